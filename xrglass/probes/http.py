"""HTTP fetch capability for metadata and reachability probes."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from ..constants import USER_AGENT

logger = logging.getLogger(__name__)

MAX_BODY_CHARS = 256_000


@dataclass(frozen=True)
class HttpResult:
    url: str
    status: Optional[int] = None
    body: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.status is not None and 200 <= self.status < 300


class HttpProber:
    """Bounded, non-raising HTTP requests with a fixed identifying user agent."""

    def __init__(self, timeout: float = 10.0, user_agent: str = USER_AGENT):
        self.timeout = timeout
        self.user_agent = user_agent

    async def fetch(self, url: str, method: str = "GET", headers: Optional[dict[str, str]] = None) -> HttpResult:
        request_headers = {"User-Agent": self.user_agent, "Accept": "text/plain,*/*"}
        if headers:
            request_headers.update(headers)
        try:
            return await asyncio.wait_for(self._request(url, method, request_headers), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.debug("%s %s timed out", method, url)
            return HttpResult(url=url, error="timeout")
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.debug("%s %s failed: %s", method, url, exc)
            return HttpResult(url=url, error=str(exc) or exc.__class__.__name__)

    async def _request(self, url: str, method: str, headers: dict[str, str]) -> HttpResult:
        async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True, headers=headers) as client:
            resp = await client.request(method, url)
            body = "" if method == "HEAD" else (resp.text or "")[:MAX_BODY_CHARS]
            return HttpResult(url=url, status=resp.status_code, body=body)

    async def is_reachable(self, url: str) -> bool:
        """HEAD first; some servers reject HEAD, so retry with GET."""
        head = await self.fetch(url, method="HEAD")
        if head.ok:
            return True
        get = await self.fetch(url, method="GET")
        return get.ok
