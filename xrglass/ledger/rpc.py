"""JSON-RPC transport for rippled endpoints with ordered fallback."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Sequence

import httpx

from ..constants import USER_AGENT
from ..exceptions import LedgerUnavailableError

logger = logging.getLogger(__name__)

# Authoritative ledger answers: another endpoint would say the same thing.
DEFINITIVE_ERRORS = frozenset({
    "actNotFound",
    "actMalformed",
    "lgrNotFound",
    "invalidParams",
})


class RpcResponseError(Exception):
    """An endpoint answered, but not with a usable JSON-RPC result."""

    pass


class LedgerRPC:
    """Posts JSON-RPC requests to an ordered list of rippled endpoints."""

    def __init__(self, endpoints: Sequence[str], timeout: float = 15.0, user_agent: str = USER_AGENT):
        self.endpoints = [e.strip() for e in endpoints if e and e.strip()]
        self.timeout = timeout
        self.user_agent = user_agent

    async def call(self, method: str, params: dict[str, Any]) -> dict[str, Any]:
        """
        Run one RPC method, trying endpoints strictly one after another.

        Returns the `result` object of the first endpoint that answers. Results
        carrying a definitive ledger error (e.g. actNotFound) count as answers.
        Raises LedgerUnavailableError once every endpoint has failed.
        """
        attempts: list[tuple[str, str]] = []
        for index, endpoint in enumerate(self.endpoints):
            try:
                result = await asyncio.wait_for(
                    self._post(endpoint, method, params),
                    timeout=self.timeout,
                )
            except asyncio.TimeoutError:
                error = f"timeout after {self.timeout}s"
            except (httpx.HTTPError, httpx.InvalidURL, RpcResponseError, ValueError) as exc:
                error = str(exc) or exc.__class__.__name__
            else:
                if index > 0:
                    logger.info("Ledger RPC %s succeeded via fallback endpoint %s", method, endpoint)
                return result

            logger.warning("Ledger RPC %s failed via %s: %s", method, endpoint, error)
            attempts.append((endpoint, error))

        raise LedgerUnavailableError(method, attempts)

    async def _post(self, endpoint: str, method: str, params: dict[str, Any]) -> dict[str, Any]:
        body = {"method": method, "params": [params]}
        headers = {"User-Agent": self.user_agent, "Content-Type": "application/json"}
        async with httpx.AsyncClient(timeout=self.timeout, headers=headers) as client:
            resp = await client.post(endpoint, json=body)

        if not 200 <= resp.status_code < 300:
            raise RpcResponseError(f"HTTP {resp.status_code}")

        payload = resp.json()
        if not isinstance(payload, dict):
            raise RpcResponseError("Invalid JSON from RPC")

        result = payload.get("result")
        if not isinstance(result, dict):
            raise RpcResponseError("RPC response has no result object")

        if result.get("status") == "error" or "error" in result:
            code = str(result.get("error") or "unknown")
            if code in DEFINITIVE_ERRORS:
                return result
            raise RpcResponseError(f"RPC error {code}")

        return result
