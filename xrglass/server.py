"""HTTP API for XRglass scans."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from aiohttp import web

from .exceptions import InvalidInputError, ScanError, ServiceUnavailableError
from .normalizer import advisory_response, error_response, to_response
from .scanner import TrustScanner

logger = logging.getLogger(__name__)

_CORS_HEADERS = {"Access-Control-Allow-Origin": "*"}


def _status_for(exc: ScanError) -> int:
    if isinstance(exc, InvalidInputError):
        return 400
    if isinstance(exc, ServiceUnavailableError):
        return 503
    return 500


class ScanServer:
    """Serves wallet, project and advisory URL scans as JSON."""

    def __init__(self, scanner: TrustScanner, host: str = "127.0.0.1", port: int = 8080):
        self.scanner = scanner
        self.host = host
        self.port = port
        self._app = web.Application()
        self._runner: web.AppRunner | None = None
        self._site: web.TCPSite | None = None
        self._register_routes()

    def _register_routes(self) -> None:
        self._app.router.add_get("/healthz", self._healthz)
        self._app.router.add_get("/api/check", self._api_check)
        self._app.router.add_get("/api/project-check", self._api_project_check)
        self._app.router.add_post("/api/project-check", self._api_project_check)
        self._app.router.add_get("/api/scan/domain", self._api_scan_domain)

    async def start(self) -> None:
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()
        self._site = web.TCPSite(self._runner, self.host, self.port)
        await self._site.start()
        logger.info("Scan API listening on %s:%s", self.host, self.port)

    async def stop(self) -> None:
        if self._site:
            await self._site.stop()
        if self._runner:
            await self._runner.cleanup()
        self._runner = None
        self._site = None

    async def _healthz(self, request: web.Request) -> web.Response:
        return web.json_response({"status": "ok"}, headers=_CORS_HEADERS)

    async def _run(self, scan: Callable[[], Awaitable[dict[str, Any]]]) -> web.Response:
        try:
            payload = await scan()
        except ScanError as exc:
            return web.json_response(error_response(exc), status=_status_for(exc), headers=_CORS_HEADERS)
        except Exception:
            logger.exception("Unexpected scan failure")
            return web.json_response(
                {"status": "error", "message": "Internal error", "code": "internal", "retryable": False},
                status=500,
                headers=_CORS_HEADERS,
            )
        return web.json_response(payload, headers=_CORS_HEADERS)

    async def _api_check(self, request: web.Request) -> web.Response:
        address = (request.query.get("address") or "").strip()

        async def scan() -> dict[str, Any]:
            if not address:
                raise InvalidInputError("Missing address", code="missing_address")
            return to_response(await self.scanner.scan_wallet(address))

        return await self._run(scan)

    async def _api_project_check(self, request: web.Request) -> web.Response:
        target = request.query.get("domain") or request.query.get("url") or ""
        if not target and request.method == "POST" and request.can_read_body:
            try:
                data = await request.json()
            except ValueError:
                data = {}
            if isinstance(data, dict):
                target = str(data.get("domain") or data.get("url") or "")

        async def scan() -> dict[str, Any]:
            if not target.strip():
                raise InvalidInputError("Missing domain", code="missing_domain")
            return to_response(await self.scanner.scan_domain(target))

        return await self._run(scan)

    async def _api_scan_domain(self, request: web.Request) -> web.Response:
        url = (request.query.get("url") or "").strip()

        async def scan() -> dict[str, Any]:
            if not url:
                raise InvalidInputError("Provide ?url=", code="missing_url")
            return advisory_response(await self.scanner.check_url(url))

        return await self._run(scan)
