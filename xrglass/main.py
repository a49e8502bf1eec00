"""Command line entry point for XRglass.

Run:
  xrglass wallet rXXXX...
  xrglass domain example.com
  xrglass url https://example.com
  xrglass serve
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import signal
import sys

from .config import Config, load_config, validate_config
from .exceptions import ScanError
from .normalizer import advisory_response, error_response, to_response
from .scanner import TrustScanner
from .server import ScanServer

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="xrglass", description="XRPL wallet and project trust scanner.")
    sub = parser.add_subparsers(dest="command", required=True)

    wallet = sub.add_parser("wallet", help="Score an XRPL wallet address.")
    wallet.add_argument("address")

    domain = sub.add_parser("domain", help="Score a project's domain.")
    domain.add_argument("domain")

    url = sub.add_parser("url", help="Advisory brand/typosquat check for a URL.")
    url.add_argument("url")

    serve = sub.add_parser("serve", help="Run the HTTP API.")
    serve.add_argument("--host", help="Bind address (default SERVER_HOST).")
    serve.add_argument("--port", type=int, help="Bind port (default SERVER_PORT).")
    return parser


async def run_scan(config: Config, args: argparse.Namespace) -> tuple[dict, int]:
    """Run one scan; returns the JSON payload and the process exit code."""
    scanner = TrustScanner(config)
    try:
        if args.command == "wallet":
            return to_response(await scanner.scan_wallet(args.address)), 0
        if args.command == "domain":
            return to_response(await scanner.scan_domain(args.domain)), 0
        return advisory_response(await scanner.check_url(args.url)), 0
    except ScanError as exc:
        return error_response(exc), 2


async def run_server(config: Config, host: str, port: int) -> None:
    server = ScanServer(TrustScanner(config), host=host, port=port)
    stop_event = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Windows event loop does not support add_signal_handler.
            pass

    await server.start()
    try:
        await stop_event.wait()
    finally:
        await server.stop()


def main(argv: list[str] | None = None) -> int:
    """Entry point."""
    args = build_parser().parse_args(argv)
    config = load_config()
    _configure_logging(config.log_level)

    validation_errors = validate_config(config)
    if validation_errors:
        for err in validation_errors:
            logger.error(err)
        return 1

    if args.command == "serve":
        asyncio.run(run_server(config, args.host or config.server_host, args.port or config.server_port))
        return 0

    payload, code = asyncio.run(run_scan(config, args))
    print(json.dumps(payload, indent=2))
    return code


if __name__ == "__main__":
    sys.exit(main())
