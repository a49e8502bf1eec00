"""Global pytest configuration."""

from __future__ import annotations

import asyncio
import inspect
import os
from datetime import datetime, timezone

import pytest

# Keep a developer's .env from pointing tests at live endpoints or lists.
os.environ.setdefault("GITHUB_LOOKUP_ENABLED", "false")

FIXED_NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock():
    """Clock returning a fixed instant, so timestamps and ages are deterministic."""
    return lambda: FIXED_NOW


def _new_loop() -> asyncio.AbstractEventLoop:
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    return loop


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem):  # type: ignore[override]
    if inspect.iscoroutinefunction(pyfuncitem.obj):
        testargs = {
            name: pyfuncitem.funcargs[name] for name in pyfuncitem._fixtureinfo.argnames
        }
        loop = _new_loop()
        try:
            loop.run_until_complete(pyfuncitem.obj(**testargs))
        finally:
            loop.close()
            asyncio.set_event_loop(None)
        return True
    return None


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "asyncio: mark test as requiring asyncio support")
