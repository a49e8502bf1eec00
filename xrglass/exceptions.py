"""Exception types surfaced by the XRglass scanner."""

from __future__ import annotations


class ScanError(Exception):
    """Base exception for scan failures reported to the caller."""

    retryable = False

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code
        super().__init__(message)


class InvalidInputError(ScanError):
    """Malformed wallet address or domain; rejected before any network call."""

    pass


class ServiceUnavailableError(ScanError):
    """The mandatory lookup could not be completed. Safe to retry later."""

    retryable = True


class LedgerUnavailableError(Exception):
    """Every candidate ledger endpoint failed for a single RPC call."""

    def __init__(self, method: str, attempts: list[tuple[str, str]]):
        self.method = method
        self.attempts = attempts
        detail = "; ".join(f"{endpoint}: {error}" for endpoint, error in attempts) or "no endpoints"
        super().__init__(f"All ledger endpoints failed for {method} ({detail})")
