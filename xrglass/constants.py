"""Centralized constants for XRglass.

Verdicts, identifying strings and ledger constants shared by the scanner,
the scoring engine and the response normalizer.
"""

from enum import Enum


class Verdict(str, Enum):
    """Three-tier trust verdict, ordered from safest to riskiest."""

    GREEN = "green"
    ORANGE = "orange"
    RED = "red"

    @property
    def rank(self) -> int:
        return _VERDICT_RANK[self]

    @classmethod
    def from_string(cls, value: str | None) -> "Verdict":
        """Convert a verdict string to the enum, defaulting to ORANGE."""
        if not value:
            return cls.ORANGE
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.ORANGE

    def __str__(self) -> str:
        return self.value


_VERDICT_RANK = {Verdict.GREEN: 0, Verdict.ORANGE: 1, Verdict.RED: 2}


DISCLAIMER = (
    "Results are indicative only. XRglass cannot guarantee 100% safety. "
    "Always do your own research."
)

USER_AGENT = "XRglass/1.0 (+https://xrglass.vercel.app)"

DEFAULT_RPC_ENDPOINTS: tuple[str, ...] = (
    "https://xrplcluster.com",
    "https://s1.ripple.com:51234",
    "https://rippled.xrpscan.com",
)

# Seconds between the Unix epoch and the Ripple epoch (2000-01-01T00:00:00Z).
RIPPLE_EPOCH_OFFSET = 946_684_800

WALLET_METADATA_PATHS: tuple[str, ...] = ("/.well-known/xrp.toml",)
PROJECT_METADATA_PATHS: tuple[str, ...] = (
    "/.well-known/xrp.toml",
    "/.well-known/xrp-ledger.toml",
)

DEFAULT_TRUSTED_WALLETS: frozenset[str] = frozenset({
    "rEb8TK3gBgk5auZkwc6sHnwrGVJH8DuaLh",  # Ripple donation
})

# Verified ecosystem domains; doubles as the typosquat reference list.
DEFAULT_TRUSTED_DOMAINS: frozenset[str] = frozenset({
    "xrpl.org",
    "xrplf.org",
    "ripple.com",
    "gatehub.net",
    "xumm.app",
    "bithomp.com",
})

DEFAULT_KNOWN_DOMAINS: tuple[str, ...] = (
    "xrpl.org",
    "xrplf.org",
    "ripple.com",
    "xumm.app",
    "bithomp.com",
    "gatehub.net",
)
