"""Allowlist/denylist short-circuit for curated wallets and domains."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from ..constants import DEFAULT_TRUSTED_DOMAINS, DEFAULT_TRUSTED_WALLETS
from ..utils.domains import canonicalize_domain, strip_port
from .engine import SHORT_CIRCUIT_WEIGHT, Clock, build_result, utc_now
from .models import Reason, ScoreResult

logger = logging.getLogger(__name__)


def domain_match_key(domain: str) -> str:
    """Normalized key for exact list matching: no scheme, trailing slash, port or leading www."""
    return strip_port(canonicalize_domain(domain))


@dataclass(frozen=True)
class CuratedLists:
    """Curated trusted/blocked subjects. Swappable without touching scoring rules."""

    trusted_wallets: frozenset[str] = field(default_factory=lambda: DEFAULT_TRUSTED_WALLETS)
    blocked_wallets: frozenset[str] = field(default_factory=frozenset)
    trusted_domains: frozenset[str] = field(default_factory=lambda: DEFAULT_TRUSTED_DOMAINS)
    blocked_domains: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def create(
        cls,
        *,
        trusted_wallets=(),
        blocked_wallets=(),
        trusted_domains=(),
        blocked_domains=(),
    ) -> "CuratedLists":
        """Build lists from raw entries, normalizing domain keys."""
        return cls(
            trusted_wallets=frozenset(w.strip() for w in trusted_wallets if w and w.strip()),
            blocked_wallets=frozenset(w.strip() for w in blocked_wallets if w and w.strip()),
            trusted_domains=frozenset(filter(None, (domain_match_key(d) for d in trusted_domains))),
            blocked_domains=frozenset(filter(None, (domain_match_key(d) for d in blocked_domains))),
        )

    @classmethod
    def from_config(cls, config) -> "CuratedLists":
        return cls.create(
            trusted_wallets=config.trusted_wallets,
            blocked_wallets=config.blocked_wallets,
            trusted_domains=config.trusted_domains,
            blocked_domains=config.blocked_domains,
        )


class ListGate:
    """Checks a subject against curated lists before the general rules run."""

    def __init__(self, lists: Optional[CuratedLists] = None, clock: Optional[Clock] = None):
        self.lists = lists or CuratedLists()
        self.clock = clock or utc_now

    def check_wallet(self, address: str, details: Optional[dict[str, Any]] = None) -> Optional[ScoreResult]:
        """Return a short-circuit result for listed wallets, else None. Denylist wins over allowlist."""
        subject = {"address": address}
        if address in self.lists.blocked_wallets:
            logger.info("Wallet %s is denylisted", address)
            return self._result(
                subject,
                Reason("Blocked denylist wallet", SHORT_CIRCUIT_WEIGHT),
                ["Blocked wallet", "Denylist match"],
                "denylist",
                details,
            )
        if address in self.lists.trusted_wallets:
            logger.info("Wallet %s is allowlisted", address)
            return self._result(
                subject,
                Reason("Trusted allowlist wallet", -SHORT_CIRCUIT_WEIGHT),
                ["Trusted wallet", "Allowlist match"],
                "allowlist",
                details,
            )
        return None

    def check_domain(self, domain: str, details: Optional[dict[str, Any]] = None) -> Optional[ScoreResult]:
        key = domain_match_key(domain)
        subject = {"domain": key or domain}
        if key in self.lists.blocked_domains:
            logger.info("Domain %s is denylisted", key)
            return self._result(
                subject,
                Reason("Blocked denylist domain", SHORT_CIRCUIT_WEIGHT),
                ["Blocked domain", "Denylist match"],
                "denylist",
                details,
            )
        if key in self.lists.trusted_domains:
            logger.info("Domain %s is allowlisted", key)
            return self._result(
                subject,
                Reason("Verified ecosystem domain (allowlist)", -SHORT_CIRCUIT_WEIGHT),
                ["Verified ecosystem domain", "Allowlist match"],
                "allowlist",
                details,
            )
        return None

    def _result(
        self,
        subject: dict[str, Any],
        reason: Reason,
        badges: list[str],
        kind: str,
        details: Optional[dict[str, Any]],
    ) -> ScoreResult:
        merged = dict(details or {})
        merged.update(subject)
        merged["trusted"] = kind == "allowlist"
        merged["blocked"] = kind == "denylist"
        return build_result(
            subject,
            [reason],
            badges,
            timestamp=self.clock(),
            details=merged,
            short_circuit=kind,
        )
