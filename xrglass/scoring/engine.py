"""Rule-based trust scoring for wallets and projects.

Scores grow with risk. Every applied rule contributes a Reason whose
`delta` is added to the running total; the total is clamped at zero and
mapped onto a three-tier verdict:

    score <= 1   green
    score 2..3   orange
    score >= 4   red
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional

from ..constants import Verdict
from ..ledger.models import AccountSnapshot
from ..probes.metadata import DomainTrustEvidence
from .models import Reason, ScoreResult

Clock = Callable[[], datetime]

NOT_FOUND_SCORE = 4
SHORT_CIRCUIT_WEIGHT = 999


def verdict_from_score(score: float) -> Verdict:
    if score <= 1:
        return Verdict.GREEN
    if score <= 3:
        return Verdict.ORANGE
    return Verdict.RED


def total_score(reasons: Iterable[Reason]) -> int:
    return max(0, sum(r.delta for r in reasons))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def build_result(
    subject: dict[str, Any],
    reasons: list[Reason],
    badges: list[str],
    *,
    timestamp: datetime,
    details: Optional[dict[str, Any]] = None,
    unavailable: Iterable[str] = (),
    short_circuit: Optional[str] = None,
) -> ScoreResult:
    score = total_score(reasons)
    return ScoreResult(
        score=score,
        verdict=verdict_from_score(score),
        reasons=tuple(reasons),
        badges=tuple(badges),
        subject=dict(subject),
        timestamp=timestamp.isoformat(),
        details=dict(details or {}),
        unavailable=tuple(unavailable),
        short_circuit=short_circuit,
    )


class WalletScorer:
    """Scores an XRPL account snapshot."""

    VERY_NEW_ACCOUNT_DAYS = 7
    NEW_ACCOUNT_DAYS = 30
    OWNER_COUNT_THRESHOLD = 20

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or utc_now

    def score(self, snapshot: AccountSnapshot, trust: Optional[DomainTrustEvidence] = None) -> ScoreResult:
        """Apply every wallet rule; unknown facts simply contribute nothing."""
        if not snapshot.exists:
            return self.score_not_found(snapshot.address)

        reasons: list[Reason] = []
        badges: list[str] = []
        unavailable: list[str] = []

        for check in (self._check_freeze, self._check_master_key):
            rule_reasons, rule_badges = check(snapshot)
            reasons.extend(rule_reasons)
            badges.extend(rule_badges)

        if snapshot.age_days is None:
            unavailable.append("account_age")
        else:
            reasons.extend(self._check_age(snapshot.age_days))

        reasons.extend(self._check_owner_count(snapshot.owner_count))

        domain_reasons, domain_badges = self._check_domain(snapshot.domain, trust)
        reasons.extend(domain_reasons)
        badges.extend(domain_badges)
        if snapshot.domain and trust is None:
            unavailable.append("domain_metadata")

        rule_reasons, rule_badges = self._check_dest_tag(snapshot)
        reasons.extend(rule_reasons)
        badges.extend(rule_badges)

        details = snapshot.to_dict()
        details.update(self._trust_details(trust))
        return build_result(
            {"address": snapshot.address},
            reasons,
            badges,
            timestamp=self.clock(),
            details=details,
            unavailable=unavailable,
        )

    def score_not_found(self, address: str) -> ScoreResult:
        """Unfunded accounts end the scan with a fixed red score."""
        return build_result(
            {"address": address},
            [Reason("Account not found (not activated/funded)", NOT_FOUND_SCORE)],
            ["Account not found"],
            timestamp=self.clock(),
            details={"address": address, "notFound": True},
            short_circuit="not_found",
        )

    def _check_freeze(self, snapshot: AccountSnapshot) -> tuple[list[Reason], list[str]]:
        if snapshot.flag_set.GlobalFreeze:
            return [Reason("Account has GlobalFreeze set", 3)], ["GlobalFreeze"]
        return [], []

    def _check_master_key(self, snapshot: AccountSnapshot) -> tuple[list[Reason], list[str]]:
        # Master disabled with no regular key means nobody can sign for the account.
        if snapshot.flag_set.DisableMaster and not snapshot.regular_key_set:
            return [Reason("Master key disabled without RegularKey", 2)], ["Master disabled (no RegularKey)"]
        return [], []

    def _check_age(self, age_days: int) -> list[Reason]:
        detail = f"{age_days} days"
        if age_days < self.VERY_NEW_ACCOUNT_DAYS:
            return [Reason("Account age < 7 days", 2, detail)]
        if age_days < self.NEW_ACCOUNT_DAYS:
            return [Reason("Account age < 30 days", 1, detail)]
        return []

    def _check_owner_count(self, owner_count: int) -> list[Reason]:
        if owner_count > self.OWNER_COUNT_THRESHOLD:
            return [Reason("High OwnerCount (>20)", 1, f"{owner_count} objects")]
        return []

    def _check_domain(
        self,
        domain: Optional[str],
        trust: Optional[DomainTrustEvidence],
    ) -> tuple[list[Reason], list[str]]:
        if not domain:
            return [Reason("No domain configured", 0)], []

        if trust is None or not trust.metadata_found:
            return [Reason("Domain set but xrp.toml not found", 0, domain)], []

        reasons = [Reason("xrp.toml found on domain", -1, trust.url)]
        badges = ["xrp.toml"]
        if trust.address_listed:
            reasons.append(Reason("Address listed in xrp.toml", -1))
            badges.append("TOML-listed")
        return reasons, badges

    def _check_dest_tag(self, snapshot: AccountSnapshot) -> tuple[list[Reason], list[str]]:
        if snapshot.flag_set.RequireDestTag:
            return [Reason("RequireDestTag enabled", -1)], ["RequireDestTag"]
        return [], []

    @staticmethod
    def _trust_details(trust: Optional[DomainTrustEvidence]) -> dict[str, Any]:
        if trust is None:
            return {"tomlFound": False, "addressListed": False, "tomlUrl": None}
        data = trust.to_dict()
        data.pop("domain", None)
        return data


class ProjectScorer:
    """Two-signal project/domain model: HTTPS reachability and xrp.toml presence."""

    HTTPS_WEIGHT = 1
    METADATA_WEIGHT = 2

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or utc_now

    def score(
        self,
        domain: str,
        *,
        https_ok: bool,
        metadata_found: bool,
        details: Optional[dict[str, Any]] = None,
    ) -> ScoreResult:
        reasons: list[Reason] = []
        badges: list[str] = []

        if https_ok:
            badges.append("HTTPS")
        else:
            reasons.append(Reason("HTTPS not detected", self.HTTPS_WEIGHT))

        if metadata_found:
            reasons.append(Reason("xrp.toml found", 0))
            badges.append("xrp.toml")
        else:
            reasons.append(Reason("xrp.toml not found", self.METADATA_WEIGHT))

        signals = [
            {"key": "https_ok", "ok": https_ok, "weight": self.HTTPS_WEIGHT},
            {"key": "toml_present", "ok": metadata_found, "weight": self.METADATA_WEIGHT},
        ]
        merged = {"domain": domain, "httpsOk": https_ok, "tomlFound": metadata_found, "trusted": False}
        merged.update(details or {})
        merged["signals"] = signals
        return build_result(
            {"domain": domain},
            reasons,
            badges,
            timestamp=self.clock(),
            details=merged,
        )
