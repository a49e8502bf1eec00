"""Advisory URL check: brand confusion and basic hygiene.

Kept apart from wallet/project trust scores. It answers "could this URL be
impersonating a known XRPL site?", not "does this domain vouch for itself?".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..constants import DEFAULT_KNOWN_DOMAINS, Verdict
from ..utils.domain_similarity import (
    TYPOSQUAT_MAX_DISTANCE,
    SimilarityMatch,
    is_typosquat,
    nearest_known_domain,
)
from ..utils.domains import clean_domain, strip_port
from .engine import Clock, utc_now

SUMMARIES = {
    Verdict.RED: "High risk - HTTPS missing or strong similarity to known brand.",
    Verdict.ORANGE: "Moderate risk - some indicators present.",
    Verdict.GREEN: "Low risk - no major indicators.",
}


@dataclass(frozen=True)
class AdvisorySignal:
    id: str
    label: str
    severity: str  # low | medium | high
    points: int
    evidence: Optional[str] = None


@dataclass(frozen=True)
class AdvisoryResult:
    domain: str
    score_value: int
    verdict: Verdict
    signals: tuple[AdvisorySignal, ...]
    nearest: Optional[SimilarityMatch]
    checked_at: str
    summary: str = field(default="")


def advisory_verdict(score_value: int) -> Verdict:
    if score_value >= 70:
        return Verdict.RED
    if score_value >= 35:
        return Verdict.ORANGE
    return Verdict.GREEN


class AdvisoryScorer:
    """Scores a URL on a 0-100 scale from independent advisory signals."""

    NO_HTTPS_POINTS = 40
    UNREACHABLE_POINTS = 10
    TYPOSQUAT_POINTS = 20
    CCTLD_POINTS = 5

    def __init__(
        self,
        known_domains: Iterable[str] = DEFAULT_KNOWN_DOMAINS,
        max_distance: int = TYPOSQUAT_MAX_DISTANCE,
        clock: Optional[Clock] = None,
    ):
        self.known_domains = tuple(known_domains)
        self.max_distance = max_distance
        self.clock = clock or utc_now

    def score(self, domain: str, *, is_https: bool, reachable: bool) -> AdvisoryResult:
        signals: list[AdvisorySignal] = []

        if not is_https:
            signals.append(AdvisorySignal("no_https", "No HTTPS", "high", self.NO_HTTPS_POINTS))

        if not reachable:
            signals.append(AdvisorySignal("head_failed", "HEAD request failed", "low", self.UNREACHABLE_POINTS))

        nearest = nearest_known_domain(domain, self.known_domains)
        if is_typosquat(nearest, self.max_distance):
            signals.append(
                AdvisorySignal(
                    "typo_risk",
                    f"Domain similar to {nearest.known}",
                    "medium",
                    self.TYPOSQUAT_POINTS,
                    evidence=f"distance={nearest.distance}",
                )
            )

        tld = strip_port(clean_domain(domain)).rsplit(".", 1)[-1]
        if len(tld) == 2:
            signals.append(AdvisorySignal("ccTLD", "Country-code TLD (manual review)", "low", self.CCTLD_POINTS))

        score_value = min(100, sum(s.points for s in signals))
        verdict = advisory_verdict(score_value)
        return AdvisoryResult(
            domain=domain,
            score_value=score_value,
            verdict=verdict,
            signals=tuple(signals),
            nearest=nearest,
            checked_at=self.clock().isoformat(),
            summary=SUMMARIES[verdict],
        )
