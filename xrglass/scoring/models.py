"""Scoring data models."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Optional

from ..constants import Verdict

REASON_CODE_MAX_LEN = 32
_NON_ALNUM = re.compile(r"[^A-Z0-9]+")


def reason_code(label: str) -> str:
    """Stable machine code for a reason label, e.g. "High OwnerCount (>20)" -> HIGH_OWNERCOUNT_20."""
    code = _NON_ALNUM.sub("_", (label or "").upper()).strip("_")
    return code[:REASON_CODE_MAX_LEN] or "REASON"


@dataclass(frozen=True)
class Reason:
    """One atomic, named contribution to a score.

    `delta` is the score change (positive = riskier). `weight` is the
    externally published value, which uses the opposite sign.
    """

    label: str
    delta: int
    detail: Optional[str] = None

    @property
    def code(self) -> str:
        return reason_code(self.label)

    @property
    def weight(self) -> int:
        return -self.delta


@dataclass(frozen=True)
class ScoreResult:
    """Outcome of one scan; never mutated after construction."""

    score: int
    verdict: Verdict
    reasons: tuple[Reason, ...]
    badges: tuple[str, ...]
    subject: dict[str, Any]
    timestamp: str
    details: dict[str, Any] = field(default_factory=dict)
    unavailable: tuple[str, ...] = ()
    short_circuit: Optional[str] = None  # "allowlist" | "denylist" | "not_found"

    @property
    def reason_total(self) -> int:
        return sum(r.delta for r in self.reasons)
