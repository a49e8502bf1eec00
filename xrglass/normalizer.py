"""Response shapes for scan results.

Pure functions: they never drop information from a ScoreResult. The legacy
top-level keys (`points`, `reasons[].impact`) carry the internal delta; the
`normalized` block publishes `weight`, which uses the opposite sign.
"""

from __future__ import annotations

from typing import Any

from .constants import DISCLAIMER
from .exceptions import ScanError
from .scoring.advisory import AdvisoryResult
from .scoring.models import ScoreResult


def _normalized_reason(reason) -> dict[str, Any]:
    item: dict[str, Any] = {"code": reason.code, "label": reason.label, "weight": reason.weight}
    if reason.detail:
        item["detail"] = reason.detail
    return item


def to_response(result: ScoreResult) -> dict[str, Any]:
    """Map a ScoreResult onto the public JSON response."""
    return {
        "status": "ok",
        "verdict": result.verdict.value,
        "points": result.score,
        "reasons": [{"label": r.label, "impact": r.delta} for r in result.reasons],
        "badges": list(result.badges),
        "details": dict(result.details),
        "unavailable": list(result.unavailable),
        "disclaimer": DISCLAIMER,
        "normalized": {
            "verdict": result.verdict.value,
            "score": result.score,
            "reasons": [_normalized_reason(r) for r in result.reasons],
            "subject": dict(result.subject),
            "badges": list(result.badges),
            "ts": result.timestamp,
        },
    }


def error_response(exc: ScanError) -> dict[str, Any]:
    return {
        "status": "error",
        "message": exc.message,
        "code": exc.code,
        "retryable": exc.retryable,
    }


def advisory_response(result: AdvisoryResult) -> dict[str, Any]:
    nearest = None
    if result.nearest is not None:
        nearest = {"known": result.nearest.known, "distance": result.nearest.distance}
    signals = []
    for signal in result.signals:
        item: dict[str, Any] = {
            "id": signal.id,
            "label": signal.label,
            "severity": signal.severity,
            "points": signal.points,
        }
        if signal.evidence:
            item["evidence"] = signal.evidence
        signals.append(item)
    return {
        "status": "ok",
        "domain": result.domain,
        "scoreValue": result.score_value,
        "verdict": result.verdict.value,
        "signals": signals,
        "nearest": nearest,
        "checkedAt": result.checked_at,
        "summary": result.summary,
        "disclaimer": DISCLAIMER,
    }
