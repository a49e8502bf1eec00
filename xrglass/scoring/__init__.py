"""Trust scoring for XRglass."""

from .advisory import AdvisoryResult, AdvisoryScorer
from .engine import ProjectScorer, WalletScorer, verdict_from_score
from .gate import CuratedLists, ListGate
from .models import Reason, ScoreResult, reason_code

__all__ = [
    "AdvisoryResult",
    "AdvisoryScorer",
    "CuratedLists",
    "ListGate",
    "ProjectScorer",
    "Reason",
    "ScoreResult",
    "WalletScorer",
    "reason_code",
    "verdict_from_score",
]
