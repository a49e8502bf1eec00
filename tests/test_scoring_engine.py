"""Tests for wallet and project scoring rules."""

from datetime import datetime, timezone

import pytest

from xrglass.constants import Verdict
from xrglass.ledger.models import AccountSnapshot
from xrglass.probes.metadata import DomainTrustEvidence
from xrglass.scoring.engine import (
    ProjectScorer,
    WalletScorer,
    total_score,
    verdict_from_score,
)
from xrglass.scoring.models import Reason, reason_code

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)
ADDRESS = "rPT1Sjq2YGrBMTttX4GZHjKu9dyfzbpAYe"

GLOBAL_FREEZE = 0x00400000
DISABLE_MASTER = 0x00100000
REQUIRE_DEST_TAG = 0x00020000


def _scorer() -> WalletScorer:
    return WalletScorer(clock=lambda: NOW)


def _labels(result) -> list[str]:
    return [r.label for r in result.reasons]


@pytest.mark.parametrize(
    "score,verdict",
    [(-3, Verdict.GREEN), (0, Verdict.GREEN), (1, Verdict.GREEN), (2, Verdict.ORANGE), (3, Verdict.ORANGE), (4, Verdict.RED), (999, Verdict.RED)],
)
def test_verdict_thresholds(score, verdict):
    assert verdict_from_score(score) == verdict


def test_total_score_clamps_at_zero():
    assert total_score([Reason("a", -1), Reason("b", -1)]) == 0
    assert total_score([Reason("a", 2), Reason("b", -1)]) == 1


def test_mature_account_with_listed_domain_is_green():
    snapshot = AccountSnapshot(
        address=ADDRESS,
        exists=True,
        owner_count=3,
        flags=REQUIRE_DEST_TAG,
        domain="example.com",
        age_days=400,
    )
    trust = DomainTrustEvidence(
        domain="example.com",
        metadata_found=True,
        address_listed=True,
        url="https://example.com/.well-known/xrp.toml",
    )

    result = _scorer().score(snapshot, trust)

    assert result.score == 0
    assert result.verdict == Verdict.GREEN
    assert "xrp.toml found on domain" in _labels(result)
    assert "Address listed in xrp.toml" in _labels(result)
    assert "RequireDestTag enabled" in _labels(result)
    assert list(result.badges) == ["xrp.toml", "TOML-listed", "RequireDestTag"]
    assert result.unavailable == ()
    assert result.details["tomlFound"] is True
    assert result.details["addressListed"] is True


def test_frozen_new_account_without_domain_is_red():
    snapshot = AccountSnapshot(
        address=ADDRESS,
        exists=True,
        flags=GLOBAL_FREEZE | DISABLE_MASTER,
        regular_key_set=False,
        age_days=2,
    )

    result = _scorer().score(snapshot)

    # 3 (freeze) + 2 (master disabled) + 2 (age < 7) + 0 (no domain)
    assert result.score == 7
    assert result.verdict == Verdict.RED
    assert _labels(result) == [
        "Account has GlobalFreeze set",
        "Master key disabled without RegularKey",
        "Account age < 7 days",
        "No domain configured",
    ]
    assert "GlobalFreeze" in result.badges
    assert "Master disabled (no RegularKey)" in result.badges


def test_disabled_master_with_regular_key_is_not_flagged():
    snapshot = AccountSnapshot(
        address=ADDRESS,
        exists=True,
        flags=DISABLE_MASTER,
        regular_key_set=True,
        age_days=100,
    )
    result = _scorer().score(snapshot)
    assert "Master key disabled without RegularKey" not in _labels(result)
    assert result.score == 0


def test_account_between_7_and_30_days_adds_one():
    snapshot = AccountSnapshot(address=ADDRESS, exists=True, age_days=10, owner_count=25)
    result = _scorer().score(snapshot)
    assert result.score == 2
    assert result.verdict == Verdict.ORANGE
    age_reason = next(r for r in result.reasons if r.label == "Account age < 30 days")
    assert age_reason.detail == "10 days"
    assert "High OwnerCount (>20)" in _labels(result)


def test_owner_count_threshold_is_exclusive():
    snapshot = AccountSnapshot(address=ADDRESS, exists=True, age_days=100, owner_count=20)
    assert "High OwnerCount (>20)" not in _labels(_scorer().score(snapshot))


def test_unknown_age_contributes_nothing_and_is_reported():
    snapshot = AccountSnapshot(address=ADDRESS, exists=True, age_days=None)
    result = _scorer().score(snapshot)
    assert result.score == 0
    assert "account_age" in result.unavailable
    assert not any(r.label.startswith("Account age") for r in result.reasons)


def test_domain_without_metadata_is_neutral():
    snapshot = AccountSnapshot(address=ADDRESS, exists=True, domain="example.com", age_days=100)
    trust = DomainTrustEvidence(domain="example.com")
    result = _scorer().score(snapshot, trust)
    reason = next(r for r in result.reasons if r.label == "Domain set but xrp.toml not found")
    assert reason.delta == 0
    assert result.score == 0
    assert result.unavailable == ()


def test_domain_trust_missing_is_reported_unavailable():
    snapshot = AccountSnapshot(address=ADDRESS, exists=True, domain="example.com", age_days=100)
    result = _scorer().score(snapshot, None)
    assert "domain_metadata" in result.unavailable


def test_not_found_is_terminal_red():
    result = _scorer().score_not_found(ADDRESS)
    assert result.score == 4
    assert result.verdict == Verdict.RED
    assert result.short_circuit == "not_found"
    assert _labels(result) == ["Account not found (not activated/funded)"]
    assert list(result.badges) == ["Account not found"]
    assert result.details["notFound"] is True


def test_snapshot_that_does_not_exist_scores_as_not_found():
    result = _scorer().score(AccountSnapshot(address=ADDRESS, exists=False))
    assert result.short_circuit == "not_found"


def test_reasons_reconstruct_score():
    snapshot = AccountSnapshot(address=ADDRESS, exists=True, flags=GLOBAL_FREEZE, age_days=5, owner_count=30)
    result = _scorer().score(snapshot)
    assert result.score == max(0, result.reason_total)
    assert result.timestamp == NOW.isoformat()


def test_reason_weight_is_negated_delta():
    reason = Reason("High OwnerCount (>20)", 1)
    assert reason.weight == -1
    assert reason.code == "HIGH_OWNERCOUNT_20"


def test_reason_code_truncates_and_falls_back():
    assert reason_code("") == "REASON"
    assert reason_code("!!!") == "REASON"
    assert len(reason_code("x" * 50)) == 32
    assert reason_code("Account age < 7 days") == "ACCOUNT_AGE_7_DAYS"


def test_project_https_and_metadata_is_green():
    result = ProjectScorer(clock=lambda: NOW).score("example.com", https_ok=True, metadata_found=True)
    assert result.score == 0
    assert result.verdict == Verdict.GREEN
    assert list(result.badges) == ["HTTPS", "xrp.toml"]
    assert result.details["signals"] == [
        {"key": "https_ok", "ok": True, "weight": 1},
        {"key": "toml_present", "ok": True, "weight": 2},
    ]


def test_project_without_https_or_metadata_is_orange():
    result = ProjectScorer(clock=lambda: NOW).score("example.com", https_ok=False, metadata_found=False)
    assert result.score == 3
    assert result.verdict == Verdict.ORANGE
    assert _labels(result) == ["HTTPS not detected", "xrp.toml not found"]
    assert result.badges == ()
    assert result.details["trusted"] is False


def test_project_missing_metadata_only_is_orange():
    result = ProjectScorer(clock=lambda: NOW).score("example.com", https_ok=True, metadata_found=False)
    assert result.score == 2
    assert result.verdict == Verdict.ORANGE


def test_global_freeze_with_unknown_age_is_orange():
    snapshot = AccountSnapshot(address=ADDRESS, exists=True, flags=GLOBAL_FREEZE, age_days=None)
    result = _scorer().score(snapshot)
    assert result.score == 3
    assert result.verdict == Verdict.ORANGE
    assert "account_age" in result.unavailable
    assert "Account has GlobalFreeze set" in _labels(result)


@pytest.mark.parametrize(
    "age_days,label,score",
    [(6, "Account age < 7 days", 2), (7, "Account age < 30 days", 1), (29, "Account age < 30 days", 1), (30, None, 0)],
)
def test_account_age_boundaries(age_days, label, score):
    snapshot = AccountSnapshot(address=ADDRESS, exists=True, age_days=age_days)
    result = _scorer().score(snapshot)
    age_labels = [r.label for r in result.reasons if r.label.startswith("Account age")]
    assert age_labels == ([label] if label else [])
    assert result.score == score
