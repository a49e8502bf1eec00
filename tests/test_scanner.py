"""Tests for scan orchestration."""

import asyncio
from datetime import datetime, timezone

import pytest

from xrglass.config import Config
from xrglass.constants import Verdict
from xrglass.exceptions import InvalidInputError, LedgerUnavailableError, ServiceUnavailableError
from xrglass.ledger.client import LedgerClient
from xrglass.ledger.models import AccountInfoResult, AccountRoot, AccountStatus, TransactionRef
from xrglass.probes.http import HttpResult
from xrglass.probes.metadata import DomainTrustChecker, DomainTrustEvidence, MetadataProbe
from xrglass.scanner import ScanContext, ScanState, TrustScanner
from xrglass.scoring.gate import CuratedLists, ListGate

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)
ADDRESS = "rPT1Sjq2YGrBMTttX4GZHjKu9dyfzbpAYe"
TRUSTED = "rEb8TK3gBgk5auZkwc6sHnwrGVJH8DuaLh"
EXAMPLE_HEX = "6578616D706C652E636F6D"


class _StubLedger:
    def __init__(self, info: AccountInfoResult, transactions=None, close_time=None):
        self.info = info
        self.transactions = transactions
        self.close_time = close_time
        self.account_info_calls = 0

    async def account_info(self, address):
        self.account_info_calls += 1
        return self.info

    async def account_transactions(self, address, *, earliest=True, limit=1):
        return self.transactions

    async def ledger_close_time(self, ledger_index):
        return self.close_time


class _StubTrustChecker:
    def __init__(self, evidence=None, probe=None):
        self.evidence = evidence
        self.probe = probe or MetadataProbe()
        self.checked: list[tuple[str, str]] = []
        self.probed: list[tuple[str, tuple]] = []

    async def check(self, domain, address):
        self.checked.append((domain, address))
        return self.evidence or DomainTrustEvidence(domain=domain)

    async def find_metadata(self, domain, paths=None):
        self.probed.append((domain, tuple(paths or ())))
        return self.probe


class _StubProber:
    def __init__(self, reachable=True, responses=None):
        self.reachable = reachable
        self.responses = responses or {}
        self.reachability_checks: list[str] = []
        self.fetched: list[tuple[str, str]] = []

    async def is_reachable(self, url):
        self.reachability_checks.append(url)
        return self.reachable

    async def fetch(self, url, method="GET", headers=None):
        self.fetched.append((method, url))
        return self.responses.get(url, HttpResult(url=url, status=404))


def _config(**overrides) -> Config:
    overrides.setdefault("github_lookup_enabled", False)
    return Config(config_dir="/nonexistent-xrglass-config", **overrides)


def _scanner(ledger=None, trust_checker=None, prober=None, gate=None, config=None) -> TrustScanner:
    return TrustScanner(
        config or _config(),
        ledger=ledger or _StubLedger(AccountInfoResult(status=AccountStatus.NOT_FOUND)),
        prober=prober or _StubProber(),
        trust_checker=trust_checker or _StubTrustChecker(),
        gate=gate or ListGate(CuratedLists.create(trusted_wallets=[TRUSTED], trusted_domains=["xrpl.org"]), clock=lambda: NOW),
        clock=lambda: NOW,
    )


def _found(**account) -> AccountInfoResult:
    return AccountInfoResult(status=AccountStatus.FOUND, account=AccountRoot(**account))


def test_scan_context_rejects_illegal_transition():
    ctx = ScanContext("wallet", ADDRESS)
    ctx.advance(ScanState.FETCHING)
    with pytest.raises(RuntimeError):
        ctx.advance(ScanState.INIT)


@pytest.mark.asyncio
async def test_invalid_address_rejected_before_lookup():
    ledger = _StubLedger(_found())
    with pytest.raises(InvalidInputError):
        await _scanner(ledger=ledger).scan_wallet("not-an-address")
    assert ledger.account_info_calls == 0


@pytest.mark.asyncio
async def test_malformed_from_ledger_is_invalid_input():
    ledger = _StubLedger(AccountInfoResult(status=AccountStatus.MALFORMED, error="actMalformed"))
    with pytest.raises(InvalidInputError):
        await _scanner(ledger=ledger).scan_wallet(ADDRESS)


@pytest.mark.asyncio
async def test_unavailable_lookup_raises_service_unavailable():
    ledger = _StubLedger(AccountInfoResult(status=AccountStatus.UNAVAILABLE, error="down"))
    with pytest.raises(ServiceUnavailableError) as exc_info:
        await _scanner(ledger=ledger).scan_wallet(ADDRESS)
    assert exc_info.value.retryable is True


@pytest.mark.asyncio
async def test_all_endpoints_timing_out_is_service_unavailable():
    class _DownRPC:
        async def call(self, method, params):
            raise LedgerUnavailableError(method, [("https://a", "timeout"), ("https://b", "timeout")])

    with pytest.raises(ServiceUnavailableError):
        await _scanner(ledger=LedgerClient(_DownRPC())).scan_wallet(ADDRESS)


@pytest.mark.asyncio
async def test_allowlisted_wallet_short_circuits_even_when_lookup_fails():
    ledger = _StubLedger(AccountInfoResult(status=AccountStatus.UNAVAILABLE))
    result = await _scanner(ledger=ledger).scan_wallet(TRUSTED)
    assert result.verdict == Verdict.GREEN
    assert result.short_circuit == "allowlist"
    assert ledger.account_info_calls == 1


@pytest.mark.asyncio
async def test_not_found_wallet_is_red():
    result = await _scanner().scan_wallet(ADDRESS)
    assert result.verdict == Verdict.RED
    assert result.score == 4
    assert result.short_circuit == "not_found"


@pytest.mark.asyncio
async def test_found_wallet_is_scored_with_age_and_domain():
    close_time = int(NOW.timestamp()) - 86_400 * 3
    ledger = _StubLedger(
        _found(flags=0x00020000, owner_count=1, domain_hex=EXAMPLE_HEX),
        transactions=[TransactionRef(ledger_index=10)],
        close_time=close_time,
    )
    checker = _StubTrustChecker(
        DomainTrustEvidence(domain="example.com", metadata_found=True, address_listed=False, url="https://example.com/.well-known/xrp.toml")
    )

    result = await _scanner(ledger=ledger, trust_checker=checker).scan_wallet(ADDRESS)

    # +2 (age < 7) -1 (xrp.toml) -1 (RequireDestTag)
    assert result.score == 0
    assert result.verdict == Verdict.GREEN
    assert checker.checked == [("example.com", ADDRESS)]
    assert result.details["accountAgeDays"] == 3
    assert result.details["domain"] == "example.com"
    assert result.unavailable == ()


@pytest.mark.asyncio
async def test_wallet_without_domain_skips_trust_check():
    checker = _StubTrustChecker()
    ledger = _StubLedger(_found(owner_count=0), transactions=None)
    result = await _scanner(ledger=ledger, trust_checker=checker).scan_wallet(ADDRESS)
    assert checker.checked == []
    assert "account_age" in result.unavailable
    assert result.verdict == Verdict.GREEN


@pytest.mark.asyncio
async def test_wallet_with_control_character_domain_is_scored():
    # Domain decodes to "exa\x01com.com", which can never be fetched.
    prober = _StubProber()
    ledger = _StubLedger(_found(domain_hex="6578610163" + "6F6D2E636F6D"), transactions=None)
    scanner = _scanner(ledger=ledger, prober=prober, trust_checker=DomainTrustChecker(prober))

    result = await scanner.scan_wallet(ADDRESS)

    assert prober.fetched == []
    assert "Domain set but xrp.toml not found" in [r.label for r in result.reasons]
    assert "domain_metadata" not in result.unavailable
    assert result.verdict == Verdict.GREEN


@pytest.mark.asyncio
async def test_wallet_domain_is_cleaned_before_trust_check():
    checker = _StubTrustChecker()
    # "https://Example.com/"
    ledger = _StubLedger(_found(domain_hex="68747470733A2F2F4578616D706C652E636F6D2F"))
    await _scanner(ledger=ledger, trust_checker=checker).scan_wallet(ADDRESS)
    assert checker.checked == [("example.com", ADDRESS)]


@pytest.mark.asyncio
async def test_allowlist_overrides_risky_facts():
    ledger = _StubLedger(
        _found(flags=0x00400000 | 0x00100000, owner_count=50),
        transactions=[TransactionRef(ledger_index=10)],
        close_time=int(NOW.timestamp()),
    )

    result = await _scanner(ledger=ledger).scan_wallet(TRUSTED)

    assert result.verdict == Verdict.GREEN
    assert result.score == 0
    assert [r.label for r in result.reasons] == ["Trusted allowlist wallet"]
    assert "GlobalFreeze" not in result.badges


@pytest.mark.asyncio
async def test_repeated_scans_of_same_facts_are_identical():
    def make_scanner():
        ledger = _StubLedger(
            _found(flags=0x00400000, owner_count=25, domain_hex=EXAMPLE_HEX),
            transactions=[TransactionRef(ledger_index=10)],
            close_time=int(NOW.timestamp()) - 86_400 * 12,
        )
        checker = _StubTrustChecker(DomainTrustEvidence(domain="example.com", metadata_found=True))
        return _scanner(ledger=ledger, trust_checker=checker)

    first = await make_scanner().scan_wallet(ADDRESS)
    second = await make_scanner().scan_wallet(ADDRESS)

    assert first.score == second.score
    assert first.verdict == second.verdict
    assert first.reasons == second.reasons
    assert first.badges == second.badges
    assert first == second


@pytest.mark.asyncio
async def test_wallet_fetches_run_concurrently():
    started: list[str] = []
    release = asyncio.Event()

    class _SlowLedger(_StubLedger):
        async def account_transactions(self, address, *, earliest=True, limit=1):
            started.append("age")
            await release.wait()
            return None

    class _SlowChecker(_StubTrustChecker):
        async def check(self, domain, address):
            started.append("trust")
            release.set()
            return DomainTrustEvidence(domain=domain)

    ledger = _SlowLedger(_found(domain_hex=EXAMPLE_HEX))
    result = await asyncio.wait_for(
        _scanner(ledger=ledger, trust_checker=_SlowChecker()).scan_wallet(ADDRESS),
        timeout=2,
    )
    assert sorted(started) == ["age", "trust"]
    assert result.verdict == Verdict.GREEN


@pytest.mark.asyncio
async def test_invalid_domain_rejected():
    with pytest.raises(InvalidInputError):
        await _scanner().scan_domain("not a domain")


@pytest.mark.asyncio
async def test_allowlisted_domain_short_circuits():
    prober = _StubProber()
    result = await _scanner(prober=prober).scan_domain("https://www.xrpl.org/")
    assert result.verdict == Verdict.GREEN
    assert result.short_circuit == "allowlist"
    assert prober.reachability_checks == []


@pytest.mark.asyncio
async def test_domain_scan_with_metadata():
    body = 'address = "rPT1Sjq2YGrBMTttX4GZHjKu9dyfzbpAYe"\n'
    checker = _StubTrustChecker(
        probe=MetadataProbe(found=True, url="https://example.com/.well-known/xrp-ledger.toml", body=body)
    )
    prober = _StubProber(reachable=True)

    result = await _scanner(prober=prober, trust_checker=checker).scan_domain("Example.com")

    assert result.verdict == Verdict.GREEN
    assert result.subject == {"domain": "example.com"}
    assert prober.reachability_checks == ["https://example.com"]
    assert checker.probed == [
        ("example.com", ("/.well-known/xrp.toml", "/.well-known/xrp-ledger.toml")),
    ]
    assert result.details["tomlAccounts"] == [ADDRESS]
    assert result.details["tomlUrl"].endswith("xrp-ledger.toml")


@pytest.mark.asyncio
async def test_domain_scan_unreachable_without_metadata():
    result = await _scanner(prober=_StubProber(reachable=False)).scan_domain("example.com")
    assert result.score == 3
    assert result.verdict == Verdict.ORANGE


@pytest.mark.asyncio
async def test_domain_scan_includes_github_details():
    api_url = "https://api.github.com/repos/a/b"
    prober = _StubProber(
        responses={api_url: HttpResult(url=api_url, status=200, body='{"full_name": "a/b", "stargazers_count": 3}')}
    )
    checker = _StubTrustChecker(
        probe=MetadataProbe(found=True, url="https://example.com/.well-known/xrp.toml", body='repository = "https://github.com/a/b"\n')
    )
    scanner = _scanner(prober=prober, trust_checker=checker, config=_config(github_lookup_enabled=True))

    result = await scanner.scan_domain("example.com")

    assert result.details["github"] == {"repo": "a/b", "stars": 3, "lastCommit": None}


@pytest.mark.asyncio
async def test_check_url_flags_typosquat():
    prober = _StubProber(responses={"http://xrp1.org": HttpResult(url="http://xrp1.org", status=200)})
    result = await _scanner(prober=prober).check_url("http://xrp1.org/login")
    assert [s.id for s in result.signals] == ["no_https", "typo_risk"]
    assert result.verdict == Verdict.ORANGE
    assert prober.fetched == [("HEAD", "http://xrp1.org")]


@pytest.mark.asyncio
async def test_check_url_head_failure_is_not_retried_with_get():
    prober = _StubProber(reachable=True)
    result = await _scanner(prober=prober).check_url("https://example.com")
    assert [s.id for s in result.signals] == ["head_failed"]
    assert prober.fetched == [("HEAD", "https://example.com")]
    assert prober.reachability_checks == []


@pytest.mark.asyncio
async def test_check_url_rejects_garbage():
    with pytest.raises(InvalidInputError):
        await _scanner().check_url("")
