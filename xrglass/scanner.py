"""Scan orchestration for wallets, project domains and advisory URL checks."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Optional

from .config import Config
from .exceptions import InvalidInputError, ScanError, ServiceUnavailableError
from .ledger.client import LedgerClient
from .ledger.fetcher import AccountFetcher
from .ledger.models import AccountStatus, is_valid_address
from .ledger.rpc import LedgerRPC
from .probes.http import HttpProber
from .probes.metadata import DomainTrustChecker, DomainTrustEvidence, GithubLookup, parse_metadata
from .scoring.advisory import AdvisoryResult, AdvisoryScorer
from .scoring.engine import ProjectScorer, WalletScorer, utc_now
from .scoring.gate import CuratedLists, ListGate
from .scoring.models import ScoreResult
from .utils.domains import clean_domain, is_valid_domain

logger = logging.getLogger(__name__)


class ScanState(str, Enum):
    INIT = "init"
    FETCHING = "fetching"
    SHORT_CIRCUIT = "short_circuit"
    FAILED = "failed"
    SCORED = "scored"
    RESPONDED = "responded"


_TRANSITIONS: dict[ScanState, frozenset[ScanState]] = {
    ScanState.INIT: frozenset({ScanState.FETCHING, ScanState.FAILED}),
    ScanState.FETCHING: frozenset({ScanState.SHORT_CIRCUIT, ScanState.FAILED, ScanState.SCORED}),
    ScanState.SHORT_CIRCUIT: frozenset({ScanState.RESPONDED}),
    ScanState.FAILED: frozenset({ScanState.RESPONDED}),
    ScanState.SCORED: frozenset({ScanState.RESPONDED}),
    ScanState.RESPONDED: frozenset(),
}


class ScanContext:
    """Tracks one scan through its lifecycle; illegal transitions raise."""

    def __init__(self, kind: str, subject: str):
        self.kind = kind
        self.subject = subject
        self.state = ScanState.INIT
        self.history: list[ScanState] = [ScanState.INIT]

    def advance(self, state: ScanState) -> None:
        if state not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal scan transition {self.state.value} -> {state.value}")
        logger.debug("%s scan %s: %s -> %s", self.kind, self.subject, self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def fail(self, exc: ScanError) -> ScanError:
        """Move to FAILED then RESPONDED and hand back the error to raise."""
        self.advance(ScanState.FAILED)
        self.advance(ScanState.RESPONDED)
        logger.info("%s scan %s failed: %s", self.kind, self.subject, exc.message)
        return exc

    def finish(self, result: ScoreResult, state: ScanState) -> ScoreResult:
        self.advance(state)
        self.advance(ScanState.RESPONDED)
        logger.info(
            "%s scan %s: verdict=%s score=%s",
            self.kind,
            self.subject,
            result.verdict.value,
            result.score,
        )
        return result


class TrustScanner:
    """Runs wallet and domain scans against live ledger and HTTP data."""

    def __init__(
        self,
        config: Optional[Config] = None,
        ledger: Optional[LedgerClient] = None,
        prober: Optional[HttpProber] = None,
        trust_checker: Optional[DomainTrustChecker] = None,
        gate: Optional[ListGate] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.config = config or Config()
        self.clock = clock or utc_now
        self.ledger = ledger or LedgerClient(
            LedgerRPC(self.config.rpc_endpoints, timeout=self.config.rpc_timeout)
        )
        self.prober = prober or HttpProber(timeout=self.config.http_timeout)
        self.reachability_prober = prober or HttpProber(timeout=self.config.probe_timeout)
        self.trust_checker = trust_checker or DomainTrustChecker(
            self.prober, paths=self.config.wallet_metadata_paths
        )
        self.gate = gate or ListGate(CuratedLists.from_config(self.config), clock=self.clock)
        self.fetcher = AccountFetcher(self.ledger, clock=self.clock)
        self.wallet_scorer = WalletScorer(clock=self.clock)
        self.project_scorer = ProjectScorer(clock=self.clock)
        self.advisory_scorer = AdvisoryScorer(
            known_domains=self.config.known_domains,
            max_distance=self.config.similarity_max_distance,
            clock=self.clock,
        )
        self.github = GithubLookup(self.prober) if self.config.github_lookup_enabled else None

    async def scan_wallet(self, address: str) -> ScoreResult:
        """Score one wallet address.

        Raises InvalidInputError for malformed addresses and
        ServiceUnavailableError when the account lookup is indeterminate.
        """
        address = (address or "").strip()
        ctx = ScanContext("wallet", address or "<empty>")
        if not is_valid_address(address):
            raise ctx.fail(InvalidInputError("Invalid XRPL address", code="invalid_address"))

        ctx.advance(ScanState.FETCHING)
        info = await self.ledger.account_info(address)

        gated = self.gate.check_wallet(address)
        if gated is not None:
            return ctx.finish(gated, ScanState.SHORT_CIRCUIT)

        if info.status == AccountStatus.MALFORMED:
            raise ctx.fail(InvalidInputError("Invalid XRPL address", code="invalid_address"))
        if info.status == AccountStatus.UNAVAILABLE:
            raise ctx.fail(
                ServiceUnavailableError(
                    "Ledger lookup unavailable, please retry later",
                    code="ledger_unavailable",
                )
            )
        if info.status == AccountStatus.NOT_FOUND:
            return ctx.finish(self.wallet_scorer.score_not_found(address), ScanState.SHORT_CIRCUIT)

        base = self.fetcher.snapshot(address, info)
        age_days, trust = await asyncio.gather(
            self.fetcher.account_age_days(address),
            self._domain_trust(base.domain, address),
        )
        snapshot = self.fetcher.snapshot(address, info, age_days=age_days)
        result = self.wallet_scorer.score(snapshot, trust)
        return ctx.finish(result, ScanState.SCORED)

    async def _domain_trust(self, domain: Optional[str], address: str) -> Optional[DomainTrustEvidence]:
        if not domain:
            return None
        host = clean_domain(domain)
        if not host or not is_valid_domain(host):
            # Owner-supplied Domain that cannot be a hostname; nothing to fetch.
            logger.debug("Skipping xrp.toml lookup for unusable domain %r", domain)
            return DomainTrustEvidence(domain=domain)
        return await self.trust_checker.check(host, address)

    async def scan_domain(self, domain: str) -> ScoreResult:
        """Score a project's domain on HTTPS reachability and xrp.toml presence."""
        host = clean_domain(domain)
        ctx = ScanContext("domain", host or (domain or "").strip() or "<empty>")
        if not host or not is_valid_domain(host):
            raise ctx.fail(InvalidInputError("Invalid domain", code="invalid_domain"))

        ctx.advance(ScanState.FETCHING)
        gated = self.gate.check_domain(host)
        if gated is not None:
            return ctx.finish(gated, ScanState.SHORT_CIRCUIT)

        https_ok, probe = await asyncio.gather(
            self.reachability_prober.is_reachable(f"https://{host}"),
            self.trust_checker.find_metadata(host, self.config.project_metadata_paths),
        )

        details: dict[str, Any] = {"tomlUrl": probe.url}
        if probe.found:
            document = parse_metadata(probe.body)
            details["tomlAccounts"] = list(document.accounts)
            details["tomlValid"] = document.valid_toml
            if self.github is not None and document.repository:
                github = await self.github.lookup(document.repository)
                if github is not None:
                    details["github"] = github.to_dict()

        result = self.project_scorer.score(
            host,
            https_ok=https_ok,
            metadata_found=probe.found,
            details=details,
        )
        return ctx.finish(result, ScanState.SCORED)

    async def check_url(self, url: str) -> AdvisoryResult:
        """Advisory brand-confusion check; kept apart from trust scores."""
        raw = (url or "").strip()
        host = clean_domain(raw)
        if not host or not is_valid_domain(host):
            raise InvalidInputError("Invalid URL", code="invalid_url")

        is_https = raw.lower().startswith("https://") or "://" not in raw
        target = f"https://{host}" if is_https else f"http://{host}"
        head = await self.reachability_prober.fetch(target, method="HEAD")
        reachable = head.ok
        result = self.advisory_scorer.score(host, is_https=is_https, reachable=reachable)
        logger.info("url check %s: verdict=%s score=%s", host, result.verdict.value, result.score_value)
        return result
