"""Well-known xrp.toml discovery and domain trust evidence."""

from __future__ import annotations

import json
import logging
import re
import tomllib
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from ..constants import WALLET_METADATA_PATHS
from ..utils.domains import clean_domain
from .http import HttpProber

logger = logging.getLogger(__name__)

_LINE_RE = re.compile(r"""^\s*([A-Za-z0-9_.-]+)\s*=\s*["'](.+?)["']\s*$""")
GITHUB_RE = re.compile(r"github\.com/([^/\s]+/[^/\s]+?)(?:\.git)?(?:/|$)", re.IGNORECASE)
REPOSITORY_KEYS = ("Repository", "repository", "repo", "Repo")


@dataclass(frozen=True)
class DomainTrustEvidence:
    """Whether a wallet's claimed domain vouches for it via xrp.toml."""

    domain: str
    metadata_found: bool = False
    address_listed: bool = False  # Only meaningful when metadata_found
    url: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "domain": self.domain,
            "tomlFound": self.metadata_found,
            "addressListed": self.address_listed,
            "tomlUrl": self.url,
        }


@dataclass(frozen=True)
class MetadataProbe:
    found: bool = False
    url: Optional[str] = None
    body: str = ""


@dataclass
class MetadataDocument:
    """Informational fields parsed from an xrp.toml file."""

    fields: dict[str, str] = field(default_factory=dict)
    accounts: list[str] = field(default_factory=list)
    valid_toml: bool = True

    @property
    def repository(self) -> Optional[str]:
        for key in REPOSITORY_KEYS:
            value = self.fields.get(key)
            if value and "github.com" in value:
                return value
        return None


@dataclass(frozen=True)
class GithubInfo:
    repo: str
    stars: Optional[int] = None
    last_commit: Optional[str] = None

    def to_dict(self) -> dict:
        return {"repo": self.repo, "stars": self.stars, "lastCommit": self.last_commit}


def candidate_urls(domain: str, paths: Sequence[str] = WALLET_METADATA_PATHS) -> list[str]:
    """HTTPS metadata URLs to probe, bare host before the www. variant."""
    host = clean_domain(domain)
    if not host:
        return []
    hosts = [host] if host.startswith("www.") else [host, f"www.{host}"]
    return [f"https://{h}{path}" for path in paths for h in hosts]


def _flatten_strings(data: dict[str, Any], out: dict[str, str], accounts: list[str]) -> None:
    for key, value in data.items():
        if isinstance(value, str):
            out.setdefault(key, value)
            if key.lower() == "address":
                accounts.append(value)
        elif isinstance(value, dict):
            _flatten_strings(value, out, accounts)
        elif isinstance(value, list):
            for item in value:
                if isinstance(item, dict):
                    _flatten_strings(item, out, accounts)


def parse_metadata(text: str) -> MetadataDocument:
    """Parse xrp.toml; files that are not valid TOML fall back to key = "value" lines."""
    doc = MetadataDocument()
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError:
        doc.valid_toml = False
        for line in text.splitlines():
            match = _LINE_RE.match(line)
            if not match:
                continue
            key, value = match.group(1), match.group(2)
            doc.fields[key] = value
            if key.lower() == "address":
                doc.accounts.append(value)
        return doc

    _flatten_strings(data, doc.fields, doc.accounts)
    return doc


def extract_github_repo(url: str) -> Optional[str]:
    match = GITHUB_RE.search(url or "")
    return match.group(1) if match else None


class DomainTrustChecker:
    """Probes a domain's well-known xrp.toml candidates over HTTPS."""

    def __init__(self, prober: HttpProber, paths: Sequence[str] = WALLET_METADATA_PATHS):
        self.prober = prober
        self.paths = tuple(paths)

    async def find_metadata(self, domain: str, paths: Optional[Sequence[str]] = None) -> MetadataProbe:
        """Return the first candidate that answers with a success status."""
        for url in candidate_urls(domain, paths or self.paths):
            result = await self.prober.fetch(url)
            if result.ok:
                logger.debug("Found xrp.toml at %s", url)
                return MetadataProbe(found=True, url=url, body=result.body)
            logger.debug("No xrp.toml at %s (status=%s, error=%s)", url, result.status, result.error)
        return MetadataProbe()

    async def check(self, domain: str, address: str) -> DomainTrustEvidence:
        host = clean_domain(domain) or domain
        probe = await self.find_metadata(host)
        return DomainTrustEvidence(
            domain=host,
            metadata_found=probe.found,
            address_listed=probe.found and bool(address) and address in probe.body,
            url=probe.url,
        )


class GithubLookup:
    """Best-effort repository details for project scans (never scored)."""

    API_URL = "https://api.github.com/repos/{repo}"

    def __init__(self, prober: HttpProber):
        self.prober = prober

    async def lookup(self, repository_url: str) -> Optional[GithubInfo]:
        repo = extract_github_repo(repository_url)
        if not repo:
            return None

        result = await self.prober.fetch(
            self.API_URL.format(repo=repo),
            headers={"Accept": "application/vnd.github+json"},
        )
        if not result.ok:
            logger.debug("GitHub lookup for %s failed: %s", repo, result.error or result.status)
            return None

        try:
            data = json.loads(result.body)
        except ValueError:
            return None
        if not isinstance(data, dict):
            return None

        stars = data.get("stargazers_count")
        pushed_at = data.get("pushed_at")
        return GithubInfo(
            repo=data.get("full_name") if isinstance(data.get("full_name"), str) else repo,
            stars=stars if isinstance(stars, int) and not isinstance(stars, bool) else None,
            last_commit=pushed_at if isinstance(pushed_at, str) else None,
        )
