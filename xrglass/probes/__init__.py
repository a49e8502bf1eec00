"""HTTP probes: reachability and well-known metadata."""

from .http import HttpProber, HttpResult
from .metadata import (
    DomainTrustChecker,
    DomainTrustEvidence,
    GithubInfo,
    GithubLookup,
    MetadataProbe,
    parse_metadata,
)

__all__ = [
    "HttpProber",
    "HttpResult",
    "DomainTrustChecker",
    "DomainTrustEvidence",
    "GithubInfo",
    "GithubLookup",
    "MetadataProbe",
    "parse_metadata",
]
