"""Domain similarity helpers for typosquat detection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from rapidfuzz.distance import Levenshtein

from .domains import canonicalize_domain, registered_domain, strip_port

TYPOSQUAT_MAX_DISTANCE = 2


@dataclass(frozen=True)
class SimilarityMatch:
    """Closest known-good domain for a scanned host."""

    domain: str
    known: str
    distance: int

    @property
    def is_exact(self) -> bool:
        return self.distance == 0


def similarity_key(value: str) -> str:
    """Registrable domain of a raw domain/URL, falling back to the bare host."""
    return registered_domain(value) or strip_port(canonicalize_domain(value))


def nearest_known_domain(value: str, known_domains: Iterable[str]) -> Optional[SimilarityMatch]:
    """Find the known domain with the smallest edit distance (ties keep list order)."""
    key = similarity_key(value)
    if not key:
        return None

    best: Optional[SimilarityMatch] = None
    for known in known_domains:
        known_key = canonicalize_domain(known)
        if not known_key:
            continue
        distance = Levenshtein.distance(key, known_key)
        if best is None or distance < best.distance:
            best = SimilarityMatch(domain=key, known=known_key, distance=distance)
    return best


def is_typosquat(match: Optional[SimilarityMatch], max_distance: int = TYPOSQUAT_MAX_DISTANCE) -> bool:
    """Within max_distance edits of a known domain (an exact match included)."""
    return match is not None and match.distance <= max_distance
