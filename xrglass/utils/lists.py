"""Curated list file helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional


def read_list(path: Path, normalize: Optional[Callable[[str], str]] = None) -> set[str]:
    """Read list entries from disk, skipping blank lines and `#` comments."""
    if not path.exists():
        return set()

    entries: set[str] = set()
    for line in path.read_text().splitlines():
        value = line.split("#", 1)[0].strip()
        if not value:
            continue
        if normalize:
            value = normalize(value)
        if value:
            entries.add(value)
    return entries
