"""Domain normalization utilities."""

from __future__ import annotations

from urllib.parse import urlparse

import idna
import tldextract

# Bundled public-suffix snapshot only; scans never fetch the live list.
_extract = tldextract.TLDExtract(suffix_list_urls=())


def clean_domain(value: str) -> str:
    """
    Reduce a domain/URL to its host.

    - Lowercase
    - Strip scheme, path, query and trailing slashes
    - Preserve port (if present) and any "www." prefix
    """
    raw = (value or "").strip()
    if not raw:
        return ""

    candidate = raw if "://" in raw else f"https://{raw}"
    try:
        parsed = urlparse(candidate)
        port = parsed.port
    except ValueError:
        return ""

    host = (parsed.hostname or "").strip().lower().strip(".")
    if not host:
        return ""

    if port:
        host = f"{host}:{port}"
    return host


def canonicalize_domain(value: str) -> str:
    """Normalize a domain/URL to the key used for curated-list matching (no "www.")."""
    host = clean_domain(value)
    if host.startswith("www.") and len(host) > 4:
        host = host[4:]
    return host


def strip_port(host: str) -> str:
    if not host:
        return ""
    if host.count(":") == 1:
        return host.split(":", 1)[0]
    return host


def registered_domain(value: str) -> str:
    """Return the registrable domain for a host or URL (best-effort)."""
    host = strip_port(canonicalize_domain(value))
    if not host:
        return ""
    extracted = _extract(host)
    if extracted.domain and extracted.suffix:
        return f"{extracted.domain}.{extracted.suffix}".lower()
    return host


def is_valid_domain(value: str) -> bool:
    """Check that a cleaned host is a syntactically valid (IDNA) domain name."""
    host = strip_port(value or "")
    if not host or "." not in host or len(host) > 253:
        return False
    if any(ch.isspace() or not ch.isprintable() for ch in host):
        return False
    try:
        idna.encode(host, uts46=True)
    except (idna.IDNAError, UnicodeError):
        return False
    return True
