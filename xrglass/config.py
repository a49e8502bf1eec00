"""Configuration management for XRglass."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Set
from urllib.parse import urlparse

import yaml
from dotenv import load_dotenv

from .constants import (
    DEFAULT_KNOWN_DOMAINS,
    DEFAULT_RPC_ENDPOINTS,
    DEFAULT_TRUSTED_DOMAINS,
    DEFAULT_TRUSTED_WALLETS,
    PROJECT_METADATA_PATHS,
    WALLET_METADATA_PATHS,
)
from .utils.domain_similarity import TYPOSQUAT_MAX_DISTANCE
from .utils.domains import canonicalize_domain
from .utils.lists import read_list

logger = logging.getLogger(__name__)


def parse_endpoints(value: str | None) -> list[str]:
    """Split a comma-separated endpoint override; empty means "use defaults"."""
    if not value:
        return list(DEFAULT_RPC_ENDPOINTS)
    endpoints = [e.strip() for e in value.split(",") if e.strip()]
    return endpoints or list(DEFAULT_RPC_ENDPOINTS)


@dataclass
class Config:
    """XRglass configuration."""

    # Ledger access
    rpc_endpoints: list[str] = field(default_factory=lambda: list(DEFAULT_RPC_ENDPOINTS))
    rpc_timeout: float = 15.0

    # HTTP probes
    http_timeout: float = 10.0
    probe_timeout: float = 10.0
    github_lookup_enabled: bool = True
    wallet_metadata_paths: list[str] = field(default_factory=lambda: list(WALLET_METADATA_PATHS))
    project_metadata_paths: list[str] = field(default_factory=lambda: list(PROJECT_METADATA_PATHS))

    # Advisory typosquat check
    known_domains: list[str] = field(default_factory=lambda: list(DEFAULT_KNOWN_DOMAINS))
    similarity_max_distance: int = TYPOSQUAT_MAX_DISTANCE

    # HTTP surface
    server_host: str = "127.0.0.1"
    server_port: int = 8080
    log_level: str = "INFO"

    config_dir: Path = field(default_factory=lambda: Path("./config"))

    # Curated lists (replaced by config/*.txt when present)
    trusted_wallets: Set[str] = field(default_factory=lambda: set(DEFAULT_TRUSTED_WALLETS))
    blocked_wallets: Set[str] = field(default_factory=set)
    trusted_domains: Set[str] = field(default_factory=lambda: set(DEFAULT_TRUSTED_DOMAINS))
    blocked_domains: Set[str] = field(default_factory=set)

    def __post_init__(self):
        """Normalize paths and load curated lists."""
        self.config_dir = Path(self.config_dir)
        self._load_lists()

    def _load_lists(self):
        """Load wallet and domain lists from config files."""
        wallet_files = {
            "trusted_wallets": self.config_dir / "trusted_wallets.txt",
            "blocked_wallets": self.config_dir / "blocked_wallets.txt",
        }
        domain_files = {
            "trusted_domains": self.config_dir / "trusted_domains.txt",
            "blocked_domains": self.config_dir / "blocked_domains.txt",
        }

        for attr, path in wallet_files.items():
            if path.exists():
                setattr(self, attr, read_list(path))
        for attr, path in domain_files.items():
            if path.exists():
                setattr(self, attr, read_list(path, normalize=canonicalize_domain))


def _load_heuristics(config_dir: Path) -> dict:
    """Load overrides from config/heuristics.yaml (optional)."""
    path = Path(config_dir or ".") / "heuristics.yaml"
    if not path.exists():
        return {}

    try:
        data = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as exc:
        logger.warning("Failed to parse heuristics.yaml: %s", exc)
        return {}
    if not isinstance(data, dict):
        return {}

    def _coerce_str_list(raw) -> list[str] | None:
        if not isinstance(raw, (list, tuple)):
            return None
        items = [str(item).strip() for item in raw if str(item or "").strip()]
        return items or None

    similarity_cfg = data.get("similarity") or {}
    metadata_cfg = data.get("metadata") or {}
    if not isinstance(similarity_cfg, dict):
        similarity_cfg = {}
    if not isinstance(metadata_cfg, dict):
        metadata_cfg = {}

    overrides: dict = {}
    known = _coerce_str_list(similarity_cfg.get("known_domains"))
    if known:
        overrides["known_domains"] = known
    try:
        if similarity_cfg.get("max_distance") is not None:
            overrides["similarity_max_distance"] = int(similarity_cfg["max_distance"])
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid similarity.max_distance in heuristics.yaml")

    wallet_paths = _coerce_str_list(metadata_cfg.get("wallet_paths"))
    if wallet_paths:
        overrides["wallet_metadata_paths"] = wallet_paths
    project_paths = _coerce_str_list(metadata_cfg.get("project_paths"))
    if project_paths:
        overrides["project_metadata_paths"] = project_paths
    return overrides


def load_config() -> Config:
    """Load configuration from environment variables."""
    load_dotenv()

    config_dir = Path(os.getenv("CONFIG_DIR", "./config"))
    heuristics = _load_heuristics(config_dir)

    return Config(
        rpc_endpoints=parse_endpoints(os.getenv("XRPL_RPC_ENDPOINTS")),
        rpc_timeout=float(os.getenv("XRPL_RPC_TIMEOUT", "15")),
        http_timeout=float(os.getenv("HTTP_TIMEOUT", "10")),
        probe_timeout=float(os.getenv("PROBE_TIMEOUT", "10")),
        github_lookup_enabled=os.getenv("GITHUB_LOOKUP_ENABLED", "true").lower() == "true",
        server_host=os.getenv("SERVER_HOST", "127.0.0.1"),
        server_port=int(os.getenv("SERVER_PORT", "8080")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        config_dir=config_dir,
        **heuristics,
    )


def validate_config(config: Config) -> list[str]:
    """Validate configuration and return list of error messages."""
    errors: list[str] = []
    if not config.rpc_endpoints:
        errors.append("At least one XRPL RPC endpoint is required")
    for endpoint in config.rpc_endpoints:
        if urlparse(endpoint).scheme not in {"http", "https"}:
            errors.append(f"XRPL RPC endpoint must be an http(s) URL: {endpoint}")

    for name in ("rpc_timeout", "http_timeout", "probe_timeout"):
        if getattr(config, name) <= 0:
            errors.append(f"{name.upper()} must be positive")

    if config.similarity_max_distance < 1:
        errors.append("similarity max_distance must be at least 1")

    if not config.trusted_wallets and not config.trusted_domains:
        logger.info("No curated allowlist entries configured; every subject goes through full scoring")

    return errors
