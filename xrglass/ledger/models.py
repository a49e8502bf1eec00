"""Ledger data models."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .flags import FlagSet, decode_flags

# Classic address: "r" followed by base58 (XRPL alphabet excludes 0, O, I, l).
ADDRESS_RE = re.compile(r"^r[1-9A-HJ-NP-Za-km-z]{24,35}$")


def is_valid_address(address: str) -> bool:
    return isinstance(address, str) and bool(ADDRESS_RE.match(address))


class AccountStatus(str, Enum):
    """Outcome of an account_info lookup."""

    FOUND = "found"
    NOT_FOUND = "not_found"  # Never funded/activated; a scoring signal, not an error
    MALFORMED = "malformed"  # Ledger rejected the address itself
    UNAVAILABLE = "unavailable"  # Transport/parse failure; indeterminate


@dataclass(frozen=True)
class AccountRoot:
    """Validated subset of the AccountRoot ledger entry."""

    flags: Optional[int] = None
    owner_count: int = 0
    regular_key: Optional[str] = None
    domain_hex: Optional[str] = None


@dataclass(frozen=True)
class AccountInfoResult:
    status: AccountStatus
    account: Optional[AccountRoot] = None
    error: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.status == AccountStatus.FOUND


@dataclass(frozen=True)
class TransactionRef:
    """Minimal view of an account_tx entry."""

    ledger_index: Optional[int]
    hash: Optional[str] = None
    transaction_type: Optional[str] = None


@dataclass(frozen=True)
class AccountSnapshot:
    """Facts about one ledger account at scan time."""

    address: str
    exists: bool
    owner_count: int = 0
    flags: Optional[int] = None
    regular_key_set: bool = False
    domain: Optional[str] = None
    age_days: Optional[int] = None  # None = indeterminate, never zero

    @property
    def flag_set(self) -> FlagSet:
        return decode_flags(self.flags)

    def to_dict(self) -> dict:
        return {
            "address": self.address,
            "exists": self.exists,
            "ownerCount": self.owner_count,
            "flags": self.flags,
            "flagsDecoded": self.flag_set.to_dict(),
            "regularKeySet": self.regular_key_set,
            "domain": self.domain,
            "accountAgeDays": self.age_days,
        }
