"""AccountRoot flag decoding."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Optional

# lsf* masks from the XRPL AccountRoot ledger entry.
ACCOUNT_FLAGS: dict[str, int] = {
    "RequireDestTag": 0x00020000,
    "RequireAuth": 0x00040000,
    "DisallowXRP": 0x00080000,
    "DisableMaster": 0x00100000,
    "NoFreeze": 0x00200000,
    "GlobalFreeze": 0x00400000,
    "DefaultRipple": 0x00800000,
    "DepositAuth": 0x01000000,
}


@dataclass(frozen=True)
class FlagSet:
    """Named account security flags."""

    RequireDestTag: bool = False
    RequireAuth: bool = False
    DisallowXRP: bool = False
    DisableMaster: bool = False
    NoFreeze: bool = False
    GlobalFreeze: bool = False
    DefaultRipple: bool = False
    DepositAuth: bool = False

    def active(self) -> list[str]:
        """Names of the flags that are set, in mask order."""
        return [f.name for f in fields(self) if getattr(self, f.name)]

    def to_dict(self) -> dict[str, bool]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def has_flag(raw_flags: Optional[int], mask: int) -> bool:
    return isinstance(raw_flags, int) and (raw_flags & mask) == mask


def decode_flags(raw_flags: Optional[int]) -> FlagSet:
    """Decode a raw AccountRoot bitmask. Missing flags decode to all-false."""
    return FlagSet(**{name: has_flag(raw_flags, mask) for name, mask in ACCOUNT_FLAGS.items()})


def encode_flags(flag_set: FlagSet) -> int:
    """Build the raw bitmask for a FlagSet."""
    raw = 0
    for name, mask in ACCOUNT_FLAGS.items():
        if getattr(flag_set, name):
            raw |= mask
    return raw
