"""XRP Ledger lookups for XRglass."""

from .client import LedgerClient
from .fetcher import AccountFetcher, decode_domain
from .flags import FlagSet, decode_flags, encode_flags
from .models import AccountInfoResult, AccountSnapshot, AccountStatus, is_valid_address
from .rpc import LedgerRPC

__all__ = [
    "LedgerClient",
    "LedgerRPC",
    "AccountFetcher",
    "AccountInfoResult",
    "AccountSnapshot",
    "AccountStatus",
    "FlagSet",
    "decode_domain",
    "decode_flags",
    "encode_flags",
    "is_valid_address",
]
