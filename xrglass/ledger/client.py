"""Typed ledger queries.

Every method here is the parse boundary for one rippled command: raw JSON
goes in, validated dataclasses (or an explicit "unavailable" outcome) come
out. Nothing above this module sees untyped upstream payloads.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from ..constants import RIPPLE_EPOCH_OFFSET
from ..exceptions import LedgerUnavailableError
from .models import AccountInfoResult, AccountRoot, AccountStatus, TransactionRef
from .rpc import LedgerRPC

logger = logging.getLogger(__name__)


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def parse_account_root(data: dict[str, Any]) -> AccountRoot:
    """Validate the fields of an AccountRoot entry that scoring relies on."""
    return AccountRoot(
        flags=_as_int(data.get("Flags")),
        owner_count=_as_int(data.get("OwnerCount")) or 0,
        regular_key=_as_str(data.get("RegularKey")),
        domain_hex=_as_str(data.get("Domain")),
    )


def parse_transactions(result: dict[str, Any]) -> Optional[list[TransactionRef]]:
    """Parse an account_tx result; None when the payload is malformed."""
    entries = result.get("transactions")
    if not isinstance(entries, list):
        return None

    refs: list[TransactionRef] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        tx = entry.get("tx") or entry.get("tx_json") or entry.get("transaction")
        if not isinstance(tx, dict):
            tx = entry
        ledger_index = _as_int(entry.get("ledger_index"))
        if ledger_index is None:
            ledger_index = _as_int(tx.get("ledger_index"))
        refs.append(
            TransactionRef(
                ledger_index=ledger_index,
                hash=_as_str(tx.get("hash")) or _as_str(entry.get("hash")),
                transaction_type=_as_str(tx.get("TransactionType")),
            )
        )
    return refs


class LedgerClient:
    """Ledger query capability used by the scanner."""

    def __init__(self, rpc: LedgerRPC):
        self.rpc = rpc

    async def account_info(self, address: str) -> AccountInfoResult:
        try:
            result = await self.rpc.call(
                "account_info",
                {"account": address, "ledger_index": "validated", "strict": True},
            )
        except LedgerUnavailableError as exc:
            logger.warning("account_info unavailable for %s: %s", address, exc)
            return AccountInfoResult(status=AccountStatus.UNAVAILABLE, error=str(exc))

        error = result.get("error")
        if error == "actNotFound":
            return AccountInfoResult(status=AccountStatus.NOT_FOUND, error=error)
        if error == "actMalformed":
            return AccountInfoResult(status=AccountStatus.MALFORMED, error=error)
        if error:
            return AccountInfoResult(status=AccountStatus.UNAVAILABLE, error=str(error))

        data = result.get("account_data")
        if not isinstance(data, dict):
            logger.warning("account_info for %s returned no account_data", address)
            return AccountInfoResult(
                status=AccountStatus.UNAVAILABLE,
                error="account_info response missing account_data",
            )

        return AccountInfoResult(status=AccountStatus.FOUND, account=parse_account_root(data))

    async def account_transactions(
        self,
        address: str,
        *,
        earliest: bool = True,
        limit: int = 1,
    ) -> Optional[list[TransactionRef]]:
        """Fetch transactions oldest-first (earliest=True) or newest-first. None = unavailable."""
        try:
            result = await self.rpc.call(
                "account_tx",
                {
                    "account": address,
                    "ledger_index_min": -1,
                    "ledger_index_max": -1,
                    "forward": earliest,
                    "limit": limit,
                },
            )
        except LedgerUnavailableError as exc:
            logger.warning("account_tx unavailable for %s: %s", address, exc)
            return None

        if result.get("error"):
            return None
        return parse_transactions(result)

    async def ledger_close_time(self, ledger_index: int) -> Optional[int]:
        """Close time of a validated ledger as Unix seconds. None = unavailable."""
        try:
            result = await self.rpc.call(
                "ledger",
                {"ledger_index": ledger_index, "transactions": False, "expand": False},
            )
        except LedgerUnavailableError as exc:
            logger.warning("ledger %s unavailable: %s", ledger_index, exc)
            return None

        ledger = result.get("ledger")
        if not isinstance(ledger, dict):
            return None
        close_time = _as_int(ledger.get("close_time"))
        if close_time is None:
            return None
        return close_time + RIPPLE_EPOCH_OFFSET
