"""Account snapshot assembly."""

from __future__ import annotations

import binascii
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from .client import LedgerClient
from .models import AccountInfoResult, AccountSnapshot

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86_400


def decode_domain(domain_hex: Optional[str]) -> Optional[str]:
    """Decode the hex-encoded AccountRoot Domain field; None when unusable."""
    if not domain_hex:
        return None
    try:
        text = binascii.unhexlify(domain_hex.strip()).decode("utf-8")
    except (binascii.Error, ValueError):
        return None
    text = text.rstrip("\x00").strip().rstrip("/")
    return text or None


def age_in_days(close_time: int, now: datetime) -> int:
    return max(0, int((now.timestamp() - close_time) // SECONDS_PER_DAY))


class AccountFetcher:
    """Derives account facts that need more than one ledger query."""

    def __init__(self, ledger: LedgerClient, clock: Optional[Callable[[], datetime]] = None):
        self.ledger = ledger
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    async def account_age_days(self, address: str) -> Optional[int]:
        """Days since the earliest known transaction; None when indeterminate."""
        transactions = await self.ledger.account_transactions(address, earliest=True, limit=1)
        if not transactions:
            return None

        ledger_index = transactions[0].ledger_index
        if ledger_index is None:
            return None

        close_time = await self.ledger.ledger_close_time(ledger_index)
        if close_time is None:
            return None

        age = age_in_days(close_time, self.clock())
        logger.debug("Account %s first seen in ledger %s (%d days)", address, ledger_index, age)
        return age

    @staticmethod
    def snapshot(address: str, info: AccountInfoResult, age_days: Optional[int] = None) -> AccountSnapshot:
        if not info.found or info.account is None:
            return AccountSnapshot(address=address, exists=False)
        account = info.account
        return AccountSnapshot(
            address=address,
            exists=True,
            owner_count=account.owner_count,
            flags=account.flags,
            regular_key_set=bool(account.regular_key),
            domain=decode_domain(account.domain_hex),
            age_days=age_days,
        )
