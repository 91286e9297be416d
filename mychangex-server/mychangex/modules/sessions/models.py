"""Client session snapshot with an explicit lifecycle.

A ``WalletSession`` is created from an authenticated token plus the stored
account, handed to the components that need the current user, and invalidated
on logout or expiry. The cached balance can run ahead of the store: transfers
apply an optimistic delta at once and a reconciliation later replaces it with
the stored value.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Awaitable, Callable, Optional

from mychangex.core.errors import SessionExpiredError

logger = logging.getLogger(__name__)

BalanceLoader = Callable[[str], Awaitable[Optional[Decimal]]]


@dataclass(slots=True)
class CurrentUser:
    id: str
    phone: str
    balance: Decimal


@dataclass(slots=True)
class WalletSession:
    account_id: str
    phone: str
    full_name: str
    balance: Decimal
    token: Optional[str] = field(default=None, repr=False)
    token_id: Optional[str] = None
    expires_at: Optional[datetime] = None
    active: bool = True
    pending_reconciliation: Optional["asyncio.Task[Decimal | None]"] = field(default=None, repr=False)

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        return (now or datetime.now(timezone.utc)) >= self.expires_at

    def get_current_user(self) -> CurrentUser:
        if not self.active or self.is_expired():
            raise SessionExpiredError()
        return CurrentUser(id=self.account_id, phone=self.phone, balance=self.balance)

    def invalidate(self) -> None:
        self.active = False
        self.token = None
        if self.pending_reconciliation is not None and not self.pending_reconciliation.done():
            self.pending_reconciliation.cancel()
        self.pending_reconciliation = None

    def apply_optimistic_delta(self, delta: Decimal) -> Decimal:
        self.balance = self.balance + delta
        return self.balance

    async def reconcile(self, loader: BalanceLoader) -> Decimal | None:
        stored = await loader(self.account_id)
        if stored is None:
            logger.warning("Account %s vanished during reconciliation", self.account_id)
            return None
        if stored != self.balance:
            logger.info(
                "Balance drift for %s: cached %s, stored %s",
                self.account_id,
                self.balance,
                stored,
            )
        self.balance = stored
        return stored

    def schedule_reconciliation(self, loader: BalanceLoader, delay: float = 0.0) -> "asyncio.Task[Decimal | None]":
        """Re-read the balance after ``delay`` seconds; replaces any pending run."""
        if self.pending_reconciliation is not None and not self.pending_reconciliation.done():
            self.pending_reconciliation.cancel()

        async def _run() -> Decimal | None:
            if delay > 0:
                await asyncio.sleep(delay)
            return await self.reconcile(loader)

        self.pending_reconciliation = asyncio.create_task(_run())
        return self.pending_reconciliation


__all__ = ["BalanceLoader", "CurrentUser", "WalletSession"]
