"""Repository protocol for accounts."""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Protocol, Sequence

from .models import Account


class AccountRepository(Protocol):
    """Abstract repository interface for account persistence."""

    async def get_by_id(self, account_id: str) -> Account | None:
        ...

    async def get_by_phone(self, phone: str) -> Account | None:
        ...

    async def get_many(self, account_ids: Iterable[str]) -> Sequence[Account]:
        ...

    async def create_account(
        self,
        *,
        phone: str,
        full_name: str,
        pin_hash: str,
        balance: Decimal = Decimal("0.00"),
    ) -> Account:
        ...
