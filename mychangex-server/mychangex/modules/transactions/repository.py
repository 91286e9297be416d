"""Repository protocol for the transaction ledger."""

from __future__ import annotations

from decimal import Decimal
from typing import Protocol, Sequence

from .models import TransactionRecord


class TransactionRepository(Protocol):
    async def list_for_account(
        self,
        account_id: str,
        *,
        limit: int,
        max_amount: Decimal | None = None,
    ) -> Sequence[TransactionRecord]:
        """Transactions where the account is sender or receiver, newest first.

        ``max_amount`` is exclusive.
        """
        ...

    async def get_by_id(self, transaction_id: str) -> TransactionRecord | None:
        ...

    async def find_by_request_id(self, request_id: str) -> TransactionRecord | None:
        ...

    async def has_transfer_between(
        self,
        sender_id: str,
        receiver_id: str,
        *,
        max_amount: Decimal,
    ) -> bool:
        ...
