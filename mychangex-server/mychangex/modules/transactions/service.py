"""Transaction history queries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from .exceptions import TransactionNotFoundError
from .models import TransactionRecord
from .repository import TransactionRepository


@dataclass(slots=True)
class TransactionService:
    repository: TransactionRepository
    default_limit: int = 50
    max_limit: int = 100

    @classmethod
    def with_session(cls, session: AsyncSession, **kwargs: int) -> "TransactionService":
        from mychangex.infrastructure.database.repositories.transaction_repository import SqlTransactionRepository

        return cls(SqlTransactionRepository(session), **kwargs)

    async def list_history(self, account_id: str, limit: int | None = None) -> Sequence[TransactionRecord]:
        limit = min(limit or self.default_limit, self.max_limit)
        return await self.repository.list_for_account(account_id, limit=limit)

    async def get_transaction(self, transaction_id: str, account_id: str) -> TransactionRecord:
        """Fetch a transaction visible to ``account_id``.

        Transactions the account did not take part in are reported as missing.
        """
        record = await self.repository.get_by_id(transaction_id)
        if record is None or not record.involves(account_id):
            raise TransactionNotFoundError()
        return record
