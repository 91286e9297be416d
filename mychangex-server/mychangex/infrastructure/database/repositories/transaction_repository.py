"""SQLAlchemy implementation of the transaction ledger."""

from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from sqlalchemy import desc, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from mychangex.infrastructure.database.models import Transaction
from mychangex.modules.transactions.models import TransactionRecord


def to_record(model: Transaction) -> TransactionRecord:
    return TransactionRecord(
        id=model.id,
        sender_id=model.sender_id,
        receiver_id=model.receiver_id,
        amount=Decimal(model.amount).quantize(Decimal("0.01")),
        type=model.type or "transfer",
        status=model.status or "completed",
        notes=model.notes,
        request_id=model.request_id,
        created_at=model.created_at,
    )


class SqlTransactionRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_for_account(
        self,
        account_id: str,
        *,
        limit: int,
        max_amount: Decimal | None = None,
    ) -> Sequence[TransactionRecord]:
        stmt = select(Transaction).where(
            or_(Transaction.sender_id == account_id, Transaction.receiver_id == account_id)
        )
        if max_amount is not None:
            stmt = stmt.where(Transaction.amount < max_amount)
        stmt = stmt.order_by(desc(Transaction.created_at)).limit(limit)
        result = await self.session.execute(stmt)
        return [to_record(row) for row in result.scalars().all()]

    async def get_by_id(self, transaction_id: str) -> TransactionRecord | None:
        stmt = select(Transaction).where(Transaction.id == transaction_id)
        result = await self.session.execute(stmt)
        model = result.scalars().first()
        return to_record(model) if model else None

    async def find_by_request_id(self, request_id: str) -> TransactionRecord | None:
        stmt = select(Transaction).where(Transaction.request_id == request_id)
        result = await self.session.execute(stmt)
        model = result.scalars().first()
        return to_record(model) if model else None

    async def has_transfer_between(
        self,
        sender_id: str,
        receiver_id: str,
        *,
        max_amount: Decimal,
    ) -> bool:
        stmt = (
            select(Transaction.id)
            .where(
                Transaction.sender_id == sender_id,
                Transaction.receiver_id == receiver_id,
                Transaction.amount < max_amount,
            )
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.first() is not None
