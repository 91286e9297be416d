"""SQLAlchemy backends for the transfer strategies.

Both classes take a session factory rather than a session: the gateway needs
its own unit of work, and every fallback step must commit independently of
the request that triggered it.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.sql import func

from mychangex.infrastructure.database.models import Profile, Transaction, TransferIncident
from mychangex.infrastructure.database.repositories.transaction_repository import to_record
from mychangex.modules.transactions.models import TransactionRecord
from mychangex.modules.transfers.exceptions import LedgerRejection
from mychangex.modules.transfers.models import (
    FAILURE_DUPLICATE_REQUEST,
    FAILURE_INSUFFICIENT_FUNDS,
    FAILURE_RECIPIENT_NOT_FOUND,
    PartialTransferWarning,
    TransferOrder,
)
from mychangex.modules.transfers.strategies import is_duplicate_request


def _new_transaction(order: TransferOrder) -> Transaction:
    return Transaction(
        sender_id=order.sender_id,
        receiver_id=order.receiver_id,
        amount=order.amount,
        type=order.type,
        status="completed",
        notes=order.notes,
        request_id=order.request_id,
    )


class SqlTransferGateway:
    """Debit, credit and ledger insert inside one database transaction."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def atomic_transfer(self, order: TransferOrder) -> tuple[TransactionRecord, Decimal]:
        async with self._session_factory() as session:
            async with session.begin():
                if order.request_id:
                    duplicate = await session.scalar(
                        select(Transaction.id).where(Transaction.request_id == order.request_id)
                    )
                    if duplicate is not None:
                        raise LedgerRejection(FAILURE_DUPLICATE_REQUEST, order.request_id)

                receiver = await session.scalar(select(Profile.id).where(Profile.id == order.receiver_id))
                if receiver is None:
                    raise LedgerRejection(FAILURE_RECIPIENT_NOT_FOUND, "receiver not found")

                debit = await session.execute(
                    update(Profile)
                    .where(Profile.id == order.sender_id, Profile.balance >= order.amount)
                    .values(balance=Profile.balance - order.amount, updated_at=func.now())
                    .returning(Profile.balance)
                )
                new_balance = debit.scalar_one_or_none()
                if new_balance is None:
                    sender = await session.scalar(select(Profile.id).where(Profile.id == order.sender_id))
                    if sender is None:
                        raise LedgerRejection(FAILURE_RECIPIENT_NOT_FOUND, "sender not found")
                    raise LedgerRejection(FAILURE_INSUFFICIENT_FUNDS, "Insufficient funds")

                await session.execute(
                    update(Profile)
                    .where(Profile.id == order.receiver_id)
                    .values(balance=Profile.balance + order.amount, updated_at=func.now())
                )

                model = _new_transaction(order)
                session.add(model)
                try:
                    await session.flush()
                except IntegrityError as exc:
                    # lost a race with a concurrent request carrying the same id
                    if is_duplicate_request(exc):
                        raise LedgerRejection(FAILURE_DUPLICATE_REQUEST, order.request_id or "") from exc
                    raise
                await session.refresh(model)
                record = to_record(model)
        return record, Decimal(new_balance).quantize(Decimal("0.01"))


class SqlLedgerSteps:
    """Read-modify-write steps, one committed unit of work per call.

    Balances are read, computed in Python and written back as absolute
    values, so concurrent callers can overwrite each other's updates.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def has_request(self, request_id: str) -> bool:
        async with self._session_factory() as session:
            existing = await session.scalar(select(Transaction.id).where(Transaction.request_id == request_id))
        return existing is not None

    async def read_balance(self, account_id: str) -> Decimal | None:
        async with self._session_factory() as session:
            balance = await session.scalar(select(Profile.balance).where(Profile.id == account_id))
        return None if balance is None else Decimal(balance).quantize(Decimal("0.01"))

    async def _write_balance(self, account_id: str, balance: Decimal) -> Decimal:
        if balance < 0:
            raise LedgerRejection(FAILURE_INSUFFICIENT_FUNDS, "balance would become negative")
        async with self._session_factory.begin() as session:
            result = await session.execute(
                update(Profile)
                .where(Profile.id == account_id)
                .values(balance=balance, updated_at=func.now())
            )
            if result.rowcount == 0:
                raise LedgerRejection(FAILURE_RECIPIENT_NOT_FOUND, f"account {account_id} not found")
        return balance

    async def debit(self, account_id: str, amount: Decimal) -> Decimal:
        current = await self.read_balance(account_id)
        if current is None:
            raise LedgerRejection(FAILURE_RECIPIENT_NOT_FOUND, f"account {account_id} not found")
        if current < amount:
            raise LedgerRejection(FAILURE_INSUFFICIENT_FUNDS, "Insufficient funds")
        return await self._write_balance(account_id, current - amount)

    async def credit(self, account_id: str, amount: Decimal) -> Decimal:
        current = await self.read_balance(account_id)
        if current is None:
            raise LedgerRejection(FAILURE_RECIPIENT_NOT_FOUND, f"account {account_id} not found")
        return await self._write_balance(account_id, current + amount)

    async def record_transaction(self, order: TransferOrder) -> TransactionRecord:
        async with self._session_factory.begin() as session:
            model = _new_transaction(order)
            session.add(model)
            await session.flush()
            await session.refresh(model)
            return to_record(model)


class SqlIncidentRepository:
    """Manual-review queue for partially applied fallback transfers."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def open_incident(self, warning: PartialTransferWarning) -> str:
        async with self._session_factory.begin() as session:
            incident = TransferIncident(
                sender_id=warning.sender_id,
                receiver_id=warning.receiver_id,
                amount=warning.amount,
                stage=warning.stage,
                detail=warning.detail[:1000],
                status="open",
            )
            session.add(incident)
            await session.flush()
            return incident.id

    async def list_open(self) -> list[TransferIncident]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(TransferIncident)
                .where(TransferIncident.status == "open")
                .order_by(TransferIncident.created_at)
            )
            return list(result.scalars().all())
