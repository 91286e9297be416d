"""Backend contracts used by the transfer strategies."""

from __future__ import annotations

from decimal import Decimal
from typing import Protocol

from mychangex.modules.transactions.models import TransactionRecord

from .models import PartialTransferWarning, TransferOrder


class TransferGateway(Protocol):
    """Single all-or-nothing server-side transfer."""

    async def atomic_transfer(self, order: TransferOrder) -> tuple[TransactionRecord, Decimal]:
        """Debit, credit and record in one unit of work.

        Returns the recorded transaction and the sender's new balance. Raises
        ``LedgerRejection`` for insufficient funds, unknown accounts or a
        reused request id; nothing is applied in that case.
        """
        ...


class LedgerSteps(Protocol):
    """Independent read-modify-write steps. Each call commits on its own."""

    async def has_request(self, request_id: str) -> bool:
        ...

    async def read_balance(self, account_id: str) -> Decimal | None:
        ...

    async def debit(self, account_id: str, amount: Decimal) -> Decimal:
        ...

    async def credit(self, account_id: str, amount: Decimal) -> Decimal:
        ...

    async def record_transaction(self, order: TransferOrder) -> TransactionRecord:
        ...


class IncidentRepository(Protocol):
    async def open_incident(self, warning: PartialTransferWarning) -> str:
        ...
