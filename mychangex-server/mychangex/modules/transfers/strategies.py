"""Transfer execution strategies.

``AtomicTransfer`` delegates to a single all-or-nothing backend call and is
the only strategy that stays consistent under concurrent transfers touching
the same account.

``FallbackTransfer`` replays the same movement as separate read-modify-write
steps, each committed on its own. It is NOT atomic: two concurrent fallbacks
against one account can lose an update, and a failure after the debit leaves
the sender debited without a matching credit or ledger row. Such partial
transfers are logged at ERROR level and queued as incidents for manual
reconciliation; no compensating write is attempted.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError, SQLAlchemyError

from .exceptions import LedgerRejection
from .models import (
    FAILURE_DUPLICATE_REQUEST,
    FAILURE_PARTIAL,
    FAILURE_RECIPIENT_NOT_FOUND,
    FAILURE_NETWORK,
    FAILURE_UNKNOWN,
    STAGE_CREDIT,
    STAGE_RECORD,
    PartialTransferWarning,
    TransferOrder,
    TransferResult,
)
from .repository import IncidentRepository, LedgerSteps, TransferGateway

logger = logging.getLogger(__name__)

BACKEND_ERRORS = (SQLAlchemyError, OSError, asyncio.TimeoutError)
STEP_ERRORS = (LedgerRejection, *BACKEND_ERRORS)


def is_duplicate_request(exc: BaseException) -> bool:
    """Unique-index violation on the transaction request id."""
    return isinstance(exc, IntegrityError) and "request_id" in str(exc.orig)


def classify_failure(exc: BaseException) -> str:
    if isinstance(exc, LedgerRejection):
        return exc.code
    if is_duplicate_request(exc):
        return FAILURE_DUPLICATE_REQUEST
    if isinstance(exc, (OSError, asyncio.TimeoutError, OperationalError)):
        return FAILURE_NETWORK
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return FAILURE_NETWORK
    return FAILURE_UNKNOWN


class TransferStrategy(Protocol):
    name: str
    atomic: bool

    async def execute(self, order: TransferOrder) -> TransferResult:
        ...


class AtomicTransfer:
    name = "atomic"
    atomic = True

    def __init__(self, gateway: TransferGateway) -> None:
        self._gateway = gateway

    async def execute(self, order: TransferOrder) -> TransferResult:
        try:
            transaction, new_balance = await self._gateway.atomic_transfer(order)
        except LedgerRejection as exc:
            logger.info("Atomic transfer rejected: %s", exc)
            return TransferResult.failed(self.name, exc.code, exc.detail or None)
        except BACKEND_ERRORS as exc:
            logger.warning("Atomic transfer errored: %s", exc)
            return TransferResult.failed(self.name, classify_failure(exc), str(exc))
        return TransferResult(
            success=True,
            strategy=self.name,
            new_sender_balance=new_balance,
            transaction=transaction,
        )


class FallbackTransfer:
    name = "fallback"
    atomic = False

    def __init__(self, steps: LedgerSteps, incidents: IncidentRepository) -> None:
        self._steps = steps
        self._incidents = incidents

    async def execute(self, order: TransferOrder) -> TransferResult:
        try:
            if order.request_id and await self._steps.has_request(order.request_id):
                return TransferResult.failed(self.name, FAILURE_DUPLICATE_REQUEST, order.request_id)
            if await self._steps.read_balance(order.receiver_id) is None:
                return TransferResult.failed(self.name, FAILURE_RECIPIENT_NOT_FOUND)
            new_sender_balance = await self._steps.debit(order.sender_id, order.amount)
        except LedgerRejection as exc:
            return TransferResult.failed(self.name, exc.code, exc.detail or None)
        except BACKEND_ERRORS as exc:
            logger.warning("Fallback transfer failed before any write: %s", exc)
            return TransferResult.failed(self.name, classify_failure(exc), str(exc))

        try:
            await self._steps.credit(order.receiver_id, order.amount)
        except STEP_ERRORS as exc:
            partial = await self._report_partial(order, STAGE_CREDIT, exc)
            return TransferResult(
                success=False,
                strategy=self.name,
                new_sender_balance=new_sender_balance,
                error=partial.detail,
                error_code=FAILURE_PARTIAL,
                partial=partial,
            )

        try:
            transaction = await self._steps.record_transaction(order)
        except STEP_ERRORS as exc:
            # money moved on both sides; only the ledger row is missing
            partial = await self._report_partial(order, STAGE_RECORD, exc)
            return TransferResult(
                success=True,
                strategy=self.name,
                new_sender_balance=new_sender_balance,
                partial=partial,
            )

        return TransferResult(
            success=True,
            strategy=self.name,
            new_sender_balance=new_sender_balance,
            transaction=transaction,
        )

    async def _report_partial(
        self,
        order: TransferOrder,
        stage: str,
        exc: BaseException,
    ) -> PartialTransferWarning:
        warning = PartialTransferWarning(
            sender_id=order.sender_id,
            receiver_id=order.receiver_id,
            amount=order.amount,
            stage=stage,
            detail=str(exc) or exc.__class__.__name__,
        )
        logger.error(
            "Partial fallback transfer: %s debited %s but %s step failed for receiver %s: %s",
            order.sender_id,
            order.amount,
            stage,
            order.receiver_id,
            warning.detail,
        )
        try:
            warning.incident_id = await self._incidents.open_incident(warning)
        except BACKEND_ERRORS:
            logger.exception("Could not queue reconciliation incident for sender %s", order.sender_id)
        return warning


__all__ = ["AtomicTransfer", "FallbackTransfer", "TransferStrategy", "classify_failure", "is_duplicate_request"]
