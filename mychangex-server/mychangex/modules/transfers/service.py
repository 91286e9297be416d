"""Balance-constrained peer transfers."""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from mychangex.infrastructure.database.health import DatabaseHealthProbe
from mychangex.modules.accounts.models import Account
from mychangex.modules.notifications.relay import NotificationRelay
from mychangex.modules.recipients.exceptions import RecipientNotFoundError, SelfTransferError
from mychangex.modules.sessions.models import BalanceLoader, CurrentUser, WalletSession
from mychangex.modules.transactions.models import TYPE_TRANSFER, TransactionRecord
from mychangex.modules.transactions.repository import TransactionRepository

from .exceptions import (
    DuplicateTransferError,
    InsufficientBalanceError,
    InvalidAmountError,
    TransferFailedError,
)
from .models import (
    FAILURE_DUPLICATE_REQUEST,
    TERMINAL_FAILURES,
    TransferOrder,
    TransferResult,
)
from .strategies import TransferStrategy

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def parse_amount(amount: Any) -> Decimal:
    """Coerce user input to a positive two-decimal amount or raise InvalidAmountError."""
    if amount is None or isinstance(amount, bool):
        raise InvalidAmountError()
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount).strip())
    except (InvalidOperation, ValueError) as exc:
        raise InvalidAmountError() from exc
    if not value.is_finite() or value <= 0:
        raise InvalidAmountError()
    if value != value.quantize(CENT):
        raise InvalidAmountError("Amounts can have at most two decimal places.")
    return value.quantize(CENT)


class TransferExecutor:
    """Runs a transfer through the atomic strategy, falling back when it fails.

    Business rejections from the atomic path (insufficient funds, unknown
    account, reused request id) are final; only infrastructure failures move
    on to the fallback strategy.
    """

    def __init__(
        self,
        *,
        primary: TransferStrategy,
        fallback: TransferStrategy,
        transactions: TransactionRepository,
        probe: Optional[DatabaseHealthProbe] = None,
        relay: Optional[NotificationRelay] = None,
        balance_loader: Optional[BalanceLoader] = None,
        resync_delay: float = 0.0,
        reconcile_inline: bool = False,
        background: Optional[set[asyncio.Task[Any]]] = None,
    ) -> None:
        self._primary = primary
        self._fallback = fallback
        self._transactions = transactions
        self._probe = probe
        self._relay = relay
        self._balance_loader = balance_loader
        self._resync_delay = resync_delay
        self._reconcile_inline = reconcile_inline
        # strong references; the event loop only keeps weak ones
        self._background: set[asyncio.Task[Any]] = background if background is not None else set()

    @staticmethod
    def validate(sender: CurrentUser, receiver: Account | None, amount: Any) -> tuple[Decimal, Account]:
        value = parse_amount(amount)
        if receiver is None:
            raise RecipientNotFoundError()
        if receiver.id == sender.id:
            raise SelfTransferError()
        if value > sender.balance:
            raise InsufficientBalanceError(shortage=value - sender.balance)
        return value, receiver

    async def execute(
        self,
        session: WalletSession,
        receiver: Account | None,
        amount: Any,
        *,
        request_id: str | None = None,
        type: str = TYPE_TRANSFER,
        notes: str | None = None,
    ) -> TransferResult:
        sender = session.get_current_user()
        value, receiver = self.validate(sender, receiver, amount)

        if self._probe is not None:
            await self._probe.check()

        if request_id:
            existing = await self._transactions.find_by_request_id(request_id)
            if existing is not None:
                logger.warning("Transfer request %s already recorded as %s", request_id, existing.id)
                raise DuplicateTransferError(existing)

        order = TransferOrder(
            sender_id=sender.id,
            receiver_id=receiver.id,
            amount=value,
            type=type,
            notes=notes,
            request_id=request_id,
        )
        logger.info("Transfer %s -> %s of %s started", order.sender_id, order.receiver_id, value)

        result = await self._primary.execute(order)
        if not result.success and result.error_code not in TERMINAL_FAILURES:
            logger.warning(
                "Atomic transfer unavailable (%s); retrying with non-atomic %s strategy",
                result.error_code,
                self._fallback.name,
            )
            result = await self._fallback.execute(order)

        if not result.success:
            logger.info("Transfer %s -> %s failed: %s", order.sender_id, order.receiver_id, result.error_code)
            if result.error_code == FAILURE_DUPLICATE_REQUEST:
                raise DuplicateTransferError()
            raise TransferFailedError(
                result.error_code or "unknown",
                detail=result.error,
                partial=result.partial,
            )

        logger.info(
            "Transfer %s -> %s of %s completed via %s%s",
            order.sender_id,
            order.receiver_id,
            value,
            result.strategy,
            " (degraded)" if result.degraded else "",
        )
        session.apply_optimistic_delta(-value)
        if self._balance_loader is not None:
            if self._reconcile_inline:
                # request-scoped sessions are gone once the response is sent
                await session.reconcile(self._balance_loader)
            else:
                self._track(session.schedule_reconciliation(self._balance_loader, self._resync_delay))
        if result.transaction is not None:
            self._dispatch_notification(
                result.transaction,
                sender_name=session.full_name,
                recipient_name=receiver.display_name,
            )
        return result

    def _dispatch_notification(self, transaction: TransactionRecord, *, sender_name: str, recipient_name: str) -> None:
        if self._relay is None:
            return
        self._track(
            asyncio.create_task(
                self._relay.notify_transaction(
                    transaction,
                    sender_name=sender_name,
                    recipient_name=recipient_name,
                )
            )
        )

    def _track(self, task: asyncio.Task[Any]) -> None:
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def wait_for_background(self) -> None:
        """Wait for in-flight notification tasks; used on shutdown and in tests."""
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)


__all__ = ["TransferExecutor", "parse_amount"]
