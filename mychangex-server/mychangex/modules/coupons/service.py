"""Coupon classification and the send-back rule."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from mychangex.modules.accounts.models import Account
from mychangex.modules.accounts.repository import AccountRepository
from mychangex.modules.sessions.models import WalletSession
from mychangex.modules.transactions.exceptions import TransactionNotFoundError
from mychangex.modules.transactions.models import COUPON_THRESHOLD, TYPE_COUPON_RETURN, TransactionRecord
from mychangex.modules.transactions.repository import TransactionRepository
from mychangex.modules.transfers.models import TransferResult
from mychangex.modules.transfers.service import TransferExecutor

from .exceptions import NotReceivedError
from .models import UNKNOWN_PHONE, CouponView, Party, SendBackIntent, placeholder_name

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _sort_key(record: TransactionRecord) -> datetime:
    created = record.created_at
    if created is None:
        return _EPOCH
    return created if created.tzinfo else created.replace(tzinfo=timezone.utc)


class CouponLedger:
    def __init__(
        self,
        transactions: TransactionRepository,
        accounts: AccountRepository,
        *,
        threshold: Decimal = COUPON_THRESHOLD,
        limit: int = 100,
    ) -> None:
        self._transactions = transactions
        self._accounts = accounts
        self._threshold = threshold
        self._limit = limit

    @classmethod
    def with_session(cls, session: AsyncSession, **kwargs) -> "CouponLedger":
        from mychangex.infrastructure.database.repositories.account_repository import SqlAccountRepository
        from mychangex.infrastructure.database.repositories.transaction_repository import SqlTransactionRepository

        return cls(SqlTransactionRepository(session), SqlAccountRepository(session), **kwargs)

    def can_send_back(self, transaction: TransactionRecord, user_id: str) -> bool:
        return (
            transaction.receiver_id == user_id
            and transaction.sender_id != user_id
            and transaction.is_coupon(self._threshold)
        )

    async def list_coupons(self, user_id: str) -> list[CouponView]:
        records = await self._transactions.list_for_account(
            user_id,
            limit=self._limit,
            max_amount=self._threshold,
        )
        coupons = sorted(
            (record for record in records if record.involves(user_id) and record.is_coupon(self._threshold)),
            key=_sort_key,
            reverse=True,
        )
        parties = await self._load_parties(
            {record.sender_id for record in coupons} | {record.receiver_id for record in coupons}
        )
        return [
            CouponView(
                transaction=record,
                sender=parties.get(record.sender_id) or Party(record.sender_id, placeholder_name(record.sender_id)),
                receiver=parties.get(record.receiver_id) or Party(record.receiver_id, placeholder_name(record.receiver_id)),
                is_received=record.receiver_id == user_id,
                can_send_back=self.can_send_back(record, user_id),
            )
            for record in coupons
        ]

    async def prepare_send_back(self, transaction: TransactionRecord, user_id: str) -> SendBackIntent:
        if not self.can_send_back(transaction, user_id):
            raise NotReceivedError()
        sender = await self._accounts.get_by_id(transaction.sender_id)
        return SendBackIntent(
            transaction_id=transaction.id,
            recipient_id=transaction.sender_id,
            recipient_phone=sender.phone if sender else UNKNOWN_PHONE,
            recipient_name=sender.display_name if sender else placeholder_name(transaction.sender_id),
            preset_amount=transaction.amount,
        )

    async def is_send_back(self, user_id: str, recipient_id: str) -> bool:
        """Whether ``recipient_id`` has previously sent ``user_id`` a coupon."""
        return await self._transactions.has_transfer_between(
            recipient_id,
            user_id,
            max_amount=self._threshold,
        )

    async def send_back(
        self,
        session: WalletSession,
        transaction_id: str,
        executor: TransferExecutor,
        *,
        request_id: str | None = None,
    ) -> tuple[SendBackIntent, TransferResult]:
        user = session.get_current_user()
        transaction = await self._transactions.get_by_id(transaction_id)
        if transaction is None or not transaction.involves(user.id):
            raise TransactionNotFoundError()

        intent = await self.prepare_send_back(transaction, user.id)
        recipient = await self._accounts.get_by_id(intent.recipient_id)
        logger.info("Sending coupon %s back to %s", transaction.id, intent.recipient_id)
        result = await executor.execute(
            session,
            recipient,
            intent.preset_amount,
            request_id=request_id,
            type=TYPE_COUPON_RETURN,
            notes=f"Coupon sent back: {intent.preset_amount:.2f} returned to original sender",
        )
        return intent, result

    async def _load_parties(self, account_ids: Iterable[str]) -> dict[str, Party]:
        ids = list(account_ids)
        if not ids:
            return {}
        accounts: Sequence[Account] = await self._accounts.get_many(ids)
        return {
            account.id: Party(account.id, account.display_name, account.phone or UNKNOWN_PHONE)
            for account in accounts
        }


__all__ = ["CouponLedger"]
