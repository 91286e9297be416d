"""Ledger related dependency providers."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from mychangex.core.container import ApplicationContainer
from mychangex.infrastructure.database.repositories.account_repository import SqlAccountRepository
from mychangex.infrastructure.database.repositories.transaction_repository import SqlTransactionRepository
from mychangex.modules.coupons.service import CouponLedger
from mychangex.modules.transactions.service import TransactionService
from mychangex.modules.transfers.service import TransferExecutor

from .account import get_account_repository
from .container import get_app_container
from .database import get_db_session


def get_transaction_repository(db: AsyncSession = Depends(get_db_session)) -> SqlTransactionRepository:
    return SqlTransactionRepository(db)


def get_transaction_service(
    repository: SqlTransactionRepository = Depends(get_transaction_repository),
    container: ApplicationContainer = Depends(get_app_container),
) -> TransactionService:
    return TransactionService(
        repository,
        default_limit=container.settings.transfer.default_history_limit,
        max_limit=container.settings.transfer.history_limit,
    )


def get_coupon_ledger(
    transactions: SqlTransactionRepository = Depends(get_transaction_repository),
    accounts: SqlAccountRepository = Depends(get_account_repository),
    container: ApplicationContainer = Depends(get_app_container),
) -> CouponLedger:
    return CouponLedger(
        transactions,
        accounts,
        threshold=container.settings.transfer.coupon_threshold,
        limit=container.settings.transfer.history_limit,
    )


def get_transfer_executor(
    transactions: SqlTransactionRepository = Depends(get_transaction_repository),
    container: ApplicationContainer = Depends(get_app_container),
) -> TransferExecutor:
    return container.transfer_executor(transactions)


__all__ = [
    "get_coupon_ledger",
    "get_transaction_repository",
    "get_transaction_service",
    "get_transfer_executor",
]
