"""Reusable FastAPI dependencies."""

from .database import get_db_session
from .container import get_app_container
from .account import get_account_repository, get_account_service, get_recipient_resolver
from .ledger import (
    get_coupon_ledger,
    get_transaction_repository,
    get_transaction_service,
    get_transfer_executor,
)

__all__ = [
    "get_account_repository",
    "get_account_service",
    "get_app_container",
    "get_coupon_ledger",
    "get_db_session",
    "get_recipient_resolver",
    "get_transaction_repository",
    "get_transaction_service",
    "get_transfer_executor",
]
