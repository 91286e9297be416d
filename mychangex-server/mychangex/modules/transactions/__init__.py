"""Transaction ledger exports."""

from .exceptions import TransactionNotFoundError
from .models import COUPON_THRESHOLD, TYPE_COUPON_RETURN, TYPE_TRANSFER, TransactionRecord
from .service import TransactionService

__all__ = [
    "COUPON_THRESHOLD",
    "TYPE_COUPON_RETURN",
    "TYPE_TRANSFER",
    "TransactionNotFoundError",
    "TransactionRecord",
    "TransactionService",
]
