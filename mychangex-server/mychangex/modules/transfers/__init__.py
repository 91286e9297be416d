"""Transfer domain exports."""

from .exceptions import (
    DuplicateTransferError,
    InsufficientBalanceError,
    InvalidAmountError,
    LedgerRejection,
    TransferError,
    TransferFailedError,
)
from .models import PartialTransferWarning, TransferOrder, TransferResult
from .service import TransferExecutor, parse_amount
from .strategies import AtomicTransfer, FallbackTransfer, TransferStrategy

__all__ = [
    "AtomicTransfer",
    "DuplicateTransferError",
    "FallbackTransfer",
    "InsufficientBalanceError",
    "InvalidAmountError",
    "LedgerRejection",
    "PartialTransferWarning",
    "TransferError",
    "TransferExecutor",
    "TransferFailedError",
    "TransferOrder",
    "TransferResult",
    "TransferStrategy",
    "parse_amount",
]
