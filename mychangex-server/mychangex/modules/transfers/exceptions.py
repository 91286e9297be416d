"""Transfer domain exceptions."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from mychangex.core.errors import ChangeXError

if TYPE_CHECKING:
    from mychangex.modules.transactions.models import TransactionRecord

    from .models import PartialTransferWarning


class TransferError(ChangeXError):
    """Base class for transfer failures."""


class InvalidAmountError(TransferError):
    code = "invalid_amount"
    default_message = "Please enter a valid amount."


class InsufficientBalanceError(TransferError):
    code = "insufficient_balance"

    def __init__(self, shortage: Decimal) -> None:
        self.shortage = shortage
        super().__init__(f"Insufficient balance. You need ${shortage:.2f} more.")


class DuplicateTransferError(TransferError):
    """A transfer with the same client request id already exists."""

    code = "duplicate_transfer"
    default_message = "This transfer was already submitted. Check your transaction history before retrying."

    def __init__(self, existing: Optional["TransactionRecord"] = None) -> None:
        self.existing = existing
        super().__init__()


_FAILURE_MESSAGES = {
    "insufficient_funds": "Insufficient balance for this transaction.",
    "recipient_not_found": "Recipient account not found. Please check the phone number.",
    "network": "Network error. Please check your internet connection.",
    "partial": (
        "Your transfer could not be completed and your balance may be affected. "
        "Support has been notified and will reconcile it."
    ),
}


class TransferFailedError(TransferError):
    """Both execution paths failed. Never retried automatically."""

    code = "transfer_failed"
    default_message = "Failed to complete transaction. Please try again."

    def __init__(
        self,
        reason: str,
        *,
        detail: str | None = None,
        partial: Optional["PartialTransferWarning"] = None,
    ) -> None:
        self.reason = reason
        self.detail = detail
        self.partial = partial
        super().__init__(_FAILURE_MESSAGES.get(reason))


class LedgerRejection(Exception):
    """Raised by ledger backends when they refuse an operation on business grounds.

    Not user-facing; strategies translate it into a failed ``TransferResult``.
    """

    def __init__(self, code: str, detail: str = "") -> None:
        self.code = code
        self.detail = detail
        super().__init__(f"{code}: {detail}" if detail else code)
