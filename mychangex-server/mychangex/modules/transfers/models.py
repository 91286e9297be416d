"""Transfer value objects."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from mychangex.modules.transactions.models import TYPE_TRANSFER, TransactionRecord

FAILURE_INSUFFICIENT_FUNDS = "insufficient_funds"
FAILURE_RECIPIENT_NOT_FOUND = "recipient_not_found"
FAILURE_DUPLICATE_REQUEST = "duplicate_request"
FAILURE_NETWORK = "network"
FAILURE_PARTIAL = "partial"
FAILURE_UNKNOWN = "unknown"

# business rejections: the fallback path would refuse them for the same reason
TERMINAL_FAILURES = frozenset(
    {FAILURE_INSUFFICIENT_FUNDS, FAILURE_RECIPIENT_NOT_FOUND, FAILURE_DUPLICATE_REQUEST}
)

STAGE_CREDIT = "credit"
STAGE_RECORD = "record"


@dataclass(frozen=True, slots=True)
class TransferOrder:
    sender_id: str
    receiver_id: str
    amount: Decimal
    type: str = TYPE_TRANSFER
    notes: Optional[str] = None
    request_id: Optional[str] = None


@dataclass(slots=True)
class PartialTransferWarning:
    """A fallback transfer stopped after the sender was debited."""

    sender_id: str
    receiver_id: str
    amount: Decimal
    stage: str
    detail: str
    incident_id: Optional[str] = None

    @property
    def receiver_credited(self) -> bool:
        return self.stage == STAGE_RECORD


@dataclass(slots=True)
class TransferResult:
    success: bool
    strategy: str
    new_sender_balance: Optional[Decimal] = None
    transaction: Optional[TransactionRecord] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    partial: Optional[PartialTransferWarning] = None

    @property
    def degraded(self) -> bool:
        return self.success and self.partial is not None

    @classmethod
    def failed(cls, strategy: str, code: str, error: str | None = None) -> "TransferResult":
        return cls(success=False, strategy=strategy, error=error or code, error_code=code)
