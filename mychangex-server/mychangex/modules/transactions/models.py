"""Domain models for ledger transactions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

COUPON_THRESHOLD = Decimal("1.00")

TYPE_TRANSFER = "transfer"
TYPE_COUPON_RETURN = "coupon_return"


@dataclass(frozen=True, slots=True)
class TransactionRecord:
    """Immutable ledger entry. Reversals are new records, never edits."""

    id: str
    sender_id: str
    receiver_id: str
    amount: Decimal
    type: str = TYPE_TRANSFER
    status: str = "completed"
    notes: Optional[str] = None
    request_id: Optional[str] = None
    created_at: Optional[datetime] = None

    def is_coupon(self, threshold: Decimal = COUPON_THRESHOLD) -> bool:
        return self.amount < threshold

    def involves(self, account_id: str) -> bool:
        return account_id in (self.sender_id, self.receiver_id)
