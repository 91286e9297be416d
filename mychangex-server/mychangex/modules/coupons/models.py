"""Coupon ledger read models."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from mychangex.modules.transactions.models import TransactionRecord

UNKNOWN_PHONE = "N/A"


def placeholder_name(account_id: str) -> str:
    return f"User {account_id[:8]}..."


@dataclass(frozen=True, slots=True)
class Party:
    id: str
    name: str
    phone: str = UNKNOWN_PHONE


@dataclass(frozen=True, slots=True)
class CouponView:
    transaction: TransactionRecord
    sender: Party
    receiver: Party
    is_received: bool
    can_send_back: bool

    @property
    def amount(self) -> Decimal:
        return self.transaction.amount


@dataclass(frozen=True, slots=True)
class SendBackIntent:
    """Same amount, reversed direction, addressed to the original sender only."""

    transaction_id: str
    recipient_id: str
    recipient_phone: str
    recipient_name: str
    preset_amount: Decimal
