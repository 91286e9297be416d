"""Coupon ledger exports."""

from .exceptions import NotReceivedError
from .models import CouponView, Party, SendBackIntent
from .service import CouponLedger

__all__ = ["CouponLedger", "CouponView", "NotReceivedError", "Party", "SendBackIntent"]
