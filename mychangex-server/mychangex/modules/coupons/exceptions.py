"""Coupon ledger errors."""

from mychangex.core.errors import ChangeXError


class NotReceivedError(ChangeXError):
    code = "not_received"
    default_message = "You can only send back coupons that you received."
