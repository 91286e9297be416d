"""Recipient resolution exports."""

from .phone import is_valid_phone, normalize_phone
from .payload import RawPhoneMatch, StructuredCouponPayload, Unrecognized, build_coupon_payload, parse_scan_payload
from .exceptions import InvalidPayloadError, RecipientError, RecipientNotFoundError, SelfTransferError
from .service import RecipientResolver

__all__ = [
    "InvalidPayloadError",
    "RawPhoneMatch",
    "RecipientError",
    "RecipientNotFoundError",
    "RecipientResolver",
    "SelfTransferError",
    "StructuredCouponPayload",
    "Unrecognized",
    "build_coupon_payload",
    "is_valid_phone",
    "normalize_phone",
    "parse_scan_payload",
]
