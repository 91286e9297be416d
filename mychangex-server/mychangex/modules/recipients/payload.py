"""Parsing of scanned QR/barcode payloads into a tagged result."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from mychangex.modules.sessions.models import WalletSession

COUPON_TAG = "coupon"
APP_TAG = "MyChangeX"

PHONE_PATTERN = re.compile(
    r"(\+?\d{1,4}?[-.\s]?\(?\d{1,3}?\)?[-.\s]?\d{1,4}[-.\s]?\d{1,4}[-.\s]?\d{1,9})"
)


@dataclass(frozen=True, slots=True)
class StructuredCouponPayload:
    """``{"type": "coupon", "phone": ...}`` generated by the receive screen."""

    phone: str
    name: str | None = None


@dataclass(frozen=True, slots=True)
class RawPhoneMatch:
    phone: str


@dataclass(frozen=True, slots=True)
class Unrecognized:
    raw: str


ScanPayload = Union[StructuredCouponPayload, RawPhoneMatch, Unrecognized]


def build_coupon_payload(session: WalletSession, *, now: datetime | None = None) -> str:
    """QR payload shown on the receive screen; scanning it yields a ``StructuredCouponPayload``."""
    return json.dumps(
        {
            "type": COUPON_TAG,
            "name": session.full_name,
            "phone": session.phone,
            "balance": f"{session.balance:.2f}",
            "timestamp": (now or datetime.now(timezone.utc)).isoformat(),
            "app": APP_TAG,
        }
    )


def parse_scan_payload(data: str | None) -> ScanPayload:
    if not data or not data.strip():
        return Unrecognized(raw=data or "")

    try:
        decoded = json.loads(data)
    except ValueError:
        decoded = None
    else:
        # valid JSON is only accepted in its tagged coupon form
        if isinstance(decoded, dict):
            phone = decoded.get("phone")
            if decoded.get("type") == COUPON_TAG and isinstance(phone, str) and phone.strip():
                name = decoded.get("name")
                return StructuredCouponPayload(phone=phone.strip(), name=name if isinstance(name, str) else None)
            return Unrecognized(raw=data)
        if not isinstance(decoded, (int, float)):
            return Unrecognized(raw=data)

    match = PHONE_PATTERN.search(data)
    if match:
        return RawPhoneMatch(phone=match.group(0).strip())
    return Unrecognized(raw=data)


__all__ = [
    "APP_TAG",
    "COUPON_TAG",
    "RawPhoneMatch",
    "ScanPayload",
    "StructuredCouponPayload",
    "Unrecognized",
    "build_coupon_payload",
    "parse_scan_payload",
]
