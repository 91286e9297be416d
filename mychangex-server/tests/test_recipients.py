"""
Recipient resolution: phone normalisation, scanned payload parsing and lookup.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from mychangex.core.errors import FormatError
from mychangex.modules.recipients import (
    InvalidPayloadError,
    RawPhoneMatch,
    RecipientNotFoundError,
    RecipientResolver,
    SelfTransferError,
    StructuredCouponPayload,
    Unrecognized,
    build_coupon_payload,
    is_valid_phone,
    normalize_phone,
    parse_scan_payload,
)

from conftest import ALICE_PHONE, BOB_PHONE


@pytest.mark.parametrize(
    "raw",
    [
        "771234567",
        "0771234567",
        "263771234567",
        "+263771234567",
        "+263 77 123 4567",
        "077-123-4567",
    ],
)
def test_normalize_phone_accepts_local_formats(raw):
    assert normalize_phone(raw) == "+263771234567"


def test_normalize_phone_truncates_long_mobile_numbers():
    assert normalize_phone("77123456789") == "+263771234567"


@pytest.mark.parametrize("raw", ["", None, "12345", "1234567890123", "0123456789", "abcdefghij"])
def test_normalize_phone_rejects_other_input(raw):
    with pytest.raises(FormatError):
        normalize_phone(raw)
    assert not is_valid_phone(raw)


def test_normalize_phone_uses_configured_country_code():
    assert normalize_phone("0771234567", country_code="27") == "+27771234567"


def test_parse_structured_coupon_payload():
    payload = json.dumps({"type": "coupon", "phone": "+263771234567", "name": "Tendai"})
    assert parse_scan_payload(payload) == StructuredCouponPayload(phone="+263771234567", name="Tendai")


def test_parse_untagged_json_is_unrecognized():
    assert isinstance(parse_scan_payload(json.dumps({"phone": "+263771234567"})), Unrecognized)
    assert isinstance(parse_scan_payload(json.dumps({"type": "coupon"})), Unrecognized)
    assert isinstance(parse_scan_payload("[1, 2, 3]"), Unrecognized)


def test_parse_raw_phone_text():
    parsed = parse_scan_payload("Call me on 0771234567")
    assert isinstance(parsed, RawPhoneMatch)
    assert normalize_phone(parsed.phone) == "+263771234567"


def test_parse_bare_number_is_a_phone_match():
    assert isinstance(parse_scan_payload("771234567"), RawPhoneMatch)


def test_parse_text_without_digits_is_unrecognized():
    assert isinstance(parse_scan_payload("hello world"), Unrecognized)
    assert isinstance(parse_scan_payload("   "), Unrecognized)


async def test_typed_and_scanned_phone_resolve_to_same_account(db_session, make_account):
    bob = await make_account(BOB_PHONE, "Bob")
    resolver = RecipientResolver.with_session(db_session)

    typed = await resolver.resolve_recipient("077 222 2222", ALICE_PHONE)
    scanned = await resolver.resolve_recipient(
        json.dumps({"type": "coupon", "phone": "+263772222222"}),
        ALICE_PHONE,
        scanned=True,
    )
    raw_scan = await resolver.resolve_recipient("263772222222", ALICE_PHONE, scanned=True)

    assert typed.id == scanned.id == raw_scan.id == bob.id


async def test_receive_code_scans_back_to_its_owner(db_session, make_account, open_session):
    bob = await make_account(BOB_PHONE, "Bob", balance="4.50")
    issued = datetime(2026, 10, 18, 9, 30, tzinfo=timezone.utc)

    payload = build_coupon_payload(open_session(bob), now=issued)

    fields = json.loads(payload)
    assert fields["app"] == "MyChangeX"
    assert fields["balance"] == "4.50"
    assert fields["timestamp"] == issued.isoformat()
    assert parse_scan_payload(payload) == StructuredCouponPayload(phone="+263772222222", name="Bob")
    resolver = RecipientResolver.with_session(db_session)
    resolved = await resolver.resolve_recipient(payload, ALICE_PHONE, scanned=True)
    assert resolved.id == bob.id


async def test_resolve_own_number_is_self_transfer(db_session, make_account):
    await make_account(ALICE_PHONE, "Alice")
    resolver = RecipientResolver.with_session(db_session)

    with pytest.raises(SelfTransferError):
        await resolver.resolve_recipient("+263 771 111 111", ALICE_PHONE)


async def test_resolve_unknown_number(db_session):
    resolver = RecipientResolver.with_session(db_session)

    with pytest.raises(RecipientNotFoundError):
        await resolver.resolve_recipient(BOB_PHONE, ALICE_PHONE)


async def test_resolve_rejects_unrecognized_scan(db_session):
    resolver = RecipientResolver.with_session(db_session)

    with pytest.raises(InvalidPayloadError):
        await resolver.resolve_recipient('{"type": "receipt"}', ALICE_PHONE, scanned=True)


async def test_resolve_rejects_malformed_typed_number(db_session):
    resolver = RecipientResolver.with_session(db_session)

    with pytest.raises(FormatError):
        await resolver.resolve_recipient("12345", ALICE_PHONE)
