"""Utilities for PIN hashing and verification."""

from __future__ import annotations

import re

import bcrypt

_PIN_PATTERN = re.compile(r"^\d{4}$")


def is_valid_pin(pin: str | None) -> bool:
    """A PIN is exactly four digits."""
    return isinstance(pin, str) and bool(_PIN_PATTERN.match(pin))


def hash_pin(pin: str) -> str:
    """Hash a PIN using bcrypt."""
    return bcrypt.hashpw(pin.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_pin(plain_pin: str, hashed_pin: str) -> bool:
    """Verify a plain PIN against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(plain_pin.encode("utf-8"), hashed_pin.encode("utf-8"))
    except ValueError:
        return False


__all__ = ["hash_pin", "is_valid_pin", "verify_pin"]
