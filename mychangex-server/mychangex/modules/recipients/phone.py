"""Phone number normalisation to E.164.

Only the local mobile formats the wallet accepts are recognised:

* ``7XXXXXXXX`` (national number without trunk prefix)
* ``07XXXXXXXX`` (with trunk prefix)
* ``2637XXXXXXXX`` / ``+2637XXXXXXXX`` (international)

Separators and other non-digit characters are ignored. Inputs whose digit
count falls outside 9-12 are rejected.
"""

from __future__ import annotations

import re

from mychangex.core.errors import FormatError

_NON_DIGITS = re.compile(r"\D")

MIN_DIGITS = 9
MAX_DIGITS = 12
NATIONAL_LENGTH = 9


def normalize_phone(raw: str | None, *, country_code: str = "263", mobile_prefix: str = "7") -> str:
    if not raw or not isinstance(raw, str):
        raise FormatError()

    digits = _NON_DIGITS.sub("", raw)
    if not MIN_DIGITS <= len(digits) <= MAX_DIGITS:
        raise FormatError()

    if len(digits) == NATIONAL_LENGTH and digits.startswith(mobile_prefix):
        return f"+{country_code}{digits}"
    if len(digits) == NATIONAL_LENGTH + 1 and digits.startswith("0" + mobile_prefix):
        return f"+{country_code}{digits[1:]}"
    if len(digits) == len(country_code) + NATIONAL_LENGTH and digits.startswith(country_code + mobile_prefix):
        return f"+{digits}"
    if digits.startswith(mobile_prefix):
        # trailing digits beyond the national number are dropped
        return f"+{country_code}{digits[:NATIONAL_LENGTH]}"
    raise FormatError()


def is_valid_phone(raw: str | None, **kwargs: str) -> bool:
    try:
        normalize_phone(raw, **kwargs)
    except FormatError:
        return False
    return True


__all__ = ["is_valid_phone", "normalize_phone"]
