"""Base error type shared by every domain module.

Each module defines its own subclasses in ``exceptions.py``. The HTTP layer
relies on ``code`` and ``message`` only; ``message`` is always safe to show to
an end user.
"""

from __future__ import annotations


class ChangeXError(Exception):
    """Base class for user-facing domain errors."""

    code: str = "error"
    default_message: str = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class FormatError(ChangeXError):
    code = "invalid_phone"
    default_message = "Please enter a valid phone number."


class SessionExpiredError(ChangeXError):
    code = "session_expired"
    default_message = "Your session has expired. Please log in again."


class ConnectionTimeoutError(ChangeXError):
    code = "connection_timeout"
    default_message = "Could not reach the server. Check your connection and try again."


__all__ = [
    "ChangeXError",
    "ConnectionTimeoutError",
    "FormatError",
    "SessionExpiredError",
]
