"""Recipient resolution errors."""

from mychangex.core.errors import ChangeXError


class RecipientError(ChangeXError):
    """Base class for recipient resolution failures."""


class SelfTransferError(RecipientError):
    code = "self_transfer"
    default_message = "You cannot send money to yourself."


class RecipientNotFoundError(RecipientError):
    code = "recipient_not_found"
    default_message = "Recipient not found in the system."


class InvalidPayloadError(RecipientError):
    code = "invalid_payload"
    default_message = "The scanned code is not a valid phone number or coupon."
