"""Account domain specific exceptions."""

from mychangex.core.errors import ChangeXError


class AccountError(ChangeXError):
    """Base class for account domain errors."""


class AccountAlreadyExistsError(AccountError):
    """Raised when attempting to sign up with a phone number that is already registered."""

    code = "account_exists"
    default_message = "This phone number is already registered. Please login instead."


class AccountNotFoundError(AccountError):
    """Raised when the requested account cannot be found."""

    code = "account_not_found"
    default_message = "No account found with this phone number. Please sign up first."


class InvalidCredentialsError(AccountError):
    code = "invalid_pin"
    default_message = "Invalid PIN. Please try again."


class InvalidSignupError(AccountError):
    code = "invalid_signup"
    default_message = "Please fill in all required fields."
