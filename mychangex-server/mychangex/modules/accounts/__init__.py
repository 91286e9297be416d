"""Account domain exports."""

from .exceptions import (
    AccountAlreadyExistsError,
    AccountError,
    AccountNotFoundError,
    InvalidCredentialsError,
    InvalidSignupError,
)
from .models import Account, AccountCreateInput
from .service import AccountService

__all__ = [
    "Account",
    "AccountAlreadyExistsError",
    "AccountCreateInput",
    "AccountError",
    "AccountNotFoundError",
    "AccountService",
    "InvalidCredentialsError",
    "InvalidSignupError",
]
