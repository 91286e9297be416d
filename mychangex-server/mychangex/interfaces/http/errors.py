"""Maps domain errors to HTTP responses.

Every domain error carries a user-facing message; the response body is
``{"code", "message"}`` plus error-specific fields. Raw exception text from
the database or network layer is never returned.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from mychangex.core.errors import ChangeXError, ConnectionTimeoutError, FormatError, SessionExpiredError
from mychangex.modules.accounts import (
    AccountAlreadyExistsError,
    AccountNotFoundError,
    InvalidCredentialsError,
    InvalidSignupError,
)
from mychangex.modules.coupons import NotReceivedError
from mychangex.modules.recipients import InvalidPayloadError, RecipientNotFoundError, SelfTransferError
from mychangex.modules.transactions import TransactionNotFoundError
from mychangex.modules.transfers import (
    DuplicateTransferError,
    InsufficientBalanceError,
    InvalidAmountError,
    TransferFailedError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR: dict[type[ChangeXError], int] = {
    FormatError: status.HTTP_400_BAD_REQUEST,
    InvalidAmountError: status.HTTP_400_BAD_REQUEST,
    InvalidPayloadError: status.HTTP_400_BAD_REQUEST,
    InvalidSignupError: status.HTTP_400_BAD_REQUEST,
    SelfTransferError: status.HTTP_400_BAD_REQUEST,
    InsufficientBalanceError: status.HTTP_400_BAD_REQUEST,
    InvalidCredentialsError: status.HTTP_401_UNAUTHORIZED,
    SessionExpiredError: status.HTTP_401_UNAUTHORIZED,
    NotReceivedError: status.HTTP_403_FORBIDDEN,
    AccountNotFoundError: status.HTTP_404_NOT_FOUND,
    RecipientNotFoundError: status.HTTP_404_NOT_FOUND,
    TransactionNotFoundError: status.HTTP_404_NOT_FOUND,
    AccountAlreadyExistsError: status.HTTP_409_CONFLICT,
    DuplicateTransferError: status.HTTP_409_CONFLICT,
    ConnectionTimeoutError: status.HTTP_503_SERVICE_UNAVAILABLE,
}

STATUS_BY_FAILURE_REASON = {
    "insufficient_funds": status.HTTP_400_BAD_REQUEST,
    "recipient_not_found": status.HTTP_404_NOT_FOUND,
    "network": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(exc: ChangeXError) -> int:
    if isinstance(exc, TransferFailedError):
        return STATUS_BY_FAILURE_REASON.get(exc.reason, status.HTTP_500_INTERNAL_SERVER_ERROR)
    for error_type in type(exc).__mro__:
        if error_type in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[error_type]
    return status.HTTP_400_BAD_REQUEST


def error_body(exc: ChangeXError) -> dict:
    body: dict = {"code": exc.code, "message": exc.message}
    if isinstance(exc, InsufficientBalanceError):
        body["shortage"] = f"{exc.shortage:.2f}"
    if isinstance(exc, ConnectionTimeoutError):
        body["retryable"] = True
    if isinstance(exc, TransferFailedError):
        body["reason"] = exc.reason
        body["retryable"] = False
        if exc.partial is not None:
            body["incident_id"] = exc.partial.incident_id
    return body


async def handle_domain_error(request: Request, exc: ChangeXError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.code, exc)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, SessionExpiredError) else None
    return JSONResponse(status_code=status_code, content=error_body(exc), headers=headers)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ChangeXError, handle_domain_error)


__all__ = ["error_body", "register_error_handlers", "status_for"]
