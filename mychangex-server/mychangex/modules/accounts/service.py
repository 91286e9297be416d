"""Domain services for PIN-based account management."""

from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mychangex.core.config import PhoneSettings, get_settings
from mychangex.core.crypto import hash_pin, is_valid_pin, verify_pin
from mychangex.modules.recipients.phone import normalize_phone

from .exceptions import (
    AccountAlreadyExistsError,
    AccountNotFoundError,
    InvalidCredentialsError,
    InvalidSignupError,
)
from .models import Account, AccountCreateInput
from .repository import AccountRepository

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 2


class AccountService:
    """Encapsulates signup, login and profile lookups."""

    def __init__(self, repository: AccountRepository, phone_settings: PhoneSettings | None = None) -> None:
        self._repository = repository
        self._phone_settings = phone_settings or get_settings().phone

    @classmethod
    def with_session(cls, session: AsyncSession) -> "AccountService":
        from mychangex.infrastructure.database.repositories.account_repository import SqlAccountRepository

        return cls(SqlAccountRepository(session))

    def _normalize(self, phone: str) -> str:
        return normalize_phone(
            phone,
            country_code=self._phone_settings.country_code,
            mobile_prefix=self._phone_settings.mobile_prefix,
        )

    async def get_by_id(self, account_id: str) -> Account | None:
        return await self._repository.get_by_id(account_id)

    async def get_by_phone(self, phone: str) -> Account | None:
        return await self._repository.get_by_phone(self._normalize(phone))

    async def exists(self, phone: str) -> bool:
        return await self.get_by_phone(phone) is not None

    async def get_balance(self, account_id: str) -> Decimal | None:
        account = await self._repository.get_by_id(account_id)
        return account.balance if account else None

    async def sign_up(self, payload: AccountCreateInput) -> Account:
        if not payload.phone or not payload.full_name or not payload.pin:
            raise InvalidSignupError()
        if not is_valid_pin(payload.pin):
            raise InvalidSignupError("PIN must be exactly 4 digits.")
        full_name = payload.full_name.strip()
        if len(full_name) < MIN_NAME_LENGTH:
            raise InvalidSignupError("Full name must be at least 2 characters long.")

        phone = self._normalize(payload.phone)
        if await self._repository.get_by_phone(phone) is not None:
            raise AccountAlreadyExistsError()

        try:
            account = await self._repository.create_account(
                phone=phone,
                full_name=full_name,
                pin_hash=hash_pin(payload.pin),
            )
        except IntegrityError as exc:
            # lost a signup race on the unique phone index
            raise AccountAlreadyExistsError() from exc
        logger.info("Account %s created for %s", account.id, phone)
        return account

    async def authenticate(self, phone: str, pin: str) -> Account:
        if not phone or not pin:
            raise InvalidCredentialsError("Please enter both phone number and PIN.")
        if not is_valid_pin(pin):
            raise InvalidCredentialsError("PIN must be exactly 4 digits.")

        account = await self._repository.get_by_phone(self._normalize(phone))
        if account is None:
            raise AccountNotFoundError()
        if not verify_pin(pin, account.pin_hash):
            logger.info("Rejected PIN for account %s", account.id)
            raise InvalidCredentialsError()
        return account
