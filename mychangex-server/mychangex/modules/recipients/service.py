"""Turns typed phone numbers and scanned payloads into verified recipients."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from mychangex.core.config import PhoneSettings, get_settings
from mychangex.modules.accounts.models import Account
from mychangex.modules.accounts.repository import AccountRepository

from .exceptions import InvalidPayloadError, RecipientNotFoundError, SelfTransferError
from .payload import ScanPayload, Unrecognized, parse_scan_payload
from .phone import normalize_phone

logger = logging.getLogger(__name__)


class RecipientResolver:
    def __init__(self, accounts: AccountRepository, phone_settings: PhoneSettings | None = None) -> None:
        self._accounts = accounts
        self._phone_settings = phone_settings or get_settings().phone

    @classmethod
    def with_session(cls, session: AsyncSession) -> "RecipientResolver":
        from mychangex.infrastructure.database.repositories.account_repository import SqlAccountRepository

        return cls(SqlAccountRepository(session))

    def normalize_phone(self, raw: str) -> str:
        return normalize_phone(
            raw,
            country_code=self._phone_settings.country_code,
            mobile_prefix=self._phone_settings.mobile_prefix,
        )

    def extract_phone(self, phone_or_payload: str, *, scanned: bool = False) -> str:
        """Return the raw phone carried by the input.

        Scanned input goes through the payload parser; typed input is used as-is.
        """
        if not scanned:
            return phone_or_payload
        parsed: ScanPayload = parse_scan_payload(phone_or_payload)
        if isinstance(parsed, Unrecognized):
            raise InvalidPayloadError()
        return parsed.phone

    async def resolve_recipient(
        self,
        phone_or_payload: str,
        current_user_phone: str,
        *,
        scanned: bool = False,
    ) -> Account:
        phone = self.normalize_phone(self.extract_phone(phone_or_payload, scanned=scanned))
        if phone == self.normalize_phone(current_user_phone):
            raise SelfTransferError()

        account = await self._accounts.get_by_phone(phone)
        if account is None:
            logger.info("No account registered for %s", phone)
            raise RecipientNotFoundError()
        return account


__all__ = ["RecipientResolver"]
