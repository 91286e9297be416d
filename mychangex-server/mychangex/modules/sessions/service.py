"""Session lifecycle: open from a token, close on logout."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from mychangex.core.errors import SessionExpiredError
from mychangex.modules.accounts.models import Account
from mychangex.modules.accounts.repository import AccountRepository

from .models import WalletSession
from .repository import RevokedTokenRepository

logger = logging.getLogger(__name__)


class SessionService:
    def __init__(self, accounts: AccountRepository, revoked: RevokedTokenRepository) -> None:
        self._accounts = accounts
        self._revoked = revoked

    @classmethod
    def with_session(cls, session: AsyncSession) -> "SessionService":
        from mychangex.infrastructure.database.repositories.account_repository import SqlAccountRepository
        from mychangex.infrastructure.database.repositories.token_repository import SqlRevokedTokenRepository

        return cls(SqlAccountRepository(session), SqlRevokedTokenRepository(session))

    @staticmethod
    def from_account(
        account: Account,
        *,
        token: str | None = None,
        token_id: str | None = None,
        expires_at: datetime | None = None,
    ) -> WalletSession:
        return WalletSession(
            account_id=account.id,
            phone=account.phone,
            full_name=account.display_name,
            balance=account.balance,
            token=token,
            token_id=token_id,
            expires_at=expires_at,
        )

    async def load(self, *, account_id: str, token: str, token_id: str, expires_at: datetime) -> WalletSession:
        if expires_at <= datetime.now(timezone.utc):
            raise SessionExpiredError()
        if await self._revoked.is_revoked(token_id):
            raise SessionExpiredError()
        account = await self._accounts.get_by_id(account_id)
        if account is None:
            raise SessionExpiredError()
        return self.from_account(account, token=token, token_id=token_id, expires_at=expires_at)

    async def logout(self, session: WalletSession) -> None:
        if session.token_id and session.expires_at:
            await self._revoked.revoke(
                jti=session.token_id,
                account_id=session.account_id,
                expires_at=session.expires_at,
            )
        session.invalidate()
        logger.info("Session closed for %s", session.account_id)
