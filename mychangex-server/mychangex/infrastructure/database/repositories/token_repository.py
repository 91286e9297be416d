"""SQLAlchemy implementation for revoked session tokens."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mychangex.infrastructure.database.models import RevokedToken


class SqlRevokedTokenRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def revoke(self, *, jti: str, account_id: str, expires_at: datetime) -> None:
        await self.session.merge(RevokedToken(jti=jti, account_id=account_id, expires_at=expires_at))
        await self.session.flush()

    async def is_revoked(self, jti: str) -> bool:
        stmt = select(RevokedToken.jti).where(RevokedToken.jti == jti)
        result = await self.session.execute(stmt)
        return result.first() is not None
