"""Repository protocol for revoked session tokens."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class RevokedTokenRepository(Protocol):
    async def revoke(self, *, jti: str, account_id: str, expires_at: datetime) -> None:
        ...

    async def is_revoked(self, jti: str) -> bool:
        ...
