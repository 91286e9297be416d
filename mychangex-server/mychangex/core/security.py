"""JWT session tokens and the current-session dependency."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from mychangex.core.config import get_settings
from mychangex.core.errors import SessionExpiredError
from mychangex.interfaces.http.deps.database import get_db_session
from mychangex.modules.sessions import SessionService, WalletSession

security = HTTPBearer(auto_error=False)


@dataclass(slots=True)
class TokenData:
    account_id: str
    phone: str
    jti: str
    expires_at: datetime


def create_access_token(account_id: str, phone: str, expires_delta: Optional[timedelta] = None) -> tuple[str, TokenData]:
    settings = get_settings()
    expires_at = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    jti = str(uuid.uuid4())
    payload = {
        "sub": account_id,
        "phone": phone,
        "jti": jti,
        "exp": expires_at,
    }
    token = jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)
    return token, TokenData(account_id=account_id, phone=phone, jti=jti, expires_at=expires_at)


def decode_access_token(token: str) -> TokenData:
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as exc:
        raise SessionExpiredError() from exc

    account_id = payload.get("sub")
    phone = payload.get("phone")
    jti = payload.get("jti")
    exp = payload.get("exp")
    if not all([account_id, phone, jti, exp]):
        raise SessionExpiredError()
    return TokenData(
        account_id=account_id,
        phone=phone,
        jti=jti,
        expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
    )


async def get_current_session(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db_session),
) -> WalletSession:
    if credentials is None:
        raise SessionExpiredError()
    token_data = decode_access_token(credentials.credentials)
    service = SessionService.with_session(db)
    return await service.load(
        account_id=token_data.account_id,
        token=credentials.credentials,
        token_id=token_data.jti,
        expires_at=token_data.expires_at,
    )


__all__ = [
    "TokenData",
    "create_access_token",
    "decode_access_token",
    "get_current_session",
    "security",
]
