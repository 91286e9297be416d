"""Bounded connectivity probe run before money moves."""

from __future__ import annotations

import asyncio
import logging

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mychangex.core.errors import ConnectionTimeoutError

logger = logging.getLogger(__name__)


class DatabaseHealthProbe:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession], timeout: float = 10.0) -> None:
        self._session_factory = session_factory
        self._timeout = timeout

    async def _ping(self) -> None:
        async with self._session_factory() as session:
            await session.execute(text("SELECT 1"))

    async def check(self) -> None:
        """Raise ConnectionTimeoutError when the database does not answer in time."""
        try:
            await asyncio.wait_for(self._ping(), timeout=self._timeout)
        except asyncio.TimeoutError as exc:
            logger.warning("Database did not answer within %.1fs", self._timeout)
            raise ConnectionTimeoutError() from exc
        except (DBAPIError, OSError) as exc:
            logger.warning("Database unreachable: %s", exc)
            raise ConnectionTimeoutError() from exc

    async def is_healthy(self) -> bool:
        try:
            await self.check()
        except ConnectionTimeoutError:
            return False
        return True


__all__ = ["DatabaseHealthProbe"]
