"""Simple dependency container for wiring core services."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from decimal import Decimal
from functools import lru_cache
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mychangex.core.config import Settings, get_settings
from mychangex.infrastructure.database.health import DatabaseHealthProbe
from mychangex.infrastructure.database.session import get_session_factory
from mychangex.modules.notifications import EdgeFunctionNotificationRelay, NotificationRelay
from mychangex.modules.transfers import AtomicTransfer, FallbackTransfer, TransferExecutor
from mychangex.modules.transactions.repository import TransactionRepository


@dataclass(slots=True)
class ApplicationContainer:
    settings: Settings
    relay: Optional[NotificationRelay] = None
    background_tasks: set[asyncio.Task[Any]] = field(default_factory=set, repr=False)

    def init_infrastructure(self) -> None:
        """Ensure infrastructure singletons (database engine, relay) are initialised."""
        get_session_factory()
        if self.relay is None:
            self.relay = EdgeFunctionNotificationRelay.from_settings(self.settings.notifications)

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        return get_session_factory()

    def health_probe(self) -> DatabaseHealthProbe:
        return DatabaseHealthProbe(
            self.session_factory,
            timeout=self.settings.database.connect_timeout_seconds,
        )

    async def load_balance(self, account_id: str) -> Decimal | None:
        from mychangex.modules.accounts import AccountService

        async with self.session_factory() as session:
            return await AccountService.with_session(session).get_balance(account_id)

    def transfer_executor(self, transactions: TransactionRepository) -> TransferExecutor:
        from mychangex.infrastructure.database.repositories.transfer_repository import (
            SqlIncidentRepository,
            SqlLedgerSteps,
            SqlTransferGateway,
        )

        factory = self.session_factory
        return TransferExecutor(
            primary=AtomicTransfer(SqlTransferGateway(factory)),
            fallback=FallbackTransfer(SqlLedgerSteps(factory), SqlIncidentRepository(factory)),
            transactions=transactions,
            probe=self.health_probe(),
            relay=self.relay,
            balance_loader=self.load_balance,
            resync_delay=self.settings.transfer.resync_delay_seconds,
            reconcile_inline=self.settings.transfer.reconcile_inline,
            background=self.background_tasks,
        )

    async def shutdown(self) -> None:
        if self.background_tasks:
            await asyncio.gather(*self.background_tasks, return_exceptions=True)


@lru_cache()
def get_container() -> ApplicationContainer:
    container = ApplicationContainer(settings=get_settings())
    container.init_infrastructure()
    return container


__all__ = ["ApplicationContainer", "get_container"]
