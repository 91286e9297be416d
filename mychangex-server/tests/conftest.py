"""
Pytest fixtures for wallet tests. Each test gets its own temporary SQLite file
so that the atomic and fallback paths can open independent connections.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from mychangex.core.config import NotificationSettings, Settings, TransferSettings
from mychangex.core.crypto import hash_pin
from mychangex.infrastructure.database.health import DatabaseHealthProbe
from mychangex.infrastructure.database.repositories.account_repository import SqlAccountRepository
from mychangex.infrastructure.database.repositories.transaction_repository import SqlTransactionRepository
from mychangex.infrastructure.database.repositories.transfer_repository import (
    SqlIncidentRepository,
    SqlLedgerSteps,
    SqlTransferGateway,
)
from mychangex.infrastructure.database.session import (
    configure_engine,
    dispose_engine,
    get_session_factory,
    init_db,
)
from mychangex.modules.accounts import Account, AccountService
from mychangex.modules.recipients import normalize_phone
from mychangex.modules.sessions import SessionService, WalletSession
from mychangex.modules.transfers import AtomicTransfer, FallbackTransfer, TransferExecutor

ALICE_PHONE = "0771111111"
BOB_PHONE = "0772222222"
CAROL_PHONE = "0773333333"


class RecordingRelay:
    """Notification relay that remembers what it was asked to send."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, str]] = []

    async def notify_transaction(self, transaction, *, sender_name: str, recipient_name: str) -> bool:
        self.calls.append((transaction.id, sender_name, recipient_name))
        return True


@pytest.fixture
async def session_factory(tmp_path):
    configure_engine(f"sqlite+aiosqlite:///{tmp_path / 'wallet.db'}")
    await init_db()
    yield get_session_factory()
    await dispose_engine()


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_account(session_factory):
    async def _make(
        phone: str,
        full_name: str = "Test User",
        *,
        pin: str = "1234",
        balance: str = "0.00",
    ) -> Account:
        async with session_factory.begin() as session:
            return await SqlAccountRepository(session).create_account(
                phone=normalize_phone(phone),
                full_name=full_name,
                pin_hash=hash_pin(pin),
                balance=Decimal(balance),
            )

    return _make


@pytest.fixture
def balance_of(session_factory):
    async def _balance(account_id: str) -> Decimal | None:
        async with session_factory() as session:
            return await AccountService.with_session(session).get_balance(account_id)

    return _balance


@pytest.fixture
def count_transactions(session_factory):
    async def _count(account_id: str) -> int:
        async with session_factory() as session:
            records = await SqlTransactionRepository(session).list_for_account(account_id, limit=1000)
        return len(records)

    return _count


@pytest.fixture
def open_session():
    def _open(account: Account) -> WalletSession:
        return SessionService.from_account(account)

    return _open


@pytest.fixture
def relay():
    return RecordingRelay()


@pytest.fixture
async def build_executor(session_factory, db_session, balance_of, relay):
    executors: list[TransferExecutor] = []

    def _build(
        *,
        primary=None,
        fallback=None,
        transactions=None,
        notifier=relay,
        loader=balance_of,
        reconcile_inline=False,
    ) -> TransferExecutor:
        executor = TransferExecutor(
            primary=primary or AtomicTransfer(SqlTransferGateway(session_factory)),
            fallback=fallback or FallbackTransfer(SqlLedgerSteps(session_factory), SqlIncidentRepository(session_factory)),
            transactions=transactions or SqlTransactionRepository(db_session),
            probe=DatabaseHealthProbe(session_factory, timeout=5.0),
            relay=notifier,
            balance_loader=loader,
            resync_delay=0.0,
            reconcile_inline=reconcile_inline,
        )
        executors.append(executor)
        return executor

    yield _build
    for executor in executors:
        await executor.wait_for_background()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        environment="test",
        transfer=TransferSettings(resync_delay_seconds=0.0),
        notifications=NotificationSettings(enabled=False),
    )
