"""
Transfer executor: validation, the atomic path, the non-atomic fallback and
the optimistic session balance.
"""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal

import httpx
import pytest
from sqlalchemy.exc import IntegrityError

from mychangex.core.errors import ConnectionTimeoutError, SessionExpiredError
from mychangex.infrastructure.database.health import DatabaseHealthProbe
from mychangex.infrastructure.database.repositories.transaction_repository import SqlTransactionRepository
from mychangex.infrastructure.database.repositories.transfer_repository import (
    SqlIncidentRepository,
    SqlLedgerSteps,
)
from mychangex.modules.accounts import Account
from mychangex.modules.notifications import EdgeFunctionNotificationRelay
from mychangex.modules.recipients import SelfTransferError
from mychangex.modules.sessions import CurrentUser
from mychangex.modules.transfers import (
    AtomicTransfer,
    DuplicateTransferError,
    FallbackTransfer,
    InsufficientBalanceError,
    InvalidAmountError,
    TransferExecutor,
    TransferFailedError,
    TransferOrder,
    parse_amount,
)
from mychangex.modules.transfers.exceptions import LedgerRejection
from mychangex.modules.transfers.strategies import classify_failure

from conftest import ALICE_PHONE, BOB_PHONE


class UnreachableGateway:
    """Atomic backend that never answers."""

    def __init__(self) -> None:
        self.calls = 0

    async def atomic_transfer(self, order: TransferOrder):
        self.calls += 1
        raise OSError("connection reset by peer")


def _unique_violation(detail: str) -> IntegrityError:
    return IntegrityError("INSERT INTO transactions ...", {}, Exception(detail))


class ConflictingGateway:
    """Atomic backend whose insert loses a race on the request id."""

    async def atomic_transfer(self, order: TransferOrder):
        raise _unique_violation("UNIQUE constraint failed: transactions.request_id")


class StaleTransactions(SqlTransactionRepository):
    """Ledger reads that have not yet seen a concurrent insert."""

    async def find_by_request_id(self, request_id):
        return None


class CreditFailingSteps(SqlLedgerSteps):
    async def credit(self, account_id, amount):
        raise OSError("connection dropped during credit")


class RecordFailingSteps(SqlLedgerSteps):
    async def record_transaction(self, order):
        raise OSError("connection dropped during insert")


class SpyStrategy:
    name = "spy"
    atomic = False

    def __init__(self) -> None:
        self.calls = 0

    async def execute(self, order):
        self.calls += 1
        raise AssertionError("fallback must not run")


class SlowProbe(DatabaseHealthProbe):
    async def _ping(self) -> None:
        await asyncio.sleep(1)


@pytest.fixture
async def alice_and_bob(make_account):
    alice = await make_account(ALICE_PHONE, "Alice", balance="10.00")
    bob = await make_account(BOB_PHONE, "Bob", balance="5.00")
    return alice, bob


# --- amount parsing and validation ---


@pytest.mark.parametrize("value, expected", [("3", "3.00"), ("0.5", "0.50"), (2, "2.00"), ("1.25", "1.25")])
def test_parse_amount_accepts_positive_cents(value, expected):
    assert parse_amount(value) == Decimal(expected)


@pytest.mark.parametrize("value", [None, "", "abc", "0", "-1", "1.234", "NaN", "Infinity", True])
def test_parse_amount_rejects_invalid_input(value):
    with pytest.raises(InvalidAmountError):
        parse_amount(value)


def test_validation_returns_checked_receiver():
    sender = CurrentUser(id="a", phone="+263771111111", balance=Decimal("10.00"))
    receiver = Account(id="b", phone="+263772222222", full_name="Bob", balance=Decimal("0.00"))

    assert TransferExecutor.validate(sender, receiver, "2.50") == (Decimal("2.50"), receiver)


def test_validation_checks_amount_before_recipient():
    sender = CurrentUser(id="a", phone="+263771111111", balance=Decimal("10.00"))

    with pytest.raises(InvalidAmountError):
        TransferExecutor.validate(sender, None, "abc")


async def test_scenario_a_atomic_transfer(alice_and_bob, open_session, build_executor, balance_of, count_transactions, relay):
    alice, bob = alice_and_bob
    session = open_session(alice)
    executor = build_executor()

    result = await executor.execute(session, bob, "3.00")

    assert result.success
    assert result.strategy == "atomic"
    assert result.new_sender_balance == Decimal("7.00")
    assert result.transaction.amount == Decimal("3.00")
    assert await balance_of(alice.id) == Decimal("7.00")
    assert await balance_of(bob.id) == Decimal("8.00")
    assert await count_transactions(alice.id) == 1

    await executor.wait_for_background()
    assert relay.calls == [(result.transaction.id, "Alice", "Bob")]


async def test_scenario_b_insufficient_balance(make_account, open_session, build_executor, balance_of, count_transactions):
    alice = await make_account(ALICE_PHONE, "Alice", balance="2.00")
    bob = await make_account(BOB_PHONE, "Bob", balance="0.00")
    executor = build_executor()

    with pytest.raises(InsufficientBalanceError) as excinfo:
        await executor.execute(open_session(alice), bob, "5.00")

    assert excinfo.value.shortage == Decimal("3.00")
    assert excinfo.value.message == "Insufficient balance. You need $3.00 more."
    assert await balance_of(alice.id) == Decimal("2.00")
    assert await balance_of(bob.id) == Decimal("0.00")
    assert await count_transactions(alice.id) == 0


async def test_scenario_c_self_transfer(alice_and_bob, open_session, build_executor, balance_of, count_transactions):
    alice, _ = alice_and_bob
    executor = build_executor()

    with pytest.raises(SelfTransferError):
        await executor.execute(open_session(alice), alice, "1.00")

    assert await balance_of(alice.id) == Decimal("10.00")
    assert await count_transactions(alice.id) == 0


async def test_scenario_e_fallback_after_atomic_failure(
    alice_and_bob, open_session, build_executor, balance_of, count_transactions, caplog
):
    alice, bob = alice_and_bob
    gateway = UnreachableGateway()
    executor = build_executor(primary=AtomicTransfer(gateway))

    with caplog.at_level(logging.WARNING, logger="mychangex.modules.transfers"):
        result = await executor.execute(open_session(alice), bob, "3.00")

    assert gateway.calls == 1
    assert result.success
    assert result.strategy == "fallback"
    assert not result.degraded
    assert result.new_sender_balance == Decimal("7.00")
    assert await balance_of(alice.id) == Decimal("7.00")
    assert await balance_of(bob.id) == Decimal("8.00")
    assert await count_transactions(alice.id) == 1
    assert any("non-atomic" in record.getMessage() for record in caplog.records)


@pytest.mark.parametrize("use_fallback", [False, True])
async def test_completed_transfers_conserve_money(
    make_account, open_session, build_executor, balance_of, session_factory, use_fallback
):
    alice = await make_account(ALICE_PHONE, "Alice", balance="4.20")
    bob = await make_account(BOB_PHONE, "Bob", balance="1.10")
    primary = AtomicTransfer(UnreachableGateway()) if use_fallback else None
    executor = build_executor(primary=primary)
    session = open_session(alice)

    for amount in ("0.35", "1.00", "2.85"):
        before_sender = await balance_of(alice.id)
        before_receiver = await balance_of(bob.id)
        await executor.execute(session, bob, amount)
        assert await balance_of(alice.id) == before_sender - Decimal(amount)
        assert await balance_of(bob.id) == before_receiver + Decimal(amount)
        session.balance = await balance_of(alice.id)

    assert await balance_of(alice.id) == Decimal("0.00")
    with pytest.raises(InsufficientBalanceError):
        await executor.execute(session, bob, "0.01")


async def test_ledger_rejection_from_atomic_path_is_final(make_account, open_session, build_executor, balance_of):
    alice = await make_account(ALICE_PHONE, "Alice", balance="2.00")
    bob = await make_account(BOB_PHONE, "Bob")
    session = open_session(alice)
    # cached balance ahead of the store, e.g. another device spent it
    session.balance = Decimal("10.00")
    spy = SpyStrategy()
    executor = build_executor(fallback=spy)

    with pytest.raises(TransferFailedError) as excinfo:
        await executor.execute(session, bob, "5.00")

    assert excinfo.value.reason == "insufficient_funds"
    assert spy.calls == 0
    assert await balance_of(alice.id) == Decimal("2.00")
    assert session.balance == Decimal("10.00")


async def test_fallback_refuses_overdraft(make_account, open_session, build_executor, balance_of):
    alice = await make_account(ALICE_PHONE, "Alice", balance="2.00")
    bob = await make_account(BOB_PHONE, "Bob")
    session = open_session(alice)
    session.balance = Decimal("10.00")
    executor = build_executor(primary=AtomicTransfer(UnreachableGateway()))

    with pytest.raises(TransferFailedError) as excinfo:
        await executor.execute(session, bob, "5.00")

    assert excinfo.value.reason == "insufficient_funds"
    assert await balance_of(alice.id) == Decimal("2.00")
    assert await balance_of(bob.id) == Decimal("0.00")


async def test_partial_credit_failure_is_queued_and_logged(
    alice_and_bob, open_session, build_executor, balance_of, count_transactions, session_factory, caplog
):
    alice, bob = alice_and_bob
    incidents = SqlIncidentRepository(session_factory)
    executor = build_executor(
        primary=AtomicTransfer(UnreachableGateway()),
        fallback=FallbackTransfer(CreditFailingSteps(session_factory), incidents),
    )
    session = open_session(alice)

    with caplog.at_level(logging.ERROR, logger="mychangex.modules.transfers.strategies"):
        with pytest.raises(TransferFailedError) as excinfo:
            await executor.execute(session, bob, "3.00")

    error = excinfo.value
    assert error.reason == "partial"
    assert error.partial.stage == "credit"
    assert not error.partial.receiver_credited
    assert "connection dropped" not in error.message
    assert await balance_of(alice.id) == Decimal("7.00")
    assert await balance_of(bob.id) == Decimal("5.00")
    assert await count_transactions(alice.id) == 0

    queued = await incidents.list_open()
    assert [incident.id for incident in queued] == [error.partial.incident_id]
    assert queued[0].stage == "credit"
    assert Decimal(queued[0].amount) == Decimal("3.00")
    assert any(record.levelno == logging.ERROR and "Partial fallback transfer" in record.getMessage() for record in caplog.records)


async def test_partial_record_failure_is_degraded_success(
    alice_and_bob, open_session, build_executor, balance_of, count_transactions, session_factory, relay, caplog
):
    alice, bob = alice_and_bob
    incidents = SqlIncidentRepository(session_factory)
    executor = build_executor(
        primary=AtomicTransfer(UnreachableGateway()),
        fallback=FallbackTransfer(RecordFailingSteps(session_factory), incidents),
    )
    session = open_session(alice)

    with caplog.at_level(logging.ERROR, logger="mychangex.modules.transfers.strategies"):
        result = await executor.execute(session, bob, "3.00")

    assert result.success
    assert result.degraded
    assert result.partial.stage == "record"
    assert result.partial.receiver_credited
    assert result.transaction is None
    assert await balance_of(alice.id) == Decimal("7.00")
    assert await balance_of(bob.id) == Decimal("8.00")
    assert await count_transactions(alice.id) == 0
    assert len(await incidents.list_open()) == 1
    assert any(record.levelno == logging.ERROR for record in caplog.records)

    await executor.wait_for_background()
    assert relay.calls == []


async def test_resubmission_without_request_id_duplicates(
    alice_and_bob, open_session, build_executor, balance_of, count_transactions
):
    alice, bob = alice_and_bob
    executor = build_executor()
    session = open_session(alice)

    await executor.execute(session, bob, "2.00")
    await executor.execute(session, bob, "2.00")

    # no dedupe key: the retry moved the money a second time
    assert await count_transactions(alice.id) == 2
    assert await balance_of(alice.id) == Decimal("6.00")


async def test_resubmission_with_request_id_is_rejected(
    alice_and_bob, open_session, build_executor, balance_of, count_transactions
):
    alice, bob = alice_and_bob
    executor = build_executor()
    session = open_session(alice)

    first = await executor.execute(session, bob, "2.00", request_id="req-42")
    with pytest.raises(DuplicateTransferError) as excinfo:
        await executor.execute(session, bob, "2.00", request_id="req-42")

    assert excinfo.value.existing.id == first.transaction.id
    assert await count_transactions(alice.id) == 1
    assert await balance_of(alice.id) == Decimal("8.00")


async def test_concurrent_reuse_of_request_id_moves_money_once(
    alice_and_bob, open_session, build_executor, db_session, balance_of, count_transactions
):
    alice, bob = alice_and_bob
    await build_executor().execute(open_session(alice), bob, "3.00", request_id="req-1")
    executor = build_executor(
        primary=AtomicTransfer(ConflictingGateway()),
        transactions=StaleTransactions(db_session),
    )

    with pytest.raises(DuplicateTransferError):
        await executor.execute(open_session(alice), bob, "3.00", request_id="req-1")

    assert await balance_of(alice.id) == Decimal("7.00")
    assert await balance_of(bob.id) == Decimal("8.00")
    assert await count_transactions(alice.id) == 1


async def test_fallback_refuses_reused_request_id(alice_and_bob, open_session, build_executor, session_factory, balance_of):
    alice, bob = alice_and_bob
    await build_executor().execute(open_session(alice), bob, "3.00", request_id="req-2")
    fallback = FallbackTransfer(SqlLedgerSteps(session_factory), SqlIncidentRepository(session_factory))

    result = await fallback.execute(
        TransferOrder(sender_id=alice.id, receiver_id=bob.id, amount=Decimal("3.00"), request_id="req-2")
    )

    assert not result.success
    assert result.error_code == "duplicate_request"
    assert result.partial is None
    assert await balance_of(alice.id) == Decimal("7.00")
    assert await balance_of(bob.id) == Decimal("8.00")


def test_request_id_conflict_is_classified_as_duplicate():
    assert classify_failure(_unique_violation("UNIQUE constraint failed: transactions.request_id")) == "duplicate_request"
    assert classify_failure(_unique_violation("CHECK constraint failed: ck_profiles_balance_non_negative")) == "unknown"


async def test_atomic_gateway_rejects_reused_request_id(alice_and_bob, session_factory):
    from mychangex.infrastructure.database.repositories.transfer_repository import SqlTransferGateway

    alice, bob = alice_and_bob
    gateway = SqlTransferGateway(session_factory)
    order = TransferOrder(sender_id=alice.id, receiver_id=bob.id, amount=Decimal("1.00"), request_id="req-7")
    await gateway.atomic_transfer(order)

    with pytest.raises(LedgerRejection) as excinfo:
        await gateway.atomic_transfer(order)
    assert excinfo.value.code == "duplicate_request"


async def test_optimistic_balance_then_reconciliation(alice_and_bob, open_session, build_executor, balance_of):
    alice, bob = alice_and_bob
    session = open_session(alice)
    executor = build_executor()

    await executor.execute(session, bob, "3.00")
    assert session.balance == Decimal("7.00")

    await session.pending_reconciliation
    assert session.balance == await balance_of(alice.id) == Decimal("7.00")


async def test_inline_reconciliation_settles_session_before_returning(alice_and_bob, open_session, build_executor):
    alice, bob = alice_and_bob
    session = open_session(alice)
    # cached balance ahead of the store
    session.balance = Decimal("12.00")
    executor = build_executor(reconcile_inline=True)

    await executor.execute(session, bob, "3.00")

    assert session.pending_reconciliation is None
    assert session.balance == Decimal("7.00")


async def test_probe_timeout_blocks_transfer(alice_and_bob, open_session, session_factory, db_session, balance_of):
    from mychangex.infrastructure.database.repositories.transaction_repository import SqlTransactionRepository

    alice, bob = alice_and_bob
    executor = TransferExecutor(
        primary=SpyStrategy(),
        fallback=SpyStrategy(),
        transactions=SqlTransactionRepository(db_session),
        probe=SlowProbe(session_factory, timeout=0.01),
    )

    with pytest.raises(ConnectionTimeoutError):
        await executor.execute(open_session(alice), bob, "1.00")
    assert await balance_of(alice.id) == Decimal("10.00")


async def test_expired_session_cannot_transfer(alice_and_bob, open_session, build_executor):
    alice, bob = alice_and_bob
    session = open_session(alice)
    session.invalidate()

    with pytest.raises(SessionExpiredError):
        await build_executor().execute(session, bob, "1.00")


async def test_notification_failure_does_not_affect_transfer(alice_and_bob, open_session, build_executor, balance_of, caplog):
    alice, bob = alice_and_bob
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(500)))
    relay = EdgeFunctionNotificationRelay("https://functions.test/send-transaction-notification", client=client)
    executor = build_executor(notifier=relay)

    with caplog.at_level(logging.WARNING, logger="mychangex.modules.notifications"):
        result = await executor.execute(open_session(alice), bob, "3.00")
        await executor.wait_for_background()
    await client.aclose()

    assert result.success
    assert await balance_of(bob.id) == Decimal("8.00")
    assert any("Notification for transaction" in record.getMessage() for record in caplog.records)
