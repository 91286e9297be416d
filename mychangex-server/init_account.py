"""
Create demo wallet accounts for local testing.

Usage: python init_account.py
"""
import asyncio
from decimal import Decimal

from mychangex.core.logging import configure_logging
from mychangex.infrastructure.database.session import dispose_engine, get_session, get_session_factory, init_db
from mychangex.infrastructure.database.repositories.transfer_repository import SqlLedgerSteps
from mychangex.modules.accounts import AccountCreateInput, AccountService

DEMO_ACCOUNTS = [
    ("0771234567", "Tendai Moyo", "1234", Decimal("25.00")),
    ("0772345678", "Rudo Chikwanha", "4321", Decimal("10.00")),
]


async def create_demo_accounts() -> None:
    configure_logging()
    await init_db()

    created = []
    async for db in get_session():
        service = AccountService.with_session(db)
        for phone, full_name, pin, opening_balance in DEMO_ACCOUNTS:
            if await service.exists(phone):
                print(f"Account {phone} already exists")
                continue
            account = await service.sign_up(AccountCreateInput(phone=phone, full_name=full_name, pin=pin))
            created.append((account, pin, opening_balance))

    ledger = SqlLedgerSteps(get_session_factory())
    for account, pin, opening_balance in created:
        await ledger.credit(account.id, opening_balance)
        print(f"Created {account.phone} / PIN {pin} with balance {opening_balance}")

    await dispose_engine()


if __name__ == "__main__":
    asyncio.run(create_demo_accounts())
