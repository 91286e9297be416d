"""SQLAlchemy implementation of the account repository."""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mychangex.infrastructure.database.models import Profile
from mychangex.modules.accounts.models import Account
from mychangex.modules.accounts.repository import AccountRepository


class SqlAccountRepository(AccountRepository):
    """Account repository backed by the ``profiles`` table."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, account_id: str) -> Account | None:
        stmt = select(Profile).where(Profile.id == account_id)
        result = await self._session.execute(stmt)
        return self._to_domain(result.scalar_one_or_none())

    async def get_by_phone(self, phone: str) -> Account | None:
        stmt = select(Profile).where(Profile.phone == phone)
        result = await self._session.execute(stmt)
        return self._to_domain(result.scalar_one_or_none())

    async def get_many(self, account_ids: Iterable[str]) -> Sequence[Account]:
        ids = list(account_ids)
        if not ids:
            return []
        stmt = select(Profile).where(Profile.id.in_(ids))
        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def create_account(
        self,
        *,
        phone: str,
        full_name: str,
        pin_hash: str,
        balance: Decimal = Decimal("0.00"),
    ) -> Account:
        model = Profile(
            phone=phone,
            full_name=full_name,
            pin_hash=pin_hash,
            balance=balance,
        )
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_domain(model)

    @staticmethod
    def _to_domain(model: Profile | None) -> Account | None:
        if model is None:
            return None
        return Account(
            id=str(model.id),
            phone=model.phone,
            full_name=model.full_name,
            balance=Decimal(model.balance or 0).quantize(Decimal("0.01")),
            pin_hash=model.pin_hash,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
