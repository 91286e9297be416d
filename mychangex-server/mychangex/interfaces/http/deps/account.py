"""Account related dependency providers."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from mychangex.core.container import ApplicationContainer
from mychangex.infrastructure.database.repositories.account_repository import SqlAccountRepository
from mychangex.modules.accounts.service import AccountService
from mychangex.modules.recipients.service import RecipientResolver

from .container import get_app_container
from .database import get_db_session


def get_account_repository(db: AsyncSession = Depends(get_db_session)) -> SqlAccountRepository:
    return SqlAccountRepository(db)


def get_account_service(
    repository: SqlAccountRepository = Depends(get_account_repository),
    container: ApplicationContainer = Depends(get_app_container),
) -> AccountService:
    return AccountService(repository, container.settings.phone)


def get_recipient_resolver(
    repository: SqlAccountRepository = Depends(get_account_repository),
    container: ApplicationContainer = Depends(get_app_container),
) -> RecipientResolver:
    return RecipientResolver(repository, container.settings.phone)


__all__ = [
    "get_account_repository",
    "get_account_service",
    "get_recipient_resolver",
]
