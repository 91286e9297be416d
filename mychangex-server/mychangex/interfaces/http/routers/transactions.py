"""Transaction history."""
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query

from mychangex.core.container import ApplicationContainer
from mychangex.core.security import get_current_session
from mychangex.interfaces.http.deps import get_app_container, get_transaction_service
from mychangex.modules.sessions import WalletSession
from mychangex.modules.transactions import TransactionRecord, TransactionService
from mychangex.schemas import TransactionListResponse, TransactionResponse

router = APIRouter()


def transaction_to_schema(record: TransactionRecord, threshold: Decimal) -> TransactionResponse:
    return TransactionResponse(
        id=record.id,
        sender_id=record.sender_id,
        receiver_id=record.receiver_id,
        amount=record.amount,
        type=record.type,
        status=record.status,
        notes=record.notes,
        created_at=record.created_at,
        is_coupon=record.is_coupon(threshold),
    )


@router.get("", response_model=TransactionListResponse, summary="Recent transactions, newest first")
async def list_transactions(
    limit: Optional[int] = Query(default=None, ge=1),
    session: WalletSession = Depends(get_current_session),
    service: TransactionService = Depends(get_transaction_service),
    container: ApplicationContainer = Depends(get_app_container),
) -> TransactionListResponse:
    records = await service.list_history(session.get_current_user().id, limit)
    threshold = container.settings.transfer.coupon_threshold
    return TransactionListResponse(
        count=len(records),
        transactions=[transaction_to_schema(record, threshold) for record in records],
    )


@router.get("/{transaction_id}", response_model=TransactionResponse, summary="One transaction")
async def get_transaction(
    transaction_id: str,
    session: WalletSession = Depends(get_current_session),
    service: TransactionService = Depends(get_transaction_service),
    container: ApplicationContainer = Depends(get_app_container),
) -> TransactionResponse:
    record = await service.get_transaction(transaction_id, session.get_current_user().id)
    return transaction_to_schema(record, container.settings.transfer.coupon_threshold)
