"""Coupon ledger and send-back."""
from typing import Optional

from fastapi import APIRouter, Depends

from mychangex.core.container import ApplicationContainer
from mychangex.core.security import get_current_session
from mychangex.interfaces.http.deps import (
    get_account_repository,
    get_app_container,
    get_coupon_ledger,
    get_transfer_executor,
)
from mychangex.infrastructure.database.repositories.account_repository import SqlAccountRepository
from mychangex.modules.accounts import AccountNotFoundError
from mychangex.modules.coupons import CouponLedger, CouponView, Party
from mychangex.modules.sessions import WalletSession
from mychangex.modules.transfers import TransferExecutor
from mychangex.schemas import (
    CouponListResponse,
    CouponResponse,
    PartyResponse,
    SendBackIntentResponse,
    SendBackRequest,
    SendBackResponse,
)

from .transfers import transfer_to_schema

router = APIRouter()


def _party(party: Party) -> PartyResponse:
    return PartyResponse(id=party.id, name=party.name, phone=party.phone)


def _to_schema(view: CouponView) -> CouponResponse:
    return CouponResponse(
        id=view.transaction.id,
        amount=view.amount,
        type=view.transaction.type,
        created_at=view.transaction.created_at,
        is_received=view.is_received,
        can_send_back=view.can_send_back,
        sender=_party(view.sender),
        receiver=_party(view.receiver),
    )


@router.get("", response_model=CouponListResponse, summary="Coupons sent and received, newest first")
async def list_coupons(
    session: WalletSession = Depends(get_current_session),
    ledger: CouponLedger = Depends(get_coupon_ledger),
) -> CouponListResponse:
    views = await ledger.list_coupons(session.get_current_user().id)
    return CouponListResponse(count=len(views), coupons=[_to_schema(view) for view in views])


@router.post(
    "/{transaction_id}/send-back",
    response_model=SendBackResponse,
    summary="Return a received coupon to its sender",
)
async def send_back_coupon(
    transaction_id: str,
    payload: Optional[SendBackRequest] = None,
    session: WalletSession = Depends(get_current_session),
    ledger: CouponLedger = Depends(get_coupon_ledger),
    executor: TransferExecutor = Depends(get_transfer_executor),
    accounts: SqlAccountRepository = Depends(get_account_repository),
    container: ApplicationContainer = Depends(get_app_container),
) -> SendBackResponse:
    request_id = payload.request_id if payload else None
    intent, result = await ledger.send_back(session, transaction_id, executor, request_id=request_id)
    recipient = await accounts.get_by_id(intent.recipient_id)
    if recipient is None:
        raise AccountNotFoundError()
    return SendBackResponse(
        intent=SendBackIntentResponse(
            transaction_id=intent.transaction_id,
            recipient_id=intent.recipient_id,
            recipient_phone=intent.recipient_phone,
            recipient_name=intent.recipient_name,
            preset_amount=intent.preset_amount,
        ),
        transfer=transfer_to_schema(
            result,
            amount=intent.preset_amount,
            recipient=recipient,
            session=session,
            threshold=container.settings.transfer.coupon_threshold,
            is_send_back=True,
        ),
    )
