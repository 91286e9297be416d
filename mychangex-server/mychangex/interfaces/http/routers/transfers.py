"""Peer transfers."""
from decimal import Decimal

from fastapi import APIRouter, Depends

from mychangex.core.container import ApplicationContainer
from mychangex.core.security import get_current_session
from mychangex.interfaces.http.deps import (
    get_app_container,
    get_coupon_ledger,
    get_recipient_resolver,
    get_transfer_executor,
)
from mychangex.modules.accounts import Account
from mychangex.modules.coupons import CouponLedger
from mychangex.modules.recipients import RecipientResolver
from mychangex.modules.sessions import WalletSession
from mychangex.modules.transfers import TransferExecutor, TransferResult, parse_amount
from mychangex.schemas import PartialTransferResponse, TransferRequest, TransferResponse

from .recipients import recipient_to_schema
from .transactions import transaction_to_schema

router = APIRouter()


def transfer_to_schema(
    result: TransferResult,
    *,
    amount: Decimal,
    recipient: Account,
    session: WalletSession,
    threshold: Decimal,
    is_send_back: bool = False,
) -> TransferResponse:
    partial = None
    if result.partial is not None:
        partial = PartialTransferResponse(
            stage=result.partial.stage,
            receiver_credited=result.partial.receiver_credited,
            incident_id=result.partial.incident_id,
        )
    return TransferResponse(
        success=result.success,
        strategy=result.strategy,
        amount=amount,
        recipient=recipient_to_schema(recipient, is_send_back=is_send_back),
        new_balance=result.new_sender_balance,
        session_balance=session.balance,
        transaction=transaction_to_schema(result.transaction, threshold) if result.transaction else None,
        partial=partial,
    )


@router.post("", response_model=TransferResponse, summary="Send money to another account")
async def create_transfer(
    payload: TransferRequest,
    session: WalletSession = Depends(get_current_session),
    resolver: RecipientResolver = Depends(get_recipient_resolver),
    coupons: CouponLedger = Depends(get_coupon_ledger),
    executor: TransferExecutor = Depends(get_transfer_executor),
    container: ApplicationContainer = Depends(get_app_container),
) -> TransferResponse:
    user = session.get_current_user()
    amount = parse_amount(payload.amount)
    recipient = await resolver.resolve_recipient(payload.recipient, user.phone, scanned=payload.scanned)
    is_send_back = await coupons.is_send_back(user.id, recipient.id)
    result = await executor.execute(session, recipient, amount, request_id=payload.request_id)
    return transfer_to_schema(
        result,
        amount=amount,
        recipient=recipient,
        session=session,
        threshold=container.settings.transfer.coupon_threshold,
        is_send_back=is_send_back,
    )
