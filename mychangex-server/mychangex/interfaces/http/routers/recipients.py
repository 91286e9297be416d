"""Recipient lookup for typed numbers and scanned QR payloads."""
from fastapi import APIRouter, Depends

from mychangex.core.security import get_current_session
from mychangex.interfaces.http.deps import get_coupon_ledger, get_recipient_resolver
from mychangex.modules.accounts import Account
from mychangex.modules.coupons import CouponLedger
from mychangex.modules.recipients import RecipientResolver
from mychangex.modules.sessions import WalletSession
from mychangex.schemas import RecipientResolveRequest, RecipientResponse

router = APIRouter()


def recipient_to_schema(account: Account, *, is_send_back: bool = False) -> RecipientResponse:
    return RecipientResponse(
        id=account.id,
        full_name=account.display_name,
        phone=account.phone,
        is_send_back=is_send_back,
    )


@router.post("/resolve", response_model=RecipientResponse, summary="Resolve a phone number or QR payload")
async def resolve_recipient(
    payload: RecipientResolveRequest,
    session: WalletSession = Depends(get_current_session),
    resolver: RecipientResolver = Depends(get_recipient_resolver),
    coupons: CouponLedger = Depends(get_coupon_ledger),
) -> RecipientResponse:
    user = session.get_current_user()
    account = await resolver.resolve_recipient(payload.value, user.phone, scanned=payload.scanned)
    return recipient_to_schema(account, is_send_back=await coupons.is_send_back(user.id, account.id))
