"""Current account profile and receive code."""
from fastapi import APIRouter, Depends

from mychangex.core.security import get_current_session
from mychangex.interfaces.http.deps import get_account_service
from mychangex.modules.accounts import AccountNotFoundError, AccountService
from mychangex.modules.recipients import build_coupon_payload
from mychangex.modules.sessions import WalletSession
from mychangex.schemas import AccountResponse, ReceiveCodeResponse

router = APIRouter()


@router.get("/me", response_model=AccountResponse, summary="Current account and balance")
async def me(
    session: WalletSession = Depends(get_current_session),
    account_service: AccountService = Depends(get_account_service),
) -> AccountResponse:
    account = await account_service.get_by_id(session.get_current_user().id)
    if account is None:
        raise AccountNotFoundError()
    return AccountResponse.model_validate(account)


@router.get("/me/receive-code", response_model=ReceiveCodeResponse, summary="QR payload for receiving coupons")
async def receive_code(session: WalletSession = Depends(get_current_session)) -> ReceiveCodeResponse:
    session.get_current_user()
    return ReceiveCodeResponse(payload=build_coupon_payload(session))
