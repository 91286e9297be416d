"""PIN-based signup, login and logout."""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from mychangex.core.security import create_access_token, get_current_session
from mychangex.interfaces.http.deps import get_account_service, get_db_session
from mychangex.modules.accounts import Account, AccountCreateInput, AccountService
from mychangex.modules.sessions import SessionService, WalletSession
from mychangex.schemas import AccountResponse, LoginRequest, SessionResponse, SignupRequest

router = APIRouter()


def _session_response(account: Account) -> SessionResponse:
    token, token_data = create_access_token(account.id, account.phone)
    return SessionResponse(
        access_token=token,
        expires_at=token_data.expires_at,
        account=AccountResponse.model_validate(account),
    )


@router.post(
    "/signup",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account with phone, name and PIN",
)
async def signup(
    payload: SignupRequest,
    account_service: AccountService = Depends(get_account_service),
) -> SessionResponse:
    account = await account_service.sign_up(
        AccountCreateInput(phone=payload.phone, full_name=payload.full_name, pin=payload.pin)
    )
    return _session_response(account)


@router.post("/login", response_model=SessionResponse, summary="Log in with phone and PIN")
async def login(
    payload: LoginRequest,
    account_service: AccountService = Depends(get_account_service),
) -> SessionResponse:
    account = await account_service.authenticate(payload.phone, payload.pin)
    return _session_response(account)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT, summary="Revoke the current token")
async def logout(
    session: WalletSession = Depends(get_current_session),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await SessionService.with_session(db).logout(session)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
