"""Pydantic schemas used across the project."""
from datetime import datetime
from decimal import Decimal
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class SignupRequest(BaseModel):
    phone: str = Field(..., min_length=9, max_length=20)
    full_name: str = Field(..., min_length=2, max_length=100)
    pin: str = Field(..., min_length=4, max_length=4)


class LoginRequest(BaseModel):
    phone: str = Field(..., min_length=9, max_length=20)
    pin: str = Field(..., min_length=4, max_length=4)


class AccountResponse(BaseModel):
    id: str
    phone: str
    full_name: str
    balance: Decimal
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SessionResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    account: AccountResponse


class ReceiveCodeResponse(BaseModel):
    payload: str = Field(..., description="JSON text to render as the receive QR code")


class RecipientResolveRequest(BaseModel):
    value: str = Field(..., min_length=1, description="Typed phone number or scanned QR payload")
    scanned: bool = False


class RecipientResponse(BaseModel):
    id: str
    full_name: str
    phone: str
    is_send_back: bool = False


class TransferRequest(BaseModel):
    recipient: str = Field(..., min_length=1, description="Typed phone number or scanned QR payload")
    amount: Union[Decimal, str]
    scanned: bool = False
    request_id: Optional[str] = Field(default=None, max_length=64)


class SendBackRequest(BaseModel):
    request_id: Optional[str] = Field(default=None, max_length=64)


class TransactionResponse(BaseModel):
    id: str
    sender_id: str
    receiver_id: str
    amount: Decimal
    type: str
    status: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    is_coupon: bool = False

    model_config = ConfigDict(from_attributes=True)


class TransactionListResponse(BaseModel):
    count: int
    transactions: list[TransactionResponse]


class PartialTransferResponse(BaseModel):
    stage: str
    receiver_credited: bool
    incident_id: Optional[str] = None


class TransferResponse(BaseModel):
    success: bool
    strategy: str
    amount: Decimal
    recipient: RecipientResponse
    new_balance: Optional[Decimal] = None
    session_balance: Decimal
    transaction: Optional[TransactionResponse] = None
    partial: Optional[PartialTransferResponse] = None


class PartyResponse(BaseModel):
    id: str
    name: str
    phone: str


class CouponResponse(BaseModel):
    id: str
    amount: Decimal
    type: str
    created_at: Optional[datetime] = None
    is_received: bool
    can_send_back: bool
    sender: PartyResponse
    receiver: PartyResponse


class CouponListResponse(BaseModel):
    count: int
    coupons: list[CouponResponse]


class SendBackIntentResponse(BaseModel):
    transaction_id: str
    recipient_id: str
    recipient_phone: str
    recipient_name: str
    preset_amount: Decimal


class SendBackResponse(BaseModel):
    intent: SendBackIntentResponse
    transfer: TransferResponse


class ErrorResponse(BaseModel):
    code: str
    message: str
    shortage: Optional[Decimal] = None


class HealthResponse(BaseModel):
    status: str
    database: bool
