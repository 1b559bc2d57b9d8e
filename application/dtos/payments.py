"""
Payment DTOs (Pydantic v2) used at the client boundaries.

Amounts are in major currency units (UZS); each client converts to the
unit its provider expects.
"""
from __future__ import annotations

from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.types import condecimal

from domain.payment.status import PaymentStatus


CardType = Literal["uzcard", "humo", "visa", "master"]


class CreateCardTokenParams(BaseModel):
    card_number: str = Field(min_length=1)
    # MMYY, e.g. "1228"
    expire_date: str = Field(min_length=4, max_length=4)
    # False asks the provider for a temporary (single use) token
    save: bool = True

    @field_validator("card_number")
    @classmethod
    def _strip_spaces(cls, v: str) -> str:
        return v.replace(" ", "")


class VerifyCardTokenParams(BaseModel):
    card_token: str = Field(min_length=1)
    sms_code: str = Field(min_length=1)


class ProcessPaymentParams(BaseModel):
    card_token: str = Field(min_length=1)
    amount: condecimal(gt=0)  # type: ignore[valid-type]
    order_id: str = Field(min_length=1)


class GenerateInvoiceParams(BaseModel):
    amount: condecimal(gt=0)  # type: ignore[valid-type]
    order_id: str = Field(min_length=1)
    return_url: str


class ClickGenerateInvoiceParams(GenerateInvoiceParams):
    card_type: Optional[CardType] = None


class CardTokenResult(BaseModel):
    card_token: str
    requires_verification: bool


class CardVerification(BaseModel):
    card_token: str
    is_verified: bool


class ProcessedPaymentResult(BaseModel):
    """Click charge/status result; Click identifies payments numerically."""
    transaction_id: int
    status: PaymentStatus


class CancelPaymentResult(BaseModel):
    transaction_id: int


class Receipt(BaseModel):
    """Payme two-phase receipt (create, then pay)."""
    id: str = Field(default="", alias="_id")
    create_time: int = 0
    pay_time: int = 0
    cancel_time: int = 0
    state: Optional[int] = None
    # tiyin (UZS * 100)
    amount: int = 0

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class ProcessedReceiptResult(BaseModel):
    transaction_id: str
    status: PaymentStatus
    receipt: Receipt


class ReceiptStatusResult(BaseModel):
    status: PaymentStatus
    state: Optional[int] = None

