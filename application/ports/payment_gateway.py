"""
Card payment gateway port (application/ports) exposing a replaceable protocol.

Click and Payme implement it independently, without a shared base class.
"""
from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable

from application.dtos.payments import (
    CardTokenResult,
    CardVerification,
    CreateCardTokenParams,
    GenerateInvoiceParams,
    ProcessPaymentParams,
    VerifyCardTokenParams,
)


@runtime_checkable
class CardPaymentGateway(Protocol):
    """Tokenize, verify, charge, check, cancel and build invoice URLs.

    Implementations are async, stateless beyond their configuration and
    raise a provider ``PaymentError`` on any failure.
    """

    provider: str

    async def create_card_token(self, params: CreateCardTokenParams) -> CardTokenResult: ...

    async def verify_card_token(self, params: VerifyCardTokenParams) -> Optional[CardVerification]: ...

    async def charge_from_card_token(self, params: ProcessPaymentParams) -> Any: ...

    async def check_payment_status(self, payment_id: Any) -> Any: ...

    async def cancel_payment(self, payment_id: Any) -> Any: ...

    def generate_invoice_url(self, params: GenerateInvoiceParams) -> str: ...

    async def aclose(self) -> None: ...
