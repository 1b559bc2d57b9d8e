"""
Shared codes used across layers (Domain/Infrastructure/API).

Payment and provider specific codes live in `shared.codes.payment_codes`.
"""
from .payment_codes import (
    ClickErrorCode,
    ClickPaymentState,
    PaymentCode,
    PaymeErrorCode,
    PaymeReceiptState,
    PaymeTransactionState,
)

__all__ = [
    "ClickErrorCode",
    "ClickPaymentState",
    "PaymentCode",
    "PaymeErrorCode",
    "PaymeReceiptState",
    "PaymeTransactionState",
]
