"""
Payment specific codes and provider status mapping.
"""
from __future__ import annotations

from enum import IntEnum


class PaymentCode(IntEnum):
    # Generic success
    SUCCESS = 0

    # Provider/Network errors (6xxxx)
    PROVIDER_ERROR = 60000
    TIMEOUT = 60003
    TRANSPORT_ERROR = 60005


class ClickErrorCode(IntEnum):
    """Error codes Click expects in webhook acknowledgements."""

    SUCCESS = 0
    SIGN_CHECK_FAILED = -1
    INCORRECT_AMOUNT = -2
    ACTION_NOT_FOUND = -3
    ALREADY_PAID = -4
    USER_NOT_FOUND = -5
    TRANSACTION_NOT_FOUND = -6
    FAILED_TO_UPDATE_USER = -7
    ERROR_IN_REQUEST = -8
    TRANSACTION_CANCELLED = -9


class ClickPaymentState(IntEnum):
    NEW = 0
    WAITING = 1
    CONFIRMED = 2
    REJECTED = 3
    REFUNDED = 4
    CANCELED = 5


class PaymeErrorCode(IntEnum):
    """JSON-RPC and merchant API error codes used by Payme."""

    # JSON-RPC level
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INSUFFICIENT_PRIVILEGE = -32504
    INTERNAL_ERROR = -32400

    # Checkout API protocol violations raised on our side
    EMPTY_RESULT = -32000
    RECEIPT_NOT_CREATED = -32001

    # Merchant API (webhook) business errors
    INVALID_AMOUNT = -31001
    TRANSACTION_NOT_FOUND = -31003
    CANNOT_CANCEL = -31007
    CANNOT_PERFORM = -31008
    INVALID_ACCOUNT = -31050


class PaymeReceiptState(IntEnum):
    NEW = 0
    WAITING = 1
    PAID = 2
    CANCELLED_BY_TIMEOUT = 3
    CANCELLED = 4
    WAITING_FOR_REFUND = 5
    REFUNDED = 6


class PaymeTransactionState(IntEnum):
    """Merchant-side transaction states reported back to Payme."""

    CREATED = 1
    PERFORMED = 2
    CANCELLED = -1
    CANCELLED_AFTER_PERFORM = -2


# Provider numeric code -> canonical PaymentStatus value.
# Anything missing from a table is treated as "failed" by the normalizer.
PROVIDER_STATUS_TO_INTERNAL: dict[str, dict[int, str]] = {
    "click": {
        ClickPaymentState.NEW: "pending",
        ClickPaymentState.WAITING: "pending",
        ClickPaymentState.CONFIRMED: "success",
        ClickPaymentState.REJECTED: "cancelled",
        ClickPaymentState.REFUNDED: "refunded",
        ClickPaymentState.CANCELED: "cancelled",
    },
    "payme": {
        PaymeReceiptState.NEW: "pending",
        PaymeReceiptState.WAITING: "pending",
        PaymeReceiptState.PAID: "success",
        PaymeReceiptState.CANCELLED_BY_TIMEOUT: "cancelled",
        PaymeReceiptState.CANCELLED: "cancelled",
        PaymeReceiptState.WAITING_FOR_REFUND: "pending",
        PaymeReceiptState.REFUNDED: "refunded",
    },
}
