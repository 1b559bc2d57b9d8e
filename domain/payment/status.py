"""
Canonical payment status and per-provider status normalization.

Every provider reports its own numeric state. These functions are the only
place where such codes are turned into a ``PaymentStatus``; unknown codes
always fail closed.
"""
from __future__ import annotations

import math
from enum import Enum
from typing import Any

from shared.codes.payment_codes import PROVIDER_STATUS_TO_INTERNAL


class PaymentStatus(str, Enum):
    """Provider independent payment status."""
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


TERMINAL_STATUSES = frozenset({
    PaymentStatus.SUCCESS,
    PaymentStatus.FAILED,
    PaymentStatus.CANCELLED,
    PaymentStatus.REFUNDED,
})


def is_terminal(status: PaymentStatus) -> bool:
    return status in TERMINAL_STATUSES


def _as_state_code(code: Any) -> int | None:
    # bool is an int subclass but never a valid provider state
    if code is None or isinstance(code, bool):
        return None
    if isinstance(code, int):
        return code
    if isinstance(code, float):
        if math.isnan(code) or not code.is_integer():
            return None
        return int(code)
    return None


def normalize_status(provider: str, code: Any) -> PaymentStatus:
    """Map a provider state code to ``PaymentStatus``.

    ``None``, ``NaN``, non-integral and unmapped values yield ``FAILED``.
    """
    state = _as_state_code(code)
    if state is None:
        return PaymentStatus.FAILED
    mapping = PROVIDER_STATUS_TO_INTERNAL.get(provider.lower(), {})
    value = mapping.get(state)
    if value is None:
        return PaymentStatus.FAILED
    return PaymentStatus(value)


def status_from_click_code(code: Any = None) -> PaymentStatus:
    """Click ``payment_status``: 0,1 pending; 2 success; 3,5 cancelled; 4 refunded."""
    return normalize_status("click", code)


def status_from_payme_receipt_state(code: Any = None) -> PaymentStatus:
    """Payme receipt ``state``: 0,1,5 pending; 2 success; 3,4 cancelled; 6 refunded."""
    return normalize_status("payme", code)
