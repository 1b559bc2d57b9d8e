"""
Exceptions for payment providers mapped to unified BusinessException variants.

Each provider has a single error class; the failure category is carried by
the explicit ``kind`` field so callers can branch on it without relying on
subclass checks.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Optional

from domain.common.exceptions import BusinessException


class ErrorKind(str, Enum):
    AUTHENTICATION = "authentication"  # bad webhook signature/credentials
    PROVIDER = "provider"  # business failure reported in the payload
    PROTOCOL = "protocol"  # malformed/empty provider response
    TRANSPORT = "transport"  # network, timeout, non-2xx


UNKNOWN_ERROR_MESSAGE = "Unknown error"


class PaymentError(BusinessException):
    """Base domain error for provider interactions.

    ``code`` is the provider's own code (negative Click/Payme codes) or a
    ``PaymentCode`` for failures that happen before the provider answers.
    """

    provider: str = "base"

    def __init__(
        self,
        message: str,
        code: int | str,
        *,
        kind: ErrorKind = ErrorKind.PROVIDER,
        data: Any = None,
    ) -> None:
        self.kind = kind
        self.data = data
        details: dict[str, Any] = {"provider": self.provider, "kind": kind.value}
        if data is not None:
            details["data"] = data
        super().__init__(
            code=code,
            message=message,
            error_type=type(self).__name__,
            details=details,
        )

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": self.name,
            "kind": self.kind.value,
            "code": self.code,
            "message": self.message,
        }
        if self.data is not None:
            payload["data"] = self.data
        return payload


class ClickError(PaymentError):
    """An error that occurred during an interaction with the Click API."""

    provider = "click"


class PaymeError(PaymentError):
    """An error that occurred during an interaction with the Payme API."""

    provider = "payme"

    def __init__(
        self,
        message: str,
        code: int | str,
        data: Any = None,
        *,
        kind: ErrorKind = ErrorKind.PROVIDER,
        messages: Optional[Mapping[str, str]] = None,
    ) -> None:
        super().__init__(message, code, kind=kind, data=data)
        self.messages = dict(messages) if messages else {"en": message}

    @classmethod
    def from_json_rpc_error(cls, error: Mapping[str, Any]) -> "PaymeError":
        """Build an error from a JSON-RPC ``error`` object.

        The message is the first non-empty translation in en, ru, uz order.
        """
        raw = error.get("message")
        if isinstance(raw, Mapping):
            messages = {lang: text for lang, text in raw.items() if isinstance(text, str) and text}
        elif isinstance(raw, str) and raw:
            messages = {"en": raw}
        else:
            messages = {}
        message = messages.get("en") or messages.get("ru") or messages.get("uz") or UNKNOWN_ERROR_MESSAGE
        return cls(
            message,
            error.get("code", -32400),
            error.get("data"),
            messages=messages or None,
        )

    def to_json_rpc_error(self) -> dict[str, Any]:
        code = int(self.code) if isinstance(self.code, int) else self.code
        payload: dict[str, Any] = {"code": code, "message": dict(self.messages)}
        if self.data is not None:
            payload["data"] = self.data
        return payload
