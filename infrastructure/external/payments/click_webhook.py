"""
Click SHOP-API webhook signature verification and acknowledgement builders.

Stateless and synchronous. Signature:

    md5(click_trans_id|service_id|SECRET|merchant_trans_id|[merchant_prepare_id|]amount|action|sign_time)

``merchant_prepare_id`` takes part only for the complete action, and only
when Click sent it.
"""
from __future__ import annotations

import hashlib
import hmac
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from application.dtos.webhooks import ClickWebhookAction, ClickWebhookBody, ClickWebhookResponse
from core.logging_config import get_logger
from infrastructure.external.payments.exceptions import ClickError, ErrorKind
from shared.codes.payment_codes import ClickErrorCode


logger = get_logger(__name__)


def _as_body(body: Union[ClickWebhookBody, Mapping[str, Any]]) -> ClickWebhookBody:
    if isinstance(body, ClickWebhookBody):
        return body
    try:
        return ClickWebhookBody.model_validate(dict(body))
    except ValidationError as exc:
        raise ClickError(
            "Error in request from click", ClickErrorCode.ERROR_IN_REQUEST, kind=ErrorKind.PROTOCOL, data=str(exc)
        ) from exc


def build_sign_string(body: ClickWebhookBody, secret_key: str) -> str:
    parts = [body.click_trans_id, body.service_id, secret_key, body.merchant_trans_id]
    if body.action == ClickWebhookAction.COMPLETE and body.merchant_prepare_id:
        parts.append(body.merchant_prepare_id)
    parts.extend([body.amount, str(int(body.action)), body.sign_time])
    return hashlib.md5("|".join(parts).encode("utf-8")).hexdigest()


class ClickWebhookHandler:
    provider = "click"

    def __init__(self, secret_key: str):
        if not secret_key:
            raise RuntimeError("ClickWebhookHandler: secret_key is required.")
        self._secret_key = secret_key

    def is_valid_signature(self, body: Union[ClickWebhookBody, Mapping[str, Any]]) -> bool:
        parsed = _as_body(body)
        expected = build_sign_string(parsed, self._secret_key)
        return hmac.compare_digest(expected.encode("utf-8"), parsed.sign_string.encode("utf-8"))

    def verify_signature(self, body: Union[ClickWebhookBody, Mapping[str, Any]]) -> None:
        """Raise ``ClickError`` (code -1) unless ``sign_string`` matches."""
        if not self.is_valid_signature(body):
            parsed = _as_body(body)
            logger.warning(
                "click_webhook_invalid_signature",
                click_trans_id=parsed.click_trans_id,
                merchant_trans_id=parsed.merchant_trans_id,
                action=int(parsed.action),
            )
            raise ClickError("Invalid webhook signature.", ClickErrorCode.SIGN_CHECK_FAILED, kind=ErrorKind.AUTHENTICATION)

    def create_success_response(
        self,
        body: Union[ClickWebhookBody, Mapping[str, Any]],
        merchant_prepare_id: Optional[Union[int, str]] = None,
        merchant_confirm_id: Optional[Union[int, str]] = None,
    ) -> ClickWebhookResponse:
        """Acknowledge a prepare (``merchant_prepare_id``) or complete (``merchant_confirm_id``)."""
        parsed = _as_body(body)
        return ClickWebhookResponse(
            click_trans_id=parsed.click_trans_id,
            merchant_trans_id=parsed.merchant_trans_id,
            merchant_prepare_id=merchant_prepare_id,
            merchant_confirm_id=merchant_confirm_id,
            error=int(ClickErrorCode.SUCCESS),
            error_note="Success",
        )

    def create_error_response(self, code: Union[ClickErrorCode, int], message: str) -> ClickWebhookResponse:
        # Click does not expect transaction ids on error acknowledgements
        return ClickWebhookResponse(
            click_trans_id="",
            merchant_trans_id="",
            error=int(code),
            error_note=message,
        )
