"""
Click merchant API v2 adapter (REST, digest auth).

Card flow: create a card token, verify it with the SMS code, then charge it.
Every call carries a freshly computed ``Auth`` digest; a negative
``error_code`` in the payload is a failure even on HTTP 200.
"""
from __future__ import annotations

import hashlib
import time
from typing import Any, Optional
from urllib.parse import quote, urlencode

from application.dtos.payments import (
    CancelPaymentResult,
    CardTokenResult,
    ClickGenerateInvoiceParams,
    CreateCardTokenParams,
    GenerateInvoiceParams,
    ProcessedPaymentResult,
    ProcessPaymentParams,
    VerifyCardTokenParams,
)
from core.logging_config import get_logger
from core.settings import ClickSettings, payment_settings
from domain.payment.status import status_from_click_code
from infrastructure.external.api_clients import APIError, APITimeoutError, BaseAPIClient
from infrastructure.external.payments.base import (
    build_http_client,
    format_amount,
    to_wire_amount,
)
from infrastructure.external.payments.endpoints import CLICK_ENDPOINTS
from infrastructure.external.payments.exceptions import ClickError, ErrorKind
from shared.codes.payment_codes import ClickPaymentState, PaymentCode


logger = get_logger(__name__)


def get_digest_auth_token(merchant_user_id: str, secret_key: str, timestamp: Optional[int] = None) -> str:
    """``Auth`` header value: ``user_id:sha1(timestamp + secret):timestamp``.

    The timestamp is taken per call; the digest is not meant to be reused.
    """
    ts = int(time.time()) if timestamp is None else int(timestamp)
    digest = hashlib.sha1(f"{ts}{secret_key}".encode("utf-8")).hexdigest()
    return f"{merchant_user_id}:{digest}:{ts}"


class ClickClient:
    provider = "click"

    def __init__(self, config: Optional[ClickSettings] = None, *, http_client: Optional[BaseAPIClient] = None):
        cfg = config or payment_settings.click
        if not (cfg.merchant_id and cfg.merchant_user_id and cfg.secret_key and cfg.service_id):
            raise RuntimeError("ClickClient: merchant_id, merchant_user_id, secret_key and service_id are required.")
        self._config = cfg
        self._http = http_client or build_http_client(CLICK_ENDPOINTS.api_url)

    async def aclose(self) -> None:
        await self._http.close()

    async def _request(self, method: str, endpoint: str, *, operation: str, body: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        headers = {"Auth": get_digest_auth_token(self._config.merchant_user_id, self._config.secret_key)}
        if method not in {"POST", "GET", "DELETE"}:
            raise ValueError(f"Unsupported method: {method}")
        logger.info("click_request", provider=self.provider, operation=operation, method=method)
        try:
            if method == "POST":
                response = await self._http.post(endpoint, json_data=body, headers=headers)
            elif method == "GET":
                response = await self._http.get(endpoint, headers=headers)
            else:
                response = await self._http.delete(endpoint, headers=headers)
            data = response.json()
        except APITimeoutError as exc:
            logger.warning("click_request_timeout", operation=operation, error=str(exc))
            raise ClickError(f"Click API request failed: {exc}", PaymentCode.TIMEOUT, kind=ErrorKind.TRANSPORT) from exc
        except APIError as exc:
            logger.warning("click_request_failed", operation=operation, status_code=exc.status_code, error=str(exc))
            raise ClickError(f"Click API request failed: {exc}", PaymentCode.TRANSPORT_ERROR, kind=ErrorKind.TRANSPORT) from exc
        except ValueError as exc:
            raise ClickError(f"Click API returned invalid JSON: {exc}", PaymentCode.PROVIDER_ERROR, kind=ErrorKind.PROTOCOL) from exc

        if not isinstance(data, dict):
            raise ClickError("Click API returned an unexpected payload", PaymentCode.PROVIDER_ERROR, kind=ErrorKind.PROTOCOL)
        return data

    def _raise_for_error(self, response: dict[str, Any], operation: str) -> int:
        error_code = response.get("error_code")
        if isinstance(error_code, bool) or not isinstance(error_code, int):
            raise ClickError(
                f"Click API response has no error_code ({operation})",
                PaymentCode.PROVIDER_ERROR,
                kind=ErrorKind.PROTOCOL,
                data=response,
            )
        if error_code < 0:
            logger.info("click_provider_error", operation=operation, error_code=error_code, error_note=response.get("error_note"))
            raise ClickError(response.get("error_note") or "Click request failed", error_code)
        return error_code

    async def create_card_token(self, params: CreateCardTokenParams) -> CardTokenResult:
        """Step 1: create a card token; Click always follows up with an SMS."""
        response = await self._request("POST", "/card_token/request", operation="create_card_token", body={
            "card_number": params.card_number,
            "expire_date": params.expire_date,
            "temporary": 0 if params.save else 1,
            "service_id": self._config.service_id,
        })
        self._raise_for_error(response, "create_card_token")
        token = response.get("card_token")
        if not token:
            raise ClickError(
                response.get("error_note") or "Click did not return a card token",
                PaymentCode.PROVIDER_ERROR,
                kind=ErrorKind.PROTOCOL,
            )
        return CardTokenResult(card_token=str(token), requires_verification=True)

    async def verify_card_token(self, params: VerifyCardTokenParams) -> None:
        """Step 2: confirm the token with the SMS code."""
        response = await self._request("POST", "/card_token/verify", operation="verify_card_token", body={
            "service_id": self._config.service_id,
            "card_token": params.card_token,
            "sms_code": params.sms_code,
        })
        self._raise_for_error(response, "verify_card_token")

    async def charge_from_card_token(self, params: ProcessPaymentParams) -> ProcessedPaymentResult:
        """Step 3: charge a verified token.

        A zero ``error_code`` is only a success when ``payment_status`` is
        confirmed; Click may report a business failure with HTTP 200.
        """
        logger.info("click_charge_request", order_id=params.order_id, amount=format_amount(params.amount))
        response = await self._request("POST", "/card_token/payment", operation="charge_from_card_token", body={
            "service_id": self._config.service_id,
            "card_token": params.card_token,
            "amount": to_wire_amount(params.amount),
            "transaction_parameter": params.order_id,
        })
        error_code = self._raise_for_error(response, "charge_from_card_token")
        payment_status = response.get("payment_status")
        if error_code == 0 and payment_status != ClickPaymentState.CONFIRMED:
            raise ClickError(
                response.get("error_note") or "Click payment was not confirmed",
                PaymentCode.PROVIDER_ERROR,
                data={"error_code": error_code, "payment_status": payment_status},
            )
        payment_id = response.get("payment_id")
        if isinstance(payment_id, bool) or not isinstance(payment_id, int):
            raise ClickError(
                "Click confirmed the payment without a payment_id",
                PaymentCode.PROVIDER_ERROR,
                kind=ErrorKind.PROTOCOL,
                data=response,
            )
        result = ProcessedPaymentResult(
            transaction_id=payment_id,
            status=status_from_click_code(payment_status),
        )
        logger.info("click_charge_response", order_id=params.order_id, transaction_id=result.transaction_id, status=result.status.value)
        return result

    def generate_invoice_url(self, params: GenerateInvoiceParams) -> str:
        """Redirect URL to the Click payment page. No network call."""
        query = {
            "service_id": self._config.service_id,
            "merchant_id": self._config.merchant_id,
            "amount": format_amount(params.amount),
            "transaction_param": params.order_id,
            "return_url": params.return_url,
        }
        if isinstance(params, ClickGenerateInvoiceParams) and params.card_type:
            query["card_type"] = params.card_type
        return f"{CLICK_ENDPOINTS.checkout_url}?{urlencode(query)}"

    async def check_payment_status(self, payment_id: int | str) -> ProcessedPaymentResult:
        endpoint = f"/payment/status/{self._config.service_id}/{payment_id}"
        response = await self._request("GET", endpoint, operation="check_payment_status")
        self._raise_for_error(response, "check_payment_status")
        return ProcessedPaymentResult(
            transaction_id=int(payment_id),
            status=status_from_click_code(response.get("payment_status")),
        )

    async def cancel_payment(self, payment_id: int | str) -> CancelPaymentResult:
        """Reverse a payment."""
        endpoint = f"/payment/reversal/{self._config.service_id}/{payment_id}"
        response = await self._request("DELETE", endpoint, operation="cancel_payment")
        self._raise_for_error(response, "cancel_payment")
        return CancelPaymentResult(transaction_id=response.get("payment_id") or int(payment_id))

    async def delete_card_token(self, card_token: str) -> None:
        endpoint = f"/card_token/{self._config.service_id}/{quote(card_token, safe='')}"
        response = await self._request("DELETE", endpoint, operation="delete_card_token")
        self._raise_for_error(response, "delete_card_token")
