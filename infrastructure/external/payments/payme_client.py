"""
Payme Checkout API adapter (JSON-RPC over a single POST endpoint).

Card flow: ``cards.create`` -> optional ``cards.get_verify_code`` /
``cards.verify`` -> charge, where charging is the two-phase receipt flow
``receipts.create`` then ``receipts.pay``. Authentication is the static
checkout key in the ``X-Auth`` header.
"""
from __future__ import annotations

import base64
import itertools
import random
import time
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from application.dtos.payments import (
    CardTokenResult,
    CardVerification,
    CreateCardTokenParams,
    GenerateInvoiceParams,
    ProcessedReceiptResult,
    ProcessPaymentParams,
    Receipt,
    ReceiptStatusResult,
    VerifyCardTokenParams,
)
from core.logging_config import get_logger
from core.settings import PaymeSettings, payment_settings
from domain.payment.status import status_from_payme_receipt_state
from infrastructure.external.api_clients import APIError, APITimeoutError, BaseAPIClient
from infrastructure.external.payments.base import build_http_client, to_minor
from infrastructure.external.payments.endpoints import PAYME_ENDPOINTS, PaymentEnvironment
from infrastructure.external.payments.exceptions import ErrorKind, PaymeError
from shared.codes.payment_codes import PaymentCode, PaymeErrorCode


logger = get_logger(__name__)

_request_seq = itertools.count(1)


def generate_request_id() -> str:
    """``<ms timestamp>-<random>-<seq>``.

    Best effort uniqueness across processes; the sequence keeps ids distinct
    within one process.
    """
    return f"{int(time.time() * 1000)}-{random.randint(0, 999_999)}-{next(_request_seq)}"


def build_invoice_url(checkout_url: str, merchant_id: str, amount_in_tiyin: int, order_id: str, return_url: str) -> str:
    """Base64 of the whole ``m=..;ac.order_id=..;a=..;c=..`` string, appended to the checkout URL."""
    params = f"m={merchant_id};ac.order_id={order_id};a={amount_in_tiyin};c={return_url}"
    encoded = base64.b64encode(params.encode("utf-8")).decode("ascii")
    return f"{checkout_url}{encoded}"


class PaymeClient:
    provider = "payme"

    def __init__(self, config: Optional[PaymeSettings] = None, *, http_client: Optional[BaseAPIClient] = None):
        cfg = config or payment_settings.payme
        if not (cfg.merchant_id and cfg.checkout_key and cfg.merchant_api_secret):
            raise RuntimeError("PaymeClient: merchant_id, checkout_key and merchant_api_secret are required.")
        self._config = cfg
        self.environment = PaymentEnvironment.from_test_mode(cfg.test_mode)
        endpoints = PAYME_ENDPOINTS[self.environment]
        self.checkout_url = endpoints.checkout_url
        self._http = http_client or build_http_client(endpoints.api_url)

    async def aclose(self) -> None:
        await self._http.close()

    async def _request(self, method: str, params: dict[str, Any]) -> dict[str, Any]:
        request_id = generate_request_id()
        payload = {"id": request_id, "method": method, "params": params}
        logger.info("payme_rpc_request", provider=self.provider, rpc_method=method, request_id=request_id)
        try:
            response = await self._http.post("", json_data=payload, headers={"X-Auth": self._config.checkout_key})
            data = response.json()
        except APITimeoutError as exc:
            logger.warning("payme_rpc_timeout", rpc_method=method, request_id=request_id, error=str(exc))
            raise PaymeError(f"Payme API request failed: {exc}", PaymentCode.TIMEOUT, kind=ErrorKind.TRANSPORT) from exc
        except APIError as exc:
            logger.warning("payme_rpc_transport_error", rpc_method=method, request_id=request_id, error=str(exc))
            raise PaymeError(f"Payme API request failed: {exc}", PaymentCode.TRANSPORT_ERROR, kind=ErrorKind.TRANSPORT) from exc
        except ValueError as exc:
            raise PaymeError(
                f"Payme API returned invalid JSON: {exc}", PaymeErrorCode.EMPTY_RESULT, kind=ErrorKind.PROTOCOL
            ) from exc

        if not isinstance(data, Mapping):
            raise PaymeError("Payme API returned a non-object response.", PaymeErrorCode.EMPTY_RESULT, kind=ErrorKind.PROTOCOL)

        error = data.get("error")
        if error:
            exc = PaymeError.from_json_rpc_error(error) if isinstance(error, Mapping) else PaymeError(str(error), PaymeErrorCode.INTERNAL_ERROR)
            logger.info("payme_rpc_error", rpc_method=method, request_id=request_id, code=exc.code, error=exc.message)
            raise exc

        result = data.get("result")
        if not result:
            raise PaymeError("Received empty result from Payme API.", PaymeErrorCode.EMPTY_RESULT, kind=ErrorKind.PROTOCOL)
        if not isinstance(result, Mapping):
            raise PaymeError("Payme API returned a non-object result.", PaymeErrorCode.EMPTY_RESULT, kind=ErrorKind.PROTOCOL)
        return dict(result)

    @staticmethod
    def _parse_receipt(result: Mapping[str, Any]) -> Receipt:
        try:
            return Receipt.model_validate(result.get("receipt") or {})
        except ValidationError as exc:
            raise PaymeError(
                "Payme API returned a malformed receipt.", PaymeErrorCode.EMPTY_RESULT, kind=ErrorKind.PROTOCOL, data=str(exc)
            ) from exc

    @staticmethod
    def _require_id(value: str, what: str) -> str:
        if not value:
            raise PaymeError(f"{what} is required.", PaymeErrorCode.INVALID_REQUEST, kind=ErrorKind.PROTOCOL)
        return value

    async def create_card_token(self, params: CreateCardTokenParams) -> CardTokenResult:
        """Step 1: tokenize the card. Already verified cards need no SMS step."""
        result = await self._request("cards.create", {
            "card": {"number": params.card_number, "expire": params.expire_date},
            "save": params.save,
        })
        card = result.get("card") or {}
        token = card.get("token")
        if not token:
            raise PaymeError("Payme did not return a card token.", PaymeErrorCode.EMPTY_RESULT, kind=ErrorKind.PROTOCOL)
        return CardTokenResult(card_token=token, requires_verification=not bool(card.get("verify")))

    async def send_verification_code(self, card_token: str) -> bool:
        """Step 1a: ask Payme to send the SMS code. Returns whether it was sent."""
        self._require_id(card_token, "Card token")
        result = await self._request("cards.get_verify_code", {"token": card_token})
        return bool(result.get("sent"))

    async def verify_card(self, params: VerifyCardTokenParams) -> CardVerification:
        """Step 2: confirm the card with the SMS code."""
        result = await self._request("cards.verify", {"token": params.card_token, "code": params.sms_code})
        card = result.get("card") or {}
        return CardVerification(
            card_token=card.get("token") or params.card_token,
            is_verified=bool(card.get("verify")),
        )

    async def verify_card_token(self, params: VerifyCardTokenParams) -> CardVerification:
        return await self.verify_card(params)

    async def charge_from_card_token(self, params: ProcessPaymentParams) -> ProcessedReceiptResult:
        """Step 3: create a receipt, then pay it with the card token.

        The pay call is never made unless the create call produced a
        receipt id.
        """
        amount = to_minor(params.amount)
        logger.info("payme_charge_request", order_id=params.order_id, amount=amount)
        created = self._parse_receipt(await self._request("receipts.create", {
            "amount": amount,
            "account": {"order_id": params.order_id},
            "description": f"Payment for order {params.order_id}",
        }))
        if not created.id:
            logger.warning("payme_receipt_missing_id", order_id=params.order_id)
            raise PaymeError("Failed to create receipt.", PaymeErrorCode.RECEIPT_NOT_CREATED, kind=ErrorKind.PROTOCOL)

        paid = self._parse_receipt(await self._request("receipts.pay", {
            "id": created.id,
            "token": params.card_token,
        }))
        result = ProcessedReceiptResult(
            transaction_id=paid.id or created.id,
            status=status_from_payme_receipt_state(paid.state),
            receipt=paid,
        )
        logger.info(
            "payme_charge_response",
            order_id=params.order_id,
            receipt_id=result.transaction_id,
            state=paid.state,
            status=result.status.value,
        )
        return result

    def generate_invoice_url(self, params: GenerateInvoiceParams) -> str:
        """Redirect URL to the Payme checkout page. No network call."""
        return build_invoice_url(
            self.checkout_url,
            self._config.merchant_id,
            to_minor(params.amount),
            params.order_id,
            params.return_url,
        )

    async def check_receipt_status(self, receipt_id: str) -> ReceiptStatusResult:
        self._require_id(receipt_id, "Receipt id")
        result = await self._request("receipts.check", {"id": receipt_id})
        state = result.get("state")
        return ReceiptStatusResult(status=status_from_payme_receipt_state(state), state=state if isinstance(state, int) else None)

    async def cancel_receipt(self, receipt_id: str) -> ProcessedReceiptResult:
        """Cancel an unpaid receipt (or queue a refund for a paid one)."""
        self._require_id(receipt_id, "Receipt id")
        receipt = self._parse_receipt(await self._request("receipts.cancel", {"id": receipt_id}))
        return ProcessedReceiptResult(
            transaction_id=receipt.id or receipt_id,
            status=status_from_payme_receipt_state(receipt.state),
            receipt=receipt,
        )

    async def check_payment_status(self, payment_id: str) -> ReceiptStatusResult:
        return await self.check_receipt_status(payment_id)

    async def cancel_payment(self, payment_id: str) -> ProcessedReceiptResult:
        return await self.cancel_receipt(payment_id)
