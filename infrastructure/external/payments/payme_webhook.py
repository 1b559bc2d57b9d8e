"""
Payme merchant API (webhook) dispatcher.

Authenticates the ``Authorization: Basic`` header, routes the JSON-RPC
method to the injected ``PaymeWebhookLogic`` and shapes the reply. It keeps
no state between calls and always returns a well-formed envelope: Payme
expects a synchronous acknowledgement whatever happens internally.
"""
from __future__ import annotations

import base64
import hmac
import json
import time
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ValidationError

from application.dtos.webhooks import (
    PAYME_PARAMS_BY_METHOD,
    PaymeJsonRpcRequest,
    PaymeWebhookMethod,
    RequestId,
)
from application.ports.webhook_logic import PaymeWebhookLogic
from core.logging_config import get_logger
from infrastructure.external.payments.endpoints import PAYME_WEBHOOK_LOGIN
from infrastructure.external.payments.exceptions import ErrorKind, PaymeError
from shared.codes.payment_codes import PaymeErrorCode


logger = get_logger(__name__)

# JSON-RPC method -> PaymeWebhookLogic attribute
LOGIC_METHODS: dict[str, str] = {
    PaymeWebhookMethod.CHECK_PERFORM_TRANSACTION: "check_perform_transaction",
    PaymeWebhookMethod.CREATE_TRANSACTION: "create_transaction",
    PaymeWebhookMethod.PERFORM_TRANSACTION: "perform_transaction",
    PaymeWebhookMethod.CANCEL_TRANSACTION: "cancel_transaction",
    PaymeWebhookMethod.CHECK_TRANSACTION: "check_transaction",
    PaymeWebhookMethod.GET_STATEMENT: "get_statement",
}

RawBody = Union[Mapping[str, Any], bytes, bytearray, str, None]


def _unauthorized(reason: str) -> PaymeError:
    return PaymeError("Unauthorized", PaymeErrorCode.INSUFFICIENT_PRIVILEGE, reason, kind=ErrorKind.AUTHENTICATION)


def _same(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


class PaymeWebhookHandler:
    provider = "payme"

    def __init__(self, secret_key: str, logic: PaymeWebhookLogic):
        if not secret_key or logic is None:
            raise RuntimeError("PaymeWebhookHandler: secret_key and logic implementation are required.")
        self._secret_key = secret_key
        self._logic = logic

    def verify_auth(self, authorization_header: Optional[str]) -> None:
        """Require ``Basic base64("Paycom:<secret>")``; raise ``PaymeError`` (-32504) otherwise."""
        if not authorization_header or not authorization_header.startswith("Basic "):
            raise _unauthorized("Authorization header missing or invalid")
        try:
            credentials = base64.b64decode(authorization_header[6:].strip(), validate=True).decode("utf-8")
        except ValueError as exc:
            raise _unauthorized("Authorization header missing or invalid") from exc

        login, sep, password = credentials.partition(":")
        if not sep or not (_same(login, PAYME_WEBHOOK_LOGIN) and _same(password, self._secret_key)):
            raise _unauthorized("Invalid login or password")

    async def handle(self, body: RawBody, authorization_header: Optional[str] = None) -> dict[str, Any]:
        """Process one merchant API call and return the JSON-RPC response object."""
        payload: Any = body
        unparsable = False
        if isinstance(body, (bytes, bytearray, str)):
            try:
                payload = json.loads(body)
            except ValueError:
                payload, unparsable = None, True
        request_id: Optional[RequestId] = payload.get("id") if isinstance(payload, Mapping) else None

        try:
            self.verify_auth(authorization_header)
            if unparsable:
                raise PaymeError("Parse error", PaymeErrorCode.PARSE_ERROR, kind=ErrorKind.PROTOCOL)
            if not isinstance(payload, Mapping):
                raise PaymeError("Invalid Request", PaymeErrorCode.INVALID_REQUEST, kind=ErrorKind.PROTOCOL)
            response = await self._dispatch(payload)
        except PaymeError as exc:
            if exc.kind is ErrorKind.AUTHENTICATION:
                logger.warning("payme_webhook_unauthorized", request_id=request_id, reason=exc.data)
            else:
                logger.info("payme_webhook_error", request_id=request_id, code=exc.code, error=exc.message)
            return self._envelope(request_id, {"error": exc.to_json_rpc_error()})
        except Exception as exc:
            logger.error("payme_webhook_internal_error", request_id=request_id, error=str(exc), exc_info=True)
            return self._envelope(request_id, {"error": {
                "code": int(PaymeErrorCode.INTERNAL_ERROR),
                "message": {"en": "Internal Server Error"},
                "data": str(exc),
            }})

        return self._envelope(request_id, response)

    async def _dispatch(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        # unknown methods are rejected before the envelope or params are looked at
        method = payload.get("method")
        attr = LOGIC_METHODS.get(method) if isinstance(method, str) else None
        if attr is None:
            raise PaymeError(
                "Method not found",
                PaymeErrorCode.METHOD_NOT_FOUND,
                method if isinstance(method, str) else None,
                kind=ErrorKind.PROTOCOL,
            )

        try:
            request = PaymeJsonRpcRequest.model_validate(payload)
        except ValidationError as exc:
            raise PaymeError("Invalid Request", PaymeErrorCode.INVALID_REQUEST, str(exc), kind=ErrorKind.PROTOCOL) from exc

        try:
            params = PAYME_PARAMS_BY_METHOD[request.method].model_validate(request.params)
        except ValidationError as exc:
            raise PaymeError("Invalid params", PaymeErrorCode.INVALID_REQUEST, str(exc), kind=ErrorKind.PROTOCOL) from exc

        logger.info("payme_webhook_request", rpc_method=request.method, request_id=request.id)
        outcome = await getattr(self._logic, attr)(params, request.id)
        return self._normalize_outcome(outcome, request.method)

    @staticmethod
    def _normalize_outcome(outcome: Any, method: str) -> dict[str, Any]:
        if not isinstance(outcome, Mapping) or (("result" in outcome) == ("error" in outcome)):
            raise PaymeError(
                "Internal Server Error",
                PaymeErrorCode.INTERNAL_ERROR,
                f"{method} must return exactly one of 'result' or 'error'",
            )
        if "error" in outcome:
            error = outcome["error"]
            if isinstance(error, PaymeError):
                error = error.to_json_rpc_error()
            return {"error": error}
        result = outcome["result"]
        if isinstance(result, BaseModel):
            result = result.model_dump(mode="json", by_alias=True)
        return {"result": result}

    @staticmethod
    def _envelope(request_id: Optional[RequestId], response: Mapping[str, Any]) -> dict[str, Any]:
        rid = request_id if request_id is not None else int(time.time() * 1000)
        return {"id": rid, **response}
