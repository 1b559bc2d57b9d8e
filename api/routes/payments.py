"""
Payments webhook routes.

Keep this thin: authentication, dispatch and response shapes live in the
webhook components; business decisions live in the injected logic.
"""
from __future__ import annotations

import json
from typing import Any, Optional
from urllib.parse import parse_qsl

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from application.dtos.webhooks import ClickWebhookAction, ClickWebhookBody
from application.ports.webhook_logic import ClickWebhookLogic
from core.logging_config import bind_webhook_context, get_logger
from infrastructure.external.payments.click_webhook import ClickWebhookHandler
from infrastructure.external.payments.exceptions import ClickError
from infrastructure.external.payments.payme_webhook import PaymeWebhookHandler
from shared.codes.payment_codes import ClickErrorCode


logger = get_logger(__name__)


async def _read_click_form(request: Request) -> dict[str, Any]:
    raw_body = await request.body()
    ct = (request.headers.get("content-type") or "").lower()
    if "application/json" in ct:
        data = json.loads(raw_body or b"{}")
        if not isinstance(data, dict):
            raise ValueError("Click webhook body must be an object")
        return data
    # Click posts application/x-www-form-urlencoded
    return dict(parse_qsl(raw_body.decode("utf-8"), keep_blank_values=True))


def build_payments_router(
    *,
    payme_handler: Optional[PaymeWebhookHandler] = None,
    click_handler: Optional[ClickWebhookHandler] = None,
    click_logic: Optional[ClickWebhookLogic] = None,
) -> APIRouter:
    router = APIRouter(prefix="/payments", tags=["Payments"])

    if payme_handler is not None:
        @router.post("/webhooks/payme")
        async def payme_webhook(request: Request):
            bind_webhook_context("payme")
            raw_body = await request.body()
            response = await payme_handler.handle(raw_body, request.headers.get("authorization"))
            # JSON-RPC errors travel in the body; the HTTP status is always 200
            return JSONResponse(content=response)

    if click_handler is not None and click_logic is not None:
        async def _click_webhook(request: Request, action: ClickWebhookAction) -> JSONResponse:
            bind_webhook_context("click", action=action.name.lower())
            try:
                body = ClickWebhookBody.model_validate(await _read_click_form(request))
            except ValueError as exc:
                logger.info("click_webhook_bad_request", error=str(exc))
                ack = click_handler.create_error_response(ClickErrorCode.ERROR_IN_REQUEST, "Error in request from click")
                return JSONResponse(content=ack.to_payload())

            bind_webhook_context(
                "click",
                action=action.name.lower(),
                click_trans_id=body.click_trans_id,
                merchant_trans_id=body.merchant_trans_id,
            )
            if body.action != action:
                ack = click_handler.create_error_response(ClickErrorCode.ACTION_NOT_FOUND, "Action not found")
                return JSONResponse(content=ack.to_payload())

            try:
                click_handler.verify_signature(body)
                handler = click_logic.prepare if action == ClickWebhookAction.PREPARE else click_logic.complete
                ack = await handler(body)
            except ClickError as exc:
                ack = click_handler.create_error_response(int(exc.code), exc.message)
            return JSONResponse(content=ack.to_payload())

        @router.post("/webhooks/click/prepare")
        async def click_prepare(request: Request):
            return await _click_webhook(request, ClickWebhookAction.PREPARE)

        @router.post("/webhooks/click/complete")
        async def click_complete(request: Request):
            return await _click_webhook(request, ClickWebhookAction.COMPLETE)

    return router
