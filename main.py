"""
FastAPI application entry point.

The merchant business logic for both providers is injected by the
deployment, so the app is built through ``create_app`` rather than at import.
"""
from typing import Optional

from fastapi import FastAPI

from api.routes.payments import build_payments_router
from application.ports.webhook_logic import ClickWebhookLogic, PaymeWebhookLogic
from core.config import settings
from core.logging_config import configure_logging, get_logger
from core.settings import payment_settings
from infrastructure.external.payments.click_webhook import ClickWebhookHandler
from infrastructure.external.payments.payme_webhook import PaymeWebhookHandler


logger = get_logger(__name__)


def create_app(
    *,
    payme_logic: Optional[PaymeWebhookLogic] = None,
    click_logic: Optional[ClickWebhookLogic] = None,
    payme_secret: Optional[str] = None,
    click_secret: Optional[str] = None,
) -> FastAPI:
    """Build the webhook app. Providers without logic get no routes."""
    configure_logging()
    app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION, debug=settings.DEBUG)

    payme_handler = None
    if payme_logic is not None:
        payme_handler = PaymeWebhookHandler(payme_secret or payment_settings.payme.merchant_api_secret or "", payme_logic)

    click_handler = None
    if click_logic is not None:
        click_handler = ClickWebhookHandler(click_secret or payment_settings.click.secret_key or "")

    app.include_router(
        build_payments_router(payme_handler=payme_handler, click_handler=click_handler, click_logic=click_logic),
        prefix="/api/v1",
    )

    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok", "environment": settings.ENVIRONMENT}

    logger.info(
        "app_created",
        payme_enabled=payme_handler is not None,
        click_enabled=click_handler is not None,
    )
    return app
