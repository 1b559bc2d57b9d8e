"""
Structlog setup for the payment integration.

Human readable console output when DEBUG is on, JSON lines otherwise.
Records from stdlib loggers (uvicorn, httpx) are rendered by the same chain,
and card data or credentials passed as key-values are masked first.
"""
import json
import logging
from typing import Any, List, MutableMapping

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars, merge_contextvars
from structlog.dev import ConsoleRenderer
from structlog.processors import JSONRenderer, TimeStamper, add_log_level
from structlog.stdlib import ProcessorFormatter

from core.config import settings


MASK = "***"

# key-value names that never reach the output as-is
SENSITIVE_KEYS = frozenset({
    "card_number",
    "card_token",
    "token",
    "sms_code",
    "secret",
    "secret_key",
    "checkout_key",
    "merchant_api_secret",
    "password",
    "authorization",
    "auth",
    "x_auth",
})


def mask_sensitive(_: Any, __: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    for key in SENSITIVE_KEYS.intersection(event_dict):
        event_dict[key] = MASK
    return event_dict


def _renderer() -> Any:
    if settings.DEBUG:
        return ConsoleRenderer(colors=True)

    def _dumps(obj, default=None, **kwargs):
        return json.dumps(obj, ensure_ascii=False, default=default, **kwargs)
    return JSONRenderer(serializer=_dumps)


def configure_logging() -> None:
    """(Re)configure structlog and the root stdlib logger. Safe to call repeatedly."""
    pre_chain: List[Any] = [
        merge_contextvars,
        add_log_level,
        TimeStamper(fmt="iso", utc=True),
        mask_sensitive,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[*pre_chain, ProcessorFormatter.wrap_for_formatter],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(ProcessorFormatter(
        foreign_pre_chain=pre_chain,
        processors=[ProcessorFormatter.remove_processors_meta, _renderer()],
    ))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if settings.DEBUG else settings.LOG_LEVEL.upper())

    # httpx logs every request line at INFO; the clients log their own events
    logging.getLogger("httpx").setLevel(logging.WARNING)


def bind_webhook_context(provider: str, **values: Any) -> None:
    """Start a fresh per-request log context for an inbound provider call."""
    clear_contextvars()
    bind_contextvars(provider=provider, **values)


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


configure_logging()
