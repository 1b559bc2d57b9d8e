"""
Shared transport wiring for the payment clients: timeouts, amount helpers
and logging. Provider protocol logic stays in each client.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Optional

import httpx

from core.settings import PaymentTimeouts, payment_settings
from infrastructure.external.api_clients import BaseAPIClient


def build_timeout(cfg: Optional[PaymentTimeouts] = None) -> httpx.Timeout:
    cfg = cfg or payment_settings.timeouts
    return httpx.Timeout(
        connect=cfg.connect,
        read=cfg.read,
        write=cfg.write,
        timeout=cfg.total,
    )


def build_http_client(base_url: str, *, transport: Optional[httpx.AsyncBaseTransport] = None) -> BaseAPIClient:
    return BaseAPIClient(base_url, timeout=build_timeout(), transport=transport)


def to_minor(amount: Decimal) -> int:
    # UZS -> tiyin
    return int((amount * Decimal(100)).to_integral_value())


def to_wire_amount(amount: Decimal) -> int | float:
    """JSON number for an amount in major units (integral amounts stay ints)."""
    if amount == amount.to_integral_value():
        return int(amount)
    return float(amount)


def format_amount(amount: Decimal) -> str:
    return format(amount.normalize(), "f")
