"""
Factory for card payment gateway clients.

The caller decides which provider to use; this only builds a configured
client for the given name.
"""
from __future__ import annotations

from application.ports.payment_gateway import CardPaymentGateway


def get_payment_gateway(provider: str) -> CardPaymentGateway:
    name = provider.lower()
    if name == "click":
        from .click_client import ClickClient
        return ClickClient()
    if name in {"payme", "paycom"}:
        from .payme_client import PaymeClient
        return PaymeClient()
    raise ValueError(f"Unsupported payment provider: {name}")
