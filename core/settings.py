"""
Payment-related settings using pydantic-settings v2 with nested env keys.

This module is isolated so core.config.Settings stays provider agnostic.
Credentials are optional here; the clients validate them at construction.
"""
from __future__ import annotations

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field


class PaymentTimeouts(BaseModel):
    connect: float = 3.0
    read: float = 8.0
    write: float = 8.0
    total: float = 8.0


class ClickSettings(BaseModel):
    merchant_id: Optional[str] = None
    merchant_user_id: Optional[str] = None
    secret_key: Optional[str] = None
    service_id: Optional[str] = None


class PaymeSettings(BaseModel):
    # `m` parameter of checkout invoices
    merchant_id: Optional[str] = None
    # X-Auth key for the Checkout (cards/receipts) API
    checkout_key: Optional[str] = None
    # Password Payme presents to our merchant API (webhooks)
    merchant_api_secret: Optional[str] = None
    test_mode: bool = False


class PaymentSettings(BaseSettings):
    timeouts: PaymentTimeouts = Field(default_factory=PaymentTimeouts)

    click: ClickSettings = Field(default_factory=ClickSettings)
    payme: PaymeSettings = Field(default_factory=PaymeSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
    )


payment_settings = PaymentSettings()
