"""
Read-only provider endpoints per environment profile.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class PaymentEnvironment(str, Enum):
    PRODUCTION = "production"
    SANDBOX = "sandbox"

    @classmethod
    def from_test_mode(cls, test_mode: bool) -> "PaymentEnvironment":
        return cls.SANDBOX if test_mode else cls.PRODUCTION


@dataclass(frozen=True)
class ProviderEndpoints:
    api_url: str
    checkout_url: str


# Click exposes a single environment; test merchants use the same hosts.
CLICK_ENDPOINTS = ProviderEndpoints(
    api_url="https://api.click.uz/v2/merchant",
    checkout_url="https://my.click.uz/services/pay",
)

PAYME_ENDPOINTS: dict[PaymentEnvironment, ProviderEndpoints] = {
    PaymentEnvironment.PRODUCTION: ProviderEndpoints(
        api_url="https://checkout.paycom.uz/api",
        checkout_url="https://checkout.paycom.uz/",
    ),
    PaymentEnvironment.SANDBOX: ProviderEndpoints(
        api_url="https://checkout.test.paycom.uz/api",
        checkout_url="https://test.paycom.uz/",
    ),
}

# Login Payme presents in the Basic auth header of merchant API calls
PAYME_WEBHOOK_LOGIN = "Paycom"
