"""Pytest bootstrap configuration.

Provider credentials are set before any module reads the payment settings,
so the factory and the app can be built without a real .env file.
"""
import os

os.environ.setdefault("CLICK__MERCHANT_ID", "11111")
os.environ.setdefault("CLICK__MERCHANT_USER_ID", "22222")
os.environ.setdefault("CLICK__SECRET_KEY", "click-secret")
os.environ.setdefault("CLICK__SERVICE_ID", "33333")
os.environ.setdefault("PAYME__MERCHANT_ID", "5e730e8e0b852a417aa49ceb")
os.environ.setdefault("PAYME__CHECKOUT_KEY", "checkout-key")
os.environ.setdefault("PAYME__MERCHANT_API_SECRET", "payme-secret")
os.environ.setdefault("PAYME__TEST_MODE", "true")

import json
from typing import Any, Optional

import httpx
import pytest

from core.settings import ClickSettings, PaymeSettings
from infrastructure.external.api_clients import BaseAPIClient


class FakeProviderAPI:
    """Serves queued provider replies through ``httpx.MockTransport`` and records requests."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._replies: list[Any] = []

    def reply(self, payload: Any = None, *, status_code: int = 200, content: Optional[bytes] = None) -> None:
        if content is not None:
            self._replies.append(httpx.Response(status_code, content=content))
        else:
            self._replies.append(httpx.Response(status_code, json=payload))

    def fail(self, exc_type: type[httpx.TransportError], message: str = "boom") -> None:
        self._replies.append((exc_type, message))

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self._replies.pop(0)
        if isinstance(reply, tuple):
            exc_type, message = reply
            raise exc_type(message, request=request)
        return reply

    def client(self, base_url: str = "https://provider.test/api") -> BaseAPIClient:
        return BaseAPIClient(base_url, timeout=5.0, transport=httpx.MockTransport(self._handle))

    def body(self, index: int = -1) -> Any:
        return json.loads(self.requests[index].content)


@pytest.fixture
def fake_api() -> FakeProviderAPI:
    return FakeProviderAPI()


@pytest.fixture
def click_config() -> ClickSettings:
    return ClickSettings(merchant_id="11111", merchant_user_id="22222", secret_key="click-secret", service_id="33333")


@pytest.fixture
def payme_config() -> PaymeSettings:
    return PaymeSettings(
        merchant_id="5e730e8e0b852a417aa49ceb",
        checkout_key="checkout-key",
        merchant_api_secret="payme-secret",
        test_mode=True,
    )
