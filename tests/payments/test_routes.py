import base64
import hashlib

import pytest
from fastapi.testclient import TestClient

from application.dtos.webhooks import ClickWebhookResponse
from infrastructure.external.payments.exceptions import ClickError
from main import create_app


PAYME_SECRET = "route-payme-secret"
CLICK_SECRET = "route-click-secret"
SIGN_TIME = "2024-01-01 10:00:00"


def _basic(credentials: str) -> str:
    return "Basic " + base64.b64encode(credentials.encode("utf-8")).decode("ascii")


def _click_form(action: int, secret: str = CLICK_SECRET, **overrides) -> dict:
    prepare_id = "77|" if action == 1 else ""
    sign = hashlib.md5(f"2854721|33333|{secret}|order-1|{prepare_id}1000|{action}|{SIGN_TIME}".encode()).hexdigest()
    form = {
        "click_trans_id": "2854721",
        "service_id": "33333",
        "click_paydoc_id": "3188821",
        "merchant_trans_id": "order-1",
        "amount": "1000",
        "action": str(action),
        "error": "0",
        "error_note": "Success",
        "sign_time": SIGN_TIME,
        "sign_string": sign,
    }
    if action == 1:
        form["merchant_prepare_id"] = "77"
    form.update(overrides)
    return form


class PaymeLogic:
    def __init__(self):
        self.calls = []

    async def _ok(self, name, params, request_id):
        self.calls.append(name)
        return {"result": {"handled": name}}

    async def check_perform_transaction(self, params, request_id=None):
        return await self._ok("check_perform_transaction", params, request_id)

    async def create_transaction(self, params, request_id=None):
        return await self._ok("create_transaction", params, request_id)

    async def perform_transaction(self, params, request_id=None):
        return await self._ok("perform_transaction", params, request_id)

    async def cancel_transaction(self, params, request_id=None):
        return await self._ok("cancel_transaction", params, request_id)

    async def check_transaction(self, params, request_id=None):
        return await self._ok("check_transaction", params, request_id)

    async def get_statement(self, params, request_id=None):
        return await self._ok("get_statement", params, request_id)


class ClickLogic:
    def __init__(self, fail_with=None):
        self.bodies = []
        self._fail_with = fail_with

    async def prepare(self, body):
        self.bodies.append(body)
        if self._fail_with:
            raise self._fail_with
        return ClickWebhookResponse(
            click_trans_id=body.click_trans_id,
            merchant_trans_id=body.merchant_trans_id,
            merchant_prepare_id=501,
            error=0,
            error_note="Success",
        )

    async def complete(self, body):
        self.bodies.append(body)
        return ClickWebhookResponse(
            click_trans_id=body.click_trans_id,
            merchant_trans_id=body.merchant_trans_id,
            merchant_confirm_id=901,
            error=0,
            error_note="Success",
        )


@pytest.fixture
def payme_logic():
    return PaymeLogic()


@pytest.fixture
def click_logic():
    return ClickLogic()


@pytest.fixture
def client(payme_logic, click_logic):
    app = create_app(
        payme_logic=payme_logic,
        click_logic=click_logic,
        payme_secret=PAYME_SECRET,
        click_secret=CLICK_SECRET,
    )
    return TestClient(app)


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_payme_webhook(client, payme_logic):
    resp = client.post(
        "/api/v1/payments/webhooks/payme",
        json={"id": 3, "method": "CheckTransaction", "params": {"id": "5305e3bab097f420a62ced0b"}},
        headers={"Authorization": _basic(f"Paycom:{PAYME_SECRET}")},
    )
    assert resp.status_code == 200
    assert resp.json() == {"id": 3, "result": {"handled": "check_transaction"}}
    assert payme_logic.calls == ["check_transaction"]


def test_payme_webhook_errors_are_http_200(client, payme_logic):
    resp = client.post(
        "/api/v1/payments/webhooks/payme",
        json={"id": 4, "method": "CheckTransaction", "params": {"id": "x"}},
        headers={"Authorization": _basic("Paycom:wrong")},
    )
    assert resp.status_code == 200
    assert resp.json()["error"]["code"] == -32504
    assert payme_logic.calls == []

    resp = client.post(
        "/api/v1/payments/webhooks/payme",
        content=b"garbage",
        headers={"Authorization": _basic(f"Paycom:{PAYME_SECRET}"), "Content-Type": "application/json"},
    )
    assert resp.status_code == 200
    assert resp.json()["error"]["code"] == -32700


def test_click_prepare_form(client, click_logic):
    resp = client.post("/api/v1/payments/webhooks/click/prepare", data=_click_form(0))

    assert resp.status_code == 200
    assert resp.json() == {
        "click_trans_id": "2854721",
        "merchant_trans_id": "order-1",
        "merchant_prepare_id": 501,
        "error": 0,
        "error_note": "Success",
    }
    assert click_logic.bodies[0].amount == "1000"


def test_click_complete_json(client, click_logic):
    resp = client.post("/api/v1/payments/webhooks/click/complete", json=_click_form(1))

    assert resp.json()["merchant_confirm_id"] == 901
    assert click_logic.bodies[0].merchant_prepare_id == "77"


def test_click_bad_signature(client, click_logic):
    resp = client.post("/api/v1/payments/webhooks/click/prepare", data=_click_form(0, secret="other"))

    assert resp.json()["error"] == -1
    assert click_logic.bodies == []


def test_click_malformed_body(client, click_logic):
    form = _click_form(0)
    del form["sign_string"]
    resp = client.post("/api/v1/payments/webhooks/click/prepare", data=form)

    assert resp.json()["error"] == -8
    assert click_logic.bodies == []


def test_click_action_must_match_route(client, click_logic):
    resp = client.post("/api/v1/payments/webhooks/click/prepare", data=_click_form(1))

    assert resp.json()["error"] == -3
    assert click_logic.bodies == []


def test_click_logic_error_becomes_acknowledgement():
    logic = ClickLogic(fail_with=ClickError("Already paid", -4))
    app = create_app(click_logic=logic, click_secret=CLICK_SECRET)
    resp = TestClient(app).post("/api/v1/payments/webhooks/click/prepare", data=_click_form(0))

    assert resp.json() == {"click_trans_id": "", "merchant_trans_id": "", "error": -4, "error_note": "Already paid"}


def test_providers_without_logic_have_no_routes():
    app = create_app(click_logic=ClickLogic(), click_secret=CLICK_SECRET)
    resp = TestClient(app).post("/api/v1/payments/webhooks/payme", json={})
    assert resp.status_code == 404


def test_secrets_default_to_settings(payme_logic):
    # conftest sets PAYME__MERCHANT_API_SECRET=payme-secret
    app = create_app(payme_logic=payme_logic)
    resp = TestClient(app).post(
        "/api/v1/payments/webhooks/payme",
        json={"id": 1, "method": "CheckTransaction", "params": {"id": "x"}},
        headers={"Authorization": _basic("Paycom:payme-secret")},
    )
    assert "result" in resp.json()
