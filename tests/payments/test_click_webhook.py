import hashlib

import pytest

from application.dtos.webhooks import ClickWebhookAction, ClickWebhookBody
from infrastructure.external.payments.click_webhook import ClickWebhookHandler, build_sign_string
from infrastructure.external.payments.exceptions import ClickError, ErrorKind


SECRET = "click-secret"
SIGN_TIME = "2024-01-01 10:00:00"


def _md5(text: str) -> str:
    return hashlib.md5(text.encode("utf-8")).hexdigest()


def _prepare_body(**overrides):
    body = {
        "click_trans_id": "2854721",
        "service_id": "33333",
        "click_paydoc_id": "3188821",
        "merchant_trans_id": "order-1",
        "amount": "1000",
        "action": "0",
        "error": "0",
        "error_note": "Success",
        "sign_time": SIGN_TIME,
        "sign_string": _md5(f"2854721|33333|{SECRET}|order-1|1000|0|{SIGN_TIME}"),
    }
    body.update(overrides)
    return body


def _complete_body(**overrides):
    body = _prepare_body(
        action="1",
        merchant_prepare_id="77",
        sign_string=_md5(f"2854721|33333|{SECRET}|order-1|77|1000|1|{SIGN_TIME}"),
    )
    body.update(overrides)
    return body


@pytest.fixture
def handler():
    return ClickWebhookHandler(SECRET)


def test_secret_is_required():
    with pytest.raises(RuntimeError):
        ClickWebhookHandler("")


def test_prepare_signature(handler):
    assert handler.is_valid_signature(_prepare_body())
    handler.verify_signature(_prepare_body())


def test_complete_signature_includes_prepare_id(handler):
    body = ClickWebhookBody.model_validate(_complete_body())
    assert body.action is ClickWebhookAction.COMPLETE
    assert handler.is_valid_signature(body)


def test_prepare_id_ignored_for_prepare_action(handler):
    # signed without the prepare id even though the field is present
    assert handler.is_valid_signature(_prepare_body(merchant_prepare_id="77"))


def test_complete_without_prepare_id(handler):
    body = _complete_body(
        merchant_prepare_id=None,
        sign_string=_md5(f"2854721|33333|{SECRET}|order-1|1000|1|{SIGN_TIME}"),
    )
    assert handler.is_valid_signature(body)


def test_numeric_fields_are_signed_as_sent(handler):
    body = _prepare_body(click_trans_id=2854721, service_id=33333)
    assert handler.is_valid_signature(body)


@pytest.mark.parametrize("field, value", [
    ("amount", "1"),
    ("merchant_trans_id", "order-2"),
    ("sign_time", "2024-01-01 10:00:01"),
    ("sign_string", "0" * 32),
    ("sign_string", "подпись"),
])
def test_tampered_body_is_rejected(handler, field, value):
    body = _prepare_body(**{field: value})
    assert not handler.is_valid_signature(body)

    with pytest.raises(ClickError) as exc_info:
        handler.verify_signature(body)
    assert exc_info.value.code == -1
    assert exc_info.value.kind is ErrorKind.AUTHENTICATION


@pytest.mark.parametrize("check", ["is_valid_signature", "verify_signature"])
def test_incomplete_mapping_is_a_click_error(handler, check):
    body = _prepare_body()
    del body["sign_string"]

    with pytest.raises(ClickError) as exc_info:
        getattr(handler, check)(body)
    assert exc_info.value.code == -8
    assert exc_info.value.kind is ErrorKind.PROTOCOL


def test_other_secret_does_not_verify():
    assert not ClickWebhookHandler("other-secret").is_valid_signature(_prepare_body())


def test_build_sign_string_matches_formula():
    body = ClickWebhookBody.model_validate(_complete_body())
    assert build_sign_string(body, SECRET) == _md5(f"2854721|33333|{SECRET}|order-1|77|1000|1|{SIGN_TIME}")


def test_success_responses(handler):
    prepare = handler.create_success_response(_prepare_body(), merchant_prepare_id=501)
    assert prepare.to_payload() == {
        "click_trans_id": "2854721",
        "merchant_trans_id": "order-1",
        "merchant_prepare_id": 501,
        "error": 0,
        "error_note": "Success",
    }

    complete = handler.create_success_response(_complete_body(), merchant_confirm_id=901)
    assert complete.to_payload()["merchant_confirm_id"] == 901
    assert "merchant_prepare_id" not in complete.to_payload()


def test_error_response(handler):
    assert handler.create_error_response(-5, "User does not exist").to_payload() == {
        "click_trans_id": "",
        "merchant_trans_id": "",
        "error": -5,
        "error_note": "User does not exist",
    }
