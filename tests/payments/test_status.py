import math

import pytest

from domain.payment.status import (
    PaymentStatus,
    is_terminal,
    normalize_status,
    status_from_click_code,
    status_from_payme_receipt_state,
)


@pytest.mark.parametrize("code, expected", [
    (0, PaymentStatus.PENDING),
    (1, PaymentStatus.PENDING),
    (2, PaymentStatus.SUCCESS),
    (3, PaymentStatus.CANCELLED),
    (4, PaymentStatus.REFUNDED),
    (5, PaymentStatus.CANCELLED),
])
def test_click_status_mapping(code, expected):
    assert status_from_click_code(code) is expected


@pytest.mark.parametrize("code, expected", [
    (0, PaymentStatus.PENDING),
    (1, PaymentStatus.PENDING),
    (2, PaymentStatus.SUCCESS),
    (3, PaymentStatus.CANCELLED),
    (4, PaymentStatus.CANCELLED),
    (5, PaymentStatus.PENDING),
    (6, PaymentStatus.REFUNDED),
])
def test_payme_receipt_state_mapping(code, expected):
    assert status_from_payme_receipt_state(code) is expected


@pytest.mark.parametrize("code", [None, math.nan, -1, 99, 2.5, True, "2"])
def test_unknown_codes_fail_closed(code):
    assert status_from_click_code(code) is PaymentStatus.FAILED
    assert status_from_payme_receipt_state(code) is PaymentStatus.FAILED


def test_out_of_table_codes_per_provider():
    # 6 is refunded for Payme but means nothing to Click
    assert status_from_click_code(6) is PaymentStatus.FAILED
    assert status_from_payme_receipt_state(7) is PaymentStatus.FAILED


def test_no_argument_means_failed():
    assert status_from_click_code() is PaymentStatus.FAILED
    assert status_from_payme_receipt_state() is PaymentStatus.FAILED


def test_integral_float_is_accepted():
    assert status_from_click_code(2.0) is PaymentStatus.SUCCESS


def test_normalize_status_by_provider_name():
    assert normalize_status("PAYME", 6) is PaymentStatus.REFUNDED
    assert normalize_status("click", 4) is PaymentStatus.REFUNDED
    assert normalize_status("unknown", 2) is PaymentStatus.FAILED


def test_terminal_statuses():
    assert not is_terminal(PaymentStatus.PENDING)
    for status in (PaymentStatus.SUCCESS, PaymentStatus.FAILED, PaymentStatus.CANCELLED, PaymentStatus.REFUNDED):
        assert is_terminal(status)
