import pytest
import requests

from payments.models import PaymentEvent, PaymentRecord
from payments.paystack import PaystackConfigError
from payments.verification import (
    BAD_RESPONSE,
    NETWORK_ERROR,
    NOT_CONFIGURED,
    NOT_FOUND,
    NOT_SUCCESSFUL,
    REFERENCE_MISMATCH,
    TIMEOUT,
    VERIFIED,
    verify_payment,
)
from tests.factories import http_error, paystack_verify_response

pytestmark = pytest.mark.django_db

REFERENCE = "FEE-1700000000-abc123def"


def test_successful_transaction_is_verified(paystack_get):
    paystack_get.return_value = paystack_verify_response(REFERENCE, amount=5000000)
    result = verify_payment(REFERENCE)

    assert result.verified
    assert result.reason == VERIFIED
    assert result.transaction["amount"] == 5000000
    paystack_get.assert_called_once_with(f"transaction/verify/{REFERENCE}")
    assert not PaymentEvent.objects.exists()


def test_verification_never_writes_records(paystack_get):
    paystack_get.return_value = paystack_verify_response(REFERENCE)
    verify_payment(REFERENCE)
    verify_payment(REFERENCE)
    assert not PaymentRecord.objects.exists()


@pytest.mark.parametrize("status", ["failed", "abandoned", "reversed", "pending", "ongoing", ""])
def test_non_success_status_is_not_verified(paystack_get, status):
    paystack_get.return_value = paystack_verify_response(REFERENCE, status=status)
    result = verify_payment(REFERENCE)

    assert not result.verified
    assert result.reason == NOT_SUCCESSFUL
    assert result.provider_status == status
    assert not result.retryable
    event = PaymentEvent.objects.get(kind=PaymentEvent.KIND_VERIFICATION_FAILED)
    assert event.reference == REFERENCE
    assert event.payload["reason"] == NOT_SUCCESSFUL


@pytest.mark.parametrize(
    "error, reason, retryable",
    [
        (requests.Timeout("read timed out"), TIMEOUT, True),
        (requests.ConnectionError("connection refused"), NETWORK_ERROR, True),
        (http_error(404), NOT_FOUND, False),
        (http_error(400), NOT_FOUND, False),
        (http_error(502), NETWORK_ERROR, True),
        (ValueError("Expecting value"), BAD_RESPONSE, False),
        (PaystackConfigError("PAYSTACK_SECRET_KEY is not configured"), NOT_CONFIGURED, True),
    ],
)
def test_provider_failures_are_negative_results(paystack_get, error, reason, retryable):
    paystack_get.side_effect = error
    result = verify_payment(REFERENCE)

    assert not result.verified
    assert result.reason == reason
    assert result.retryable is retryable


def test_provider_says_not_found(paystack_get):
    paystack_get.return_value = {"status": False, "message": "Transaction reference not found"}
    result = verify_payment(REFERENCE)
    assert result.reason == NOT_FOUND


def test_missing_data_is_bad_response(paystack_get):
    paystack_get.return_value = {"status": True, "message": "ok", "data": None}
    assert verify_payment(REFERENCE).reason == BAD_RESPONSE


def test_reference_mismatch(paystack_get):
    paystack_get.return_value = paystack_verify_response("FEE-1700000000-someoneelse")
    result = verify_payment(REFERENCE)
    assert not result.verified
    assert result.reason == REFERENCE_MISMATCH


def test_empty_reference_skips_provider(paystack_get):
    result = verify_payment("  ")
    assert result.reason == NOT_FOUND
    paystack_get.assert_not_called()


def test_reference_is_escaped_in_path(paystack_get):
    paystack_get.return_value = paystack_verify_response()
    verify_payment("FEE/../secret")
    paystack_get.assert_called_once_with("transaction/verify/FEE%2F..%2Fsecret")


def test_same_answer_on_repeat(paystack_get):
    paystack_get.return_value = paystack_verify_response(REFERENCE)
    first = verify_payment(REFERENCE)
    second = verify_payment(REFERENCE)
    assert first == second
