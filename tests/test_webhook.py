import json

import pytest
from django.test import Client

from jobs.tasks import process_charge_success
from payments.models import PaymentEvent
from payments.paystack import compute_signature

pytestmark = pytest.mark.django_db

URL = "/paystack-webhook/"
REFERENCE = "FEE-1700000000-abc123def"


def _post(client, payload, signature=None, raw=None):
    body = raw if raw is not None else json.dumps(payload).encode()
    if signature is None:
        signature = compute_signature(body, "sk_test_secret")
    return client.post(
        URL,
        data=body,
        content_type="application/json",
        HTTP_X_PAYSTACK_SIGNATURE=signature,
    )


def charge_success(reference=REFERENCE):
    return {"event": "charge.success", "data": {"reference": reference, "status": "success"}}


def test_valid_charge_success_is_queued(queued):
    # no bootstrap needed: the provider must always reach this endpoint
    resp = _post(Client(), charge_success())

    assert resp.status_code == 200
    assert resp.json() == {"status": "success"}
    queued.assert_called_once_with(process_charge_success, REFERENCE)
    assert PaymentEvent.objects.filter(
        kind=PaymentEvent.KIND_WEBHOOK_RECEIVED, reference=REFERENCE
    ).exists()


def test_bad_signature_rejected(queued):
    resp = _post(Client(), charge_success(), signature="0" * 128)

    assert resp.status_code == 401
    queued.assert_not_called()
    assert PaymentEvent.objects.filter(kind=PaymentEvent.KIND_WEBHOOK_REJECTED).exists()


def test_missing_signature_rejected(queued):
    resp = Client().post(URL, data=json.dumps(charge_success()), content_type="application/json")
    assert resp.status_code == 401
    queued.assert_not_called()


def test_body_changed_after_signing(queued):
    signed = json.dumps(charge_success()).encode()
    tampered = json.dumps(charge_success("FEE-1700000000-attacker")).encode()
    resp = _post(Client(), None, signature=compute_signature(signed, "sk_test_secret"), raw=tampered)
    assert resp.status_code == 401


def test_invalid_json(queued):
    resp = _post(Client(), None, raw=b"{not json")
    assert resp.status_code == 400
    queued.assert_not_called()


def test_event_without_data(queued):
    resp = _post(Client(), {"event": "charge.success"})
    assert resp.status_code == 400


def test_other_events_acknowledged(queued):
    resp = _post(Client(), {"event": "transfer.success", "data": {"reference": "TRF_1"}})
    assert resp.status_code == 200
    queued.assert_not_called()


def test_queue_down_asks_for_redelivery(queued):
    queued.return_value = False
    resp = _post(Client(), charge_success())
    assert resp.status_code == 503


def test_get_not_allowed():
    assert Client().get(URL).status_code == 405
