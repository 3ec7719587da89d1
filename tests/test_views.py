from datetime import date
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.test import Client

from fees.models import FeeDefinition
from payments.models import FeeStatusEntry, PaymentRecord
from payments.settlement import settle_payment
from tests.factories import paystack_verify_response

pytestmark = pytest.mark.django_db

REFERENCE = "FEE-1700000000-abc123def"


def test_pay_requires_login(bootstrapped):
    resp = Client().get("/payments/")
    assert resp.status_code == 302
    assert "/accounts/login/" in resp["Location"]


def test_pay_forbidden_for_admin(admin_web):
    assert admin_web.get("/payments/").status_code == 403


def test_empty_catalog_shows_blocking_notice(student_client):
    resp = student_client.get("/payments/")
    assert resp.status_code == 200
    assert resp.context["catalog_empty"]
    assert b"Fee Payment Not Available" in resp.content
    assert b"Pay Now" not in resp.content


def test_pay_lists_active_fees_with_amounts(student_client, fee):
    FeeDefinition.objects.create(
        name="Old Levy", amount=Decimal("100"), due_date=date(2025, 1, 1), status="inactive"
    )
    resp = student_client.get("/payments/")
    labels = [o["label"] for o in resp.context["options"]]
    assert labels == ["Term 1 Tuition - ₦50,000.00"]
    assert "Term 1 Tuition - ₦50,000.00".encode() in resp.content


def test_pay_marks_paid_fees(student_client, student, fee):
    settle_payment(student, fee, {"status": "success", "id": "TXN1"}, reference=REFERENCE)
    resp = student_client.get("/payments/")
    assert resp.context["options"][0]["paid"]


def test_initiate_returns_widget_config(student_client, student, fee):
    resp = student_client.post("/payments/initiate/", {"fee_id": fee.pk})
    assert resp.status_code == 200
    config = resp.json()["config"]
    assert config["amount"] == 5000000
    assert config["email"] == student.email
    assert config["ref"].startswith("FEE-")
    assert config["metadata"]["fee_id"] == str(fee.pk)
    assert not PaymentRecord.objects.exists()


def test_initiate_without_fee(student_client):
    resp = student_client.post("/payments/initiate/", {})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Please select a fee to pay"


def test_initiate_without_public_key(settings, student_client, fee):
    settings.PAYSTACK_PUBLIC_KEY = ""
    resp = student_client.post("/payments/initiate/", {"fee_id": fee.pk})
    assert resp.status_code == 503


def test_verify_settles(student_client, paystack_get, student, fee):
    paystack_get.return_value = paystack_verify_response(REFERENCE, id="TXN1")
    resp = student_client.post("/payments/verify/", {"reference": REFERENCE, "fee_id": fee.pk})

    assert resp.status_code == 200
    body = resp.json()
    assert body["ok"]
    assert body["outcome"] == "settled"
    assert body["payment"]["amount"] == "50000.00"
    assert body["payment"]["transaction_id"] == "TXN1"
    assert body["receipts_url"] == "/payments/receipts/"
    assert FeeStatusEntry.objects.get(payer=student, fee=fee).is_paid


def test_verify_failed_payment(student_client, paystack_get, fee):
    paystack_get.return_value = paystack_verify_response(REFERENCE, status="failed")
    resp = student_client.post("/payments/verify/", {"reference": REFERENCE, "fee_id": fee.pk})

    assert resp.status_code == 402
    assert resp.json()["outcome"] == "unverified"
    assert resp.json()["retry"] is False
    assert not PaymentRecord.objects.exists()


def test_verify_malformed(student_client, paystack_get, fee):
    paystack_get.return_value = paystack_verify_response(REFERENCE, amount=1)
    resp = student_client.post("/payments/verify/", {"reference": REFERENCE, "fee_id": fee.pk})
    assert resp.status_code == 422
    assert resp.json()["error"] == "Error processing payment. Please contact support."


def test_verify_duplicate(student_client, paystack_get, student, fee):
    settle_payment(student, fee, {"status": "success", "id": "TXN1"}, reference=REFERENCE)
    other = "FEE-1700000100-zzz999yyy"
    paystack_get.return_value = paystack_verify_response(other)
    resp = student_client.post("/payments/verify/", {"reference": other, "fee_id": fee.pk})
    assert resp.status_code == 409


def test_verify_requires_reference(student_client, fee):
    resp = student_client.post("/payments/verify/", {"fee_id": fee.pk})
    assert resp.status_code == 400


def test_receipts_only_show_own_payments(student_client, student, other_student, fee):
    settle_payment(other_student, fee, {"status": "success", "id": "TXN9"}, reference="FEE-1700000000-other0000")
    resp = student_client.get("/payments/receipts/")
    assert resp.status_code == 200
    assert resp.context["rows"] == []
    assert b"No payment receipts found." in resp.content

    theirs = PaymentRecord.objects.get()
    assert student_client.get(f"/payments/receipts/{theirs.pk}/").status_code == 404


def test_receipt_detail(student_client, student, fee):
    result = settle_payment(student, fee, {"status": "success", "id": "TXN1"}, reference=REFERENCE)
    resp = student_client.get(f"/payments/receipts/{result.payment.pk}/")
    assert resp.status_code == 200
    assert REFERENCE.encode() in resp.content


def test_callback_without_reference(student_client):
    resp = student_client.get("/payments/callback/")
    assert resp.status_code == 302
    assert resp["Location"] == "/payments/"


def test_callback_settles(student_client, paystack_get, student, fee):
    paystack_get.return_value = paystack_verify_response(
        REFERENCE, metadata={"student_id": str(student.pk), "fee_id": str(fee.pk)}
    )
    resp = student_client.get("/payments/callback/", {"trxref": REFERENCE, "reference": REFERENCE})
    assert resp.status_code == 302
    assert resp["Location"] == "/payments/receipts/"
    assert PaymentRecord.objects.filter(reference=REFERENCE).exists()


def test_fee_management_admin_only(student_client):
    assert student_client.get("/fees/").status_code == 403


def test_admin_creates_fee(admin_web):
    resp = admin_web.post(
        "/fees/",
        {
            "name": "Sports Levy",
            "description": "",
            "amount": "2500.00",
            "category": "sports",
            "due_date": "2026-02-01",
            "status": "active",
        },
    )
    assert resp.status_code == 302
    assert FeeDefinition.objects.get(name="Sports Levy").amount == Decimal("2500.00")


def test_admin_rejects_zero_amount(admin_web):
    admin_web.post(
        "/fees/",
        {"name": "Free", "amount": "0", "category": "other", "due_date": "2026-02-01", "status": "active"},
    )
    assert not FeeDefinition.objects.filter(name="Free").exists()


def test_admin_toggles_fee(admin_web, fee):
    admin_web.post(f"/fees/{fee.pk}/toggle/")
    fee.refresh_from_db()
    assert fee.status == FeeDefinition.STATUS_INACTIVE


def test_collection_summary(admin_web, student, other_student, fee):
    settle_payment(student, fee, {"status": "success", "id": "TXN1"}, reference=REFERENCE)
    resp = admin_web.get("/fees/summary/")
    assert resp.status_code == 200
    assert resp.context["student_count"] == 2
    row = resp.context["rows"][0]
    assert row["paid_count"] == 1
    assert row["paid_percent"] == 50.0
    assert row["collected"] == Decimal("50000")
    assert resp.context["total_collected"] == Decimal("50000")


def test_initiate_rejects_paid_fee(student_client, student, fee):
    FeeStatusEntry.objects.create(payer=student, fee=fee, status=FeeStatusEntry.STATUS_PAID)
    resp = student_client.post("/payments/initiate/", {"fee_id": fee.pk})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Fee Term 1 Tuition has already been paid"


def test_checkout_rejects_paid_fee(student_client, student, fee):
    FeeStatusEntry.objects.create(payer=student, fee=fee, status=FeeStatusEntry.STATUS_PAID)
    with patch("payments.initiator.paystack_post") as post:
        resp = student_client.post("/payments/checkout/", {"fee_id": fee.pk})
    assert resp.status_code == 302
    assert resp["Location"] == "/payments/"
    post.assert_not_called()
