import pytest
from django.core import mail

from jobs.tasks import send_payment_receipt
from mailer.models import MessageLog
from mailer.sending import send_receipt_to_payer
from payments.settlement import settle_payment

pytestmark = pytest.mark.django_db

REFERENCE = "FEE-1700000000-abc123def"


@pytest.fixture
def payment(student, fee):
    return settle_payment(
        student, fee, {"status": "success", "id": "TXN1"}, reference=REFERENCE
    ).payment


def test_receipt_sent_once(payment):
    log = send_receipt_to_payer(payment)

    assert len(mail.outbox) == 1
    msg = mail.outbox[0]
    assert msg.to == ["ada.obi@example.com"]
    assert msg.subject == f"Payment receipt: Term 1 Tuition ({REFERENCE})"
    assert "₦50,000.00" in msg.body
    assert msg.alternatives[0][1] == "text/html"
    assert log.email == "ada.obi@example.com"

    assert send_receipt_to_payer(payment) is None
    assert len(mail.outbox) == 1
    assert MessageLog.objects.count() == 1


def test_receipt_job(payment):
    send_payment_receipt(payment.pk)
    assert len(mail.outbox) == 1
    assert f"/payments/receipts/{payment.pk}/" in mail.outbox[0].body
