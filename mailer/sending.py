import logging
from anymail.message import AnymailMessage
from django.conf import settings
from django.urls import reverse
from fees.services import format_amount
from .models import MessageLog
from .rendering import RECEIPT_SUBJECT, render_email

logger = logging.getLogger(__name__)

def send_receipt_to_payer(payment):
    # idempotency: only one receipt per payment
    if MessageLog.objects.filter(payment=payment).exists():
        return None
    user = payment.payer
    context = {
        "payment": payment,
        "payer_name": payment.payer_name or user.email,
        "amount_display": format_amount(payment.amount, payment.currency),
        "receipt_url": f"{settings.SITE_URL.rstrip('/')}{reverse('payments:receipt_detail', args=[payment.pk])}",
        "subject_vars": {"fee_name": payment.fee_name, "reference": payment.reference},
    }
    subject, text, html = render_email(
        RECEIPT_SUBJECT,
        "emails/payment_receipt.html",
        context,
        text_template_path="emails/payment_receipt.txt",
    )
    msg = AnymailMessage(subject=subject, to=[user.email])
    if text:
        msg.body = text
    msg.attach_alternative(html, "text/html")
    msg.metadata = {"payment_id": payment.pk, "user_id": user.pk, "reference": payment.reference}
    msg.tags = ["payment_receipt"]
    msg.send()
    status = getattr(msg, "anymail_status", None)
    provider_id = getattr(status, "message_id", None)
    log, _ = MessageLog.objects.get_or_create(
        payment=payment, defaults={"email": user.email, "provider_id": provider_id}
    )
    logger.info("Receipt for %s sent to %s", payment.reference, user.email)
    return log
