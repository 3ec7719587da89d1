import logging
from django_rq import job
from redis.exceptions import RedisError
from rq import Retry
from payments.exceptions import MalformedProviderData
from payments.models import PaymentRecord

logger = logging.getLogger(__name__)


def enqueue(task, *args):
    """Queue a job; returns False when the queue cannot be reached."""
    try:
        task.delay(*args)
        return True
    except RedisError as e:
        logger.warning("Could not enqueue %s%r: %s", getattr(task, "__name__", task), args, e)
        return False


@job("default", retry=Retry(max=3, interval=[30, 120, 600]))
def process_charge_success(reference: str):
    from payments.services import confirm_payment_by_reference
    try:
        outcome = confirm_payment_by_reference(reference)
    except MalformedProviderData:
        # already recorded as an operator event; retrying will not help
        return "malformed"
    if outcome.settlement is None and outcome.verification.retryable:
        raise RuntimeError(f"verification of {reference} not conclusive: {outcome.verification.reason}")
    return outcome.status


@job("default", retry=Retry(max=5, interval=[60, 300, 900, 1800, 3600]))
def reconcile_fee_status(payment_id: int):
    from payments.settlement import reconcile_payment
    payment = PaymentRecord.objects.select_related("payer", "fee").filter(pk=payment_id).first()
    if not payment:
        logger.warning("reconcile_fee_status: payment %s not found", payment_id)
        return False
    return reconcile_payment(payment)


@job("default")
def sweep_unreconciled():
    from payments.settlement import reconcile_payment, unreconciled_payments
    fixed = 0
    for payment in unreconciled_payments():
        if reconcile_payment(payment):
            fixed += 1
    if fixed:
        logger.info("Reconciliation sweep fixed %s fee status entries", fixed)
    return fixed


@job("mail")
def send_payment_receipt(payment_id: int):
    from mailer.sending import send_receipt_to_payer
    payment = PaymentRecord.objects.select_related("payer").filter(pk=payment_id).first()
    if not payment:
        return
    send_receipt_to_payer(payment)
