import logging
from dataclasses import dataclass
from django.contrib.auth import get_user_model
from rest_framework import serializers
from fees.models import FeeDefinition
from jobs.tasks import enqueue, send_payment_receipt
from .events import log_payment_event
from .exceptions import MalformedProviderData
from .models import PaymentEvent
from .serializers import MetadataField
from .settlement import SETTLED, SettlementResult, settle_payment
from .verification import VerificationResult, verify_payment

logger = logging.getLogger(__name__)

UNVERIFIED = "unverified"
UNVERIFIED_MESSAGE = "We could not confirm your payment. Please contact support."
RETRY_MESSAGE = (
    "We could not confirm your payment yet. Please try verifying again in a moment."
)


@dataclass
class PaymentOutcome:
    reference: str
    verification: VerificationResult
    settlement: SettlementResult = None

    @property
    def status(self):
        if self.settlement is None:
            return UNVERIFIED
        return self.settlement.outcome

    @property
    def ok(self):
        return self.settlement is not None and self.settlement.settled

    @property
    def payment(self):
        return self.settlement.payment if self.settlement else None

    @property
    def message(self):
        if self.settlement is not None:
            return self.settlement.message
        if self.verification.retryable:
            return RETRY_MESSAGE
        return UNVERIFIED_MESSAGE


def payment_context(transaction):
    """(student_id, fee_id) as strings from a verified transaction's metadata."""
    try:
        metadata = MetadataField().to_internal_value(transaction.get("metadata"))
    except serializers.ValidationError:
        metadata = {}
    student_id = metadata.get("student_id")
    fee_id = metadata.get("fee_id")
    return (
        str(student_id) if student_id not in (None, "") else None,
        str(fee_id) if fee_id not in (None, "") else None,
    )


def _malformed(reference, detail, payer=None, fee=None):
    log_payment_event(
        PaymentEvent.KIND_MALFORMED_DATA,
        reference=reference,
        payer=payer,
        fee=fee,
        detail=detail,
        level=logging.ERROR,
    )
    return MalformedProviderData(detail)


def _after_settlement(outcome):
    if outcome.settlement.outcome == SETTLED:
        enqueue(send_payment_receipt, outcome.payment.pk)
    return outcome


def confirm_payment(payer, fee, reference) -> PaymentOutcome:
    """
    Verify a reference reported by the payer's browser and settle it.

    The provider is always asked first; settlement is never reached for an
    unverified reference.
    """
    verification = verify_payment(reference)
    if not verification.verified:
        return PaymentOutcome(reference=verification.reference, verification=verification)
    student_id, fee_id = payment_context(verification.transaction)
    if student_id is not None and student_id != str(payer.pk):
        raise _malformed(
            verification.reference,
            f"transaction belongs to student {student_id}",
            payer=payer,
            fee=fee,
        )
    if fee_id is not None and fee_id != str(fee.pk):
        raise _malformed(
            verification.reference,
            f"transaction was for fee {fee_id}",
            payer=payer,
            fee=fee,
        )
    settlement = settle_payment(
        payer, fee, verification.transaction, reference=verification.reference
    )
    return _after_settlement(
        PaymentOutcome(
            reference=verification.reference,
            verification=verification,
            settlement=settlement,
        )
    )


def confirm_payment_by_reference(reference, expected_payer=None) -> PaymentOutcome:
    """
    Verify and settle a reference when only the reference is known (webhook,
    hosted-checkout return). Payer and fee come from the verified metadata.
    """
    verification = verify_payment(reference)
    if not verification.verified:
        return PaymentOutcome(reference=verification.reference, verification=verification)
    student_id, fee_id = payment_context(verification.transaction)
    if student_id is None or fee_id is None:
        raise _malformed(verification.reference, "transaction metadata lacks student_id/fee_id")
    User = get_user_model()
    payer = User.objects.filter(pk=student_id).first() if student_id.isdigit() else None
    fee = FeeDefinition.objects.filter(pk=fee_id).first() if fee_id.isdigit() else None
    if payer is None or fee is None:
        raise _malformed(
            verification.reference,
            f"unknown student {student_id} or fee {fee_id}",
            payer=payer,
            fee=fee,
        )
    if expected_payer is not None and expected_payer.pk != payer.pk:
        raise _malformed(
            verification.reference,
            f"transaction belongs to student {student_id}",
            payer=expected_payer,
            fee=fee,
        )
    settlement = settle_payment(
        payer, fee, verification.transaction, reference=verification.reference
    )
    return _after_settlement(
        PaymentOutcome(
            reference=verification.reference,
            verification=verification,
            settlement=settlement,
        )
    )
