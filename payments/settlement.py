import logging
from dataclasses import dataclass
from django.conf import settings
from django.db import DatabaseError, IntegrityError, InterfaceError, OperationalError, transaction
from django.db.models import Exists, OuterRef
from django.utils import timezone
from jobs.tasks import enqueue, reconcile_fee_status
from .events import log_payment_event
from .exceptions import MalformedProviderData, StoreUnavailable
from .initiator import to_minor_units
from .models import FeeStatusEntry, PaymentEvent, PaymentRecord
from .serializers import ProviderTransactionSerializer

logger = logging.getLogger(__name__)

SETTLED = "settled"
ALREADY_SETTLED = "already_settled"
DUPLICATE = "duplicate"
STATUS_PENDING = "status_pending"

MESSAGES = {
    SETTLED: "Payment successful! Your receipt has been generated.",
    ALREADY_SETTLED: "This payment has already been recorded.",
    DUPLICATE: (
        "This fee was already paid. Your extra payment has been flagged for a "
        "refund; please contact the bursary."
    ),
    STATUS_PENDING: (
        "Payment recorded, status pending. Your fee status will update shortly."
    ),
}


@dataclass
class SettlementResult:
    outcome: str
    payment: PaymentRecord = None
    status_entry: FeeStatusEntry = None

    @property
    def settled(self):
        return self.outcome in (SETTLED, ALREADY_SETTLED, STATUS_PENDING)

    @property
    def message(self):
        return MESSAGES[self.outcome]


def validate_provider_transaction(data, fee, reference=None) -> dict:
    """
    Validate verified provider data against the fee being settled.
    Raises MalformedProviderData; nothing is written before this passes.
    """
    serializer = ProviderTransactionSerializer(data=data if isinstance(data, dict) else {})
    if not serializer.is_valid():
        raise MalformedProviderData("invalid provider transaction", serializer.errors)
    tx = dict(serializer.validated_data)
    tx_ref = tx.get("reference") or reference
    if not tx_ref:
        raise MalformedProviderData("provider transaction has no reference")
    if reference and tx_ref != reference:
        raise MalformedProviderData(f"reference mismatch: {tx_ref} != {reference}")
    tx["reference"] = tx_ref
    if "amount" in tx and tx["amount"] != to_minor_units(fee.amount):
        raise MalformedProviderData(
            f"amount mismatch: paid {tx['amount']} expected {to_minor_units(fee.amount)}"
        )
    currency = tx.get("currency")
    if currency and currency.upper() != settings.PAYMENT_CURRENCY.upper():
        raise MalformedProviderData(f"currency mismatch: {currency}")
    return tx


def _record_fields(payer, fee, tx):
    payer_name = payer.get_display_name()
    fields = {
        "payer": payer,
        "payer_name": payer_name,
        "fee": fee,
        "fee_name": fee.name,
        "amount": fee.amount,
        "currency": settings.PAYMENT_CURRENCY,
        "reference": tx["reference"],
        "status": PaymentRecord.STATUS_SUCCESS,
        "transaction_id": tx["id"],
        "payment_method": "paystack",
        "metadata": {
            "student_id": str(payer.pk),
            "fee_id": str(fee.pk),
            "student_name": payer_name,
            "fee_type": fee.name,
        },
    }
    # optional provider details only when present
    if tx.get("channel"):
        fields["channel"] = tx["channel"]
    if tx.get("receipt_url"):
        fields["receipt_url"] = tx["receipt_url"]
    if tx.get("authorization"):
        fields["authorization"] = tx["authorization"]
    if tx.get("paid_at"):
        fields["paid_at"] = tx["paid_at"]
    return fields


def mark_fee_paid(entry, payment):
    entry.status = FeeStatusEntry.STATUS_PAID
    entry.payment_date = payment.paid_at or payment.created_at or timezone.now()
    entry.reference = payment.reference
    entry.transaction_id = payment.transaction_id
    entry.receipt_url = payment.receipt_url
    entry.save()
    return entry


def _settled_record(reference):
    return PaymentRecord.objects.select_for_update().filter(reference=reference).first()


def _lock_status_entry(payer, fee):
    entry, _ = FeeStatusEntry.objects.select_for_update().get_or_create(
        payer=payer, fee=fee, defaults={"status": FeeStatusEntry.STATUS_UNPAID}
    )
    return entry


def settle_payment(payer, fee, transaction_data, *, reference=None) -> SettlementResult:
    """
    Record a verified payment and mark the payer's fee paid.

    Runs in one transaction: the payer's status entry for the fee is locked
    first, so two verified references for the same fee cannot both settle.
    The payment record is written before the status flip; the flip happens in
    a savepoint so a failure there keeps the record and reports
    STATUS_PENDING for later reconciliation.
    """
    try:
        tx = validate_provider_transaction(transaction_data, fee, reference)
    except MalformedProviderData as e:
        log_payment_event(
            PaymentEvent.KIND_MALFORMED_DATA,
            reference=reference or "",
            payer=payer,
            fee=fee,
            detail=str(e),
            payload={"errors": e.errors},
            level=logging.ERROR,
        )
        raise

    status_error = None
    try:
        with transaction.atomic():
            existing = _settled_record(tx["reference"])
            if existing is not None:
                if existing.payer_id != payer.pk or existing.fee_id != fee.pk:
                    raise MalformedProviderData(
                        f"reference {tx['reference']} already settled for another fee"
                    )
                result = SettlementResult(ALREADY_SETTLED, payment=existing)
            else:
                entry = _lock_status_entry(payer, fee)
                if entry.is_paid and entry.reference == tx["reference"]:
                    # a concurrent settlement of this reference committed while we waited
                    result = SettlementResult(
                        ALREADY_SETTLED,
                        payment=PaymentRecord.objects.filter(reference=tx["reference"]).first(),
                        status_entry=entry,
                    )
                elif entry.is_paid:
                    result = SettlementResult(DUPLICATE, status_entry=entry)
                else:
                    try:
                        with transaction.atomic():
                            payment = PaymentRecord.objects.create(**_record_fields(payer, fee, tx))
                    except IntegrityError:
                        # another success record for this fee slipped in
                        result = SettlementResult(DUPLICATE, status_entry=entry)
                    else:
                        result = SettlementResult(SETTLED, payment=payment, status_entry=entry)
                        try:
                            with transaction.atomic():
                                mark_fee_paid(entry, payment)
                        except DatabaseError as e:
                            status_error = e
                            result.outcome = STATUS_PENDING
    except MalformedProviderData as e:
        log_payment_event(
            PaymentEvent.KIND_MALFORMED_DATA,
            reference=tx["reference"],
            payer=payer,
            fee=fee,
            detail=str(e),
            level=logging.ERROR,
        )
        raise
    except (OperationalError, InterfaceError) as e:
        log_payment_event(
            PaymentEvent.KIND_STORE_UNAVAILABLE,
            reference=tx["reference"],
            payer=payer,
            fee=fee,
            detail=str(e),
            level=logging.ERROR,
        )
        raise StoreUnavailable(str(e)) from e

    if result.outcome == ALREADY_SETTLED:
        # an earlier attempt may have stopped before the status flip
        if result.payment is not None and reconcile_payment(result.payment):
            logger.info("Reconciled fee status for %s on repeat settlement", tx["reference"])
        result.status_entry = FeeStatusEntry.objects.filter(payer=payer, fee=fee).first()
    elif result.outcome == DUPLICATE:
        log_payment_event(
            PaymentEvent.KIND_DUPLICATE_PAYMENT,
            reference=tx["reference"],
            payer=payer,
            fee=fee,
            detail=(
                f"fee already paid with {result.status_entry.reference}; "
                f"transaction {tx['id']} needs a refund"
            ),
            payload={"transaction_id": tx["id"]},
            level=logging.ERROR,
        )
    elif result.outcome == STATUS_PENDING:
        log_payment_event(
            PaymentEvent.KIND_PARTIAL_WRITE,
            reference=tx["reference"],
            payer=payer,
            fee=fee,
            detail=f"payment {result.payment.pk} recorded, status update failed: {status_error}",
            level=logging.ERROR,
        )
        enqueue(reconcile_fee_status, result.payment.pk)
    else:
        logger.info(
            "Settled %s: payer %s fee %s amount %s",
            tx["reference"],
            payer.pk,
            fee.pk,
            result.payment.amount,
        )
    return result


def reconcile_payment(payment) -> bool:
    """
    Bring the payer's status entry in line with a successful payment record.
    Returns True when the entry was flipped to paid.
    """
    if payment.status != PaymentRecord.STATUS_SUCCESS or payment.fee_id is None:
        return False
    with transaction.atomic():
        entry = _lock_status_entry(payment.payer, payment.fee)
        if entry.is_paid:
            return False
        mark_fee_paid(entry, payment)
    PaymentEvent.objects.filter(
        kind=PaymentEvent.KIND_PARTIAL_WRITE,
        reference=payment.reference,
        resolved=False,
    ).update(resolved=True)
    log_payment_event(
        PaymentEvent.KIND_RECONCILED,
        reference=payment.reference,
        payer=payment.payer,
        fee=payment.fee,
        detail="fee status set to paid",
        level=logging.INFO,
    )
    return True


def unreconciled_payments():
    """Successful payments whose fee status entry is not marked paid."""
    paid_entry = FeeStatusEntry.objects.filter(
        payer_id=OuterRef("payer_id"),
        fee_id=OuterRef("fee_id"),
        status=FeeStatusEntry.STATUS_PAID,
    )
    return (
        PaymentRecord.objects.filter(status=PaymentRecord.STATUS_SUCCESS, fee__isnull=False)
        .annotate(has_paid_entry=Exists(paid_entry))
        .filter(has_paid_entry=False)
        .select_related("payer", "fee")
    )
