import logging
from django.db import DatabaseError
from .models import PaymentEvent

logger = logging.getLogger(__name__)


def log_payment_event(
    kind,
    *,
    reference="",
    payer=None,
    fee=None,
    detail="",
    payload=None,
    level=logging.WARNING,
):
    """
    Emit a structured payment event: a log line carrying the event kind and
    reference in `extra`, plus a PaymentEvent row operators can query.
    Returns the row, or None when the store itself is down.
    """
    logger.log(
        level,
        "Payment event %s reference=%s payer=%s fee=%s: %s",
        kind,
        reference or "-",
        getattr(payer, "pk", None),
        getattr(fee, "pk", None),
        detail,
        extra={"payment_event": kind, "reference": reference},
    )
    try:
        return PaymentEvent.objects.create(
            kind=kind,
            reference=reference or "",
            payer=payer,
            fee=fee,
            detail=(detail or "")[:255],
            payload=payload or {},
        )
    except DatabaseError as e:
        logger.error("Could not store payment event %s for %s: %s", kind, reference, e)
        return None
