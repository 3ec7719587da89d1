import logging
from decimal import Decimal
from django.contrib.auth import get_user_model
from django.db.models import Count, Q, Sum
from .models import FeeDefinition

logger = logging.getLogger(__name__)


class FeeNotPayable(Exception):
    pass


def list_fees():
    return list(FeeDefinition.objects.order_by("due_date", "name"))


def list_payable_fees():
    return list(
        FeeDefinition.objects.filter(
            status=FeeDefinition.STATUS_ACTIVE, amount__gt=0
        ).order_by("due_date", "name")
    )


def get_payable_fee(fee_id):
    fee = FeeDefinition.objects.filter(pk=fee_id).first() if fee_id else None
    if fee is None:
        raise FeeNotPayable("Please select a fee to pay")
    if not fee.is_payable:
        raise FeeNotPayable(f"Fee {fee.name} is not open for payment")
    return fee


def set_fee_status(fee, status):
    if status not in dict(FeeDefinition.STATUS_CHOICES):
        raise ValueError(f"Unknown fee status {status!r}")
    fee.status = status
    fee.save(update_fields=["status"])
    logger.info("Fee %s status set to %s", fee.pk, status)
    return fee


def format_amount(amount, currency="NGN"):
    symbols = {"NGN": "₦", "GHS": "GH₵", "ZAR": "R", "KES": "KSh", "USD": "$"}
    symbol = symbols.get(currency, f"{currency} ")
    return f"{symbol}{Decimal(amount):,.2f}"


def collection_summary():
    """
    Per-fee collection figures for the admin dashboard: payers paid, total
    collected and the share of student accounts that have paid.
    """
    User = get_user_model()
    student_count = User.objects.filter(role=User.ROLE_STUDENT, is_active=True).count()
    # two queries: annotating both joins at once multiplies the sums
    paid_counts = dict(
        FeeDefinition.objects.annotate(
            n=Count("status_entries", filter=Q(status_entries__status="paid"))
        ).values_list("id", "n")
    )
    collected_by_fee = dict(
        FeeDefinition.objects.annotate(
            t=Sum("payments__amount", filter=Q(payments__status="success"))
        ).values_list("id", "t")
    )
    summary = []
    for fee in FeeDefinition.objects.order_by("due_date", "name"):
        paid_count = paid_counts.get(fee.id) or 0
        collected = collected_by_fee.get(fee.id) or Decimal("0")
        if student_count:
            pct = round(paid_count * 100.0 / student_count, 1)
        else:
            pct = 0.0
        summary.append({
            "fee": fee,
            "paid_count": paid_count,
            "collected": collected,
            "paid_percent": pct,
        })
    total = sum((row["collected"] for row in summary), Decimal("0"))
    return {"rows": summary, "student_count": student_count, "total_collected": total}
