import logging
from django.conf import settings
from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.shortcuts import get_object_or_404, redirect, render
from django.urls import reverse
from django.views.decorators.http import require_GET, require_POST
from accounts.decorators import require_role
from fees.models import FeeDefinition
from fees.services import FeeNotPayable, format_amount, get_payable_fee, list_payable_fees
from .exceptions import MalformedProviderData, PaymentInitError, PaymentValidationError, StoreUnavailable
from .initiator import build_payment_request, initialize_hosted_checkout
from .models import PaymentRecord
from .services import confirm_payment, confirm_payment_by_reference
from .settlement import ALREADY_SETTLED, DUPLICATE, SETTLED, STATUS_PENDING

logger = logging.getLogger(__name__)

SUPPORT_MESSAGE = "Error processing payment. Please contact support."
STORE_DOWN_MESSAGE = (
    "Your payment could not be recorded right now. Please try verifying again shortly."
)

OUTCOME_STATUS_CODES = {
    SETTLED: 200,
    ALREADY_SETTLED: 200,
    STATUS_PENDING: 202,
    DUPLICATE: 409,
}


@require_role("student")
def pay(request):
    fees = list_payable_fees()
    statuses = request.user.fee_statuses()
    options = [
        {
            "fee": fee,
            "label": f"{fee.name} - {format_amount(fee.amount, settings.PAYMENT_CURRENCY)}",
            "paid": fee.id in statuses and statuses[fee.id].is_paid,
        }
        for fee in fees
    ]
    ctx = {
        "options": options,
        "catalog_empty": not options,
        "provider_ready": bool(settings.PAYSTACK_PUBLIC_KEY),
        "active_nav": "pay",
    }
    return render(request, "payments/pay.html", ctx)


@require_POST
@require_role("student")
def initiate(request):
    try:
        fee = get_payable_fee(request.POST.get("fee_id"))
        payment_request = build_payment_request(request.user, fee)
    except (FeeNotPayable, PaymentValidationError) as e:
        return JsonResponse({"ok": False, "error": str(e)}, status=400)
    except PaymentInitError as e:
        return JsonResponse({"ok": False, "error": str(e)}, status=503)
    return JsonResponse({"ok": True, "config": payment_request.as_widget_config()})


@require_POST
@require_role("student")
def checkout(request):
    try:
        fee = get_payable_fee(request.POST.get("fee_id"))
        payment_request = build_payment_request(request.user, fee)
        hosted = initialize_hosted_checkout(
            payment_request,
            callback_url=request.build_absolute_uri(reverse("payments:callback")),
        )
    except (FeeNotPayable, PaymentValidationError, PaymentInitError) as e:
        messages.error(request, str(e))
        return redirect("payments:pay")
    return redirect(hosted["authorization_url"])


@require_POST
@require_role("student")
def verify(request):
    reference = (request.POST.get("reference") or "").strip()
    fee_id = request.POST.get("fee_id")
    if not reference:
        return JsonResponse({"ok": False, "error": "reference required"}, status=400)
    fee = FeeDefinition.objects.filter(pk=fee_id).first() if fee_id and fee_id.isdigit() else None
    if fee is None:
        return JsonResponse({"ok": False, "error": "Please select a fee to pay"}, status=400)
    try:
        outcome = confirm_payment(request.user, fee, reference)
    except MalformedProviderData:
        return JsonResponse({"ok": False, "outcome": "rejected", "error": SUPPORT_MESSAGE}, status=422)
    except StoreUnavailable:
        return JsonResponse(
            {"ok": False, "outcome": "store_unavailable", "error": STORE_DOWN_MESSAGE, "retry": True},
            status=503,
        )
    body = {
        "ok": outcome.ok,
        "outcome": outcome.status,
        "reference": outcome.reference,
        "message": outcome.message,
    }
    if outcome.payment is not None:
        body["payment"] = outcome.payment.to_document()
        body["receipts_url"] = reverse("payments:receipts")
    if outcome.settlement is None:
        body["retry"] = outcome.verification.retryable
        return JsonResponse(body, status=402)
    return JsonResponse(body, status=OUTCOME_STATUS_CODES[outcome.status])


@require_GET
@require_role("student")
def callback(request):
    # Paystack appends both reference and trxref after hosted checkout
    reference = request.GET.get("reference") or request.GET.get("trxref")
    if not reference:
        messages.error(request, "Missing payment reference.")
        return redirect("payments:pay")
    try:
        outcome = confirm_payment_by_reference(reference, expected_payer=request.user)
    except MalformedProviderData:
        messages.error(request, SUPPORT_MESSAGE)
        return redirect("payments:pay")
    except StoreUnavailable:
        messages.error(request, STORE_DOWN_MESSAGE)
        return redirect("payments:pay")
    if outcome.ok:
        messages.success(request, outcome.message)
        return redirect("payments:receipts")
    messages.error(request, outcome.message)
    return redirect("payments:pay")


@login_required
def receipts(request):
    records = PaymentRecord.objects.filter(payer=request.user).order_by("-created_at")
    rows = [
        {"payment": p, "amount_display": format_amount(p.amount, p.currency)}
        for p in records
    ]
    return render(request, "payments/receipts.html", {"rows": rows, "active_nav": "receipts"})


@login_required
def receipt_detail(request, pk: int):
    payment = get_object_or_404(PaymentRecord, pk=pk, payer=request.user)
    return render(
        request,
        "payments/receipt_detail.html",
        {
            "payment": payment,
            "amount_display": format_amount(payment.amount, payment.currency),
            "active_nav": "receipts",
        },
    )
