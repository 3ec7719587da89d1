from django.contrib import messages
from django.db.models import Count, Q
from django.shortcuts import get_object_or_404, redirect, render
from django.views.decorators.http import require_POST
from django.conf import settings
from accounts.decorators import require_role
from .forms import FeeDefinitionForm
from .models import FeeDefinition
from .services import collection_summary, set_fee_status


@require_role("admin")
def manage(request):
    form = FeeDefinitionForm(request.POST or None)
    if request.method == "POST":
        if form.is_valid():
            form.save()
            messages.success(request, "Fee added successfully")
            return redirect("fees:manage")
        messages.error(request, "Please fill in all required fields")
    fees = FeeDefinition.objects.annotate(
        paid_count=Count("status_entries", filter=Q(status_entries__status="paid"))
    ).order_by("due_date", "name")
    return render(
        request,
        "fees/manage.html",
        {
            "form": form,
            "fees": fees,
            "currency": settings.PAYMENT_CURRENCY,
            "active_nav": "fees",
        },
    )


@require_POST
@require_role("admin")
def toggle_status(request, pk: int):
    fee = get_object_or_404(FeeDefinition, pk=pk)
    new_status = (
        FeeDefinition.STATUS_INACTIVE
        if fee.status == FeeDefinition.STATUS_ACTIVE
        else FeeDefinition.STATUS_ACTIVE
    )
    set_fee_status(fee, new_status)
    messages.success(request, "Fee status updated successfully")
    return redirect("fees:manage")


@require_POST
@require_role("admin")
def delete(request, pk: int):
    fee = get_object_or_404(FeeDefinition, pk=pk)
    fee.delete()
    messages.success(request, "Fee deleted successfully")
    return redirect("fees:manage")


@require_role("admin")
def summary(request):
    ctx = collection_summary()
    ctx.update({"currency": settings.PAYMENT_CURRENCY, "active_nav": "fee_summary"})
    return render(request, "fees/summary.html", ctx)
