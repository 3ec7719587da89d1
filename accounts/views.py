from django.contrib import messages
from django.shortcuts import redirect, render
from django.urls import reverse
from .forms import InitialAdminForm
from .models import SiteBootstrap
from .services import AdminAlreadyExists, bootstrap_initial_admin


def home(request):
    if not request.user.is_authenticated:
        return redirect("account_login")
    user = request.user
    ctx = {
        "name": user.get_display_name(),
        "role": user.role,
        "active_nav": "dashboard",
    }
    if user.is_admin:
        ctx.update({
            "fee_management_url": reverse("fees:manage"),
            "fee_summary_url": reverse("fees:summary"),
        })
    if user.is_student:
        ctx.update({
            "fee_payment_url": reverse("payments:pay"),
            "receipts_url": reverse("payments:receipts"),
            "fee_statuses": list(
                user.fee_status_entries.select_related("fee").order_by("fee__due_date")
            ),
        })
    return render(request, "home.html", ctx)


def initial_admin(request):
    if SiteBootstrap.is_complete():
        messages.info(request, "An admin account already exists. Please log in instead.")
        return redirect("account_login")
    form = InitialAdminForm(request.POST or None)
    if request.method == "POST" and form.is_valid():
        try:
            bootstrap_initial_admin(
                form.cleaned_data["email"],
                form.cleaned_data["password1"],
                display_name=form.cleaned_data["display_name"],
            )
        except AdminAlreadyExists:
            messages.error(request, "An admin account already exists. Please log in instead.")
            return redirect("account_login")
        messages.success(request, "Initial admin account created successfully")
        return redirect("account_login")
    return render(request, "accounts/initial_admin.html", {"form": form, "active_nav": None})
