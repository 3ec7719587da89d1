from django.shortcuts import redirect
from django.urls import reverse
from .models import SiteBootstrap

EXEMPT_PREFIXES = ("/admin/", "/static/", "/paystack-webhook/", "/django-rq/")


class BootstrapRequiredMiddleware:
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        setup_url = reverse("accounts:initial_admin")
        path = request.path
        if path != setup_url and not path.startswith(EXEMPT_PREFIXES):
            if not SiteBootstrap.is_complete():
                return redirect(setup_url)
        return self.get_response(request)
