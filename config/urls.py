from django.contrib import admin
from django.urls import include, path
from accounts import views as accounts_views
from payments.webhooks import paystack_webhook

urlpatterns = [
    path("admin/", admin.site.urls),
    path("django-rq/", include("django_rq.urls")),
    path("accounts/", include("allauth.urls")),
    path("paystack-webhook/", paystack_webhook, name="paystack_webhook"),
    # app URLs
    path("", include("accounts.urls")),
    path("", accounts_views.home, name="home"),
    path("fees/", include("fees.urls")),
    path("payments/", include("payments.urls")),
]
