from django.urls import path
from . import views

app_name = "payments"

urlpatterns = [
    path("", views.pay, name="pay"),
    path("initiate/", views.initiate, name="initiate"),
    path("checkout/", views.checkout, name="checkout"),
    path("verify/", views.verify, name="verify"),
    path("callback/", views.callback, name="callback"),
    path("receipts/", views.receipts, name="receipts"),
    path("receipts/<int:pk>/", views.receipt_detail, name="receipt_detail"),
]
