from django.conf import settings
from django.db import models
from django.db.models import Q


class PaymentRecord(models.Model):
    STATUS_PENDING = "pending"
    STATUS_SUCCESS = "success"
    STATUS_FAILED = "failed"
    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_SUCCESS, "Success"),
        (STATUS_FAILED, "Failed"),
    ]

    payer = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="payments"
    )
    payer_name = models.CharField(max_length=128, blank=True)
    fee = models.ForeignKey(
        "fees.FeeDefinition",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="payments",
    )
    fee_name = models.CharField(max_length=128)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3)
    reference = models.CharField(max_length=128, unique=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)
    transaction_id = models.CharField(max_length=64)
    payment_method = models.CharField(max_length=32, default="paystack")
    channel = models.CharField(max_length=32, blank=True)
    receipt_url = models.CharField(max_length=512, blank=True)
    authorization = models.JSONField(default=dict, blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["payer", "fee"],
                condition=Q(status="success"),
                name="one_successful_payment_per_fee",
            ),
        ]

    def __str__(self):
        return f"{self.reference} {self.fee_name} {self.amount} ({self.status})"

    def to_document(self):
        """Plain dict of the record; optional fields appear only when set."""
        doc = {
            "id": self.pk,
            "student_id": self.payer_id,
            "student_name": self.payer_name,
            "fee_id": self.fee_id,
            "fee_name": self.fee_name,
            "amount": str(self.amount),
            "currency": self.currency,
            "reference": self.reference,
            "status": self.status,
            "transaction_id": self.transaction_id,
            "payment_method": self.payment_method,
            "metadata": self.metadata,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if self.channel:
            doc["channel"] = self.channel
        if self.receipt_url:
            doc["receipt_url"] = self.receipt_url
        if self.authorization:
            doc["authorization"] = self.authorization
        if self.paid_at:
            doc["paid_at"] = self.paid_at.isoformat()
        return doc


class FeeStatusEntry(models.Model):
    STATUS_UNPAID = "unpaid"
    STATUS_PAID = "paid"
    STATUS_CHOICES = [
        (STATUS_UNPAID, "Unpaid"),
        (STATUS_PAID, "Paid"),
    ]

    payer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="fee_status_entries",
    )
    fee = models.ForeignKey(
        "fees.FeeDefinition", on_delete=models.CASCADE, related_name="status_entries"
    )
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_UNPAID)
    payment_date = models.DateTimeField(null=True, blank=True)
    reference = models.CharField(max_length=128, blank=True)
    transaction_id = models.CharField(max_length=64, blank=True)
    receipt_url = models.CharField(max_length=512, blank=True)
    last_updated = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = [("payer", "fee")]
        verbose_name_plural = "fee status entries"

    @property
    def is_paid(self):
        return self.status == self.STATUS_PAID


class PaymentEvent(models.Model):
    KIND_VERIFICATION_FAILED = "verification_failed"
    KIND_PARTIAL_WRITE = "partial_write"
    KIND_DUPLICATE_PAYMENT = "duplicate_payment"
    KIND_MALFORMED_DATA = "malformed_provider_data"
    KIND_STORE_UNAVAILABLE = "store_unavailable"
    KIND_WEBHOOK_RECEIVED = "webhook_received"
    KIND_WEBHOOK_REJECTED = "webhook_rejected"
    KIND_RECONCILED = "reconciled"
    KIND_CHOICES = [
        (KIND_VERIFICATION_FAILED, "Verification failed"),
        (KIND_PARTIAL_WRITE, "Payment recorded, status update failed"),
        (KIND_DUPLICATE_PAYMENT, "Duplicate payment"),
        (KIND_MALFORMED_DATA, "Malformed provider data"),
        (KIND_STORE_UNAVAILABLE, "Store unavailable"),
        (KIND_WEBHOOK_RECEIVED, "Webhook received"),
        (KIND_WEBHOOK_REJECTED, "Webhook rejected"),
        (KIND_RECONCILED, "Reconciled"),
    ]

    kind = models.CharField(max_length=32, choices=KIND_CHOICES)
    reference = models.CharField(max_length=128, blank=True, db_index=True)
    payer = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True
    )
    fee = models.ForeignKey(
        "fees.FeeDefinition", on_delete=models.SET_NULL, null=True, blank=True
    )
    detail = models.CharField(max_length=255, blank=True)
    payload = models.JSONField(default=dict, blank=True)
    resolved = models.BooleanField(default=False)
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-timestamp"]
