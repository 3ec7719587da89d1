from django.db import models

class MessageLog(models.Model):
    payment = models.OneToOneField(
        "payments.PaymentRecord", on_delete=models.CASCADE, related_name="receipt_message"
    )
    email = models.EmailField()
    sent_at = models.DateTimeField(auto_now_add=True)
    provider_id = models.CharField(max_length=128, blank=True, null=True)
