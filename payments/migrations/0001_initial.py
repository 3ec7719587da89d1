import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("fees", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="PaymentRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("payer_name", models.CharField(blank=True, max_length=128)),
                ("fee_name", models.CharField(max_length=128)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("currency", models.CharField(max_length=3)),
                ("reference", models.CharField(max_length=128, unique=True)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("success", "Success"), ("failed", "Failed")], default="pending", max_length=16)),
                ("transaction_id", models.CharField(max_length=64)),
                ("payment_method", models.CharField(default="paystack", max_length=32)),
                ("channel", models.CharField(blank=True, max_length=32)),
                ("receipt_url", models.CharField(blank=True, max_length=512)),
                ("authorization", models.JSONField(blank=True, default=dict)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("fee", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="payments", to="fees.feedefinition")),
                ("payer", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="payments", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "constraints": [
                    models.UniqueConstraint(condition=models.Q(("status", "success")), fields=("payer", "fee"), name="one_successful_payment_per_fee"),
                ],
            },
        ),
        migrations.CreateModel(
            name="FeeStatusEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("status", models.CharField(choices=[("unpaid", "Unpaid"), ("paid", "Paid")], default="unpaid", max_length=16)),
                ("payment_date", models.DateTimeField(blank=True, null=True)),
                ("reference", models.CharField(blank=True, max_length=128)),
                ("transaction_id", models.CharField(blank=True, max_length=64)),
                ("receipt_url", models.CharField(blank=True, max_length=512)),
                ("last_updated", models.DateTimeField(auto_now=True)),
                ("fee", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="status_entries", to="fees.feedefinition")),
                ("payer", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="fee_status_entries", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name_plural": "fee status entries",
                "unique_together": {("payer", "fee")},
            },
        ),
        migrations.CreateModel(
            name="PaymentEvent",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("kind", models.CharField(choices=[("verification_failed", "Verification failed"), ("partial_write", "Payment recorded, status update failed"), ("duplicate_payment", "Duplicate payment"), ("malformed_provider_data", "Malformed provider data"), ("store_unavailable", "Store unavailable"), ("webhook_received", "Webhook received"), ("webhook_rejected", "Webhook rejected"), ("reconciled", "Reconciled")], max_length=32)),
                ("reference", models.CharField(blank=True, db_index=True, max_length=128)),
                ("detail", models.CharField(blank=True, max_length=255)),
                ("payload", models.JSONField(blank=True, default=dict)),
                ("resolved", models.BooleanField(default=False)),
                ("timestamp", models.DateTimeField(auto_now_add=True)),
                ("fee", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to="fees.feedefinition")),
                ("payer", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-timestamp"],
            },
        ),
    ]
