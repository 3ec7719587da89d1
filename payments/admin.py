from django.contrib import admin
from .models import FeeStatusEntry, PaymentEvent, PaymentRecord

@admin.register(PaymentRecord)
class PaymentRecordAdmin(admin.ModelAdmin):
    list_display = ("reference", "payer", "fee_name", "amount", "status", "created_at")
    list_filter = ("status", "channel")
    search_fields = ("reference", "transaction_id", "payer__email", "fee_name")
    readonly_fields = ("created_at",)

@admin.register(FeeStatusEntry)
class FeeStatusEntryAdmin(admin.ModelAdmin):
    list_display = ("payer", "fee", "status", "reference", "last_updated")
    list_filter = ("status",)
    search_fields = ("payer__email", "reference")

@admin.register(PaymentEvent)
class PaymentEventAdmin(admin.ModelAdmin):
    list_display = ("timestamp", "kind", "reference", "payer", "resolved")
    list_filter = ("kind", "resolved")
    search_fields = ("reference", "detail")
