from django.contrib import admin
from .models import MessageLog

@admin.register(MessageLog)
class MessageLogAdmin(admin.ModelAdmin):
    list_display = ("id", "payment", "email", "sent_at", "provider_id")
    search_fields = ("email", "payment__reference", "provider_id")
