from django.contrib import admin
from .models import FeeDefinition

@admin.register(FeeDefinition)
class FeeDefinitionAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "amount", "due_date", "status")
    list_filter = ("status", "category")
    search_fields = ("name", "description")
