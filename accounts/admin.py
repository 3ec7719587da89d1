from django.contrib import admin
from .models import User, SiteBootstrap

@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ("id", "email", "role", "is_active", "date_joined")
    list_filter = ("role", "is_active")
    search_fields = ("email", "first_name", "last_name", "display_name")

@admin.register(SiteBootstrap)
class SiteBootstrapAdmin(admin.ModelAdmin):
    list_display = ("id", "initial_admin", "completed_at")
