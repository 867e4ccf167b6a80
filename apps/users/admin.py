from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _

from apps.ledger.services import is_chief_medical_officer

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    ordering = ["-created_at"]
    list_display = ("email", "get_full_name", "chief_medical_officer", "is_deleted", "created_at")
    list_filter = ("is_deleted", "is_staff", "is_superuser")
    search_fields = ("email", "first_name", "last_name")
    readonly_fields = ("id", "created_at", "deleted_at", "last_login")

    fieldsets = (
        (None, {"fields": ("id", "email", "password")}),
        (_("Name"), {"fields": ("first_name", "last_name")}),
        (_("Admin access"), {"fields": ("is_staff", "is_superuser", "groups", "user_permissions")}),
        (_("Retirement"), {"fields": ("is_active", "is_deleted", "deleted_at")}),
        (_("Dates"), {"fields": ("last_login", "created_at")}),
    )
    add_fieldsets = (
        (None, {"classes": ("wide",), "fields": ("email", "password1", "password2")}),
    )
    filter_horizontal = ("groups", "user_permissions")

    @admin.display(boolean=True, description="CMO")
    def chief_medical_officer(self, obj):
        return is_chief_medical_officer(obj)

    def has_delete_permission(self, request, obj=None):
        # Ledger rows PROTECT their users. Use soft_delete instead.
        return False
