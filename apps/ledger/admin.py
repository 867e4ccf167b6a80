"""
ledger/admin.py
===============
Read-only admin for the SystemState singleton.

The maintenance flag is toggled through the service layer only, so the
administrator check and block height stay authoritative.
"""

from django.contrib import admin

from .models import SystemState


@admin.register(SystemState)
class SystemStateAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "administrator",
        "total_records",
        "maintenance_active",
        "block_height",
        "updated_at",
    )
    readonly_fields = (
        "administrator",
        "total_records",
        "maintenance_active",
        "block_height",
        "initialized_at",
        "updated_at",
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
