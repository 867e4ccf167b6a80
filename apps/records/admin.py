"""
records/admin.py
================
Django admin for the records app.

Design rules for a ledger admin:
  - Every model is read-only. Writes go through the service layer, which
    holds the ledger lock and advances the block height.
  - No add, change or delete anywhere.
  - AccessGrant shown as inline on MedicalRecord
"""

from django.contrib import admin
from django.utils.html import format_html

from .models import AccessGrant, MedicalRecord, PhysicianStats


class ReadOnlyAdminMixin:
    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class AccessGrantInline(ReadOnlyAdminMixin, admin.TabularInline):
    model  = AccessGrant
    extra  = 0
    fields = readonly_fields = ("staff", "can_access", "access_limit", "granted_at")

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("staff")


@admin.register(MedicalRecord)
class MedicalRecordAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = (
        "id",
        "category",
        "physician",
        "usage_display",
        "created_at_block",
        "status_badge",
    )
    list_filter   = ("is_active", "category")
    search_fields = ("category", "physician__email")
    ordering      = ("id",)
    inlines       = [AccessGrantInline]

    readonly_fields = (
        "id",
        "physician",
        "category",
        "data_volume",
        "accessed_volume",
        "created_at_block",
        "is_active",
        "created_at",
        "updated_at",
    )

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("physician")

    @admin.display(description="Usage")
    def usage_display(self, obj):
        return f"{obj.accessed_volume} / {obj.data_volume}"

    @admin.display(description="Status")
    def status_badge(self, obj):
        if obj.is_active:
            return format_html('<span style="color:{};">{}</span>', "green", "Active")
        return format_html('<span style="color:{};">{}</span>', "grey", "Archived")


@admin.register(AccessGrant)
class AccessGrantAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display  = ("record", "staff", "can_access", "access_limit", "granted_at")
    list_filter   = ("can_access",)
    search_fields = ("staff__email",)
    readonly_fields = ("record", "staff", "can_access", "access_limit", "granted_at")


@admin.register(PhysicianStats)
class PhysicianStatsAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display    = ("physician", "record_count", "total_data_managed", "updated_at")
    search_fields   = ("physician__email",)
    ordering        = ("-total_data_managed",)
    readonly_fields = ("physician", "record_count", "total_data_managed", "updated_at")
