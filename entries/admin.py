from django.contrib import admin

from entries.models import DailyEntry, AuditLogEntry


class AuditLogEntryInline(admin.TabularInline):
    model = AuditLogEntry
    extra = 0
    can_delete = False
    readonly_fields = ("sequence", "timestamp", "user_name", "action", "details")
    fields = readonly_fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(DailyEntry)
class DailyEntryAdmin(admin.ModelAdmin):
    list_display = (
        "date",
        "station",
        "fuel_type",
        "quantity_sold",
        "amount",
        "total_payments",
        "reconciliation_delta",
        "status",
    )
    list_filter = ("status", "fuel_type", "station")
    date_hierarchy = "date"
    inlines = [AuditLogEntryInline]

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
