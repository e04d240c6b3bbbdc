from django.contrib import admin

from alerts.models import Alert


@admin.register(Alert)
class AlertAdmin(admin.ModelAdmin):
    list_display = ("timestamp", "type", "severity", "station", "fuel_type", "resolved")
    list_filter = ("type", "severity", "resolved", "station")
    search_fields = ("message", "key")
    readonly_fields = [f.name for f in Alert._meta.fields]
