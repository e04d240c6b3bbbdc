from django.contrib import admin

from .models import Station, FuelLine, StockPurchase, StockMovement


class FuelLineInline(admin.TabularInline):
    model = FuelLine
    extra = 0


@admin.register(Station)
class StationAdmin(admin.ModelAdmin):
    list_display = ("name", "location", "health_score", "active")
    list_filter = ("active",)
    search_fields = ("name", "location")
    inlines = [FuelLineInline]


@admin.register(StockPurchase)
class StockPurchaseAdmin(admin.ModelAdmin):
    list_display = ("date", "station", "fuel_type", "quantity", "quantity_applied", "cost", "supplier")
    list_filter = ("station", "fuel_type")


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = (
        "created_at",
        "station",
        "fuel_line",
        "direction",
        "quantity_requested",
        "quantity_applied",
        "source_type",
        "source_id",
    )
    list_filter = ("station", "direction", "source_type")
    readonly_fields = [f.name for f in StockMovement._meta.fields]
