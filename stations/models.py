from decimal import Decimal

from django.db import models
from django.db.models import F, Q
from django.conf import settings
from django.utils import timezone

from stations.constants import FuelType, MovementDirection, MovementSource


class Station(models.Model):
    name = models.CharField(max_length=150)
    location = models.CharField(max_length=255)
    image_url = models.TextField(blank=True, help_text="URL or data URI")
    health_score = models.PositiveSmallIntegerField(null=True, blank=True)
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return self.name


class FuelLine(models.Model):
    """
    One fuel product held by a station: stock, capacity, pump rate and refill threshold.
    """

    station = models.ForeignKey(
        Station,
        on_delete=models.CASCADE,
        related_name="fuel_lines"
    )
    fuel_type = models.CharField(max_length=3, choices=FuelType.choices)

    current_stock = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    capacity = models.DecimalField(max_digits=12, decimal_places=2)
    rate = models.DecimalField(max_digits=12, decimal_places=2)
    low_stock_threshold = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["station_id", "fuel_type"]
        constraints = [
            models.UniqueConstraint(
                fields=["station", "fuel_type"],
                name="unique_fuel_line_per_station",
            ),
            models.CheckConstraint(
                condition=Q(current_stock__gte=0) & Q(current_stock__lte=F("capacity")),
                name="fuel_line_stock_within_capacity",
            ),
            models.CheckConstraint(
                condition=Q(capacity__gt=0),
                name="fuel_line_capacity_positive",
            ),
            models.CheckConstraint(
                condition=Q(rate__gt=0),
                name="fuel_line_rate_positive",
            ),
            models.CheckConstraint(
                condition=Q(low_stock_threshold__gte=0),
                name="fuel_line_threshold_not_negative",
            ),
        ]

    @property
    def is_low(self):
        return self.current_stock < self.low_stock_threshold

    @property
    def stock_percent(self):
        if not self.capacity:
            return Decimal("0")
        return (Decimal(self.current_stock) / Decimal(self.capacity) * 100).quantize(Decimal("0.1"))

    def __str__(self):
        return f"{self.station} / {self.fuel_type}"


class StockPurchase(models.Model):
    """
    Procurement ledger: what was ordered into a fuel line and what the tank accepted.
    """

    station = models.ForeignKey(
        Station,
        on_delete=models.CASCADE,
        related_name="purchases"
    )
    fuel_type = models.CharField(max_length=3, choices=FuelType.choices)
    date = models.DateField(default=timezone.localdate)

    quantity = models.DecimalField(max_digits=12, decimal_places=2)
    quantity_applied = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    cost = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    supplier = models.CharField(max_length=150, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="stock_purchases"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-date", "-id"]

    @property
    def overflow(self):
        return self.quantity - self.quantity_applied

    def __str__(self):
        return f"Purchase {self.fuel_type} {self.quantity}L - {self.station}"


class StockMovement(models.Model):
    """
    Trace of every stock mutation, with the requested and the applied quantity.
    """

    station = models.ForeignKey(
        Station,
        on_delete=models.CASCADE,
        related_name="movements"
    )
    fuel_line = models.ForeignKey(
        FuelLine,
        on_delete=models.CASCADE,
        related_name="movements"
    )

    direction = models.CharField(max_length=3, choices=MovementDirection.choices)

    quantity_requested = models.DecimalField(max_digits=12, decimal_places=2)
    quantity_applied = models.DecimalField(max_digits=12, decimal_places=2)
    stock_before = models.DecimalField(max_digits=12, decimal_places=2)
    stock_after = models.DecimalField(max_digits=12, decimal_places=2)

    source_type = models.CharField(max_length=20, choices=MovementSource.choices)
    source_id = models.PositiveBigIntegerField()

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    @property
    def clamped(self):
        return self.quantity_requested != self.quantity_applied
