# alerts/models.py

from django.db import models
from django.db.models import Q
from django.conf import settings
from django.utils import timezone

from stations.constants import FuelType


class AlertType(models.TextChoices):
    LOW_STOCK = "LOW_STOCK", "Low stock"
    MISMATCH = "MISMATCH", "Reconciliation mismatch"
    STOCK_DISCREPANCY = "STOCK_DISCREPANCY", "Stock discrepancy"


class Severity(models.TextChoices):
    INFO = "info", "Info"
    WARNING = "warning", "Warning"
    ERROR = "error", "Error"


class Alert(models.Model):
    """
    Derived from stations and entries by the alerting engine. Only the resolution
    fields are ever changed after creation.
    """

    type = models.CharField(max_length=20, choices=AlertType.choices)
    key = models.CharField(
        max_length=120,
        db_index=True,
        help_text="Condition identity, e.g. LOW_STOCK:<station>:<fuel>"
    )

    station = models.ForeignKey(
        "stations.Station",
        on_delete=models.CASCADE,
        related_name="alerts"
    )
    fuel_type = models.CharField(max_length=3, choices=FuelType.choices, blank=True)
    record_date = models.DateField(null=True, blank=True)

    message = models.TextField()
    severity = models.CharField(max_length=10, choices=Severity.choices)
    observed_value = models.DecimalField(max_digits=16, decimal_places=2, null=True, blank=True)
    timestamp = models.DateTimeField(default=timezone.now)

    resolved = models.BooleanField(default=False)
    resolved_at = models.DateTimeField(null=True, blank=True)
    resolved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="alerts_resolved"
    )

    class Meta:
        ordering = ["-timestamp", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["key"],
                condition=Q(resolved=False),
                name="unique_unresolved_alert_per_key",
            ),
        ]

    def __str__(self):
        return f"[{self.severity}] {self.message}"
