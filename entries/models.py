# entries/models.py

from django.db import models
from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder

from entries.constants import EntryStatus, AuditAction
from stations.constants import FuelType


class DailyEntry(models.Model):
    """
    One station manager's daily sales / expense submission for a fuel product.

    Totals are computed once at submission and stored; the breakdowns keep the raw
    channel values they were computed from.
    """

    # =========================
    # CONTEXT
    # =========================
    date = models.DateField()
    station = models.ForeignKey(
        "stations.Station",
        on_delete=models.PROTECT,
        related_name="entries"
    )
    fuel_type = models.CharField(max_length=3, choices=FuelType.choices)

    # =========================
    # VOLUME
    # =========================
    opening_meter = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    closing_meter = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    quantity_sold = models.DecimalField(max_digits=12, decimal_places=2)
    rate = models.DecimalField(max_digits=12, decimal_places=2)
    amount = models.DecimalField(
        max_digits=16,
        decimal_places=2,
        help_text="quantity_sold x rate"
    )

    # =========================
    # SETTLEMENT
    # =========================
    payments = models.JSONField(default=dict, encoder=DjangoJSONEncoder)
    expenses = models.JSONField(default=dict, encoder=DjangoJSONEncoder)
    generator_hours = models.DecimalField(max_digits=6, decimal_places=2, default=0)

    total_payments = models.DecimalField(max_digits=16, decimal_places=2)
    total_expenses = models.DecimalField(max_digits=16, decimal_places=2)
    net_amount = models.DecimalField(max_digits=16, decimal_places=2)
    reconciliation_delta = models.DecimalField(
        max_digits=16,
        decimal_places=2,
        help_text="amount - total_payments; zero means balanced"
    )

    # =========================
    # WORKFLOW
    # =========================
    status = models.CharField(
        max_length=10,
        choices=EntryStatus.choices,
        default=EntryStatus.PENDING
    )
    approver_comments = models.TextField(blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="entries_submitted"
    )
    decided_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="entries_decided"
    )
    decided_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        verbose_name_plural = "Daily entries"
        indexes = [
            models.Index(fields=["station", "date"], name="entry_station_date_idx"),
            models.Index(fields=["status"], name="entry_status_idx"),
        ]

    @property
    def is_balanced(self):
        return self.reconciliation_delta == 0

    def __str__(self):
        return f"{self.station} {self.fuel_type} {self.date} ({self.status})"


class AuditLogEntry(models.Model):
    """
    Append-only trail of an entry. Rows are written once and never changed or removed.
    """

    entry = models.ForeignKey(
        DailyEntry,
        on_delete=models.PROTECT,
        related_name="audit_trail"
    )
    sequence = models.PositiveIntegerField()

    timestamp = models.DateTimeField()
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="audit_logs"
    )
    user_ref = models.CharField(max_length=150)
    user_name = models.CharField(max_length=150)
    action = models.CharField(max_length=10, choices=AuditAction.choices)
    details = models.TextField(blank=True)

    class Meta:
        ordering = ["entry_id", "sequence"]
        constraints = [
            models.UniqueConstraint(
                fields=["entry", "sequence"],
                name="unique_audit_sequence_per_entry",
            ),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Audit log entries are immutable.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Audit log entries cannot be deleted.")

    def __str__(self):
        return f"{self.action} by {self.user_name} @ {self.timestamp:%Y-%m-%d %H:%M}"
