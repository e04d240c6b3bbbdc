import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("stations", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Alert",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("type", models.CharField(choices=[("LOW_STOCK", "Low stock"), ("MISMATCH", "Reconciliation mismatch"), ("STOCK_DISCREPANCY", "Stock discrepancy")], max_length=20)),
                ("key", models.CharField(db_index=True, help_text="Condition identity, e.g. LOW_STOCK:<station>:<fuel>", max_length=120)),
                ("fuel_type", models.CharField(blank=True, choices=[("PMS", "Premium Motor Spirit"), ("AGO", "Automotive Gas Oil"), ("DPK", "Dual Purpose Kerosene")], max_length=3)),
                ("record_date", models.DateField(blank=True, null=True)),
                ("message", models.TextField()),
                ("severity", models.CharField(choices=[("info", "Info"), ("warning", "Warning"), ("error", "Error")], max_length=10)),
                ("observed_value", models.DecimalField(blank=True, decimal_places=2, max_digits=16, null=True)),
                ("timestamp", models.DateTimeField(default=django.utils.timezone.now)),
                ("resolved", models.BooleanField(default=False)),
                ("resolved_at", models.DateTimeField(blank=True, null=True)),
                ("resolved_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="alerts_resolved", to=settings.AUTH_USER_MODEL)),
                ("station", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="alerts", to="stations.station")),
            ],
            options={
                "ordering": ["-timestamp", "-id"],
                "constraints": [
                    models.UniqueConstraint(condition=models.Q(("resolved", False)), fields=("key",), name="unique_unresolved_alert_per_key"),
                ],
            },
        ),
    ]
