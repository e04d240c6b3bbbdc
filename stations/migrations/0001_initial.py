import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


FUEL_TYPES = [("PMS", "Premium Motor Spirit"), ("AGO", "Automotive Gas Oil"), ("DPK", "Dual Purpose Kerosene")]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Station",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=150)),
                ("location", models.CharField(max_length=255)),
                ("image_url", models.TextField(blank=True, help_text="URL or data URI")),
                ("health_score", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="FuelLine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("fuel_type", models.CharField(choices=FUEL_TYPES, max_length=3)),
                ("current_stock", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("capacity", models.DecimalField(decimal_places=2, max_digits=12)),
                ("rate", models.DecimalField(decimal_places=2, max_digits=12)),
                ("low_stock_threshold", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("station", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="fuel_lines", to="stations.station")),
            ],
            options={
                "ordering": ["station_id", "fuel_type"],
                "constraints": [
                    models.UniqueConstraint(fields=("station", "fuel_type"), name="unique_fuel_line_per_station"),
                    models.CheckConstraint(condition=models.Q(("current_stock__gte", 0), ("current_stock__lte", models.F("capacity"))), name="fuel_line_stock_within_capacity"),
                    models.CheckConstraint(condition=models.Q(("capacity__gt", 0)), name="fuel_line_capacity_positive"),
                    models.CheckConstraint(condition=models.Q(("rate__gt", 0)), name="fuel_line_rate_positive"),
                    models.CheckConstraint(condition=models.Q(("low_stock_threshold__gte", 0)), name="fuel_line_threshold_not_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockPurchase",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("fuel_type", models.CharField(choices=FUEL_TYPES, max_length=3)),
                ("date", models.DateField(default=django.utils.timezone.localdate)),
                ("quantity", models.DecimalField(decimal_places=2, max_digits=12)),
                ("quantity_applied", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("cost", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("supplier", models.CharField(blank=True, max_length=150)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("created_by", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="stock_purchases", to=settings.AUTH_USER_MODEL)),
                ("station", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="purchases", to="stations.station")),
            ],
            options={
                "ordering": ["-date", "-id"],
            },
        ),
        migrations.CreateModel(
            name="StockMovement",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("direction", models.CharField(choices=[("IN", "In"), ("OUT", "Out")], max_length=3)),
                ("quantity_requested", models.DecimalField(decimal_places=2, max_digits=12)),
                ("quantity_applied", models.DecimalField(decimal_places=2, max_digits=12)),
                ("stock_before", models.DecimalField(decimal_places=2, max_digits=12)),
                ("stock_after", models.DecimalField(decimal_places=2, max_digits=12)),
                ("source_type", models.CharField(choices=[("DAILY_ENTRY", "Approved daily entry"), ("PURCHASE", "Stock purchase")], max_length=20)),
                ("source_id", models.PositiveBigIntegerField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("fuel_line", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="movements", to="stations.fuelline")),
                ("station", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="movements", to="stations.station")),
            ],
            options={
                "ordering": ["-created_at", "-id"],
            },
        ),
    ]
