import django.core.serializers.json
import django.db.models.deletion
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
            name="DailyEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateField()),
                ("fuel_type", models.CharField(choices=[("PMS", "Premium Motor Spirit"), ("AGO", "Automotive Gas Oil"), ("DPK", "Dual Purpose Kerosene")], max_length=3)),
                ("opening_meter", models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ("closing_meter", models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ("quantity_sold", models.DecimalField(decimal_places=2, max_digits=12)),
                ("rate", models.DecimalField(decimal_places=2, max_digits=12)),
                ("amount", models.DecimalField(decimal_places=2, help_text="quantity_sold x rate", max_digits=16)),
                ("payments", models.JSONField(default=dict, encoder=django.core.serializers.json.DjangoJSONEncoder)),
                ("expenses", models.JSONField(default=dict, encoder=django.core.serializers.json.DjangoJSONEncoder)),
                ("generator_hours", models.DecimalField(decimal_places=2, default=0, max_digits=6)),
                ("total_payments", models.DecimalField(decimal_places=2, max_digits=16)),
                ("total_expenses", models.DecimalField(decimal_places=2, max_digits=16)),
                ("net_amount", models.DecimalField(decimal_places=2, max_digits=16)),
                ("reconciliation_delta", models.DecimalField(decimal_places=2, help_text="amount - total_payments; zero means balanced", max_digits=16)),
                ("status", models.CharField(choices=[("PENDING", "Pending"), ("APPROVED", "Approved"), ("REJECTED", "Rejected")], default="PENDING", max_length=10)),
                ("approver_comments", models.TextField(blank=True)),
                ("decided_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("created_by", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="entries_submitted", to=settings.AUTH_USER_MODEL)),
                ("decided_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="entries_decided", to=settings.AUTH_USER_MODEL)),
                ("station", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="entries", to="stations.station")),
            ],
            options={
                "verbose_name_plural": "Daily entries",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["station", "date"], name="entry_station_date_idx"),
                    models.Index(fields=["status"], name="entry_status_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="AuditLogEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("sequence", models.PositiveIntegerField()),
                ("timestamp", models.DateTimeField()),
                ("user_ref", models.CharField(max_length=150)),
                ("user_name", models.CharField(max_length=150)),
                ("action", models.CharField(choices=[("CREATED", "Created"), ("SUBMITTED", "Submitted"), ("APPROVED", "Approved"), ("REJECTED", "Rejected")], max_length=10)),
                ("details", models.TextField(blank=True)),
                ("entry", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="audit_trail", to="entries.dailyentry")),
                ("user", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="audit_logs", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["entry_id", "sequence"],
                "constraints": [
                    models.UniqueConstraint(fields=("entry", "sequence"), name="unique_audit_sequence_per_entry"),
                ],
            },
        ),
    ]
