from rest_framework import serializers

from entries.models import DailyEntry, AuditLogEntry
from stations.constants import FuelType


def _money_field(**kwargs):
    return serializers.DecimalField(max_digits=16, decimal_places=2, **kwargs)


class AuditLogEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = AuditLogEntry
        fields = ("sequence", "timestamp", "user_ref", "user_name", "action", "details")
        read_only_fields = fields


class DailyEntrySerializer(serializers.ModelSerializer):
    station_name = serializers.CharField(source="station.name", read_only=True)
    is_balanced = serializers.BooleanField(read_only=True)
    audit_trail = AuditLogEntrySerializer(many=True, read_only=True)

    class Meta:
        model = DailyEntry
        fields = (
            "id",
            "date",
            "station",
            "station_name",
            "fuel_type",
            "opening_meter",
            "closing_meter",
            "quantity_sold",
            "rate",
            "amount",
            "payments",
            "expenses",
            "generator_hours",
            "total_payments",
            "total_expenses",
            "net_amount",
            "reconciliation_delta",
            "is_balanced",
            "status",
            "approver_comments",
            "created_by",
            "decided_by",
            "decided_at",
            "created_at",
            "audit_trail",
        )
        read_only_fields = fields


class DailyEntryInputSerializer(serializers.Serializer):
    """
    Request shape for a submission. Business validation (meters, breakdown
    channels, station scope) happens in ``submit_entry``.
    """

    date = serializers.DateField(required=False)
    station = serializers.IntegerField(required=False)
    fuel_type = serializers.ChoiceField(choices=FuelType.choices)

    opening_meter = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, allow_null=True)
    closing_meter = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, allow_null=True)
    quantity_sold = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)

    payments = serializers.DictField(child=_money_field(), required=False)
    expenses = serializers.DictField(child=_money_field(), required=False)
    generator_hours = serializers.DecimalField(max_digits=6, decimal_places=2, required=False, allow_null=True)


class DecisionSerializer(serializers.Serializer):
    comments = serializers.CharField(required=False, allow_blank=True, default="")


class AuditFeedItemSerializer(serializers.Serializer):
    timestamp = serializers.DateTimeField()
    user_ref = serializers.CharField()
    user_name = serializers.CharField()
    action = serializers.CharField()
    details = serializers.CharField()
    station_name = serializers.CharField()
    record_date = serializers.DateField()
    entry_id = serializers.IntegerField()
