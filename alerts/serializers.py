from rest_framework import serializers

from alerts.models import Alert


class AlertSerializer(serializers.ModelSerializer):
    station_name = serializers.CharField(source="station.name", read_only=True)
    resolved_by_name = serializers.SerializerMethodField()

    class Meta:
        model = Alert
        fields = (
            "id",
            "type",
            "key",
            "station",
            "station_name",
            "fuel_type",
            "record_date",
            "message",
            "severity",
            "observed_value",
            "timestamp",
            "resolved",
            "resolved_at",
            "resolved_by",
            "resolved_by_name",
        )
        read_only_fields = fields

    def get_resolved_by_name(self, obj):
        return obj.resolved_by.display_name if obj.resolved_by else None
