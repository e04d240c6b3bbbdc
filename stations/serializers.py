from rest_framework import serializers

from stations.models import Station, FuelLine, StockPurchase, StockMovement


class FuelLineSerializer(serializers.ModelSerializer):
    is_low = serializers.BooleanField(read_only=True)
    stock_percent = serializers.DecimalField(max_digits=5, decimal_places=1, read_only=True)

    class Meta:
        model = FuelLine
        fields = (
            "id",
            "fuel_type",
            "current_stock",
            "capacity",
            "rate",
            "low_stock_threshold",
            "is_low",
            "stock_percent",
            "updated_at",
        )
        read_only_fields = ("id", "updated_at")
        # one line per (station, fuel_type): upsert_fuel_line updates in place
        validators = []

    def validate(self, attrs):
        if attrs.get("capacity") is not None and attrs["capacity"] <= 0:
            raise serializers.ValidationError({"capacity": "Must be greater than zero."})
        if attrs.get("rate") is not None and attrs["rate"] <= 0:
            raise serializers.ValidationError({"rate": "Must be greater than zero."})
        for field in ("current_stock", "low_stock_threshold"):
            if attrs.get(field) is not None and attrs[field] < 0:
                raise serializers.ValidationError({field: "Cannot be negative."})
        return attrs


class StationSerializer(serializers.ModelSerializer):
    fuel_lines = FuelLineSerializer(many=True, required=False)

    class Meta:
        model = Station
        fields = (
            "id",
            "name",
            "location",
            "image_url",
            "health_score",
            "active",
            "fuel_lines",
            "created_at",
        )
        read_only_fields = ("id", "created_at")

    def validate_fuel_lines(self, value):
        if any("fuel_type" not in line for line in value):
            raise serializers.ValidationError("Each fuel line needs a fuel_type.")

        fuel_types = [line["fuel_type"] for line in value]
        if len(fuel_types) != len(set(fuel_types)):
            raise serializers.ValidationError("Each fuel type can appear only once.")

        for line in value:
            capacity = line.get("capacity")
            if capacity is not None and line.get("current_stock", 0) > capacity:
                raise serializers.ValidationError(
                    f"{line['fuel_type']}: stock cannot exceed capacity."
                )
        return value


class StockPurchaseSerializer(serializers.ModelSerializer):
    station_name = serializers.CharField(source="station.name", read_only=True)
    overflow = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = StockPurchase
        fields = (
            "id",
            "station",
            "station_name",
            "fuel_type",
            "date",
            "quantity",
            "quantity_applied",
            "overflow",
            "cost",
            "supplier",
            "created_by",
            "created_at",
        )
        read_only_fields = fields


class StockPurchaseInputSerializer(serializers.Serializer):
    # fuel_type stays optional here so procure_stock reports it as a named error
    station = serializers.IntegerField()
    fuel_type = serializers.CharField(required=False, allow_blank=True)
    quantity = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    cost = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, default=0)
    supplier = serializers.CharField(required=False, allow_blank=True, default="")
    date = serializers.DateField(required=False)


class StockMovementSerializer(serializers.ModelSerializer):
    fuel_type = serializers.CharField(source="fuel_line.fuel_type", read_only=True)
    clamped = serializers.BooleanField(read_only=True)

    class Meta:
        model = StockMovement
        fields = (
            "id",
            "station",
            "fuel_type",
            "direction",
            "quantity_requested",
            "quantity_applied",
            "clamped",
            "stock_before",
            "stock_after",
            "source_type",
            "source_id",
            "created_at",
        )
        read_only_fields = fields
