# stations/views.py
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.filters import SearchFilter, OrderingFilter
from rest_framework.response import Response

from core.pagination import StandardResultsSetPagination
from core.permissions import Capability, HasCapability, scope_to_station
from dashboard.services.insights import AdvisoryClient, station_image_prompt
from stations.constants import FuelType
from stations.models import Station, StockPurchase, StockMovement
from stations.serializers import (
    StationSerializer,
    FuelLineSerializer,
    StockPurchaseSerializer,
    StockPurchaseInputSerializer,
    StockMovementSerializer,
)
from stations.services.procurement import procure_stock
from stations.services.station import (
    create_station,
    update_station,
    delete_station,
    upsert_fuel_line,
    remove_fuel_line,
)


class StationViewSet(viewsets.ModelViewSet):
    """
    Reads are open to every role (station managers see their own station);
    writes go through the station services, which require MANAGE_STATIONS.
    """

    serializer_class = StationSerializer
    permission_classes = [HasCapability]
    capability_map = {
        "create": Capability.MANAGE_STATIONS,
        "update": Capability.MANAGE_STATIONS,
        "partial_update": Capability.MANAGE_STATIONS,
        "destroy": Capability.MANAGE_STATIONS,
        "delete_fuel_line": Capability.MANAGE_STATIONS,
    }
    pagination_class = StandardResultsSetPagination
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    lookup_value_regex = r"\d+"
    search_fields = ["name", "location"]
    ordering_fields = ["name", "created_at"]
    filterset_fields = ["active"]

    def get_queryset(self):
        qs = Station.objects.prefetch_related("fuel_lines")
        user = self.request.user
        if user.is_station_scoped:
            qs = qs.filter(pk=user.station_id)
        return qs

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = dict(serializer.validated_data)
        fuel_lines = data.pop("fuel_lines", [])
        if not data.get("image_url"):
            data["image_url"] = AdvisoryClient().station_image(
                station_image_prompt(data["name"], data["location"])
            )

        station = create_station(request.user, fuel_lines=fuel_lines, **data)
        return Response(self.get_serializer(station).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        instance = self.get_object()

        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        data = dict(serializer.validated_data)
        fuel_lines = data.pop("fuel_lines", [])

        update_station(request.user, instance.pk, fuel_lines=fuel_lines, **data)

        return Response(self.get_serializer(self.get_queryset().get(pk=instance.pk)).data)

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        delete_station(request.user, instance.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    # =========================
    # FUEL LINES
    # =========================
    @action(detail=True, methods=["get", "post"], url_path="fuel-lines")
    def fuel_lines(self, request, pk=None):
        station = self.get_object()

        if request.method == "POST":
            serializer = FuelLineSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)

            data = dict(serializer.validated_data)
            line = upsert_fuel_line(request.user, station.pk, data.pop("fuel_type"), **data)
            return Response(FuelLineSerializer(line).data, status=status.HTTP_201_CREATED)

        return Response(FuelLineSerializer(station.fuel_lines.all(), many=True).data)

    @action(
        detail=True,
        methods=["delete"],
        url_path=f"fuel-lines/(?P<fuel_type>{'|'.join(FuelType.values)})",
    )
    def delete_fuel_line(self, request, pk=None, fuel_type=None):
        station = self.get_object()
        remove_fuel_line(request.user, station.pk, fuel_type)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ProcurementViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    serializer_class = StockPurchaseSerializer
    permission_classes = [HasCapability]
    capability_map = {"create": Capability.MANAGE_STATIONS}
    pagination_class = StandardResultsSetPagination
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["station", "fuel_type", "date"]

    def get_queryset(self):
        return scope_to_station(
            StockPurchase.objects.select_related("station"), self.request.user
        )

    def create(self, request):
        serializer = StockPurchaseInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        purchase, adjustment = procure_stock(
            request.user,
            station_id=data["station"],
            fuel_type=data.get("fuel_type"),
            quantity=data.get("quantity"),
            cost=data.get("cost"),
            supplier=data.get("supplier"),
            date=data.get("date"),
        )

        return Response(
            {
                "purchase": StockPurchaseSerializer(purchase).data,
                "requested": adjustment.requested,
                "applied": adjustment.applied,
                "stock_after": adjustment.stock_after,
                "clamped": adjustment.clamped,
            },
            status=status.HTTP_201_CREATED,
        )


class StockMovementViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    serializer_class = StockMovementSerializer
    permission_classes = [HasCapability]
    pagination_class = StandardResultsSetPagination
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["station", "direction", "source_type"]

    def get_queryset(self):
        return scope_to_station(
            StockMovement.objects.select_related("fuel_line"), self.request.user
        )
