# alerts/views.py
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.response import Response

from alerts.serializers import AlertSerializer
from alerts.services.alerting import visible_alerts, resolve_alert, evaluate_alerts
from core.pagination import StandardResultsSetPagination
from core.permissions import Capability, HasCapability


class AlertViewSet(mixins.ListModelMixin,
                   mixins.RetrieveModelMixin,
                   viewsets.GenericViewSet):
    """
    Alerts are read-only apart from resolution; new ones only come from the
    alerting engine.
    """

    serializer_class = AlertSerializer
    permission_classes = [HasCapability]
    capability_map = {
        "resolve": Capability.RESOLVE_ALERT,
        "evaluate": Capability.MANAGE_STATIONS,
    }
    pagination_class = StandardResultsSetPagination
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    lookup_value_regex = r"\d+"
    filterset_fields = ["resolved", "type", "severity", "station", "fuel_type"]
    ordering_fields = ["timestamp"]

    def get_queryset(self):
        return visible_alerts(self.request.user).select_related("resolved_by")

    @action(detail=True, methods=["post"])
    def resolve(self, request, pk=None):
        alert = resolve_alert(pk, request.user)
        return Response(AlertSerializer(alert).data)

    @action(detail=False, methods=["post"])
    def evaluate(self, request):
        created = evaluate_alerts()
        return Response(
            {
                "created": len(created),
                "alerts": AlertSerializer(created, many=True).data,
            },
            status=status.HTTP_200_OK,
        )
