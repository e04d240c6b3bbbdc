# entries/views.py
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.response import Response

from core.pagination import StandardResultsSetPagination
from core.permissions import Capability, HasCapability, scope_to_station
from entries.constants import EntryStatus
from entries.models import DailyEntry
from entries.serializers import (
    DailyEntrySerializer,
    DailyEntryInputSerializer,
    DecisionSerializer,
    AuditFeedItemSerializer,
)
from entries.services.audit import audit_feed_queryset, collect_audit_feed
from entries.services.workflow import submit_entry, decide


class DailyEntryViewSet(mixins.ListModelMixin,
                        mixins.RetrieveModelMixin,
                        viewsets.GenericViewSet):
    """
    Daily entries are created through submission and only change state through
    approve / reject. There is no update or delete.
    """

    serializer_class = DailyEntrySerializer
    permission_classes = [HasCapability]
    capability_map = {
        "create": Capability.SUBMIT_ENTRY,
        "approve": Capability.DECIDE_ENTRY,
        "reject": Capability.DECIDE_ENTRY,
        "audit_feed": Capability.VIEW_AUDIT,
    }
    pagination_class = StandardResultsSetPagination
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    lookup_value_regex = r"\d+"
    filterset_fields = {
        "status": ["exact"],
        "station": ["exact"],
        "fuel_type": ["exact"],
        "date": ["exact", "gte", "lte"],
    }
    ordering_fields = ["date", "created_at", "amount"]

    def get_queryset(self):
        qs = (
            DailyEntry.objects
            .select_related("station")
            .prefetch_related("audit_trail")
        )
        return scope_to_station(qs, self.request.user)

    def create(self, request, *args, **kwargs):
        serializer = DailyEntryInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        entry = submit_entry(request.user, serializer.validated_data)

        return Response(
            DailyEntrySerializer(self._reload(entry)).data,
            status=status.HTTP_201_CREATED,
        )

    # =========================
    # WORKFLOW
    # =========================
    def _decide(self, request, pk, verdict):
        serializer = DecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        entry = decide(pk, verdict, request.user, serializer.validated_data["comments"])
        return Response(DailyEntrySerializer(self._reload(entry)).data)

    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):
        return self._decide(request, pk, EntryStatus.APPROVED)

    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):
        return self._decide(request, pk, EntryStatus.REJECTED)

    # =========================
    # AUDIT FEED
    # =========================
    @action(detail=False, methods=["get"], url_path="audit-feed")
    def audit_feed(self, request):
        entries = self.filter_queryset(
            scope_to_station(audit_feed_queryset(), request.user)
        )
        items = [item.as_dict() for item in collect_audit_feed(entries)]

        page = self.paginate_queryset(items)
        if page is not None:
            return self.get_paginated_response(AuditFeedItemSerializer(page, many=True).data)

        return Response(AuditFeedItemSerializer(items, many=True).data)

    @staticmethod
    def _reload(entry):
        return (
            DailyEntry.objects
            .select_related("station")
            .prefetch_related("audit_trail")
            .get(pk=entry.pk)
        )
