# dashboard/views.py
from django.utils import timezone
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import APIView

from alerts.serializers import AlertSerializer
from alerts.services.alerting import active_alerts
from core.permissions import scope_to_station
from dashboard.permissions import DashboardPermission, sees_network
from dashboard.services.insights import AdvisoryClient, summarize_metrics
from dashboard.utils.aggregations import sum_field, entry_totals, daily_series
from dashboard.utils.periods import ReportPeriod, get_period_dates, last_n_days
from entries.constants import EntryStatus
from entries.models import DailyEntry
from stations.models import Station, FuelLine
from stations.services.stock import stock_summary


class DashboardView(APIView):
    permission_classes = [DashboardPermission]

    def get(self, request):
        user = request.user
        entries = scope_to_station(DailyEntry.objects.all(), user)

        # =========================
        # KPI
        # =========================
        totals = entry_totals(entries)
        kpis = {
            "total_revenue": totals["sales"],
            "fuel_sold": totals["volume"],
            "net_profit": totals["profit"],
            "pending_reviews": entries.filter(status=EntryStatus.PENDING).count(),
        }

        # =========================
        # 7-DAY SERIES
        # =========================
        chart = daily_series(entries, last_n_days(7))

        # =========================
        # ALERTS
        # =========================
        open_alerts = active_alerts(user)
        recent_alerts = AlertSerializer(open_alerts[:5], many=True).data

        # =========================
        # STATIONS (ADMIN / CEO)
        # =========================
        stations = None
        if sees_network(user):
            stations = self._station_status(entries)

        low_lines = scope_to_station(FuelLine.objects.all(), user)
        low_stock_count = sum(1 for line in low_lines if line.is_low)

        insight = AdvisoryClient().text_insight(
            summarize_metrics(kpis, low_stock_count, open_alerts.count())
        )

        return Response({
            "user": user.display_name,
            "kpis": kpis,
            "chart": chart,
            "recent_alerts": recent_alerts,
            "stations": stations,
            "insight": insight,
        })

    @staticmethod
    def _station_status(entries):
        today = timezone.localdate()
        rows = []

        for station in Station.objects.prefetch_related("fuel_lines"):
            fuel_lines = stock_summary(station)
            any_low = any(line["is_low"] for line in fuel_lines)

            rows.append({
                "id": station.id,
                "name": station.name,
                "location": station.location,
                "fuel_lines": fuel_lines,
                "daily_sales": sum_field(
                    entries.filter(station=station, date=today), "total_payments"
                ),
                "status": "REFILL_NEEDED" if any_low else "OPERATIONAL",
            })

        return rows


class ReportsView(APIView):
    """
    Financial report over a period, for one station or consolidated.
    """

    permission_classes = [DashboardPermission]

    def get(self, request):
        user = request.user
        period = request.query_params.get("period", ReportPeriod.LAST_7)
        station = request.query_params.get("station", "ALL")

        try:
            start, end = get_period_dates(period)
        except ValueError:
            raise ValidationError({"period": f"Expected one of {', '.join(ReportPeriod.CHOICES)}."})

        entries = scope_to_station(
            DailyEntry.objects.select_related("station"), user
        ).filter(date__gte=start, date__lte=end)

        if station not in ("", "ALL"):
            if not station.isdigit():
                raise ValidationError({"station": "Expected a station id or ALL."})
            entries = entries.filter(station_id=int(station))

        entries = entries.order_by("-date", "-created_at", "-id")

        rows = [
            {
                "id": entry.id,
                "date": entry.date,
                "station": entry.station_id,
                "station_name": entry.station.name,
                "fuel_type": entry.fuel_type,
                "quantity_sold": entry.quantity_sold,
                "total_payments": entry.total_payments,
                "total_expenses": entry.total_expenses,
                "net_amount": entry.net_amount,
                "reconciliation_delta": entry.reconciliation_delta,
                "status": entry.status,
            }
            for entry in entries
        ]

        return Response({
            "period": period,
            "start": start,
            "end": end,
            "station": station,
            "totals": entry_totals(entries),
            "rows": rows,
        })
