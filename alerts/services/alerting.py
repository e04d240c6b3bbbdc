# alerts/services/alerting.py
"""
Alerting engine.

Alerts are derived from live stations and entries. Every condition has a key; an
evaluation pass never creates a second unresolved alert for a key that already has
one, so running it twice on unchanged data is a no-op.
"""

import logging
from collections import OrderedDict

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Sum
from django.utils import timezone

from alerts.models import Alert, AlertType
from core.exceptions import AlertNotFound
from core.permissions import Capability, require_capability, scope_to_station
from entries.models import DailyEntry
from stations.constants import MovementSource
from stations.models import Station, FuelLine

logger = logging.getLogger(__name__)


def severity_for(alert_type):
    return settings.EXPANSE_ALERT_SEVERITY[alert_type]


def low_stock_key(station_id, fuel_type):
    return f"{AlertType.LOW_STOCK}:{station_id}:{fuel_type}"


def mismatch_key(station_id, record_date):
    return f"{AlertType.MISMATCH}:{station_id}:{record_date.isoformat()}"


def _create(alert_type, key, station, **fields):
    """
    Inserts one alert. Losing a race on the unresolved-key constraint means the
    alert already exists, which is the desired end state.
    """
    try:
        with transaction.atomic():
            alert = Alert.objects.create(
                type=alert_type,
                key=key,
                station=station,
                severity=severity_for(alert_type),
                **fields,
            )
    except IntegrityError:
        logger.info("Alert %s already raised concurrently", key)
        return None

    logger.info("Alert raised: %s", alert.message)
    return alert


# ============================================================
# LOW STOCK
# ============================================================

def evaluate_low_stock(station_id=None, fuel_type=None):
    """
    One LOW_STOCK alert per (station, fuel type) whose stock is under its threshold.

    A resolved alert is raised again only once the observed stock has changed.
    Returns the alerts created by this pass.
    """

    lines = FuelLine.objects.select_related("station")
    if station_id is not None:
        lines = lines.filter(station_id=station_id)
    if fuel_type is not None:
        lines = lines.filter(fuel_type=fuel_type)

    created = []

    for line in lines:
        if not line.is_low:
            continue

        key = low_stock_key(line.station_id, line.fuel_type)

        if Alert.objects.filter(key=key, resolved=False).exists():
            continue

        last_resolved = (
            Alert.objects
            .filter(key=key, resolved=True)
            .order_by("-resolved_at", "-id")
            .first()
        )
        if last_resolved and last_resolved.observed_value == line.current_stock:
            continue

        alert = _create(
            AlertType.LOW_STOCK,
            key,
            line.station,
            fuel_type=line.fuel_type,
            observed_value=line.current_stock,
            message=(
                f"Station {line.station.name} is below threshold: "
                f"{line.current_stock:,.0f}L left of {line.fuel_type}."
            ),
        )
        if alert:
            created.append(alert)

    return created


# ============================================================
# RECONCILIATION MISMATCH
# ============================================================

def evaluate_mismatches(entries=None):
    """
    One unresolved MISMATCH alert per (station, date) with an unbalanced entry.

    The alert carries the summed delta of every entry of that station and day. A
    resolved alert covers the key for as long as that sum is unchanged; an unbalanced
    entry recorded later on the same day raises a new alert.
    """

    if entries is None:
        entries = (
            DailyEntry.objects
            .exclude(reconciliation_delta=0)
            .select_related("station")
            .order_by("created_at", "id")
        )

    grouped = OrderedDict()
    for entry in entries:
        if entry.reconciliation_delta == 0:
            continue
        key = mismatch_key(entry.station_id, entry.date)
        grouped.setdefault(key, entry)

    created = []

    for key, first in grouped.items():
        if Alert.objects.filter(key=key, resolved=False).exists():
            continue

        delta = DailyEntry.objects.filter(
            station_id=first.station_id,
            date=first.date,
        ).aggregate(total=Sum("reconciliation_delta"))["total"]

        last_resolved = (
            Alert.objects
            .filter(key=key, resolved=True)
            .order_by("-resolved_at", "-id")
            .first()
        )
        if last_resolved and last_resolved.observed_value == delta:
            continue

        alert = _create(
            AlertType.MISMATCH,
            key,
            first.station,
            record_date=first.date,
            observed_value=delta,
            message=(
                f"Reconciliation mismatch for {first.date.isoformat()} at "
                f"{first.station.name}. Delta: {abs(delta):,.2f}"
            ),
        )
        if alert:
            created.append(alert)

    return created


# ============================================================
# CLAMPED STOCK ADJUSTMENT
# ============================================================

def raise_stock_discrepancy(adjustment):
    """
    Records the volume a stock mutation could not apply because of the tank bounds.
    """
    station = Station.objects.get(pk=adjustment.station_id)

    if adjustment.source_type == MovementSource.CAPACITY_CHANGE:
        # nothing was requested: the whole applied volume left the books
        observed = adjustment.applied
        message = (
            f"Capacity of {adjustment.fuel_type} at {station.name} was cut below its stock: "
            f"{observed:,.0f}L written off."
        )
    else:
        observed = adjustment.unapplied
        message = (
            f"Stock {adjustment.direction} of {adjustment.requested:,.0f}L "
            f"{adjustment.fuel_type} at {station.name} was clamped: "
            f"{observed:,.0f}L not applied."
        )

    return _create(
        AlertType.STOCK_DISCREPANCY,
        f"{AlertType.STOCK_DISCREPANCY}:{adjustment.movement_id}",
        station,
        fuel_type=adjustment.fuel_type,
        observed_value=observed,
        message=message,
    )


# ============================================================
# PASS / RESOLUTION / QUERIES
# ============================================================

def evaluate_alerts(stations=None, entries=None):
    """
    One full pass. ``stations`` narrows the low-stock check, ``entries`` the
    mismatch check; both default to everything.
    """
    if stations is None:
        created = evaluate_low_stock()
    else:
        created = []
        for station in stations:
            created += evaluate_low_stock(station_id=getattr(station, "pk", station))

    created += evaluate_mismatches(entries)
    logger.info("Alert evaluation pass created %d alert(s)", len(created))
    return created


@transaction.atomic
def resolve_alert(alert_id, user):
    try:
        alert = Alert.objects.select_for_update().get(pk=alert_id)
    except Alert.DoesNotExist:
        raise AlertNotFound(f"Alert {alert_id} does not exist.")

    require_capability(user, Capability.RESOLVE_ALERT, station_id=alert.station_id)

    if alert.resolved:
        return alert

    alert.resolved = True
    alert.resolved_at = timezone.now()
    alert.resolved_by = user
    alert.save(update_fields=["resolved", "resolved_at", "resolved_by"])

    logger.info("Alert %s resolved by %s", alert.id, user.username)
    return alert


def visible_alerts(user=None):
    qs = Alert.objects.select_related("station")
    if user is None:
        return qs
    return scope_to_station(qs, user)


def active_alerts(user=None):
    return visible_alerts(user).filter(resolved=False)
