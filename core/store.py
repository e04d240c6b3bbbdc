# core/store.py
"""
JSON snapshot of the whole network under four independent keys:
``user``, ``stations``, ``entries`` and ``alerts``.

Loading validates every key on its own. A key that is absent or unreadable falls
back to its seed value (demo stations, no entries, no alerts, no user) and the other
keys load normally. Nothing is written until every key has been parsed.
"""

import copy
import json
import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from django.contrib.auth import get_user_model
from django.core.serializers.json import DjangoJSONEncoder
from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from accounts.constants import UserRole
from alerts.models import Alert, AlertType, Severity
from alerts.services.alerting import low_stock_key, mismatch_key, severity_for
from entries.constants import EntryStatus, AuditAction
from entries.models import DailyEntry, AuditLogEntry
from entries.services.reconciliation import (
    gross_amount,
    normalize_breakdown,
    payment_channels,
    expense_categories,
    reconcile,
)
from stations.constants import FuelType, DEMO_STATIONS, DEMO_USERS
from stations.models import Station, FuelLine, StockPurchase, StockMovement

logger = logging.getLogger(__name__)

SNAPSHOT_KEYS = ("user", "stations", "entries", "alerts")


class UnreadableKey(ValueError):
    pass


@dataclass
class LoadReport:
    user: object = None
    stations: list = field(default_factory=list)
    entries: list = field(default_factory=list)
    alerts: list = field(default_factory=list)
    fallbacks: list = field(default_factory=list)


# ============================================================
# SEEDS
# ============================================================

def seed_stations():
    return [
        {**copy.deepcopy(station), "id": index + 1}
        for index, station in enumerate(DEMO_STATIONS)
    ]


def seed_value(key):
    if key == "stations":
        return seed_stations()
    if key == "user":
        return None
    return []


@transaction.atomic
def ensure_demo_users(stations):
    """
    Creates the demo accounts that are missing. ``stations`` is the ordered list the
    users' ``station_index`` points into.
    """
    User = get_user_model()
    created = []

    for demo in DEMO_USERS:
        index = demo["station_index"]
        station = stations[index] if index is not None and index < len(stations) else None
        if demo["role"] == UserRole.STATION_MANAGER and station is None:
            continue

        user, was_created = User.objects.get_or_create(
            email=demo["email"],
            defaults={
                "username": demo["username"],
                "first_name": demo["first_name"],
                "last_name": demo["last_name"],
                "role": demo["role"],
                "station": station,
            },
        )
        if was_created:
            user.set_unusable_password()
            user.save(update_fields=["password"])
            created.append(user)

    return created


# ============================================================
# FIELD PARSERS
# ============================================================

def _require(item, name):
    if not isinstance(item, dict) or name not in item:
        raise UnreadableKey(f"missing '{name}'")
    return item[name]


def _decimal(value, name):
    try:
        value = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise UnreadableKey(f"'{name}' is not a number")
    if not value.is_finite():
        raise UnreadableKey(f"'{name}' is not a number")
    return value


def _choice(value, choices, name):
    if value not in choices:
        raise UnreadableKey(f"'{name}' has unknown value {value!r}")
    return value


def _date(value, name):
    parsed = parse_date(value) if isinstance(value, str) else None
    if parsed is None:
        raise UnreadableKey(f"'{name}' is not a date")
    return parsed


def _datetime(value, name):
    parsed = parse_datetime(value) if isinstance(value, str) else None
    if parsed is None:
        raise UnreadableKey(f"'{name}' is not a timestamp")
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


def _list(value, key):
    if not isinstance(value, list):
        raise UnreadableKey(f"'{key}' is not a list")
    return value


# ============================================================
# KEY PARSERS
# ============================================================

def parse_user(value):
    if value is None:
        return None

    return {
        "email": str(_require(value, "email")),
        "name": str(value.get("name") or ""),
        "role": _choice(_require(value, "role"), [role for role, _ in UserRole.CHOICES], "role"),
        "station": value.get("station"),
    }


def parse_stations(value):
    stations = []
    seen_refs = set()

    for index, item in enumerate(_list(value, "stations")):
        ref = str(item.get("id", index + 1)) if isinstance(item, dict) else None
        if ref in seen_refs:
            raise UnreadableKey(f"duplicate station id {ref}")
        seen_refs.add(ref)

        lines = []
        for line in _list(_require(item, "fuel_lines"), "fuel_lines"):
            capacity = _decimal(_require(line, "capacity"), "capacity")
            rate = _decimal(_require(line, "rate"), "rate")
            if capacity <= 0 or rate <= 0:
                raise UnreadableKey("capacity and rate must be positive")
            stock = _decimal(line.get("current_stock", 0), "current_stock")
            lines.append({
                "fuel_type": _choice(_require(line, "fuel_type"), FuelType.values, "fuel_type"),
                # out-of-range stock is clamped, never rejected
                "current_stock": max(Decimal("0"), min(stock, capacity)),
                "capacity": capacity,
                "rate": rate,
                "low_stock_threshold": max(
                    Decimal("0"), _decimal(line.get("low_stock_threshold", 0), "low_stock_threshold")
                ),
            })

        if len({line["fuel_type"] for line in lines}) != len(lines):
            raise UnreadableKey("duplicate fuel type in a station")

        health_score = item.get("health_score")
        if health_score is not None and (not isinstance(health_score, int) or health_score < 0):
            raise UnreadableKey("'health_score' is not a positive integer")

        stations.append({
            "ref": ref,
            "name": str(_require(item, "name")),
            "location": str(item.get("location") or ""),
            "image_url": str(item.get("image_url") or ""),
            "health_score": health_score,
            "active": bool(item.get("active", True)),
            "fuel_lines": lines,
        })

    return stations


def parse_entries(value, station_refs):
    entries = []

    for item in _list(value, "entries"):
        station = str(_require(item, "station"))
        if station not in station_refs:
            raise UnreadableKey(f"entry references unknown station {station}")

        quantity = _decimal(_require(item, "quantity_sold"), "quantity_sold")
        rate = _decimal(_require(item, "rate"), "rate")
        if quantity <= 0:
            raise UnreadableKey("quantity_sold must be positive")

        for name in ("payments", "expenses"):
            if not isinstance(item.get(name) or {}, dict):
                raise UnreadableKey(f"'{name}' is not an object")

        try:
            payments = normalize_breakdown(item.get("payments"), payment_channels())
            expenses = normalize_breakdown(item.get("expenses"), expense_categories())
        except ValueError as exc:
            raise UnreadableKey(str(exc))

        trail = [
            {
                "timestamp": _datetime(_require(log, "timestamp"), "timestamp"),
                "user_ref": str(log.get("user_ref") or ""),
                "user_name": str(log.get("user_name") or ""),
                "action": _choice(_require(log, "action"), AuditAction.values, "action"),
                "details": str(log.get("details") or ""),
            }
            for log in _list(item.get("audit_trail", []), "audit_trail")
        ]

        entries.append({
            "station": station,
            "date": _date(_require(item, "date"), "date"),
            "fuel_type": _choice(_require(item, "fuel_type"), FuelType.values, "fuel_type"),
            "quantity_sold": quantity,
            "rate": rate,
            "payments": payments,
            "expenses": expenses,
            "generator_hours": _decimal(item.get("generator_hours") or 0, "generator_hours"),
            "status": _choice(item.get("status", EntryStatus.PENDING), EntryStatus.values, "status"),
            "approver_comments": str(item.get("approver_comments") or ""),
            "audit_trail": trail,
        })

    return entries


def parse_alerts(value, station_refs):
    alerts = []

    for index, item in enumerate(_list(value, "alerts")):
        station = str(_require(item, "station"))
        if station not in station_refs:
            raise UnreadableKey(f"alert references unknown station {station}")

        alert_type = _choice(_require(item, "type"), AlertType.values, "type")
        fuel_type = item.get("fuel_type") or ""
        if fuel_type:
            _choice(fuel_type, FuelType.values, "fuel_type")
        record_date = _date(item["record_date"], "record_date") if item.get("record_date") else None

        resolved = bool(item.get("resolved", False))

        observed = item.get("observed_value")
        alerts.append({
            "type": alert_type,
            "key": str(item.get("key") or f"{alert_type}:import:{index}"),
            "station": station,
            "fuel_type": fuel_type,
            "record_date": record_date,
            "message": str(_require(item, "message")),
            "severity": _choice(
                item.get("severity") or severity_for(alert_type), Severity.values, "severity"
            ),
            "observed_value": _decimal(observed, "observed_value") if observed is not None else None,
            "timestamp": _datetime(item["timestamp"], "timestamp") if item.get("timestamp") else timezone.now(),
            "resolved": resolved,
        })

    return alerts


# ============================================================
# STORE
# ============================================================

class StateStore:

    # =========================
    # EXPORT
    # =========================
    def export_state(self, user=None):
        return {
            "user": self._export_user(user),
            "stations": [self._export_station(s) for s in Station.objects.prefetch_related("fuel_lines")],
            "entries": [
                self._export_entry(e)
                for e in DailyEntry.objects.prefetch_related("audit_trail")
            ],
            "alerts": [self._export_alert(a) for a in Alert.objects.all()],
        }

    def dumps(self, user=None):
        return json.dumps(self.export_state(user), cls=DjangoJSONEncoder, indent=2)

    @staticmethod
    def _export_user(user):
        if user is None:
            return None
        return {
            "id": user.pk,
            "email": user.email,
            "name": user.display_name,
            "role": user.role,
            "station": user.station_id,
        }

    @staticmethod
    def _export_station(station):
        return {
            "id": station.id,
            "name": station.name,
            "location": station.location,
            "image_url": station.image_url,
            "health_score": station.health_score,
            "active": station.active,
            "fuel_lines": [
                {
                    "fuel_type": line.fuel_type,
                    "current_stock": line.current_stock,
                    "capacity": line.capacity,
                    "rate": line.rate,
                    "low_stock_threshold": line.low_stock_threshold,
                }
                for line in station.fuel_lines.all()
            ],
        }

    @staticmethod
    def _export_entry(entry):
        return {
            "id": entry.id,
            "date": entry.date,
            "station": entry.station_id,
            "fuel_type": entry.fuel_type,
            "quantity_sold": entry.quantity_sold,
            "rate": entry.rate,
            "amount": entry.amount,
            "payments": entry.payments,
            "expenses": entry.expenses,
            "generator_hours": entry.generator_hours,
            "total_payments": entry.total_payments,
            "total_expenses": entry.total_expenses,
            "net_amount": entry.net_amount,
            "reconciliation_delta": entry.reconciliation_delta,
            "status": entry.status,
            "approver_comments": entry.approver_comments,
            "audit_trail": [
                {
                    "timestamp": log.timestamp,
                    "user_ref": log.user_ref,
                    "user_name": log.user_name,
                    "action": log.action,
                    "details": log.details,
                }
                for log in entry.audit_trail.all()
            ],
        }

    @staticmethod
    def _export_alert(alert):
        return {
            "id": alert.id,
            "type": alert.type,
            "key": alert.key,
            "station": alert.station_id,
            "fuel_type": alert.fuel_type,
            "record_date": alert.record_date,
            "message": alert.message,
            "severity": alert.severity,
            "observed_value": alert.observed_value,
            "timestamp": alert.timestamp,
            "resolved": alert.resolved,
        }

    # =========================
    # LOAD
    # =========================
    def parse(self, raw):
        """
        ``raw`` is a JSON string or an already decoded object. Returns the parsed
        keys and the names of the keys that fell back to their seed.
        """
        if isinstance(raw, (str, bytes)):
            try:
                raw = json.loads(raw)
            except ValueError as exc:
                logger.warning("Snapshot is not valid JSON, using seed values: %s", exc)
                raw = {}

        if not isinstance(raw, dict):
            logger.warning("Snapshot is not an object, using seed values")
            raw = {}

        fallbacks = []

        def read(key, parser, *args):
            if key not in raw:
                fallbacks.append(key)
                return parser(seed_value(key), *args)
            try:
                return parser(raw[key], *args)
            except UnreadableKey as exc:
                logger.warning("Snapshot key '%s' unreadable, using seed value: %s", key, exc)
                fallbacks.append(key)
                return parser(seed_value(key), *args)

        stations = read("stations", parse_stations)
        refs = {station["ref"] for station in stations}

        parsed = {
            "user": read("user", parse_user),
            "stations": stations,
            "entries": read("entries", parse_entries, refs),
            "alerts": read("alerts", parse_alerts, refs),
        }
        return parsed, fallbacks

    @transaction.atomic
    def load_state(self, raw, replace=False):
        parsed, fallbacks = self.parse(raw)

        if Station.objects.exists():
            if not replace:
                raise ValueError("Database already holds stations; load with replace=True to overwrite.")
            self._clear()

        report = LoadReport(fallbacks=fallbacks)
        by_ref = {}

        for item in parsed["stations"]:
            station = Station.objects.create(
                name=item["name"],
                location=item["location"],
                image_url=item["image_url"],
                health_score=item["health_score"],
                active=item["active"],
            )
            for line in item["fuel_lines"]:
                FuelLine.objects.create(station=station, **line)
            by_ref[item["ref"]] = station
            report.stations.append(station)

        # snapshot lists entries newest first
        for item in reversed(parsed["entries"]):
            report.entries.insert(0, self._load_entry(item, by_ref[item["station"]]))

        open_keys = set()
        for item in parsed["alerts"]:
            station = by_ref[item.pop("station")]
            item["key"] = self._alert_key(item, station)
            if not item["resolved"]:
                if item["key"] in open_keys:
                    continue
                open_keys.add(item["key"])
            report.alerts.append(Alert.objects.create(station=station, **item))

        if parsed["user"] is not None:
            report.user = self._load_user(parsed["user"], by_ref)

        logger.info(
            "Snapshot loaded: %d station(s), %d entr(y/ies), %d alert(s), fallbacks=%s",
            len(report.stations), len(report.entries), len(report.alerts), fallbacks or "none",
        )
        return report

    @staticmethod
    def _clear():
        # queryset deletes: the audit trail is wiped with its entries
        Alert.objects.all().delete()
        StockMovement.objects.all().delete()
        StockPurchase.objects.all().delete()
        AuditLogEntry.objects.all().delete()
        DailyEntry.objects.all().delete()
        get_user_model().objects.filter(station__isnull=False).update(station=None)
        FuelLine.objects.all().delete()
        Station.objects.all().delete()

    @staticmethod
    def _alert_key(item, station):
        if item["type"] == AlertType.LOW_STOCK and item["fuel_type"]:
            return low_stock_key(station.id, item["fuel_type"])
        if item["type"] == AlertType.MISMATCH and item["record_date"]:
            return mismatch_key(station.id, item["record_date"])
        return item["key"]

    @staticmethod
    def _load_entry(item, station):
        amount = gross_amount(item["quantity_sold"], item["rate"])
        result = reconcile(amount, item["payments"], item["expenses"])

        entry = DailyEntry.objects.create(
            date=item["date"],
            station=station,
            fuel_type=item["fuel_type"],
            quantity_sold=item["quantity_sold"],
            rate=item["rate"],
            amount=amount,
            payments=item["payments"],
            expenses=item["expenses"],
            generator_hours=item["generator_hours"],
            total_payments=result.total_payments,
            total_expenses=result.total_expenses,
            net_amount=result.net_amount,
            reconciliation_delta=result.delta,
            status=item["status"],
            approver_comments=item["approver_comments"],
        )

        for sequence, log in enumerate(item["audit_trail"], start=1):
            AuditLogEntry.objects.create(entry=entry, sequence=sequence, **log)

        return entry

    @staticmethod
    def _load_user(item, by_ref):
        User = get_user_model()
        station = by_ref.get(str(item["station"])) if item["station"] is not None else None

        user, created = User.objects.get_or_create(
            email=item["email"],
            defaults={
                "username": item["email"].split("@")[0],
                "first_name": item["name"],
                "role": item["role"],
                "station": station,
            },
        )
        if created:
            user.set_unusable_password()
            user.save(update_fields=["password"])
        return user
