import json
from decimal import Decimal

import pytest
from django.core.management import call_command

from alerts.models import Alert, AlertType
from alerts.services.alerting import evaluate_alerts, low_stock_key
from core.store import StateStore, seed_stations
from entries.constants import AuditAction
from entries.models import DailyEntry
from entries.services.workflow import submit_entry, approve
from stations.constants import DEMO_STATIONS
from stations.models import Station, FuelLine

pytestmark = pytest.mark.django_db


@pytest.fixture
def snapshot(manager, accountant, balanced_payload):
    entry = submit_entry(manager, balanced_payload)
    approve(entry, accountant, "ok")
    FuelLine.objects.filter(fuel_type="AGO").update(current_stock=Decimal("1000"))
    evaluate_alerts()

    return json.loads(StateStore().dumps(user=manager))


def _wipe():
    StateStore._clear()


def test_export_has_the_four_keys(snapshot):
    assert set(snapshot) == {"user", "stations", "entries", "alerts"}
    assert snapshot["user"]["role"] == "STATION_MANAGER"
    assert len(snapshot["entries"][0]["audit_trail"]) == 2


def test_round_trip_into_an_empty_database(snapshot):
    _wipe()

    report = StateStore().load_state(snapshot)

    assert report.fallbacks == []
    assert [s.name for s in report.stations] == ["Expanse Station - Abuja"]

    entry = DailyEntry.objects.get()
    assert entry.total_payments == Decimal("650000")
    assert entry.reconciliation_delta == 0
    assert [log.action for log in entry.audit_trail.all()] == [
        AuditAction.SUBMITTED,
        AuditAction.APPROVED,
    ]


def test_low_stock_key_follows_the_new_station_id(snapshot):
    _wipe()

    report = StateStore().load_state(snapshot)

    station = report.stations[0]
    alert = Alert.objects.get(type=AlertType.LOW_STOCK)
    assert alert.station == station
    assert alert.key == low_stock_key(station.id, "AGO")


def test_missing_key_falls_back_to_seed(snapshot):
    _wipe()
    del snapshot["stations"]
    snapshot["entries"] = []
    snapshot["alerts"] = []

    report = StateStore().load_state(snapshot)

    assert report.fallbacks == ["stations"]
    assert Station.objects.count() == len(DEMO_STATIONS)


def test_corrupt_entries_key_falls_back_alone(snapshot):
    _wipe()
    snapshot["entries"] = "not a list"

    report = StateStore().load_state(snapshot)

    assert report.fallbacks == ["entries"]
    assert DailyEntry.objects.count() == 0
    assert Station.objects.count() == 1


def test_invalid_json_loads_the_seed(db):
    report = StateStore().load_state("{not json")

    assert set(report.fallbacks) == {"user", "stations", "entries", "alerts"}
    assert [s.name for s in report.stations] == [s["name"] for s in seed_stations()]
    assert report.user is None


def test_out_of_range_stock_is_clamped(db):
    stations = seed_stations()[:1]
    stations[0]["fuel_lines"][0]["current_stock"] = "999999"
    capacity = stations[0]["fuel_lines"][0]["capacity"]

    StateStore().load_state(json.dumps({"stations": stations}, default=str))

    line = FuelLine.objects.get(fuel_type=stations[0]["fuel_lines"][0]["fuel_type"])
    assert line.current_stock == capacity


def test_refuses_to_overwrite_without_replace(station):
    with pytest.raises(ValueError):
        StateStore().load_state({})


def test_replace_wipes_existing_network(station, manager, balanced_payload):
    submit_entry(manager, balanced_payload)

    StateStore().load_state({}, replace=True)

    assert DailyEntry.objects.count() == 0
    assert not Station.objects.filter(pk=station.pk).exists()


# ============================================================
# COMMANDS
# ============================================================

def test_seed_demo_command(db):
    call_command("seed_demo")

    assert Station.objects.count() == len(DEMO_STATIONS)
    # Port Harcourt PMS starts under its threshold
    assert Alert.objects.filter(type=AlertType.LOW_STOCK, resolved=False).exists()


def test_seed_demo_is_idempotent(db):
    call_command("seed_demo")
    alerts = Alert.objects.count()
    call_command("seed_demo")

    assert Station.objects.count() == len(DEMO_STATIONS)
    assert Alert.objects.count() == alerts


def test_export_then_load_commands(snapshot, tmp_path):
    path = tmp_path / "state.json"
    call_command("export_state", output=str(path))
    _wipe()

    call_command("load_state", str(path))

    assert DailyEntry.objects.count() == 1
