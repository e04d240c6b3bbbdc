from decimal import Decimal

import pytest
from django.test import override_settings

from entries.services.workflow import submit_entry
from stations.models import Station, FuelLine, StockPurchase

pytestmark = pytest.mark.django_db

URL = "/api/v1/stations/"

NEW_STATION = {
    "name": "Expanse Station - Kano",
    "location": "Nassarawa GRA",
    "fuel_lines": [
        {"fuel_type": "PMS", "current_stock": "20000", "capacity": "40000", "rate": "650",
         "low_stock_threshold": "8000"},
        {"fuel_type": "DPK", "current_stock": "0", "capacity": "10000", "rate": "1100",
         "low_stock_threshold": "2000"},
    ],
}


@override_settings(EXPANSE_INSIGHTS={
    "TEXT_URL": "", "IMAGE_URL": "", "API_KEY": "", "TIMEOUT": 1,
    "FALLBACK_TEXT": "fallback", "PLACEHOLDER_IMAGE": "https://img.test/placeholder.png",
})
def test_admin_creates_station_with_fuel_lines(api_client, admin):
    api_client.force_authenticate(user=admin)

    resp = api_client.post(URL, NEW_STATION, format="json")

    assert resp.status_code == 201
    assert resp.data["image_url"] == "https://img.test/placeholder.png"
    assert {line["fuel_type"] for line in resp.data["fuel_lines"]} == {"PMS", "DPK"}
    station = Station.objects.get(pk=resp.data["id"])
    assert station.fuel_lines.get(fuel_type="DPK").current_stock == 0


def test_station_with_stock_above_capacity_is_rejected(api_client, admin):
    api_client.force_authenticate(user=admin)
    payload = {
        **NEW_STATION,
        "fuel_lines": [{"fuel_type": "PMS", "current_stock": "50000", "capacity": "40000", "rate": "650"}],
    }

    resp = api_client.post(URL, payload, format="json")

    assert resp.status_code == 400
    assert not Station.objects.filter(name=NEW_STATION["name"]).exists()


def test_manager_cannot_create_station(api_client, manager):
    api_client.force_authenticate(user=manager)

    resp = api_client.post(URL, NEW_STATION, format="json")

    assert resp.status_code == 403


def test_manager_only_sees_own_station(api_client, manager, station, other_station):
    api_client.force_authenticate(user=manager)

    resp = api_client.get(URL)

    assert resp.status_code == 200
    assert [s["id"] for s in resp.data["results"]] == [station.id]
    assert api_client.get(f"{URL}{other_station.id}/").status_code == 404


def test_admin_updates_station_and_upserts_fuel_line(api_client, admin, station):
    api_client.force_authenticate(user=admin)

    resp = api_client.patch(
        f"{URL}{station.id}/",
        {"health_score": 81, "fuel_lines": [{"fuel_type": "PMS", "capacity": "60000", "rate": "700"}]},
        format="json",
    )

    assert resp.status_code == 200
    assert resp.data["health_score"] == 81
    line = FuelLine.objects.get(station=station, fuel_type="PMS")
    assert line.capacity == Decimal("60000")
    assert line.rate == Decimal("700")
    assert line.current_stock == Decimal("12000")


def test_failed_fuel_line_rolls_back_the_whole_update(api_client, admin, station):
    api_client.force_authenticate(user=admin)

    resp = api_client.patch(
        f"{URL}{station.id}/",
        {
            "name": "Renamed",
            "fuel_lines": [
                {"fuel_type": "PMS", "rate": "700"},
                {"fuel_type": "DPK", "current_stock": "10"},
            ],
        },
        format="json",
    )

    assert resp.status_code == 400
    station.refresh_from_db()
    assert station.name == "Expanse Station - Abuja"
    assert FuelLine.objects.get(station=station, fuel_type="PMS").rate == Decimal("650")
    assert not FuelLine.objects.filter(station=station, fuel_type="DPK").exists()


def test_update_cannot_overwrite_stock(api_client, admin, station):
    api_client.force_authenticate(user=admin)

    resp = api_client.patch(
        f"{URL}{station.id}/",
        {"fuel_lines": [{"fuel_type": "PMS", "current_stock": "1000"}]},
        format="json",
    )

    assert resp.status_code == 400
    assert FuelLine.objects.get(station=station, fuel_type="PMS").current_stock == Decimal("12000")


def test_fuel_lines_endpoint_adds_a_product(api_client, admin, station):
    api_client.force_authenticate(user=admin)

    resp = api_client.post(
        f"{URL}{station.id}/fuel-lines/",
        {"fuel_type": "DPK", "current_stock": "3000", "capacity": "20000", "rate": "1100"},
        format="json",
    )

    assert resp.status_code == 201
    listed = api_client.get(f"{URL}{station.id}/fuel-lines/").data
    assert {line["fuel_type"] for line in listed} == {"PMS", "AGO", "DPK"}

    removed = api_client.delete(f"{URL}{station.id}/fuel-lines/DPK/")
    assert removed.status_code == 204
    assert not FuelLine.objects.filter(station=station, fuel_type="DPK").exists()


def test_fuel_line_rate_must_be_positive(api_client, admin, station):
    api_client.force_authenticate(user=admin)

    resp = api_client.post(
        f"{URL}{station.id}/fuel-lines/",
        {"fuel_type": "DPK", "capacity": "20000", "rate": "0"},
        format="json",
    )

    assert resp.status_code == 400
    assert "rate" in resp.data


def test_station_with_entries_cannot_be_deleted(api_client, admin, manager, station, balanced_payload):
    submit_entry(manager, balanced_payload)
    api_client.force_authenticate(user=admin)

    resp = api_client.delete(f"{URL}{station.id}/")

    assert resp.status_code == 400
    assert Station.objects.filter(pk=station.id).exists()


def test_station_without_entries_is_deleted(api_client, admin, other_station):
    api_client.force_authenticate(user=admin)

    resp = api_client.delete(f"{URL}{other_station.id}/")

    assert resp.status_code == 204
    assert not Station.objects.filter(pk=other_station.id).exists()


# ============================================================
# PROCUREMENT
# ============================================================

def test_procurement_endpoint_reports_applied_quantity(api_client, admin, other_station):
    api_client.force_authenticate(user=admin)

    resp = api_client.post(
        f"{URL}procurements/",
        {"station": other_station.id, "fuel_type": "PMS", "quantity": "999999", "supplier": "Depot"},
        format="json",
    )

    assert resp.status_code == 201
    assert Decimal(resp.data["applied"]) == Decimal("10000")
    assert resp.data["clamped"] is True
    assert Decimal(resp.data["stock_after"]) == Decimal("50000")

    movements = api_client.get(f"{URL}movements/").data
    assert movements["count"] == 1
    assert movements["results"][0]["clamped"] is True


def test_procurement_without_fuel_type_is_400(api_client, admin, station):
    api_client.force_authenticate(user=admin)

    resp = api_client.post(f"{URL}procurements/", {"station": station.id, "quantity": "100"}, format="json")

    assert resp.status_code == 400
    assert "fuel_type" in resp.data
    assert not StockPurchase.objects.exists()


def test_procurement_on_unknown_station_is_404(api_client, admin):
    api_client.force_authenticate(user=admin)

    resp = api_client.post(
        f"{URL}procurements/",
        {"station": 999999, "fuel_type": "PMS", "quantity": "100"},
        format="json",
    )

    assert resp.status_code == 404


def test_accountant_cannot_procure(api_client, accountant, station):
    api_client.force_authenticate(user=accountant)

    resp = api_client.post(
        f"{URL}procurements/",
        {"station": station.id, "fuel_type": "PMS", "quantity": "100"},
        format="json",
    )

    assert resp.status_code == 403
