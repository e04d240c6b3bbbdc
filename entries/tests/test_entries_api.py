from decimal import Decimal

import pytest

from entries.models import DailyEntry
from stations.models import FuelLine

pytestmark = pytest.mark.django_db

URL = "/api/v1/entries/"


def test_manager_submits_entry(api_client, manager, station, balanced_payload):
    api_client.force_authenticate(user=manager)
    balanced_payload.pop("station")

    resp = api_client.post(URL, balanced_payload, format="json")

    assert resp.status_code == 201
    assert resp.data["station"] == station.id
    assert resp.data["status"] == "PENDING"
    assert resp.data["is_balanced"] is True
    assert Decimal(resp.data["amount"]) == Decimal("650000")
    assert len(resp.data["audit_trail"]) == 1


def test_invalid_submission_returns_400(api_client, manager, balanced_payload):
    api_client.force_authenticate(user=manager)
    balanced_payload["quantity_sold"] = "0"

    resp = api_client.post(URL, balanced_payload, format="json")

    assert resp.status_code == 400
    assert "quantity_sold" in resp.data
    assert DailyEntry.objects.count() == 0


def test_ceo_cannot_submit(api_client, ceo, balanced_payload):
    api_client.force_authenticate(user=ceo)

    resp = api_client.post(URL, balanced_payload, format="json")

    assert resp.status_code == 403


def test_unauthenticated_requests_are_refused(api_client):
    resp = api_client.get(URL)

    assert resp.status_code == 401


def test_approve_then_conflict(api_client, manager, accountant, station, balanced_payload):
    api_client.force_authenticate(user=manager)
    entry_id = api_client.post(URL, balanced_payload, format="json").data["id"]

    api_client.force_authenticate(user=accountant)
    resp = api_client.post(f"{URL}{entry_id}/approve/", {"comments": "ok"}, format="json")

    assert resp.status_code == 200
    assert resp.data["status"] == "APPROVED"
    assert resp.data["approver_comments"] == "ok"
    assert [log["action"] for log in resp.data["audit_trail"]] == ["SUBMITTED", "APPROVED"]

    again = api_client.post(f"{URL}{entry_id}/approve/", {}, format="json")
    assert again.status_code == 409

    line = FuelLine.objects.get(station=station, fuel_type="PMS")
    assert line.current_stock == Decimal("11000")


def test_manager_cannot_approve(api_client, manager, balanced_payload):
    api_client.force_authenticate(user=manager)
    entry_id = api_client.post(URL, balanced_payload, format="json").data["id"]

    resp = api_client.post(f"{URL}{entry_id}/approve/", {}, format="json")

    assert resp.status_code == 403


def test_reject_unknown_entry_is_404(api_client, accountant):
    api_client.force_authenticate(user=accountant)

    resp = api_client.post(f"{URL}999999/reject/", {}, format="json")

    assert resp.status_code == 404


def test_manager_lists_only_own_station(api_client, manager, other_manager, balanced_payload, other_station):
    api_client.force_authenticate(user=manager)
    api_client.post(URL, balanced_payload, format="json")

    api_client.force_authenticate(user=other_manager)
    other_payload = {**balanced_payload, "station": other_station.id}
    api_client.post(URL, other_payload, format="json")

    resp = api_client.get(URL)
    assert resp.status_code == 200
    assert resp.data["count"] == 1
    assert resp.data["results"][0]["station"] == other_station.id


def test_list_filters_by_status(api_client, manager, accountant, balanced_payload):
    api_client.force_authenticate(user=manager)
    first = api_client.post(URL, balanced_payload, format="json").data["id"]
    api_client.post(URL, balanced_payload, format="json")

    api_client.force_authenticate(user=accountant)
    api_client.post(f"{URL}{first}/reject/", {}, format="json")

    resp = api_client.get(URL, {"status": "PENDING"})

    assert resp.data["count"] == 1
    assert resp.data["results"][0]["id"] != first


def test_audit_feed_is_admin_only(api_client, admin, manager, balanced_payload):
    api_client.force_authenticate(user=manager)
    api_client.post(URL, balanced_payload, format="json")

    assert api_client.get(f"{URL}audit-feed/").status_code == 403

    api_client.force_authenticate(user=admin)
    resp = api_client.get(f"{URL}audit-feed/")

    assert resp.status_code == 200
    assert resp.data["count"] == 1
    assert resp.data["results"][0]["action"] == "SUBMITTED"
    assert resp.data["results"][0]["user_name"] == manager.display_name
