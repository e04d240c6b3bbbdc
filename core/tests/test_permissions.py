import pytest
from django.contrib.auth.models import AnonymousUser
from rest_framework.test import APIRequestFactory

from core.exceptions import CapabilityDenied
from core.permissions import (
    Capability,
    HasCapability,
    has_capability,
    require_capability,
    scope_to_station,
)
from stations.models import FuelLine

pytestmark = pytest.mark.django_db


@pytest.mark.parametrize(
    "user_fixture, capability, expected",
    [
        ("admin", Capability.MANAGE_STATIONS, True),
        ("admin", Capability.DECIDE_ENTRY, True),
        ("ceo", Capability.VIEW_REPORTS, True),
        ("ceo", Capability.DECIDE_ENTRY, False),
        ("ceo", Capability.SUBMIT_ENTRY, False),
        ("accountant", Capability.DECIDE_ENTRY, True),
        ("accountant", Capability.SUBMIT_ENTRY, False),
        ("accountant", Capability.MANAGE_STATIONS, False),
        ("manager", Capability.SUBMIT_ENTRY, True),
        ("manager", Capability.DECIDE_ENTRY, False),
        ("manager", Capability.VIEW_AUDIT, False),
    ],
)
def test_role_capabilities(request, user_fixture, capability, expected):
    user = request.getfixturevalue(user_fixture)

    assert has_capability(user, capability) is expected


def test_station_scoped_role_limited_to_own_station(manager, station, other_station):
    assert has_capability(manager, Capability.SUBMIT_ENTRY, station_id=station.id)
    assert not has_capability(manager, Capability.SUBMIT_ENTRY, station_id=other_station.id)


def test_network_roles_ignore_station(admin, other_station):
    assert has_capability(admin, Capability.SUBMIT_ENTRY, station_id=other_station.id)


def test_anonymous_holds_nothing():
    assert not has_capability(AnonymousUser(), Capability.VIEW_REPORTS)
    assert not has_capability(None, Capability.VIEW_REPORTS)


def test_require_capability_raises(ceo):
    with pytest.raises(CapabilityDenied):
        require_capability(ceo, Capability.DECIDE_ENTRY)


def test_scope_to_station(manager, admin, station, other_station):
    qs = FuelLine.objects.all()

    assert {line.station_id for line in scope_to_station(qs, manager)} == {station.id}
    assert scope_to_station(qs, admin).count() == 3


class _View:
    def __init__(self, action=None, **attrs):
        self.action = action
        for name, value in attrs.items():
            setattr(self, name, value)


def _request(user):
    request = APIRequestFactory().get("/")
    request.user = user
    return request


def test_has_capability_permission_uses_action_map(accountant, manager):
    view = _View(
        action="approve",
        capability_map={"approve": Capability.DECIDE_ENTRY},
        required_capability=Capability.VIEW_REPORTS,
    )
    permission = HasCapability()

    assert permission.has_permission(_request(accountant), view)
    assert not permission.has_permission(_request(manager), view)


def test_has_capability_permission_falls_back_to_required(ceo):
    view = _View(action="list", required_capability=Capability.VIEW_REPORTS)

    assert HasCapability().has_permission(_request(ceo), view)


def test_has_capability_permission_requires_authentication():
    view = _View(action="list")

    assert not HasCapability().has_permission(_request(AnonymousUser()), view)
