# core/permissions.py
from rest_framework.permissions import BasePermission

from accounts.constants import UserRole
from core.exceptions import CapabilityDenied


class Capability:
    SUBMIT_ENTRY = "submit_entry"
    DECIDE_ENTRY = "decide_entry"
    MANAGE_STATIONS = "manage_stations"
    VIEW_AUDIT = "view_audit"
    RESOLVE_ALERT = "resolve_alert"
    VIEW_REPORTS = "view_reports"


ROLE_CAPABILITIES = {
    UserRole.ADMIN: {
        Capability.SUBMIT_ENTRY,
        Capability.DECIDE_ENTRY,
        Capability.MANAGE_STATIONS,
        Capability.VIEW_AUDIT,
        Capability.RESOLVE_ALERT,
        Capability.VIEW_REPORTS,
    },
    UserRole.CEO: {
        Capability.VIEW_REPORTS,
    },
    UserRole.ACCOUNTANT: {
        Capability.DECIDE_ENTRY,
        Capability.RESOLVE_ALERT,
        Capability.VIEW_REPORTS,
    },
    UserRole.STATION_MANAGER: {
        Capability.SUBMIT_ENTRY,
        Capability.RESOLVE_ALERT,
        Capability.VIEW_REPORTS,
    },
}


def has_capability(user, capability, station_id=None):
    """
    True when ``user`` holds ``capability``.

    Station-scoped roles only hold it for their own station: when ``station_id`` is
    given it must match the user's station.
    """
    if user is None or not getattr(user, "is_authenticated", False):
        return False

    if capability not in ROLE_CAPABILITIES.get(user.role, set()):
        return False

    if station_id is not None and user.is_station_scoped:
        return user.station_id == station_id

    return True


def require_capability(user, capability, station_id=None):
    if not has_capability(user, capability, station_id=station_id):
        raise CapabilityDenied()


def scope_to_station(qs, user, field="station"):
    """
    Restrict a queryset to the user's station for station-scoped roles.
    """
    if user.is_station_scoped:
        return qs.filter(**{f"{field}_id": user.station_id})
    return qs


class HasCapability(BasePermission):
    """
    View-level gate. Views declare ``required_capability`` (or a per-action
    ``capability_map``); the services re-check with the concrete station.
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        capability_map = getattr(view, "capability_map", {})
        capability = capability_map.get(
            getattr(view, "action", None),
            getattr(view, "required_capability", None),
        )

        if capability is None:
            return True

        return has_capability(user, capability)
