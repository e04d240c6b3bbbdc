from rest_framework.permissions import BasePermission

from accounts.constants import UserRole
from core.permissions import Capability, has_capability


class DashboardPermission(BasePermission):
    def has_permission(self, request, view):
        return has_capability(request.user, Capability.VIEW_REPORTS)


def sees_network(user):
    """
    ADMIN and CEO get the per-station stock table.
    """
    return user.role in (UserRole.ADMIN, UserRole.CEO)
