# core/exceptions.py
"""
Named error kinds raised by the service layer.

They are DRF exceptions, so a view that lets them propagate answers with the matching
status code and a ``{"detail": ...}`` body. Callers outside a request (management
commands, tests) catch them by class.
"""

from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError, PermissionDenied, NotFound


# ============================================================
# VALIDATION (user-correctable, nothing is written)
# ============================================================

class EntryValidationError(ValidationError):
    default_code = "invalid_entry"


class PurchaseValidationError(ValidationError):
    default_code = "invalid_purchase"


# ============================================================
# STATE (workflow misuse)
# ============================================================

class InvalidEntryState(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Only a pending entry can be approved or rejected."
    default_code = "invalid_state"


# ============================================================
# UNKNOWN REFERENCES
# ============================================================

class StationNotFound(NotFound):
    default_detail = "Station not found."
    default_code = "station_not_found"


class FuelLineNotFound(NotFound):
    default_detail = "Fuel line not found for this station."
    default_code = "fuel_line_not_found"


class EntryNotFound(NotFound):
    default_detail = "Daily entry not found."
    default_code = "entry_not_found"


class AlertNotFound(NotFound):
    default_detail = "Alert not found."
    default_code = "alert_not_found"


# ============================================================
# AUTHORIZATION
# ============================================================

class CapabilityDenied(PermissionDenied):
    default_detail = "Your role does not allow this operation."
    default_code = "capability_denied"
