# entries/services/workflow.py

import logging
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.db import transaction
from django.db.models import Max
from django.utils import timezone
from django.utils.dateparse import parse_date

from alerts.services.alerting import evaluate_low_stock, evaluate_mismatches
from core.exceptions import (
    EntryValidationError,
    EntryNotFound,
    InvalidEntryState,
    StationNotFound,
    FuelLineNotFound,
)
from core.permissions import Capability, require_capability
from entries.constants import EntryStatus, AuditAction, VERDICTS
from entries.models import DailyEntry, AuditLogEntry
from entries.services.reconciliation import (
    gross_amount,
    normalize_breakdown,
    payment_channels,
    expense_categories,
    reconcile,
)
from stations.constants import FuelType, MovementSource
from stations.services.stock import get_fuel_line, deduct_stock

logger = logging.getLogger(__name__)


# ============================================================
# AUDIT
# ============================================================

def append_audit(entry, user, action, details=""):
    """
    Appends one record to the entry's trail. Call with the entry row locked.
    """
    last = entry.audit_trail.aggregate(last=Max("sequence"))["last"] or 0

    return AuditLogEntry.objects.create(
        entry=entry,
        sequence=last + 1,
        timestamp=timezone.now(),
        user=user,
        user_ref=str(user.pk),
        user_name=user.display_name,
        action=action,
        details=details,
    )


# ============================================================
# SUBMISSION
# ============================================================

def _optional_decimal(data, field):
    value = data.get(field)
    if value in (None, ""):
        return None
    try:
        value = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise EntryValidationError({field: "A number is required."})
    if not value.is_finite():
        raise EntryValidationError({field: "A number is required."})
    return value


def _resolve_quantity(data):
    """
    Quantity sold comes from the meters when both are read, else from the declared
    value. When both are present they must agree.
    """
    opening = _optional_decimal(data, "opening_meter")
    closing = _optional_decimal(data, "closing_meter")
    declared = _optional_decimal(data, "quantity_sold")

    if opening is not None and closing is not None:
        metered = closing - opening
        if declared is not None and declared != metered:
            raise EntryValidationError(
                {"quantity_sold": "Declared quantity does not match the meter readings."}
            )
        quantity = metered
    elif opening is not None or closing is not None:
        raise EntryValidationError(
            {"closing_meter": "Both opening and closing meter readings are required."}
        )
    else:
        quantity = declared

    if quantity is None:
        raise EntryValidationError({"quantity_sold": "This field is required."})

    if quantity <= 0:
        raise EntryValidationError(
            {"quantity_sold": "Quantity sold must be greater than zero. Check the meter readings."}
        )

    return quantity, opening, closing


@transaction.atomic
def submit_entry(user, data):
    """
    Validates a daily record and stores it as a pending entry.

    Nothing is written when validation fails. The entry carries its reconciliation
    and a SUBMITTED audit record; a non-zero delta raises a mismatch alert.
    """

    station_id = data.get("station") or (user.station_id if user.is_station_scoped else None)
    if not station_id:
        raise EntryValidationError({"station": "A station must be selected."})
    try:
        station_id = int(getattr(station_id, "pk", station_id))
    except (TypeError, ValueError):
        raise EntryValidationError({"station": "Unknown station."})

    require_capability(user, Capability.SUBMIT_ENTRY, station_id=station_id)

    fuel_type = data.get("fuel_type")
    if not fuel_type:
        raise EntryValidationError({"fuel_type": "A fuel type must be selected."})
    if fuel_type not in FuelType.values:
        raise EntryValidationError({"fuel_type": f"Unknown fuel type {fuel_type}."})

    try:
        fuel_line = get_fuel_line(station_id, fuel_type)
    except StationNotFound:
        raise EntryValidationError({"station": "Unknown station."})
    except FuelLineNotFound:
        raise EntryValidationError({"fuel_type": f"This station does not sell {fuel_type}."})

    quantity, opening, closing = _resolve_quantity(data)

    try:
        payments = normalize_breakdown(data.get("payments"), payment_channels())
    except ValueError as exc:
        raise EntryValidationError({"payments": str(exc)})

    try:
        expenses = normalize_breakdown(data.get("expenses"), expense_categories())
    except ValueError as exc:
        raise EntryValidationError({"expenses": str(exc)})

    generator_hours = _optional_decimal(data, "generator_hours") or Decimal("0")
    if generator_hours < 0:
        raise EntryValidationError({"generator_hours": "Cannot be negative."})

    entry_date = data.get("date") or timezone.localdate()
    if isinstance(entry_date, str):
        entry_date = parse_date(entry_date)
        if entry_date is None:
            raise EntryValidationError({"date": "Expected YYYY-MM-DD."})

    rate = fuel_line.rate
    amount = gross_amount(quantity, rate)
    result = reconcile(amount, payments, expenses)

    entry = DailyEntry.objects.create(
        date=entry_date,
        station_id=station_id,
        fuel_type=fuel_type,
        opening_meter=opening,
        closing_meter=closing,
        quantity_sold=quantity,
        rate=rate,
        amount=amount,
        payments=payments,
        expenses=expenses,
        generator_hours=generator_hours,
        total_payments=result.total_payments,
        total_expenses=result.total_expenses,
        net_amount=result.net_amount,
        reconciliation_delta=result.delta,
        status=EntryStatus.PENDING,
        created_by=user,
    )

    append_audit(entry, user, AuditAction.SUBMITTED, f"Daily record for {fuel_type}")

    logger.info(
        "Entry %s submitted by %s for station=%s %s (delta %s)",
        entry.id, user.username, station_id, fuel_type, result.delta,
    )

    evaluate_mismatches([entry])

    return entry


# ============================================================
# APPROVAL WORKFLOW
# ============================================================

@transaction.atomic
def decide(entry, verdict, user, comments=None):
    """
    Moves a pending entry to APPROVED or REJECTED.

    The entry row is locked before its status is checked, so two concurrent
    decisions cannot both pass the pending check. Approval deducts the sold volume
    from the station's fuel line in the same transaction and re-evaluates low stock.
    """

    if verdict not in VERDICTS:
        raise EntryValidationError({"verdict": "Must be APPROVED or REJECTED."})

    require_capability(user, Capability.DECIDE_ENTRY)

    entry_id = getattr(entry, "pk", entry)
    try:
        entry = DailyEntry.objects.select_for_update().get(pk=entry_id)
    except DailyEntry.DoesNotExist:
        raise EntryNotFound(f"Daily entry {entry_id} does not exist.")

    if entry.status != EntryStatus.PENDING:
        raise InvalidEntryState(
            f"Entry {entry.id} is already {entry.status.lower()}."
        )

    comments = (comments or "").strip()

    entry.status = verdict
    entry.approver_comments = comments
    entry.decided_by = user
    entry.decided_at = timezone.now()
    entry.save(update_fields=["status", "approver_comments", "decided_by", "decided_at"])

    append_audit(entry, user, verdict, comments or settings.EXPANSE_DEFAULT_COMMENT)

    if verdict == EntryStatus.APPROVED:
        deduct_stock(
            entry.station_id,
            entry.fuel_type,
            entry.quantity_sold,
            source_type=MovementSource.DAILY_ENTRY,
            source_id=entry.id,
        )
        evaluate_low_stock(station_id=entry.station_id, fuel_type=entry.fuel_type)

    logger.info("Entry %s %s by %s", entry.id, verdict.lower(), user.username)

    return entry


def approve(entry, user, comments=None):
    return decide(entry, EntryStatus.APPROVED, user, comments)


def reject(entry, user, comments=None):
    return decide(entry, EntryStatus.REJECTED, user, comments)
