# stations/services/stock.py

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.db import transaction

from core.exceptions import StationNotFound, FuelLineNotFound
from stations.constants import MovementDirection, MovementSource
from stations.models import Station, FuelLine, StockMovement

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class StockAdjustment:
    """
    Outcome of one stock mutation.

    ``requested`` is what the caller asked for, ``applied`` what the tank bounds
    allowed. They differ only when the result was clamped at 0 or at capacity.
    """

    station_id: int
    fuel_type: str
    direction: str
    requested: Decimal
    applied: Decimal
    stock_before: Decimal
    stock_after: Decimal
    movement_id: int
    source_type: str = ""

    @property
    def clamped(self):
        return self.requested != self.applied

    @property
    def unapplied(self):
        return self.requested - self.applied


# ============================================================
# LOOKUP
# ============================================================

def get_fuel_line(station_id, fuel_type, for_update=False):
    """
    Explicit lookup of a station's fuel line. Unknown ids are errors, never no-ops.
    """

    if not Station.objects.filter(pk=station_id).exists():
        raise StationNotFound(f"Station {station_id} does not exist.")

    qs = FuelLine.objects.all()
    if for_update:
        qs = qs.select_for_update()

    try:
        return qs.get(station_id=station_id, fuel_type=fuel_type)
    except FuelLine.DoesNotExist:
        raise FuelLineNotFound(
            f"Station {station_id} has no {fuel_type} fuel line."
        )


# ============================================================
# SALE → STOCK OUT (floored at 0)
# ============================================================

@transaction.atomic
def deduct_stock(station_id, fuel_type, quantity, *, source_type, source_id):
    """
    Subtracts a sold volume from the fuel line, never below zero.
    """

    quantity = _positive(quantity)
    fuel_line = get_fuel_line(station_id, fuel_type, for_update=True)

    stock_before = fuel_line.current_stock
    stock_after = max(ZERO, stock_before - quantity)

    return _apply(
        fuel_line,
        direction=MovementDirection.OUT,
        requested=quantity,
        applied=stock_before - stock_after,
        stock_before=stock_before,
        stock_after=stock_after,
        source_type=source_type,
        source_id=source_id,
    )


# ============================================================
# PURCHASE → STOCK IN (capped at capacity)
# ============================================================

@transaction.atomic
def replenish_stock(station_id, fuel_type, quantity, *, source_type, source_id):
    """
    Adds a delivered volume to the fuel line, never above its capacity.
    """

    quantity = _positive(quantity)
    fuel_line = get_fuel_line(station_id, fuel_type, for_update=True)

    stock_before = fuel_line.current_stock
    stock_after = min(fuel_line.capacity, stock_before + quantity)

    return _apply(
        fuel_line,
        direction=MovementDirection.IN,
        requested=quantity,
        applied=stock_after - stock_before,
        stock_before=stock_before,
        stock_after=stock_after,
        source_type=source_type,
        source_id=source_id,
    )


# ============================================================
# CAPACITY CUT (stock above the new capacity is written off)
# ============================================================

def write_off_overflow(fuel_line, capacity):
    """
    Brings a locked fuel line under a reduced ``capacity`` before the new capacity is
    saved. The written-off volume is recorded as a movement and raised as a discrepancy.

    Returns ``None`` when the stock already fits.
    """

    stock_before = fuel_line.current_stock
    if stock_before <= capacity:
        return None

    return _apply(
        fuel_line,
        direction=MovementDirection.OUT,
        requested=ZERO,
        applied=stock_before - capacity,
        stock_before=stock_before,
        stock_after=capacity,
        source_type=MovementSource.CAPACITY_CHANGE,
        source_id=fuel_line.id,
    )


# ============================================================
# READ MODELS
# ============================================================

def stock_summary(station):
    return [
        {
            "fuel_type": line.fuel_type,
            "current_stock": line.current_stock,
            "capacity": line.capacity,
            "low_stock_threshold": line.low_stock_threshold,
            "stock_percent": line.stock_percent,
            "is_low": line.is_low,
        }
        for line in station.fuel_lines.all()
    ]


# ============================================================
# INTERNALS
# ============================================================

def _positive(quantity):
    quantity = Decimal(str(quantity))
    if not quantity.is_finite() or quantity <= 0:
        raise ValueError(f"Stock quantity must be positive, got {quantity}.")
    return quantity


def _apply(fuel_line, *, direction, requested, applied, stock_before, stock_after,
           source_type, source_id):
    # Row is locked by the caller's select_for_update
    fuel_line.current_stock = stock_after
    fuel_line.save(update_fields=["current_stock", "updated_at"])

    movement = StockMovement.objects.create(
        station_id=fuel_line.station_id,
        fuel_line=fuel_line,
        direction=direction,
        quantity_requested=requested,
        quantity_applied=applied,
        stock_before=stock_before,
        stock_after=stock_after,
        source_type=source_type,
        source_id=source_id,
    )

    adjustment = StockAdjustment(
        station_id=fuel_line.station_id,
        fuel_type=fuel_line.fuel_type,
        direction=direction,
        requested=requested,
        applied=applied,
        stock_before=stock_before,
        stock_after=stock_after,
        movement_id=movement.id,
        source_type=source_type,
    )

    logger.info(
        "Stock %s %s station=%s: %s -> %s (requested %s, applied %s)",
        direction, fuel_line.fuel_type, fuel_line.station_id,
        stock_before, stock_after, requested, applied,
    )

    if adjustment.clamped:
        logger.warning(
            "Stock %s clamped for %s station=%s: %s L not applied",
            direction, fuel_line.fuel_type, fuel_line.station_id, abs(adjustment.unapplied),
        )
        from alerts.services.alerting import raise_stock_discrepancy

        raise_stock_discrepancy(adjustment)

    return adjustment
