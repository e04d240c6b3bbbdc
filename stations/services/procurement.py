# stations/services/procurement.py

import logging
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.utils import timezone

from core.exceptions import PurchaseValidationError
from core.permissions import Capability, require_capability
from stations.constants import FuelType, MovementSource
from stations.models import StockPurchase
from stations.services.stock import get_fuel_line, replenish_stock

logger = logging.getLogger(__name__)


def _decimal(value, field, allow_zero=True):
    try:
        value = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise PurchaseValidationError({field: "A number is required."})
    if not value.is_finite():
        raise PurchaseValidationError({field: "A number is required."})

    if value < 0 or (value == 0 and not allow_zero):
        raise PurchaseValidationError(
            {field: "Must be greater than zero." if not allow_zero else "Cannot be negative."}
        )
    return value


@transaction.atomic
def procure_stock(user, *, station_id, fuel_type=None, quantity=None, cost=0,
                  supplier="", date=None):
    """
    Records a stock purchase and applies it to the targeted fuel line.

    The fuel type must be stated: a purchase never falls back to a default product.
    Overfill is capped at the tank capacity; the ledger keeps both the ordered and the
    accepted quantity and the stock service raises a discrepancy alert for the rest.

    Returns ``(purchase, adjustment)``.
    """

    require_capability(user, Capability.MANAGE_STATIONS)

    if not fuel_type:
        raise PurchaseValidationError({"fuel_type": "The fuel type to replenish is required."})

    if fuel_type not in FuelType.values:
        raise PurchaseValidationError({"fuel_type": f"Unknown fuel type {fuel_type}."})

    if quantity is None:
        raise PurchaseValidationError({"quantity": "This field is required."})

    quantity = _decimal(quantity, "quantity", allow_zero=False)
    cost = _decimal(cost or 0, "cost")

    # Fail on unknown station / fuel line before anything is written
    get_fuel_line(station_id, fuel_type)

    purchase = StockPurchase.objects.create(
        station_id=station_id,
        fuel_type=fuel_type,
        date=date or timezone.localdate(),
        quantity=quantity,
        cost=cost,
        supplier=supplier or "",
        created_by=user,
    )

    adjustment = replenish_stock(
        station_id,
        fuel_type,
        quantity,
        source_type=MovementSource.PURCHASE,
        source_id=purchase.id,
    )

    purchase.quantity_applied = adjustment.applied
    purchase.save(update_fields=["quantity_applied"])

    logger.info(
        "Purchase %s recorded by %s: %s L %s into station=%s (%s applied)",
        purchase.id, user.username, quantity, fuel_type, station_id, adjustment.applied,
    )

    return purchase, adjustment
