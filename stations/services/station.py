# stations/services/station.py

import logging

from django.db import transaction
from django.db.models import ProtectedError
from rest_framework.exceptions import ValidationError

from core.exceptions import StationNotFound, FuelLineNotFound
from core.permissions import Capability, require_capability
from stations.models import Station, FuelLine
from stations.services.stock import write_off_overflow

logger = logging.getLogger(__name__)

STATION_FIELDS = ("name", "location", "image_url", "health_score", "active")
FUEL_LINE_FIELDS = ("current_stock", "capacity", "rate", "low_stock_threshold")


def _get_station(station_id):
    try:
        return Station.objects.select_for_update().get(pk=station_id)
    except Station.DoesNotExist:
        raise StationNotFound(f"Station {station_id} does not exist.")


@transaction.atomic
def create_station(user, *, fuel_lines=(), **fields):
    require_capability(user, Capability.MANAGE_STATIONS)

    station = Station.objects.create(
        **{k: v for k, v in fields.items() if k in STATION_FIELDS}
    )

    for line in fuel_lines:
        FuelLine.objects.create(station=station, **line)

    logger.info("Station %s created by %s", station.id, user.username)
    return station


@transaction.atomic
def update_station(user, station_id, *, fuel_lines=(), **fields):
    """
    Updates the station and upserts its fuel lines as one unit: a fuel line that fails
    validation leaves the station untouched.
    """
    require_capability(user, Capability.MANAGE_STATIONS)

    station = _get_station(station_id)
    changed = [k for k in fields if k in STATION_FIELDS]

    for key in changed:
        setattr(station, key, fields[key])

    if changed:
        station.save(update_fields=changed)

    for line in fuel_lines:
        line = dict(line)
        upsert_fuel_line(user, station.pk, line.pop("fuel_type"), **line)

    logger.info("Station %s updated by %s", station.id, user.username)
    return station


@transaction.atomic
def delete_station(user, station_id):
    require_capability(user, Capability.MANAGE_STATIONS)

    station = _get_station(station_id)
    try:
        station.delete()
    except ProtectedError:
        raise ValidationError(
            {"station": "Station has recorded entries and cannot be deleted. Deactivate it instead."}
        )

    logger.info("Station %s deleted by %s", station_id, user.username)


@transaction.atomic
def upsert_fuel_line(user, station_id, fuel_type, **fields):
    """
    Creates or updates one fuel line.

    Stock is only set when the line is created. Afterwards it moves through approved
    entries and procurements; a capacity cut below the current stock writes the
    overflow off through the stock service.
    """

    require_capability(user, Capability.MANAGE_STATIONS)

    station = _get_station(station_id)
    line = (
        FuelLine.objects
        .select_for_update()
        .filter(station=station, fuel_type=fuel_type)
        .first()
    )

    if line is None:
        line = FuelLine(station=station, fuel_type=fuel_type)
        if fields.get("current_stock") is None:
            fields["current_stock"] = 0
    elif "current_stock" in fields:
        if fields.pop("current_stock") != line.current_stock:
            raise ValidationError({
                "fuel_lines": f"{fuel_type}: stock changes through procurement or approved entries."
            })

    for key in FUEL_LINE_FIELDS:
        if key in fields:
            setattr(line, key, fields[key])

    if line.capacity is None or line.rate is None:
        raise ValidationError({"fuel_lines": f"{fuel_type}: capacity and rate are required."})

    if line.pk is None:
        if line.current_stock > line.capacity:
            raise ValidationError({"fuel_lines": f"{fuel_type}: stock cannot exceed capacity."})
    else:
        write_off_overflow(line, line.capacity)

    line.save()
    return line


@transaction.atomic
def remove_fuel_line(user, station_id, fuel_type):
    require_capability(user, Capability.MANAGE_STATIONS)

    deleted, _ = FuelLine.objects.filter(
        station_id=station_id,
        fuel_type=fuel_type,
    ).delete()

    if not deleted:
        raise FuelLineNotFound(f"Station {station_id} has no {fuel_type} fuel line.")
