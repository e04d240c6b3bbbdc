from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from accounts.constants import UserRole
from accounts.models import User
from stations.constants import FuelType
from stations.models import Station, FuelLine


@pytest.fixture
def api_client():
    return APIClient()


def make_station(name, location="Test", lines=()):
    station = Station.objects.create(name=name, location=location)
    for fuel_type, stock, capacity, rate, threshold in lines:
        FuelLine.objects.create(
            station=station,
            fuel_type=fuel_type,
            current_stock=Decimal(stock),
            capacity=Decimal(capacity),
            rate=Decimal(rate),
            low_stock_threshold=Decimal(threshold),
        )
    return station


def make_user(username, role, station=None):
    return User.objects.create_user(
        username=username,
        email=f"{username}@expanse.test",
        first_name=username.capitalize(),
        role=role,
        station=station,
    )


@pytest.fixture
def station(db):
    return make_station(
        "Expanse Station - Abuja",
        "Maitama District",
        lines=[
            (FuelType.PMS, "12000", "50000", "650", "10000"),
            (FuelType.AGO, "18000", "30000", "1200", "5000"),
        ],
    )


@pytest.fixture
def other_station(db):
    return make_station(
        "Expanse Station - Lagos",
        "Lekki Phase 1",
        lines=[(FuelType.PMS, "40000", "50000", "650", "10000")],
    )


@pytest.fixture
def admin(db):
    return make_user("admin", UserRole.ADMIN)


@pytest.fixture
def ceo(db):
    return make_user("ceo", UserRole.CEO)


@pytest.fixture
def accountant(db):
    return make_user("accountant", UserRole.ACCOUNTANT)


@pytest.fixture
def manager(station):
    return make_user("manager", UserRole.STATION_MANAGER, station=station)


@pytest.fixture
def other_manager(other_station):
    return make_user("othermanager", UserRole.STATION_MANAGER, station=other_station)


@pytest.fixture
def balanced_payload(station):
    # 1000 L x 650 = 650000, fully collected
    return {
        "station": station.id,
        "fuel_type": FuelType.PMS,
        "quantity_sold": "1000",
        "payments": {
            "cash": "260000",
            "pos": "195000",
            "bank_transfer": "130000",
            "credit_sales": "65000",
        },
        "expenses": {
            "generator_diesel": "15000",
            "security_levy": "5000",
        },
        "generator_hours": "6",
    }
