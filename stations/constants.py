# stations/constants.py

from decimal import Decimal

from django.db import models


class FuelType(models.TextChoices):
    PMS = "PMS", "Premium Motor Spirit"
    AGO = "AGO", "Automotive Gas Oil"
    DPK = "DPK", "Dual Purpose Kerosene"


class MovementDirection(models.TextChoices):
    IN = "IN", "In"
    OUT = "OUT", "Out"


class MovementSource(models.TextChoices):
    DAILY_ENTRY = "DAILY_ENTRY", "Approved daily entry"
    PURCHASE = "PURCHASE", "Stock purchase"
    CAPACITY_CHANGE = "CAPACITY_CHANGE", "Capacity reduced below stock"


# ============================================================
# DEMO NETWORK (seed_demo / snapshot fallback)
# ============================================================

DEMO_STATIONS = [
    {
        "name": "Expanse Station - Lagos",
        "location": "Lekki Phase 1",
        "image_url": "https://images.unsplash.com/photo-1563906267088-b029e7101114?q=80&w=800&auto=format&fit=crop",
        "health_score": 92,
        "fuel_lines": [
            {"fuel_type": FuelType.PMS, "current_stock": Decimal("45000"), "capacity": Decimal("60000"),
             "rate": Decimal("650"), "low_stock_threshold": Decimal("10000")},
            {"fuel_type": FuelType.AGO, "current_stock": Decimal("18000"), "capacity": Decimal("30000"),
             "rate": Decimal("1200"), "low_stock_threshold": Decimal("5000")},
        ],
    },
    {
        "name": "Expanse Station - Abuja",
        "location": "Maitama District",
        "image_url": "https://images.unsplash.com/photo-1527018601619-a508a2be00cd?q=80&w=800&auto=format&fit=crop",
        "health_score": 78,
        "fuel_lines": [
            {"fuel_type": FuelType.PMS, "current_stock": Decimal("12000"), "capacity": Decimal("50000"),
             "rate": Decimal("650"), "low_stock_threshold": Decimal("10000")},
            {"fuel_type": FuelType.AGO, "current_stock": Decimal("9000"), "capacity": Decimal("30000"),
             "rate": Decimal("1200"), "low_stock_threshold": Decimal("5000")},
        ],
    },
    {
        "name": "Expanse Station - Port Harcourt",
        "location": "GRA Phase 2",
        "image_url": "https://images.unsplash.com/photo-1567113463300-102550693930?q=80&w=800&auto=format&fit=crop",
        "health_score": 64,
        "fuel_lines": [
            {"fuel_type": FuelType.PMS, "current_stock": Decimal("8000"), "capacity": Decimal("50000"),
             "rate": Decimal("650"), "low_stock_threshold": Decimal("10000")},
            {"fuel_type": FuelType.DPK, "current_stock": Decimal("6000"), "capacity": Decimal("20000"),
             "rate": Decimal("1100"), "low_stock_threshold": Decimal("3000")},
        ],
    },
]

# station_index points into DEMO_STATIONS
DEMO_USERS = [
    {"username": "john.admin", "first_name": "John", "last_name": "Admin",
     "email": "admin@expanse.com", "role": "ADMIN", "station_index": None},
    {"username": "sarah.ceo", "first_name": "Sarah", "last_name": "CEO",
     "email": "ceo@expanse.com", "role": "CEO", "station_index": None},
    {"username": "mark.accountant", "first_name": "Mark", "last_name": "Accountant",
     "email": "mark@expanse.com", "role": "ACCOUNTANT", "station_index": None},
    {"username": "david.manager", "first_name": "David", "last_name": "Manager",
     "email": "david@expanse.com", "role": "STATION_MANAGER", "station_index": 0},
    {"username": "alice.manager", "first_name": "Alice", "last_name": "Manager",
     "email": "alice@expanse.com", "role": "STATION_MANAGER", "station_index": 1},
]
