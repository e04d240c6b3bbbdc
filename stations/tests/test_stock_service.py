from decimal import Decimal

from django.test import TestCase
from rest_framework.exceptions import ValidationError

from accounts.constants import UserRole
from accounts.models import User
from alerts.models import Alert, AlertType
from core.exceptions import (
    StationNotFound,
    FuelLineNotFound,
    PurchaseValidationError,
    CapabilityDenied,
)
from stations.constants import FuelType, MovementDirection, MovementSource
from stations.models import Station, FuelLine, StockPurchase, StockMovement
from stations.services.procurement import procure_stock
from stations.services.station import upsert_fuel_line
from stations.services.stock import deduct_stock, replenish_stock, get_fuel_line, stock_summary


class StockServiceTestCase(TestCase):

    def setUp(self):
        self.station = Station.objects.create(name="Station A", location="Ikeja")
        self.line = FuelLine.objects.create(
            station=self.station,
            fuel_type=FuelType.PMS,
            current_stock=Decimal("500"),
            capacity=Decimal("50000"),
            rate=Decimal("650"),
            low_stock_threshold=Decimal("10000"),
        )

    def _stock(self):
        self.line.refresh_from_db()
        return self.line.current_stock

    def _set_stock(self, value):
        FuelLine.objects.filter(pk=self.line.pk).update(current_stock=Decimal(value))

    def test_deduction_is_floored_at_zero(self):
        adjustment = deduct_stock(
            self.station.id, FuelType.PMS, 999999,
            source_type=MovementSource.DAILY_ENTRY, source_id=1,
        )

        self.assertEqual(self._stock(), 0)
        self.assertEqual(adjustment.requested, Decimal("999999"))
        self.assertEqual(adjustment.applied, Decimal("500"))
        self.assertTrue(adjustment.clamped)

    def test_clamped_deduction_raises_discrepancy_alert(self):
        adjustment = deduct_stock(
            self.station.id, FuelType.PMS, 999999,
            source_type=MovementSource.DAILY_ENTRY, source_id=1,
        )

        alert = Alert.objects.get(type=AlertType.STOCK_DISCREPANCY)
        self.assertEqual(alert.observed_value, adjustment.unapplied)
        self.assertEqual(alert.key, f"STOCK_DISCREPANCY:{adjustment.movement_id}")
        self.assertEqual(alert.fuel_type, FuelType.PMS)

    def test_exact_deduction_is_not_clamped(self):
        adjustment = deduct_stock(
            self.station.id, FuelType.PMS, "200.50",
            source_type=MovementSource.DAILY_ENTRY, source_id=1,
        )

        self.assertEqual(self._stock(), Decimal("299.50"))
        self.assertFalse(adjustment.clamped)
        self.assertFalse(Alert.objects.exists())

    def test_replenishment_is_capped_at_capacity(self):
        self._set_stock("40000")

        adjustment = replenish_stock(
            self.station.id, FuelType.PMS, 999999,
            source_type=MovementSource.PURCHASE, source_id=1,
        )

        self.assertEqual(self._stock(), Decimal("50000"))
        self.assertEqual(adjustment.applied, Decimal("10000"))
        self.assertEqual(adjustment.unapplied, Decimal("989999"))

    def test_every_mutation_is_traced(self):
        deduct_stock(
            self.station.id, FuelType.PMS, 100,
            source_type=MovementSource.DAILY_ENTRY, source_id=7,
        )

        movement = StockMovement.objects.get()
        self.assertEqual(movement.direction, MovementDirection.OUT)
        self.assertEqual(movement.stock_before, Decimal("500"))
        self.assertEqual(movement.stock_after, Decimal("400"))
        self.assertEqual(movement.source_id, 7)
        self.assertFalse(movement.clamped)

    def test_non_positive_quantity_is_refused(self):
        with self.assertRaises(ValueError):
            deduct_stock(
                self.station.id, FuelType.PMS, 0,
                source_type=MovementSource.DAILY_ENTRY, source_id=1,
            )
        self.assertEqual(self._stock(), Decimal("500"))

    def test_non_finite_quantity_is_refused(self):
        with self.assertRaises(ValueError):
            replenish_stock(
                self.station.id, FuelType.PMS, "NaN",
                source_type=MovementSource.PURCHASE, source_id=1,
            )
        self.assertFalse(StockMovement.objects.exists())

    def test_unknown_station_is_named_error(self):
        with self.assertRaises(StationNotFound):
            deduct_stock(
                999999, FuelType.PMS, 10,
                source_type=MovementSource.DAILY_ENTRY, source_id=1,
            )

    def test_unknown_fuel_line_is_named_error(self):
        with self.assertRaises(FuelLineNotFound):
            get_fuel_line(self.station.id, FuelType.AGO)

    def test_stock_summary(self):
        summary = stock_summary(self.station)

        self.assertEqual(len(summary), 1)
        self.assertEqual(summary[0]["fuel_type"], FuelType.PMS)
        self.assertTrue(summary[0]["is_low"])
        self.assertEqual(summary[0]["stock_percent"], Decimal("1.0"))


class ProcurementTestCase(TestCase):

    def setUp(self):
        self.station = Station.objects.create(name="Station B", location="Abuja")
        self.line = FuelLine.objects.create(
            station=self.station,
            fuel_type=FuelType.PMS,
            current_stock=Decimal("7000"),
            capacity=Decimal("50000"),
            rate=Decimal("650"),
            low_stock_threshold=Decimal("10000"),
        )
        self.admin = User.objects.create_user(
            username="admin", email="admin@expanse.test", role=UserRole.ADMIN
        )

    def test_procurement_is_capped_at_capacity(self):
        purchase, adjustment = procure_stock(
            self.admin,
            station_id=self.station.id,
            fuel_type=FuelType.PMS,
            quantity=45000,
            cost=29000000,
            supplier="NNPC Depot",
        )

        self.line.refresh_from_db()
        self.assertEqual(self.line.current_stock, Decimal("50000"))
        self.assertEqual(purchase.quantity, Decimal("45000"))
        self.assertEqual(purchase.quantity_applied, Decimal("43000"))
        self.assertEqual(purchase.overflow, Decimal("2000"))
        self.assertTrue(adjustment.clamped)
        self.assertTrue(Alert.objects.filter(type=AlertType.STOCK_DISCREPANCY).exists())

    def test_procurement_requires_fuel_type(self):
        with self.assertRaises(PurchaseValidationError) as ctx:
            procure_stock(self.admin, station_id=self.station.id, quantity=1000)

        self.assertIn("fuel_type", ctx.exception.detail)
        self.assertFalse(StockPurchase.objects.exists())
        self.line.refresh_from_db()
        self.assertEqual(self.line.current_stock, Decimal("7000"))

    def test_procurement_rejects_zero_quantity(self):
        with self.assertRaises(PurchaseValidationError):
            procure_stock(self.admin, station_id=self.station.id, fuel_type=FuelType.PMS, quantity=0)

    def test_procurement_rejects_non_finite_quantity(self):
        with self.assertRaises(PurchaseValidationError) as ctx:
            procure_stock(self.admin, station_id=self.station.id, fuel_type=FuelType.PMS, quantity="NaN")

        self.assertIn("quantity", ctx.exception.detail)
        self.assertFalse(StockPurchase.objects.exists())

    def test_procurement_on_missing_fuel_line_writes_nothing(self):
        with self.assertRaises(FuelLineNotFound):
            procure_stock(self.admin, station_id=self.station.id, fuel_type=FuelType.AGO, quantity=10)

        self.assertFalse(StockPurchase.objects.exists())

    def test_procurement_on_unknown_station(self):
        with self.assertRaises(StationNotFound):
            procure_stock(self.admin, station_id=999999, fuel_type=FuelType.PMS, quantity=10)

    def test_only_admin_procures(self):
        accountant = User.objects.create_user(
            username="acc", email="acc@expanse.test", role=UserRole.ACCOUNTANT
        )

        with self.assertRaises(CapabilityDenied):
            procure_stock(accountant, station_id=self.station.id, fuel_type=FuelType.PMS, quantity=10)


class FuelLineServiceTestCase(TestCase):

    def setUp(self):
        self.station = Station.objects.create(name="Station C", location="Kano")
        self.line = FuelLine.objects.create(
            station=self.station,
            fuel_type=FuelType.PMS,
            current_stock=Decimal("7000"),
            capacity=Decimal("50000"),
            rate=Decimal("650"),
            low_stock_threshold=Decimal("1000"),
        )
        self.admin = User.objects.create_user(
            username="admin", email="admin@expanse.test", role=UserRole.ADMIN
        )

    def test_new_line_takes_its_opening_stock(self):
        line = upsert_fuel_line(
            self.admin, self.station.id, FuelType.DPK,
            current_stock=Decimal("3000"), capacity=Decimal("20000"), rate=Decimal("1100"),
        )

        self.assertEqual(line.current_stock, Decimal("3000"))
        self.assertFalse(StockMovement.objects.exists())

    def test_existing_stock_cannot_be_overwritten(self):
        with self.assertRaises(ValidationError):
            upsert_fuel_line(self.admin, self.station.id, FuelType.PMS, current_stock=Decimal("1000"))

        self.line.refresh_from_db()
        self.assertEqual(self.line.current_stock, Decimal("7000"))
        self.assertFalse(StockMovement.objects.exists())

    def test_unchanged_stock_is_accepted(self):
        line = upsert_fuel_line(
            self.admin, self.station.id, FuelType.PMS,
            current_stock=Decimal("7000.00"), rate=Decimal("700"),
        )

        self.assertEqual(line.rate, Decimal("700"))

    def test_capacity_cut_writes_off_overflow(self):
        line = upsert_fuel_line(self.admin, self.station.id, FuelType.PMS, capacity=Decimal("5000"))

        line.refresh_from_db()
        self.assertEqual(line.capacity, Decimal("5000"))
        self.assertEqual(line.current_stock, Decimal("5000"))

        movement = StockMovement.objects.get()
        self.assertEqual(movement.direction, MovementDirection.OUT)
        self.assertEqual(movement.source_type, MovementSource.CAPACITY_CHANGE)
        self.assertEqual(movement.quantity_applied, Decimal("2000"))

        alert = Alert.objects.get(type=AlertType.STOCK_DISCREPANCY)
        self.assertEqual(alert.observed_value, Decimal("2000"))
        self.assertIn("written off", alert.message)

    def test_capacity_cut_above_stock_is_silent(self):
        upsert_fuel_line(self.admin, self.station.id, FuelType.PMS, capacity=Decimal("8000"))

        self.assertFalse(StockMovement.objects.exists())
        self.assertFalse(Alert.objects.exists())
