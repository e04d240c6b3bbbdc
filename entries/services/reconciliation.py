# entries/services/reconciliation.py
"""
Reconciliation of a daily entry: how much was sold, how much was collected, what it
cost to run the station.

Everything here is pure. Amounts are quantized to minor units (0.01) before any
comparison, so "balanced" is an exact comparison of two cent values.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.conf import settings

CENT = Decimal("0.01")


@dataclass(frozen=True)
class Reconciliation:
    gross_amount: Decimal
    total_payments: Decimal
    total_expenses: Decimal
    net_amount: Decimal
    delta: Decimal

    @property
    def is_balanced(self):
        return self.delta == 0

    @property
    def is_under_collected(self):
        return self.delta > 0

    @property
    def is_over_collected(self):
        return self.delta < 0


def to_money(value):
    """
    Decimal in minor units. Floats go through ``str`` so 0.1 stays 0.10.
    """
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value))
        except (InvalidOperation, ValueError):
            raise ValueError(f"Not a monetary amount: {value!r}")

    if not amount.is_finite():
        raise ValueError(f"Not a monetary amount: {value!r}")

    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def payment_channels():
    return tuple(settings.EXPANSE_PAYMENT_CHANNELS)


def expense_categories():
    return tuple(settings.EXPANSE_EXPENSE_CATEGORIES)


def normalize_breakdown(values, fields):
    """
    Full breakdown over ``fields`` with missing fields read as zero.

    Raises ``ValueError`` on an unknown field or a negative value.
    """
    values = values or {}

    unknown = set(values) - set(fields)
    if unknown:
        raise ValueError(f"Unknown fields: {', '.join(sorted(unknown))}")

    normalized = {}
    for field in fields:
        amount = to_money(values.get(field, 0) or 0)
        if amount < 0:
            raise ValueError(f"{field} cannot be negative")
        normalized[field] = amount

    return normalized


def gross_amount(quantity, rate):
    return to_money(Decimal(str(quantity)) * Decimal(str(rate)))


def reconcile(gross, payments, expenses):
    """
    ``delta = gross - sum(payments)``: positive is under-collection, negative
    over-collection, zero balanced. Net is what was collected minus running costs.
    """
    gross = to_money(gross)
    total_payments = sum((to_money(v) for v in (payments or {}).values()), Decimal("0.00"))
    total_expenses = sum((to_money(v) for v in (expenses or {}).values()), Decimal("0.00"))

    return Reconciliation(
        gross_amount=gross,
        total_payments=total_payments,
        total_expenses=total_expenses,
        net_amount=total_payments - total_expenses,
        delta=gross - total_payments,
    )
