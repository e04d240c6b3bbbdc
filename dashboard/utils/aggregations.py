from decimal import Decimal

from django.db.models import Sum

ZERO = Decimal("0.00")


def sum_field(qs, field):
    """
    Sum of ``field`` over a queryset, zero when empty.
    """
    return qs.aggregate(total=Sum(field))["total"] or ZERO


def entry_totals(qs):
    totals = qs.aggregate(
        sales=Sum("total_payments"),
        volume=Sum("quantity_sold"),
        expenses=Sum("total_expenses"),
        profit=Sum("net_amount"),
    )
    return {key: value or ZERO for key, value in totals.items()}


def daily_series(qs, dates):
    """
    Sales (collected payments) and expenses per date, one point per date even
    when nothing was recorded.
    """
    rows = (
        qs.filter(date__in=dates)
        .order_by()
        .values("date")
        .annotate(sales=Sum("total_payments"), expenses=Sum("total_expenses"))
    )
    by_date = {row["date"]: row for row in rows}

    return [
        {
            "date": day,
            "label": day.strftime("%m/%d"),
            "sales": (by_date.get(day) or {}).get("sales") or ZERO,
            "expenses": (by_date.get(day) or {}).get("expenses") or ZERO,
        }
        for day in dates
    ]
