from datetime import timedelta

from django.utils import timezone


class ReportPeriod:
    TODAY = "TODAY"
    LAST_7 = "LAST_7"
    THIS_MONTH = "THIS_MONTH"
    LAST_MONTH = "LAST_MONTH"

    CHOICES = [TODAY, LAST_7, THIS_MONTH, LAST_MONTH]


def get_period_dates(period: str, today=None):
    """
    Inclusive ``(start, end)`` dates of a report period.
    """
    today = today or timezone.localdate()

    if period == ReportPeriod.TODAY:
        start, end = today, today

    elif period == ReportPeriod.LAST_7:
        start, end = today - timedelta(days=6), today

    elif period == ReportPeriod.THIS_MONTH:
        start, end = today.replace(day=1), today

    elif period == ReportPeriod.LAST_MONTH:
        end = today.replace(day=1) - timedelta(days=1)
        start = end.replace(day=1)

    else:
        raise ValueError(f"Invalid period: {period}")

    return start, end


def last_n_days(days: int, today=None):
    """
    The ``days`` most recent dates, oldest first, ending today.
    """
    today = today or timezone.localdate()
    return [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
