# entries/services/audit.py

from dataclasses import dataclass, asdict
from datetime import date, datetime
from operator import attrgetter

from entries.models import DailyEntry


@dataclass(frozen=True)
class AuditFeedItem:
    timestamp: datetime
    user_ref: str
    user_name: str
    action: str
    details: str
    station_name: str
    record_date: date
    entry_id: int

    def as_dict(self):
        return asdict(self)


def audit_feed_queryset():
    return (
        DailyEntry.objects
        .select_related("station")
        .prefetch_related("audit_trail")
    )


def collect_audit_feed(entries=None):
    """
    Every audit record of every entry, most recent first.

    Read-only projection. Records sharing a timestamp keep the order they had when
    the trails were concatenated entry by entry.
    """
    if entries is None:
        entries = audit_feed_queryset()

    items = [
        AuditFeedItem(
            timestamp=log.timestamp,
            user_ref=log.user_ref,
            user_name=log.user_name,
            action=log.action,
            details=log.details,
            station_name=entry.station.name,
            record_date=entry.date,
            entry_id=entry.id,
        )
        for entry in entries
        for log in entry.audit_trail.all()
    ]

    # list.sort stays stable with reverse=True
    return sorted(items, key=attrgetter("timestamp"), reverse=True)
