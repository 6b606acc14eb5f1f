from __future__ import annotations

from datetime import date, datetime, timedelta

SATURDAY = 5
SUNDAY = 6


def parse_datetime(value: str) -> datetime | None:
    """Parse a stored timestamp; bare dates become midnight. Returns ``None`` when unparseable."""
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.combine(date.fromisoformat(text[:10]), datetime.min.time())
    except ValueError:
        return None


def now_like(reference: datetime | None) -> datetime:
    """Current time with the same awareness as ``reference``."""
    if reference is None or reference.tzinfo is None:
        return datetime.now()
    return datetime.now(tz=reference.tzinfo)


def align_awareness(first: datetime, second: datetime) -> tuple[datetime, datetime]:
    """Make two datetimes comparable; when only one is aware both are compared as wall-clock times."""
    if (first.tzinfo is None) != (second.tzinfo is None):
        return first.replace(tzinfo=None), second.replace(tzinfo=None)
    return first, second


def days_between(earlier: datetime, later: datetime) -> int:
    earlier, later = align_awareness(earlier, later)
    return (later - earlier).days


def add_business_days(start: datetime, days: int) -> datetime:
    """Move ``days`` weekdays forward from ``start``, skipping Saturday and Sunday.

    The start day itself is never counted, so adding one business day on a
    Friday lands on the following Monday. Non-positive values return ``start``.
    """
    result = start
    added = 0
    while added < days:
        result += timedelta(days=1)
        if result.weekday() not in (SATURDAY, SUNDAY):
            added += 1
    return result


def years_before(reference: datetime, years: int) -> datetime:
    try:
        return reference.replace(year=reference.year - years)
    except ValueError:
        # Feb 29 on a non-leap target year.
        return reference.replace(year=reference.year - years, day=28)
