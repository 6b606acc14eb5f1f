from __future__ import annotations

from datetime import datetime, timezone

import pytest

from repair_estimator.utils import (
    add_business_days,
    days_between,
    now_like,
    parse_datetime,
    years_before,
)


def test_parse_datetime_reads_stored_timestamps() -> None:
    assert parse_datetime("2026-01-01T00:00:00Z") == datetime(2026, 1, 1, tzinfo=timezone.utc)
    assert parse_datetime("2026-01-01T08:30:00") == datetime(2026, 1, 1, 8, 30)
    assert parse_datetime("2026-01-01 00:00:00+00:00") == datetime(2026, 1, 1, tzinfo=timezone.utc)


def test_parse_datetime_treats_bare_dates_as_midnight() -> None:
    assert parse_datetime("2026-03-02") == datetime(2026, 3, 2)


@pytest.mark.parametrize("value", ["", "not-a-datetime", "2026-13-40"])
def test_parse_datetime_rejects_garbage(value: str) -> None:
    assert parse_datetime(value) is None


def test_now_like_matches_reference_awareness() -> None:
    assert now_like(datetime(2026, 1, 1, tzinfo=timezone.utc)).tzinfo is not None
    assert now_like(datetime(2026, 1, 1)).tzinfo is None
    assert now_like(None).tzinfo is None


def test_days_between_tolerates_mixed_awareness() -> None:
    aware = datetime(2026, 3, 1, tzinfo=timezone.utc)

    assert days_between(aware, datetime(2026, 3, 9)) == 8


@pytest.mark.parametrize(
    ("start", "days", "expected"),
    [
        # Friday + 1 lands on Monday
        (datetime(2026, 3, 6, 9, 0), 1, datetime(2026, 3, 9, 9, 0)),
        # Saturday + 1 lands on Monday
        (datetime(2026, 3, 7, 9, 0), 1, datetime(2026, 3, 9, 9, 0)),
        (datetime(2026, 3, 4, 9, 0), 7, datetime(2026, 3, 13, 9, 0)),
        (datetime(2026, 3, 4, 9, 0), 0, datetime(2026, 3, 4, 9, 0)),
    ],
)
def test_add_business_days_skips_weekends(start: datetime, days: int, expected: datetime) -> None:
    assert add_business_days(start, days) == expected


def test_years_before_handles_leap_day() -> None:
    assert years_before(datetime(2028, 2, 29, 12, 0), 10) == datetime(2018, 2, 28, 12, 0)
    assert years_before(datetime(2026, 3, 4), 10) == datetime(2016, 3, 4)
