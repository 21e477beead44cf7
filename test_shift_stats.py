from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional

import pytest

from utils.datetime_helpers import local_today
from utils.shift_stats import (
    ShiftSummary,
    TimeOfDayBuckets,
    bucket_by_hour_of_day,
    daily_hours_last_n_days,
    duration_hours,
    summarize,
    top_workers_by_hours,
)


@dataclass
class Row:
    worker_id: str
    clock_in_time: datetime
    clock_out_time: Optional[datetime] = None


def at(day, hour, minute=0):
    return datetime(2025, 6, day, hour, minute, tzinfo=timezone.utc)


def test_duration_of_open_and_closed_shifts():
    assert duration_hours(Row("a", at(1, 9))) is None
    assert duration_hours(Row("a", at(1, 9), at(1, 17, 30))) == pytest.approx(8.5)


def test_naive_timestamps_are_treated_as_utc():
    row = Row("a", datetime(2025, 6, 1, 9), at(1, 10))
    assert duration_hours(row) == pytest.approx(1.0)


def test_summarize_empty_has_no_division_by_zero():
    assert summarize([]) == ShiftSummary(
        total_shifts=0,
        total_hours=0,
        avg_hours_per_shift=0,
        active_workers=0,
        currently_clocked_in=0,
    )


def test_summarize_counts_open_shifts_but_not_their_hours():
    rows = [
        Row("a", at(1, 9), at(1, 17)),
        Row("a", at(2, 9), at(2, 13, 20)),
        Row("b", at(2, 10)),
    ]

    summary = summarize(rows)

    assert summary.total_shifts == 3
    assert summary.total_hours == pytest.approx(12.33)
    assert summary.avg_hours_per_shift == pytest.approx(4.11)
    assert summary.active_workers == 2
    assert summary.currently_clocked_in == 1


def test_bucket_boundaries():
    rows = [
        Row("a", at(1, 5, 59)),
        Row("a", at(1, 6)),
        Row("a", at(1, 11, 59)),
        Row("a", at(1, 12)),
        Row("a", at(1, 17, 59)),
        Row("a", at(1, 18)),
        Row("a", at(1, 0)),
    ]
    assert bucket_by_hour_of_day(rows) == TimeOfDayBuckets(morning=2, afternoon=2, night=3)


def test_buckets_use_local_hour():
    # 14:00 UTC is 10:00 in New York (EDT)
    buckets = bucket_by_hour_of_day([Row("a", at(1, 14))], tz="America/New_York")
    assert buckets == TimeOfDayBuckets(morning=1, afternoon=0, night=0)


def test_daily_hours_oldest_first_with_empty_days():
    rows = [
        Row("a", at(5, 9), at(5, 17)),
        Row("b", at(5, 20), at(5, 22)),
        Row("a", at(7, 8), at(7, 12)),
        Row("a", at(7, 13)),  # open shift adds nothing
        Row("a", at(1, 8), at(1, 12)),  # outside the window
    ]

    series = daily_hours_last_n_days(rows, 3, today=date(2025, 6, 7))

    assert series == [
        (date(2025, 6, 5), 10.0),
        (date(2025, 6, 6), 0.0),
        (date(2025, 6, 7), 4.0),
    ]


def test_daily_hours_with_non_positive_window():
    assert daily_hours_last_n_days([Row("a", at(1, 8), at(1, 9))], 0) == []


def test_daily_hours_defaults_to_today():
    series = daily_hours_last_n_days([], 7)

    assert len(series) == 7
    assert series[-1][0] == local_today("UTC")
    assert [day for day, _ in series] == [series[0][0] + timedelta(days=i) for i in range(7)]


def test_top_workers_sorted_by_hours():
    rows = [
        Row("a", at(1, 9), at(1, 11)),
        Row("b", at(1, 9), at(1, 17)),
        Row("b", at(2, 9), at(2, 10)),
        Row("c", at(1, 9)),
    ]

    top = top_workers_by_hours(rows, limit=2)

    assert [(w.worker_id, w.total_hours, w.shifts) for w in top] == [("b", 9.0, 2), ("a", 2.0, 1)]


def test_top_workers_lists_open_only_workers_with_zero_hours():
    rows = [Row("a", at(1, 9), at(1, 11)), Row("c", at(1, 9))]

    top = top_workers_by_hours(rows)

    assert [(w.worker_id, w.total_hours, w.shifts) for w in top] == [("a", 2.0, 1), ("c", 0.0, 0)]
