"""Pure aggregation helpers over shift records.

Records only need ``worker_id``, ``clock_in_time`` and ``clock_out_time``
attributes. Open shifts add nothing to hour totals but count as currently
clocked in.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from utils.datetime_helpers import ensure_utc, from_utc_to_local, local_today

MORNING_START_HOUR = 6
AFTERNOON_START_HOUR = 12
NIGHT_START_HOUR = 18


@dataclass(frozen=True)
class ShiftSummary:
    total_shifts: int = 0
    total_hours: float = 0.0
    avg_hours_per_shift: float = 0.0
    active_workers: int = 0
    currently_clocked_in: int = 0


@dataclass(frozen=True)
class TimeOfDayBuckets:
    morning: int = 0
    afternoon: int = 0
    night: int = 0


@dataclass(frozen=True)
class WorkerHours:
    worker_id: str
    total_hours: float
    shifts: int


def duration_hours(record) -> Optional[float]:
    """Hours between clock-in and clock-out, or None while the shift is open."""
    if record.clock_out_time is None:
        return None
    elapsed = ensure_utc(record.clock_out_time) - ensure_utc(record.clock_in_time)
    return elapsed.total_seconds() / 3600.0


def summarize(records: Iterable) -> ShiftSummary:
    records = list(records)
    total_shifts = len(records)
    if total_shifts == 0:
        return ShiftSummary()

    total_hours = sum(duration_hours(r) or 0.0 for r in records)

    return ShiftSummary(
        total_shifts=total_shifts,
        total_hours=round(total_hours, 2),
        avg_hours_per_shift=round(total_hours / total_shifts, 2),
        active_workers=len({r.worker_id for r in records}),
        currently_clocked_in=sum(1 for r in records if r.clock_out_time is None),
    )


def bucket_by_hour_of_day(records: Iterable, tz: str = "UTC") -> TimeOfDayBuckets:
    morning = afternoon = night = 0
    for record in records:
        hour = from_utc_to_local(record.clock_in_time, tz).hour
        if MORNING_START_HOUR <= hour < AFTERNOON_START_HOUR:
            morning += 1
        elif AFTERNOON_START_HOUR <= hour < NIGHT_START_HOUR:
            afternoon += 1
        else:
            # [18, 24) and [0, 6)
            night += 1
    return TimeOfDayBuckets(morning=morning, afternoon=afternoon, night=night)


def daily_hours_last_n_days(
    records: Iterable,
    n: int,
    tz: str = "UTC",
    today: Optional[date] = None,
) -> List[Tuple[date, float]]:
    """Closed-shift hours per local calendar day of clock-in, oldest day first."""
    if n <= 0:
        return []
    if today is None:
        today = local_today(tz)

    days = [today - timedelta(days=offset) for offset in range(n - 1, -1, -1)]
    hours_by_day: Dict[date, float] = defaultdict(float)

    for record in records:
        hours = duration_hours(record)
        if not hours:
            continue
        day = from_utc_to_local(record.clock_in_time, tz).date()
        hours_by_day[day] += hours

    return [(day, round(hours_by_day.get(day, 0.0), 2)) for day in days]


def top_workers_by_hours(records: Iterable, limit: int = 5) -> List[WorkerHours]:
    totals: Dict[str, float] = defaultdict(float)
    counts: Dict[str, int] = defaultdict(int)

    for record in records:
        totals.setdefault(record.worker_id, 0.0)
        hours = duration_hours(record)
        if hours:
            totals[record.worker_id] += hours
            counts[record.worker_id] += 1

    ranked = sorted(totals.items(), key=lambda item: (-item[1], item[0]))
    return [
        WorkerHours(worker_id=worker_id, total_hours=round(hours, 2), shifts=counts[worker_id])
        for worker_id, hours in ranked[:limit]
    ]
