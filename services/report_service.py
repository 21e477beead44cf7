import logging
from datetime import date, datetime
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from firebase_admin import exceptions as firebase_exceptions
from sqlmodel import Session, col, select

from core.config import APP_TIMEZONE, DASHBOARD_DAYS, TOP_WORKERS_LIMIT
from core.exceptions import InvalidInput
from core.firebase import get_user_email
from models.shift import Shift
from utils.datetime_helpers import ensure_utc
from utils.shift_stats import (
    bucket_by_hour_of_day,
    daily_hours_last_n_days,
    summarize,
    top_workers_by_hours,
)

logger = logging.getLogger(__name__)


class ReportService:

    @staticmethod
    def list_shifts(
        session: Session,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        worker_id: Optional[str] = None,
    ) -> List[Shift]:
        """Shifts whose clock-in falls inside [start, end], newest first."""
        statement = select(Shift)
        if worker_id is not None:
            statement = statement.where(Shift.worker_id == worker_id)
        if start is not None:
            statement = statement.where(Shift.clock_in_time >= start)
        if end is not None:
            statement = statement.where(Shift.clock_in_time <= end)
        return list(session.exec(statement.order_by(col(Shift.clock_in_time).desc())).all())

    @staticmethod
    def build_dashboard(
        shifts: List[Shift],
        days: int = DASHBOARD_DAYS,
        tz: str = APP_TIMEZONE,
        top_limit: int = TOP_WORKERS_LIMIT,
        today: Optional[date] = None,
    ) -> dict:
        return {
            "summary": summarize(shifts),
            "time_of_day": bucket_by_hour_of_day(shifts, tz),
            "daily_hours": [
                {"date": day.isoformat(), "hours": hours}
                for day, hours in daily_hours_last_n_days(shifts, days, tz, today=today)
            ],
            "top_workers": top_workers_by_hours(shifts, top_limit),
            "timezone": tz,
        }

    @staticmethod
    def resolve_worker_emails(
        worker_ids: Iterable[str],
        lookup: Optional[Callable[[str], Optional[str]]] = None,
    ) -> Dict[str, str]:
        """Map worker ids to emails; ids the identity provider can't resolve are left out."""
        lookup = lookup or get_user_email
        id_to_email: Dict[str, str] = {}
        for worker_id in dict.fromkeys(worker_ids):
            try:
                email = lookup(worker_id)
            except (ValueError, firebase_exceptions.FirebaseError) as e:
                logger.warning(f"Could not resolve email for worker {worker_id}: {e}")
                continue
            if email:
                id_to_email[worker_id] = email
        return id_to_email


def normalize_range(
    start: Optional[datetime], end: Optional[datetime]
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """Convert query bounds to UTC and reject inverted ranges."""
    start = ensure_utc(start) if start is not None else None
    end = ensure_utc(end) if end is not None else None
    if start is not None and end is not None and end < start:
        raise InvalidInput("end must not be before start.")
    return start, end
