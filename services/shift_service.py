import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, col, select

from core.exceptions import LocationUnavailable, NotFound, OutsidePerimeter
from models.perimeter import PerimeterConfig
from models.shift import Shift, ShiftState
from services.perimeter_service import check_location
from utils.datetime_helpers import ensure_utc, utc_now
from utils.geofence import Coordinate, format_location

logger = logging.getLogger(__name__)


class ClockOutcome(str, Enum):
    CLOCKED_IN = "clocked_in"
    ALREADY_CLOCKED_IN = "already_clocked_in"
    CLOCKED_OUT = "clocked_out"
    NOTHING_TO_CLOSE = "nothing_to_close"


@dataclass
class ShiftTransition:
    """Result of a clock in/out; "already there" is a normal outcome, not an error."""

    outcome: ClockOutcome
    shift: Optional[Shift] = None
    message: Optional[str] = None

    @property
    def state(self) -> ShiftState:
        if self.shift is not None and self.shift.is_open:
            return ShiftState.ON_SHIFT
        return ShiftState.OFF_SHIFT


def _clean_note(note: Optional[str]) -> Optional[str]:
    if note is None:
        return None
    note = note.strip()
    return note or None


class ShiftService:

    @staticmethod
    def query_open_shift(session: Session, worker_id: str) -> Optional[Shift]:
        return session.exec(
            select(Shift)
            .where(Shift.worker_id == worker_id)
            .where(col(Shift.clock_out_time).is_(None))
            .order_by(col(Shift.clock_in_time).desc())
        ).first()

    @staticmethod
    def current_state(session: Session, worker_id: str) -> ShiftState:
        if ShiftService.query_open_shift(session, worker_id) is None:
            return ShiftState.OFF_SHIFT
        return ShiftState.ON_SHIFT

    @staticmethod
    def clock_in(
        session: Session,
        worker_id: str,
        location: Optional[Coordinate],
        note: Optional[str] = None,
        perimeter: Optional[PerimeterConfig] = None,
    ) -> ShiftTransition:

        # 0) Must supply location
        if location is None:
            raise LocationUnavailable("Location (latitude and longitude) is required for clock-in.")

        # 1) Geofence gate
        if perimeter is not None:
            check = check_location(location, perimeter)
            if not check.within:
                raise OutsidePerimeter(check.distance_km, check.radius_km)

        # 2) Already on shift: hand back the open record unchanged
        existing = ShiftService.query_open_shift(session, worker_id)
        if existing is not None:
            return ShiftTransition(
                ClockOutcome.ALREADY_CLOCKED_IN, existing, "You're already clocked in."
            )

        shift = Shift(
            worker_id=worker_id,
            clock_in_time=utc_now(),
            clock_in_location=format_location(location),
            clock_in_note=_clean_note(note),
        )
        session.add(shift)
        try:
            session.commit()
        except IntegrityError:
            # A concurrent clock-in won the open-shift unique index
            session.rollback()
            existing = ShiftService.query_open_shift(session, worker_id)
            if existing is None:
                raise
            logger.info(f"Concurrent clock-in for worker {worker_id} resolved to shift {existing.id}")
            return ShiftTransition(
                ClockOutcome.ALREADY_CLOCKED_IN, existing, "You're already clocked in."
            )
        except SQLAlchemyError:
            session.rollback()
            raise

        session.refresh(shift)
        logger.info(f"Worker {worker_id} clocked in (shift {shift.id}) at {shift.clock_in_location}")
        return ShiftTransition(ClockOutcome.CLOCKED_IN, shift, "Clocked in successfully.")

    @staticmethod
    def _resolve_open_shift(
        session: Session, worker_id: str, shift_id: Optional[int]
    ) -> Optional[Shift]:
        if shift_id is not None:
            handle = session.get(Shift, shift_id)
            if handle is None or handle.worker_id != worker_id:
                raise NotFound(f"Shift with ID {shift_id} not found.")
            if handle.is_open:
                return handle
            # Stale handle: the shift was already closed, look for a newer one
        return ShiftService.query_open_shift(session, worker_id)

    @staticmethod
    def clock_out(
        session: Session,
        worker_id: str,
        location: Optional[Coordinate],
        note: Optional[str] = None,
        shift_id: Optional[int] = None,
    ) -> ShiftTransition:

        if location is None:
            raise LocationUnavailable("Location (latitude and longitude) is required for clock-out.")

        shift = ShiftService._resolve_open_shift(session, worker_id, shift_id)
        if shift is None:
            return ShiftTransition(ClockOutcome.NOTHING_TO_CLOSE, None, "No active shift to clock out.")

        # clock_out_time never precedes clock_in_time
        now = utc_now()
        clock_in_time = ensure_utc(shift.clock_in_time)
        shift_id = shift.id

        # Only an open row may be closed; a concurrent clock-out leaves rowcount 0
        statement = (
            update(Shift)
            .where(col(Shift.id) == shift_id)
            .where(col(Shift.clock_out_time).is_(None))
            .values(
                clock_out_time=now if now >= clock_in_time else clock_in_time,
                clock_out_location=format_location(location),
                clock_out_note=_clean_note(note),
            )
            .execution_options(synchronize_session=False)
        )
        try:
            closed = session.execute(statement).rowcount
            if not closed:
                session.rollback()
                logger.info(f"Shift {shift_id} for worker {worker_id} was already closed")
                return ShiftTransition(
                    ClockOutcome.NOTHING_TO_CLOSE, None, "No active shift to clock out."
                )
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            raise

        shift = session.get(Shift, shift_id)
        session.refresh(shift)

        logger.info(f"Worker {worker_id} clocked out (shift {shift_id}) at {shift.clock_out_location}")
        return ShiftTransition(ClockOutcome.CLOCKED_OUT, shift, "Clocked out successfully.")

    @staticmethod
    def list_worker_shifts(
        session: Session,
        worker_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Shift]:
        statement = select(Shift).where(Shift.worker_id == worker_id)
        if start is not None:
            statement = statement.where(Shift.clock_in_time >= start)
        if end is not None:
            statement = statement.where(Shift.clock_in_time <= end)
        return list(session.exec(statement.order_by(col(Shift.clock_in_time).desc())).all())

    @staticmethod
    def get_worker_shift(session: Session, worker_id: str, shift_id: int) -> Shift:
        shift = session.get(Shift, shift_id)
        if shift is None or shift.worker_id != worker_id:
            raise NotFound(f"Shift with ID {shift_id} not found.")
        return shift
