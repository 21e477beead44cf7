from datetime import datetime
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from core.deps import get_current_caller
from db.session import get_session
from models.shift import ClockInRequest, ClockOutRequest, ShiftRead
from services.perimeter_service import PerimeterService, check_location
from services.report_service import normalize_range
from services.shift_service import ShiftService, ShiftTransition
from utils.geofence import Coordinate

# Defines API Endpoints
router = APIRouter()


def _location_from(data: ClockInRequest) -> Optional[Coordinate]:
    if data.latitude is None or data.longitude is None:
        return None
    return Coordinate(data.latitude, data.longitude)


def _transition_response(result: ShiftTransition) -> dict:
    return {
        "status": "success",
        "outcome": result.outcome,
        "state": result.state,
        "message": result.message,
        "data": ShiftRead.from_shift(result.shift) if result.shift is not None else None,
    }


# Clock In Endpoint
@router.post("/clock-in")
def clock_in(
    data: ClockInRequest,
    session: Session = Depends(get_session),
    caller: dict = Depends(get_current_caller),
):
    perimeter = PerimeterService.latest(session)
    result = ShiftService.clock_in(
        session,
        worker_id=caller["uid"],
        location=_location_from(data),
        note=data.note,
        perimeter=perimeter,
    )
    return _transition_response(result)


# Clock Out Endpoint
@router.post("/clock-out")
def clock_out(
    data: ClockOutRequest,
    session: Session = Depends(get_session),
    caller: dict = Depends(get_current_caller),
):
    result = ShiftService.clock_out(
        session,
        worker_id=caller["uid"],
        location=_location_from(data),
        note=data.note,
        shift_id=data.shift_id,
    )
    return _transition_response(result)


# Get the Caller's Open Shift (if any)
@router.get("/open-shift")
def get_open_shift(
    session: Session = Depends(get_session),
    caller: dict = Depends(get_current_caller),
):
    shift = ShiftService.query_open_shift(session, caller["uid"])
    if not shift:
        return {"status": "success", "data": None, "message": "No active shift."}
    return {"status": "success", "data": ShiftRead.from_shift(shift)}


# Distance from the configured perimeter, for the clock screen
@router.get("/perimeter-check")
def perimeter_check(
    latitude: Annotated[float, Query(ge=-90, le=90)],
    longitude: Annotated[float, Query(ge=-180, le=180)],
    session: Session = Depends(get_session),
    caller: dict = Depends(get_current_caller),
):
    check = check_location(Coordinate(latitude, longitude), PerimeterService.latest(session))
    return {
        "status": "success",
        "data": {
            "enforced": check.enforced,
            "within": check.within,
            "distance_km": round(check.distance_km, 3) if check.distance_km is not None else None,
            "radius_km": check.radius_km,
        },
    }


# Get the Caller's Own Shift History
@router.get("/shifts")
def get_my_shifts(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    session: Session = Depends(get_session),
    caller: dict = Depends(get_current_caller),
):
    start, end = normalize_range(start, end)
    shifts = ShiftService.list_worker_shifts(session, caller["uid"], start, end)
    return {
        "status": "success",
        "data": [ShiftRead.from_shift(s, worker_email=caller["email"]) for s in shifts],
    }


@router.get("/shifts/{shift_id}")
def get_my_shift(
    shift_id: int,
    session: Session = Depends(get_session),
    caller: dict = Depends(get_current_caller),
):
    shift = ShiftService.get_worker_shift(session, caller["uid"], shift_id)
    return {"status": "success", "data": ShiftRead.from_shift(shift, worker_email=caller["email"])}
