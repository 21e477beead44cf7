from typing import Annotated

from fastapi import APIRouter, Depends
from sqlmodel import Session

from core.deps import get_current_caller, require_manager_role
from db.session import get_session
from models.perimeter import PerimeterRead, PerimeterUpdate
from services.perimeter_service import PerimeterService

# --- Router Definition ---
router = APIRouter()


# Endpoint: Current Perimeter (workers need it too, to show their distance)
@router.get("")
def get_perimeter(
    session: Annotated[Session, Depends(get_session)],
    caller: Annotated[dict, Depends(get_current_caller)],
):
    config = PerimeterService.latest(session)
    return {
        "status": "success",
        "data": PerimeterRead.from_config(config) if config else None,
    }


# Endpoint: Set the Perimeter; a payload with any null field clears it
@router.post("")
def set_perimeter(
    payload: PerimeterUpdate,
    session: Annotated[Session, Depends(get_session)],
    manager: Annotated[dict, Depends(require_manager_role)],
):
    config = PerimeterService.set_perimeter(
        session,
        manager,
        center_lat=payload.center_lat,
        center_long=payload.center_long,
        radius_km=payload.radius_km,
    )
    if config is None:
        return {"status": "success", "data": None, "message": "Perimeter cleared."}
    return {"status": "success", "data": PerimeterRead.from_config(config)}


# Endpoint: Clear the Perimeter
@router.delete("")
def clear_perimeter(
    session: Annotated[Session, Depends(get_session)],
    manager: Annotated[dict, Depends(require_manager_role)],
):
    PerimeterService.clear_perimeter(session, manager)
    return {"status": "success", "data": None, "message": "Perimeter cleared."}
