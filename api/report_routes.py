from datetime import datetime
from typing import Annotated, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import AliasChoices, BaseModel
from pydantic import Field as PydanticField
from sqlmodel import Session

from core.config import APP_TIMEZONE, DASHBOARD_DAYS
from core.deps import get_current_caller, is_manager, require_manager_role
from core.exceptions import InvalidInput
from db.session import get_session
from models.shift import ShiftRead
from services.report_service import ReportService, normalize_range

router = APIRouter()

# --- Pydantic Models for Requests / Responses ---


class UserEmailsRequest(BaseModel):
    user_ids: List[str] = PydanticField(
        default_factory=list, validation_alias=AliasChoices("user_ids", "userIds")
    )


class UserEmailsResponse(BaseModel):
    id_to_email: Dict[str, str]


# --- API Endpoints ---


# Managers see every worker's shifts; everyone else only their own
@router.get("/shifts")
def list_shifts(
    session: Annotated[Session, Depends(get_session)],
    caller: Annotated[dict, Depends(get_current_caller)],
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    with_emails: bool = False,
):
    start, end = normalize_range(start, end)

    worker_id = None if is_manager(caller) else caller["uid"]
    shifts = ReportService.list_shifts(session, start, end, worker_id=worker_id)

    id_to_email: Dict[str, str] = {}
    if worker_id is not None:
        id_to_email = {caller["uid"]: caller["email"]}
    elif with_emails and shifts:
        id_to_email = ReportService.resolve_worker_emails(s.worker_id for s in shifts)

    return {
        "status": "success",
        "data": [ShiftRead.from_shift(s, worker_email=id_to_email.get(s.worker_id)) for s in shifts],
    }


# Aggregate analytics across all workers
@router.get("/dashboard")
def get_dashboard(
    session: Annotated[Session, Depends(get_session)],
    manager: Annotated[dict, Depends(require_manager_role)],
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    days: Annotated[int, Query(ge=1, le=366)] = DASHBOARD_DAYS,
):
    start, end = normalize_range(start, end)

    shifts = ReportService.list_shifts(session, start, end)
    dashboard = ReportService.build_dashboard(shifts, days=days, tz=APP_TIMEZONE)
    return {"status": "success", "data": dashboard}


# Resolve a batch of worker ids to display emails
@router.post("/user-emails", response_model=UserEmailsResponse)
def resolve_user_emails(
    payload: UserEmailsRequest,
    manager: Annotated[dict, Depends(require_manager_role)],
):
    if not payload.user_ids:
        raise InvalidInput("user_ids required")
    return UserEmailsResponse(id_to_email=ReportService.resolve_worker_emails(payload.user_ids))
