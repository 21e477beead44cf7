import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from models.manager import Manager

logger = logging.getLogger(__name__)


class CallerRole(str, Enum):
    MANAGER = "manager"
    WORKER = "worker"


class RosterStatus(str, Enum):
    LISTED = "listed"
    NOT_LISTED = "not_listed"
    FAILED = "failed"


@dataclass(frozen=True)
class RosterLookup:
    status: RosterStatus
    error: Optional[str] = None


def normalize_email(email: str) -> str:
    return email.strip().lower()


def lookup_manager(session: Session, email: Optional[str]) -> RosterLookup:
    """Look ``email`` up in the manager roster; store errors come back as ``FAILED``."""
    if not email:
        return RosterLookup(RosterStatus.NOT_LISTED)
    try:
        row = session.get(Manager, normalize_email(email))
    except SQLAlchemyError as e:
        session.rollback()
        return RosterLookup(RosterStatus.FAILED, error=str(e))
    if row is None:
        return RosterLookup(RosterStatus.NOT_LISTED)
    return RosterLookup(RosterStatus.LISTED)


def classify(session: Session, email: Optional[str]) -> CallerRole:
    lookup = lookup_manager(session, email)
    if lookup.status == RosterStatus.LISTED:
        return CallerRole.MANAGER
    if lookup.status == RosterStatus.FAILED:
        # Fail closed to the less-privileged role
        logger.warning(f"Manager roster lookup failed for {email}; treating as worker: {lookup.error}")
    return CallerRole.WORKER
