from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, field_serializer
from pydantic import Field as PydanticField
from sqlalchemy import DateTime, text
from sqlmodel import Field, Index, SQLModel

from utils.datetime_helpers import ensure_utc, format_utc_datetime, utc_now


# Defines the Structure of Data for a Clock In Call
class ClockInRequest(BaseModel):
    latitude: float | None = PydanticField(default=None, ge=-90, le=90)
    longitude: float | None = PydanticField(default=None, ge=-180, le=180)
    note: str | None = None


# Clock Out may carry the shift handle the client already knows about
class ClockOutRequest(ClockInRequest):
    shift_id: int | None = None


class ShiftState(str, Enum):
    OFF_SHIFT = "off_shift"
    ON_SHIFT = "on_shift"


# Defines a Table "shifts" w/ one row per attendance interval
class Shift(SQLModel, table=True):
    __tablename__ = "shifts"

    __table_args__ = (
        # Composite index for per-worker history queries
        Index("ix_shifts_worker_id_clock_in_time", "worker_id", "clock_in_time"),
        # Index for date range reporting
        Index("ix_shifts_clock_in_time", "clock_in_time"),
        # At most one open shift per worker; enforced by the store itself
        Index(
            "uq_shifts_open_per_worker",
            "worker_id",
            unique=True,
            postgresql_where=text("clock_out_time IS NULL"),
            sqlite_where=text("clock_out_time IS NULL"),
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    worker_id: str
    clock_in_time: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    clock_out_time: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    clock_in_location: Optional[str] = Field(default=None)
    clock_out_location: Optional[str] = Field(default=None)
    clock_in_note: Optional[str] = Field(default=None)
    clock_out_note: Optional[str] = Field(default=None)

    @property
    def is_open(self) -> bool:
        return self.clock_out_time is None


class ShiftRead(BaseModel):
    id: int
    worker_id: str
    clock_in_time: datetime
    clock_out_time: Optional[datetime] = None
    clock_in_location: Optional[str] = None
    clock_out_location: Optional[str] = None
    clock_in_note: Optional[str] = None
    clock_out_note: Optional[str] = None
    duration_hours: Optional[float] = None
    worker_email: Optional[str] = None

    @field_serializer("clock_in_time", "clock_out_time")
    def serialize_timestamps(self, dt: Optional[datetime]) -> Optional[str]:
        """Ensure timestamps are formatted as UTC with Z suffix"""
        return format_utc_datetime(dt)

    @classmethod
    def from_shift(cls, shift: Shift, worker_email: Optional[str] = None) -> "ShiftRead":
        duration = None
        if shift.clock_out_time is not None:
            elapsed = ensure_utc(shift.clock_out_time) - ensure_utc(shift.clock_in_time)
            duration = round(elapsed.total_seconds() / 3600.0, 4)
        return cls(
            id=shift.id,
            worker_id=shift.worker_id,
            clock_in_time=shift.clock_in_time,
            clock_out_time=shift.clock_out_time,
            clock_in_location=shift.clock_in_location,
            clock_out_location=shift.clock_out_location,
            clock_in_note=shift.clock_in_note,
            clock_out_note=shift.clock_out_note,
            duration_hours=duration,
            worker_email=worker_email,
        )
