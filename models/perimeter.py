from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, field_serializer
from pydantic import Field as PydanticField
from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from utils.datetime_helpers import format_utc_datetime, utc_now
from utils.geofence import Coordinate

# Defines the Manager-Defined Circular Geofence Gating Clock-In


class PerimeterConfig(SQLModel, table=True):
    __tablename__ = "perimeter_config"

    id: Optional[int] = Field(default=None, primary_key=True)
    # Sentinel key; the unique constraint keeps a single authoritative row
    scope: str = Field(default="default", unique=True)
    center_lat: float = Field(..., description="Latitude of perimeter center")
    center_long: float = Field(..., description="Longitude of perimeter center")
    radius_km: float = Field(..., description="Allowed clock-in radius in kilometers")
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))

    @property
    def center(self) -> Coordinate:
        return Coordinate(self.center_lat, self.center_long)


# Set request: any missing/null value turns the call into a clear request.
# Accepts the legacy perimeter_* keys as well.
class PerimeterUpdate(BaseModel):
    center_lat: Optional[float] = PydanticField(
        default=None, validation_alias=AliasChoices("center_lat", "perimeter_lat")
    )
    center_long: Optional[float] = PydanticField(
        default=None, validation_alias=AliasChoices("center_long", "perimeter_long")
    )
    radius_km: Optional[float] = None


class PerimeterRead(BaseModel):
    id: int
    center_lat: float
    center_long: float
    radius_km: float
    created_at: datetime
    updated_at: datetime

    @field_serializer("created_at", "updated_at")
    def serialize_timestamps(self, dt: datetime) -> Optional[str]:
        return format_utc_datetime(dt)

    @classmethod
    def from_config(cls, config: PerimeterConfig) -> "PerimeterRead":
        return cls(
            id=config.id,
            center_lat=config.center_lat,
            center_long=config.center_long,
            radius_km=config.radius_km,
            created_at=config.created_at,
            updated_at=config.updated_at,
        )
