from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from utils.datetime_helpers import utc_now


# Roster of emails allowed to configure the perimeter and see everyone's shifts
class Manager(SQLModel, table=True):
    __tablename__ = "managers"

    email: str = Field(primary_key=True, description="Lower-cased manager email")
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
