# yoda_events/schemas/event.py
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Event times are stored as naive UTC
def _to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class EventBase(ORMBase):
    name: str = Field(..., min_length=1, max_length=255)
    location: str = Field(..., min_length=1, max_length=255)
    time: datetime
    details: Optional[str] = None

    @field_validator("time")
    @classmethod
    def _utc_time(cls, v):
        return _to_naive_utc(v)


# Schema for creating a new event; owner comes from the token
class EventCreate(EventBase):
    pass


# Schema for partial updates; owner is deliberately absent
class EventUpdate(ORMBase):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    time: Optional[datetime] = None
    details: Optional[str] = None

    @field_validator("time")
    @classmethod
    def _utc_time(cls, v):
        return _to_naive_utc(v)


class UserSummary(ORMBase):
    id: int
    username: str


class EventResponse(EventBase):
    id: int
    slug: str
    owner: UserSummary
    attendees: List[UserSummary] = []
    created_at: datetime
    updated_at: datetime

    @field_validator("attendees", mode="before")
    @classmethod
    def _sorted_attendees(cls, v):
        return sorted(v or [], key=lambda u: getattr(u, "id", None) or 0)


class AttendingResponse(BaseModel):
    attending: bool
