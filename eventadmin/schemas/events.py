import datetime as dt
from typing import Optional, Union

from pydantic import BaseModel

from eventadmin.models.events import EventStatus


# ---------- Event ----------
class EventDraftIn(BaseModel):
    """Raw form values; checked by the event validator, not by pydantic."""

    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[str] = None
    location: Optional[str] = None
    capacity: Optional[Union[int, str]] = None
    price: Optional[Union[int, float, str]] = None
    status: Optional[EventStatus] = None


class EventStatusIn(BaseModel):
    status: EventStatus


class EventOut(BaseModel):
    id: str
    title: str
    description: Optional[str]
    date: dt.date
    location: Optional[str]
    capacity: int
    price: float
    status: str
    created_by: Optional[str]
    created_at: dt.datetime
    updated_at: dt.datetime
    registration_count: int = 0

    class Config:
        from_attributes = True
