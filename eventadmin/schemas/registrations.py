from datetime import datetime

from pydantic import BaseModel


class RegistrationIn(BaseModel):
    attendee_name: str


class RegistrationOut(BaseModel):
    id: str
    event_id: str
    attendee_name: str
    registration_date: datetime
    created_at: datetime

    class Config:
        from_attributes = True


class AttendeeRegistrationOut(BaseModel):
    id: str
    attendee_name: str
    event_id: str
    event_title: str
    event_status: str
    registration_date: datetime

    class Config:
        from_attributes = True
