from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from eventadmin.models.profiles import ProfileRole


class ProfileCreate(BaseModel):
    email: str
    full_name: Optional[str] = None
    role: ProfileRole = ProfileRole.ORGANISER


class ProfileOut(BaseModel):
    id: str
    email: str
    full_name: Optional[str]
    role: str
    created_at: datetime

    class Config:
        from_attributes = True
