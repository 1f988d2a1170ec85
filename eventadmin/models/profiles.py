import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from eventadmin.database.db import Base, new_id, utcnow


class ProfileRole(str, enum.Enum):
    ADMIN = "admin"
    ORGANISER = "organiser"


class Profile(Base):
    """Dashboard user account. Identity itself is issued by the auth provider."""

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    full_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=ProfileRole.ORGANISER.value)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == ProfileRole.ADMIN.value
