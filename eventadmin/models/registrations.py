from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint, func, select
from sqlalchemy.orm import Mapped, column_property, mapped_column, relationship

from eventadmin.database.db import Base, new_id, utcnow
from eventadmin.models.events import Event


class Registration(Base):
    __tablename__ = "event_registrations"
    # second line of defence behind the per-event admission lock
    __table_args__ = (
        UniqueConstraint("event_id", "attendee_name", name="uq_registration_event_attendee"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    event_id: Mapped[str] = mapped_column(ForeignKey("events.id"), nullable=False, index=True)
    attendee_name: Mapped[str] = mapped_column(String(200), nullable=False)
    registration_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    event: Mapped["Event"] = relationship(back_populates="registrations")


Event.registration_count = column_property(
    select(func.count(Registration.id))
    .where(Registration.event_id == Event.id)
    .correlate_except(Registration)
    .scalar_subquery()
)
