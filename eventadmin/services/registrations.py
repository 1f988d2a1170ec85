import datetime as dt
import logging
from dataclasses import dataclass
from typing import Optional

import redis
from redis.lock import Lock
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from eventadmin.core.config import LOCK_BLOCKING_TIMEOUT, LOCK_TIMEOUT
from eventadmin.core.errors import DomainError
from eventadmin.core.result import Err, Ok, Result
from eventadmin.database.db import utcnow
from eventadmin.models.events import Event
from eventadmin.models.profiles import Profile
from eventadmin.models.registrations import Registration
from eventadmin.services.users import require_role

logger = logging.getLogger("eventadmin.services.registrations")


@dataclass(frozen=True)
class AttendeeRegistration:
    """One registration joined with the event it belongs to."""

    id: str
    attendee_name: str
    event_id: str
    event_title: str
    event_status: str
    registration_date: dt.datetime


def lock_key(event_id: str) -> str:
    return f"event_lock:{event_id}"


def acquire_event_lock(
    lock_client: redis.Redis,
    event_id: str,
    *,
    timeout: float = LOCK_TIMEOUT,
    blocking_timeout: float = LOCK_BLOCKING_TIMEOUT,
) -> Result[Lock, DomainError]:
    """Take the per-event lock that serializes changes to an event's seat count."""
    lock = lock_client.lock(lock_key(event_id), timeout=timeout, blocking_timeout=blocking_timeout)
    try:
        acquired = lock.acquire(blocking=True)
    except redis.exceptions.RedisError:
        logger.exception("Event lock unavailable for event %s", event_id)
        return Err(DomainError.repository_error("Could not reach the event lock, please try again."))
    if not acquired:
        logger.warning("Timed out waiting for lock on event %s", event_id)
        return Err(DomainError.repository_error("Could not acquire event lock, please try again."))
    return Ok(lock)


def release_event_lock(lock: Lock, event_id: str) -> None:
    # a lock that cannot be released expires on its timeout
    try:
        lock.release()
    except redis.exceptions.RedisError:
        logger.warning("Could not release lock on event %s, it will expire", event_id, exc_info=True)


def register_attendee(
    db: Session,
    lock_client: redis.Redis,
    *,
    event_id: str,
    attendee_name: str,
    actor: Optional[Profile],
    lock_timeout: float = LOCK_TIMEOUT,
    blocking_timeout: float = LOCK_BLOCKING_TIMEOUT,
) -> Result[Registration, DomainError]:
    """
    Register an attendee under the event's Redis lock.
    Capacity and duplicate checks and the insert run while the lock is held,
    so two requests for the last open slot cannot both succeed.
    """
    allowed = require_role(actor)
    if isinstance(allowed, Err):
        return allowed

    name = (attendee_name or "").strip()
    if not name:
        return Err(DomainError.validation_failed({"attendee_name": DomainError.required("Attendee name is required")}))

    locked = acquire_event_lock(lock_client, event_id, timeout=lock_timeout, blocking_timeout=blocking_timeout)
    if isinstance(locked, Err):
        return locked

    try:
        result = _register_in_transaction(db, event_id, name)
    finally:
        release_event_lock(locked.value, event_id)

    if isinstance(result, Ok):
        logger.info("Registered %r for event %s (by %s)", name, event_id, actor.id)
    return result


def _register_in_transaction(db: Session, event_id: str, attendee_name: str) -> Result[Registration, DomainError]:
    """Internal function: all checks and the insert commit or roll back together."""
    try:
        admitted = _admit(db, event_id, attendee_name)
        if isinstance(admitted, Err):
            db.rollback()
            return admitted
        registration = Registration(
            event_id=event_id,
            attendee_name=attendee_name,
            registration_date=utcnow(),
        )
        db.add(registration)
        db.commit()
        db.refresh(registration)
    except IntegrityError:
        db.rollback()
        return Err(DomainError.duplicate_attendee(attendee_name))
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to register %r for event %s", attendee_name, event_id)
        return Err(DomainError.repository_error("Failed to register attendee"))
    return Ok(registration)


def _admit(db: Session, event_id: str, attendee_name: str) -> Result[Event, DomainError]:
    event = db.get(Event, event_id)
    if event is None:
        return Err(DomainError.event_not_found(event_id))

    count = db.scalar(select(func.count(Registration.id)).where(Registration.event_id == event_id)) or 0
    if count >= event.capacity:
        return Err(DomainError.capacity_exceeded(event.title, count, event.capacity))

    existing = db.scalar(
        select(Registration.id).where(
            Registration.event_id == event_id,
            Registration.attendee_name == attendee_name,
        )
    )
    if existing is not None:
        return Err(DomainError.duplicate_attendee(attendee_name))
    return Ok(event)


def unregister(db: Session, *, registration_id: str, actor: Optional[Profile]) -> Result[None, DomainError]:
    allowed = require_role(actor)
    if isinstance(allowed, Err):
        return allowed

    try:
        registration = db.get(Registration, registration_id)
        if registration is None:
            return Err(DomainError.registration_not_found(registration_id))
        db.delete(registration)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to remove registration %s", registration_id)
        return Err(DomainError.repository_error("Failed to remove attendee registration"))

    logger.info("Registration %s removed by %s", registration_id, actor.id)
    return Ok(None)


def list_registrations(db: Session, event_id: str) -> Result[list[Registration], DomainError]:
    """Return the event's registrations, most recent first."""
    stmt = (
        select(Registration)
        .where(Registration.event_id == event_id)
        .order_by(Registration.registration_date.desc())
    )
    try:
        return Ok(list(db.scalars(stmt).all()))
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to list registrations for event %s", event_id)
        return Err(DomainError.repository_error("Failed to load registrations"))


def list_attendee_registrations(
    db: Session, *, actor: Optional[Profile]
) -> Result[list[AttendeeRegistration], DomainError]:
    """Every registration across all events, most recent first, with its event's title and status."""
    allowed = require_role(actor)
    if isinstance(allowed, Err):
        return allowed

    stmt = (
        select(Registration, Event.title, Event.status)
        .join(Event, Registration.event_id == Event.id)
        .order_by(Registration.registration_date.desc())
    )
    try:
        rows = db.execute(stmt).all()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to list attendee registrations")
        return Err(DomainError.repository_error("Failed to load attendee registrations"))

    return Ok(
        [
            AttendeeRegistration(
                id=registration.id,
                attendee_name=registration.attendee_name,
                event_id=registration.event_id,
                event_title=title,
                event_status=status,
                registration_date=registration.registration_date,
            )
            for registration, title, status in rows
        ]
    )
