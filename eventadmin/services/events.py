import datetime as dt
import logging
from typing import Any, Mapping, Optional

import redis
from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eventadmin.core.config import LOCK_BLOCKING_TIMEOUT, LOCK_TIMEOUT
from eventadmin.core.errors import DomainError
from eventadmin.core.result import Err, Ok, Result
from eventadmin.models.events import Event, EventStatus
from eventadmin.models.profiles import Profile, ProfileRole
from eventadmin.models.registrations import Registration
from eventadmin.services.registrations import acquire_event_lock, release_event_lock
from eventadmin.services.users import require_role
from eventadmin.services.validation import EVENT_FIELDS, validate_event_draft

logger = logging.getLogger("eventadmin.services.events")


def _parse_status(value: Any) -> Optional[str]:
    if isinstance(value, EventStatus):
        return value.value
    text = str(value or "").strip().lower()
    return text if text in {status.value for status in EventStatus} else None


def _invalid_status(value: Any) -> DomainError:
    return DomainError.invalid_choice(value, [status.value for status in EventStatus])


def list_events(db: Session) -> Result[list[Event], DomainError]:
    """Return all events, newest first, each carrying ``registration_count``."""
    try:
        return Ok(list(db.scalars(select(Event).order_by(Event.created_at.desc())).all()))
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to list events")
        return Err(DomainError.repository_error("Failed to load events"))


def get_event(db: Session, event_id: str) -> Result[Event, DomainError]:
    try:
        event = db.get(Event, event_id)
    except SQLAlchemyError:
        logger.exception("Failed to load event %s", event_id)
        return Err(DomainError.repository_error("Failed to load event"))
    if event is None:
        return Err(DomainError.event_not_found(event_id))
    return Ok(event)


def create_event(
    db: Session,
    draft: Mapping[str, Any],
    *,
    actor: Optional[Profile],
    today: Optional[dt.date] = None,
) -> Result[Event, DomainError]:
    allowed = require_role(actor, ProfileRole.ADMIN)
    if isinstance(allowed, Err):
        return allowed

    validated = validate_event_draft(draft, today=today)
    errors = dict(validated.error) if isinstance(validated, Err) else {}
    status = EventStatus.UPCOMING.value
    if draft.get("status") is not None:
        status = _parse_status(draft["status"])
        if status is None:
            errors["status"] = _invalid_status(draft["status"])
    if errors:
        return Err(DomainError.validation_failed(errors))

    event = Event(**validated.value, status=status, created_by=actor.id)
    try:
        db.add(event)
        db.commit()
        db.refresh(event)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to create event %r", validated.value.get("title"))
        return Err(DomainError.repository_error("Failed to create event"))

    logger.info("Event %s created by %s", event.id, actor.id)
    return Ok(event)


def update_event(
    db: Session,
    lock_client: redis.Redis,
    event_id: str,
    partial_draft: Mapping[str, Any],
    *,
    actor: Optional[Profile],
    today: Optional[dt.date] = None,
    lock_timeout: float = LOCK_TIMEOUT,
    blocking_timeout: float = LOCK_BLOCKING_TIMEOUT,
) -> Result[Event, DomainError]:
    """Apply the supplied fields to an event.

    Only the fields present in ``partial_draft`` are validated. Capacity may
    not drop below the number of attendees already registered; a capacity
    change holds the same per-event lock as registration so the count it
    checks cannot grow before the commit.
    """
    allowed = require_role(actor, ProfileRole.ADMIN)
    if isinstance(allowed, Err):
        return allowed

    supplied = [name for name in EVENT_FIELDS if name in partial_draft]
    validated = validate_event_draft(partial_draft, today=today, fields=supplied)
    errors = dict(validated.error) if isinstance(validated, Err) else {}
    changes = {} if isinstance(validated, Err) else dict(validated.value)
    if "status" in partial_draft:
        status = _parse_status(partial_draft["status"])
        if status is None:
            errors["status"] = _invalid_status(partial_draft["status"])
        else:
            changes["status"] = status
    if errors:
        return Err(DomainError.validation_failed(errors))

    if "capacity" not in changes:
        return _apply_changes(db, event_id, changes, actor)

    locked = acquire_event_lock(lock_client, event_id, timeout=lock_timeout, blocking_timeout=blocking_timeout)
    if isinstance(locked, Err):
        return locked
    try:
        return _apply_changes(db, event_id, changes, actor)
    finally:
        release_event_lock(locked.value, event_id)


def _apply_changes(
    db: Session, event_id: str, changes: dict[str, Any], actor: Profile
) -> Result[Event, DomainError]:
    try:
        event = db.get(Event, event_id)
        if event is None:
            return Err(DomainError.event_not_found(event_id))
        if "capacity" in changes:
            registered = db.scalar(
                select(func.count(Registration.id)).where(Registration.event_id == event_id)
            ) or 0
            if changes["capacity"] < registered:
                db.rollback()
                return Err(DomainError.capacity_below_registrations(changes["capacity"], registered))
        for name, value in changes.items():
            setattr(event, name, value)
        db.commit()
        db.refresh(event)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to update event %s", event_id)
        return Err(DomainError.repository_error("Failed to update event"))

    logger.info("Event %s updated by %s (%s)", event_id, actor.id, ", ".join(sorted(changes)) or "no changes")
    return Ok(event)


def set_event_status(
    db: Session,
    event_id: str,
    status: Any,
    *,
    actor: Optional[Profile],
) -> Result[Event, DomainError]:
    allowed = require_role(actor, ProfileRole.ADMIN)
    if isinstance(allowed, Err):
        return allowed
    parsed = _parse_status(status)
    if parsed is None:
        return Err(DomainError.validation_failed({"status": _invalid_status(status)}))

    try:
        event = db.get(Event, event_id)
        if event is None:
            return Err(DomainError.event_not_found(event_id))
        event.status = parsed
        db.commit()
        db.refresh(event)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to update status of event %s", event_id)
        return Err(DomainError.repository_error("Failed to update event status"))

    logger.info("Event %s marked %s by %s", event_id, parsed, actor.id)
    return Ok(event)


def delete_event(db: Session, event_id: str, *, actor: Optional[Profile]) -> Result[None, DomainError]:
    """Delete an event together with all of its registrations."""
    allowed = require_role(actor, ProfileRole.ADMIN)
    if isinstance(allowed, Err):
        return allowed

    try:
        event = db.get(Event, event_id)
        if event is None:
            return Err(DomainError.event_not_found(event_id))
        removed = db.execute(delete(Registration).where(Registration.event_id == event_id)).rowcount
        db.execute(delete(Event).where(Event.id == event_id))
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to delete event %s", event_id)
        return Err(DomainError.repository_error("Failed to delete event"))

    logger.info("Event %s deleted by %s with %d registrations", event_id, actor.id, removed)
    return Ok(None)
