import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from eventadmin.core.errors import DomainError, ErrorCode
from eventadmin.core.result import Err, Ok, Result
from eventadmin.models.profiles import Profile, ProfileRole

logger = logging.getLogger("eventadmin.services.users")

ANY_ROLE = (ProfileRole.ADMIN, ProfileRole.ORGANISER)


def get_current_user_profile(db: Session, user_id: Optional[str]) -> Result[Optional[Profile], DomainError]:
    """Return the profile behind an authenticated identity, or ``Ok(None)`` when there is none."""
    if not user_id:
        return Ok(None)
    try:
        return Ok(db.get(Profile, user_id))
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to load profile %s", user_id)
        return Err(DomainError.repository_error("Failed to load user profile"))


def require_role(actor: Optional[Profile], *roles: ProfileRole) -> Result[Profile, DomainError]:
    """Check that ``actor`` holds one of ``roles``.

    Organisers may view events and manage registrations; everything that
    changes events or dashboard users is reserved to admins.
    """
    if actor is None:
        return Err(DomainError.not_authenticated())
    allowed = {role.value for role in (roles or ANY_ROLE)}
    if actor.role not in allowed:
        return Err(DomainError.permission_denied(actor.role))
    return Ok(actor)


def list_dashboard_users(db: Session, *, actor: Optional[Profile]) -> Result[list[Profile], DomainError]:
    allowed = require_role(actor, ProfileRole.ADMIN)
    if isinstance(allowed, Err):
        return allowed
    try:
        profiles = db.scalars(select(Profile).order_by(Profile.created_at.desc())).all()
    except SQLAlchemyError:
        logger.exception("Failed to list dashboard users")
        return Err(DomainError.repository_error("Failed to load dashboard users"))
    return Ok(list(profiles))


def create_dashboard_user(
    db: Session,
    *,
    email: str,
    full_name: Optional[str],
    role: str,
    actor: Optional[Profile],
) -> Result[Profile, DomainError]:
    allowed = require_role(actor, ProfileRole.ADMIN)
    if isinstance(allowed, Err):
        return allowed

    errors = {}
    normalized_email = (email or "").strip().lower()
    if not normalized_email:
        errors["email"] = DomainError.required("Email is required")
    role_value = role.value if isinstance(role, ProfileRole) else str(role or "").strip()
    if role_value not in {r.value for r in ProfileRole}:
        errors["role"] = DomainError.invalid_choice(role_value, [r.value for r in ProfileRole])
    if errors:
        return Err(DomainError.validation_failed(errors))

    try:
        existing = db.scalar(select(Profile.id).where(Profile.email == normalized_email))
        if existing is not None:
            db.rollback()
            return Err(DomainError.duplicate_email(normalized_email))
        profile = Profile(
            email=normalized_email,
            full_name=(full_name or "").strip() or None,
            role=role_value,
        )
        db.add(profile)
        db.commit()
        db.refresh(profile)
    except IntegrityError:
        db.rollback()
        return Err(DomainError.duplicate_email(normalized_email))
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to create dashboard user %s", normalized_email)
        return Err(DomainError.repository_error("Failed to create user account"))

    logger.info("Dashboard user %s (%s) created by %s", profile.id, profile.role, actor.id)
    return Ok(profile)


def delete_dashboard_user(db: Session, user_id: str, *, actor: Optional[Profile]) -> Result[None, DomainError]:
    allowed = require_role(actor, ProfileRole.ADMIN)
    if isinstance(allowed, Err):
        return allowed
    if user_id == actor.id:
        return Err(DomainError(ErrorCode.PERMISSION_DENIED, "You cannot delete your own account"))

    try:
        profile = db.get(Profile, user_id)
        if profile is None:
            return Err(DomainError.user_not_found(user_id))
        db.delete(profile)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to delete dashboard user %s", user_id)
        return Err(DomainError.repository_error("Failed to delete user profile"))

    logger.info("Dashboard user %s deleted by %s", user_id, actor.id)
    return Ok(None)
