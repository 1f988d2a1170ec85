from typing import Optional

import redis
from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from eventadmin.core.redis_config import get_lock_client
from eventadmin.database.db import get_db
from eventadmin.models.profiles import Profile
from eventadmin.routes.deps import get_current_profile, unwrap
from eventadmin.schemas.registrations import AttendeeRegistrationOut, RegistrationIn, RegistrationOut
from eventadmin.services.registrations import (
    list_attendee_registrations,
    list_registrations,
    register_attendee,
    unregister,
)
from eventadmin.services.users import require_role

router = APIRouter(tags=["registrations"])


@router.get("/events/{event_id}/registrations", response_model=list[RegistrationOut])
def event_registrations(
    event_id: str,
    db: Session = Depends(get_db),
    actor: Optional[Profile] = Depends(get_current_profile),
):
    unwrap(require_role(actor))
    return unwrap(list_registrations(db, event_id))


@router.post("/events/{event_id}/registrations", response_model=RegistrationOut, status_code=201)
def register(
    event_id: str,
    payload: RegistrationIn,
    db: Session = Depends(get_db),
    lock_client: redis.Redis = Depends(get_lock_client),
    actor: Optional[Profile] = Depends(get_current_profile),
):
    return unwrap(
        register_attendee(
            db,
            lock_client,
            event_id=event_id,
            attendee_name=payload.attendee_name,
            actor=actor,
        )
    )


@router.delete("/registrations/{registration_id}", status_code=204)
def remove_registration(
    registration_id: str,
    db: Session = Depends(get_db),
    actor: Optional[Profile] = Depends(get_current_profile),
):
    unwrap(unregister(db, registration_id=registration_id, actor=actor))
    return Response(status_code=204)


@router.get("/registrations", response_model=list[AttendeeRegistrationOut])
def all_registrations(db: Session = Depends(get_db), actor: Optional[Profile] = Depends(get_current_profile)):
    """Registrations across every event, newest first."""
    return unwrap(list_attendee_registrations(db, actor=actor))
