from typing import Optional

import redis
from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from eventadmin.core.redis_config import get_lock_client
from eventadmin.database.db import get_db
from eventadmin.models.profiles import Profile
from eventadmin.routes.deps import get_current_profile, unwrap
from eventadmin.schemas.events import EventDraftIn, EventOut, EventStatusIn
from eventadmin.services import events as event_service
from eventadmin.services.users import require_role

router = APIRouter(prefix="/events", tags=["events"])


@router.get("", response_model=list[EventOut])
def list_events(db: Session = Depends(get_db), actor: Optional[Profile] = Depends(get_current_profile)):
    unwrap(require_role(actor))
    return unwrap(event_service.list_events(db))


@router.post("", response_model=EventOut, status_code=201)
def create_event(
    payload: EventDraftIn,
    db: Session = Depends(get_db),
    actor: Optional[Profile] = Depends(get_current_profile),
):
    return unwrap(event_service.create_event(db, payload.model_dump(exclude_unset=True), actor=actor))


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: str, db: Session = Depends(get_db), actor: Optional[Profile] = Depends(get_current_profile)):
    unwrap(require_role(actor))
    return unwrap(event_service.get_event(db, event_id))


@router.patch("/{event_id}", response_model=EventOut)
def update_event(
    event_id: str,
    payload: EventDraftIn,
    db: Session = Depends(get_db),
    lock_client: redis.Redis = Depends(get_lock_client),
    actor: Optional[Profile] = Depends(get_current_profile),
):
    changes = payload.model_dump(exclude_unset=True)
    return unwrap(event_service.update_event(db, lock_client, event_id, changes, actor=actor))


@router.put("/{event_id}/status", response_model=EventOut)
def set_event_status(
    event_id: str,
    payload: EventStatusIn,
    db: Session = Depends(get_db),
    actor: Optional[Profile] = Depends(get_current_profile),
):
    return unwrap(event_service.set_event_status(db, event_id, payload.status, actor=actor))


@router.delete("/{event_id}", status_code=204)
def delete_event(event_id: str, db: Session = Depends(get_db), actor: Optional[Profile] = Depends(get_current_profile)):
    unwrap(event_service.delete_event(db, event_id, actor=actor))
    return Response(status_code=204)
