from typing import Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from eventadmin.database.db import get_db
from eventadmin.models.profiles import Profile
from eventadmin.routes.deps import get_current_profile, unwrap
from eventadmin.schemas.users import ProfileCreate, ProfileOut
from eventadmin.services import users as user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=ProfileOut)
def current_user(actor: Optional[Profile] = Depends(get_current_profile)):
    return unwrap(user_service.require_role(actor))


@router.get("", response_model=list[ProfileOut])
def list_users(db: Session = Depends(get_db), actor: Optional[Profile] = Depends(get_current_profile)):
    return unwrap(user_service.list_dashboard_users(db, actor=actor))


@router.post("", response_model=ProfileOut, status_code=201)
def create_user(
    payload: ProfileCreate,
    db: Session = Depends(get_db),
    actor: Optional[Profile] = Depends(get_current_profile),
):
    return unwrap(
        user_service.create_dashboard_user(
            db,
            email=payload.email,
            full_name=payload.full_name,
            role=payload.role,
            actor=actor,
        )
    )


@router.delete("/{user_id}", status_code=204)
def delete_user(user_id: str, db: Session = Depends(get_db), actor: Optional[Profile] = Depends(get_current_profile)):
    unwrap(user_service.delete_dashboard_user(db, user_id, actor=actor))
    return Response(status_code=204)
