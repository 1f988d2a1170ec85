from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from eventadmin.core.config import DASHBOARD_TOP_EVENTS
from eventadmin.database.db import get_db
from eventadmin.models.profiles import Profile
from eventadmin.routes.deps import get_current_profile, unwrap
from eventadmin.schemas.reports import DashboardOut, RegistrationStatsOut
from eventadmin.services.dashboard import get_dashboard_aggregates, get_registration_stats

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardOut)
def dashboard(
    top: int = Query(default=DASHBOARD_TOP_EVENTS, ge=1),
    db: Session = Depends(get_db),
    actor: Optional[Profile] = Depends(get_current_profile),
):
    """Metrics, busiest events and status breakdown across all events."""
    return unwrap(get_dashboard_aggregates(db, actor=actor, top_n=top))


@router.get("/registration-stats", response_model=RegistrationStatsOut)
def registration_stats(db: Session = Depends(get_db), actor: Optional[Profile] = Depends(get_current_profile)):
    return unwrap(get_registration_stats(db, actor=actor))
