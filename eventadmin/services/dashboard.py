"""Dashboard aggregation.

The ``compute_*`` helpers are pure functions over already-loaded events,
registrations and profiles; ``get_dashboard_aggregates`` loads a fresh
snapshot from the database and feeds it through them. Nothing is cached.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eventadmin.core.errors import DomainError
from eventadmin.core.result import Err, Ok, Result
from eventadmin.models.events import Event, EventStatus
from eventadmin.models.profiles import Profile
from eventadmin.models.registrations import Registration
from eventadmin.services.users import require_role

logger = logging.getLogger("eventadmin.services.dashboard")

STATUS_COLORS = {
    EventStatus.UPCOMING.value: "#3B82F6",
    EventStatus.ONGOING.value: "#F59E0B",
    EventStatus.COMPLETED.value: "#10B981",
    EventStatus.CANCELLED.value: "#EF4444",
}
FALLBACK_COLOR = "#6B7280"


@dataclass(frozen=True)
class DashboardMetrics:
    total_events: int
    upcoming_events: int
    total_users: int
    estimated_revenue: Decimal


@dataclass(frozen=True)
class EventWithCount:
    title: str
    users: int


@dataclass(frozen=True)
class StatusCount:
    name: str
    value: int
    color: str


@dataclass(frozen=True)
class RegistrationStats:
    total_users: int
    total_registrations: int
    upcoming_registrations: int
    completed_registrations: int


@dataclass(frozen=True)
class DashboardAggregates:
    metrics: DashboardMetrics
    events_with_registration_counts: list[EventWithCount]
    event_status_counts: list[StatusCount]


def _status_value(status: Any) -> str:
    return status.value if isinstance(status, EventStatus) else str(status)


def _counts_by_event(registrations: Iterable[Any]) -> Counter:
    return Counter(registration.event_id for registration in registrations)


def compute_metrics(events: Sequence[Any], registrations: Sequence[Any]) -> DashboardMetrics:
    """
    total_users counts distinct attendee names; registrations carry no other
    identity. Revenue is price x registrations summed over every event.
    """
    counts = _counts_by_event(registrations)
    revenue = sum(
        (Decimal(str(event.price or 0)) * counts.get(event.id, 0) for event in events),
        Decimal("0"),
    )
    return DashboardMetrics(
        total_events=len(events),
        upcoming_events=sum(1 for event in events if _status_value(event.status) == EventStatus.UPCOMING.value),
        total_users=len({registration.attendee_name for registration in registrations}),
        estimated_revenue=revenue,
    )


def events_with_registration_counts(
    events: Sequence[Any],
    registrations: Sequence[Any],
    limit: Optional[int] = None,
) -> list[EventWithCount]:
    """Events by registration count, busiest first; ties keep the input order."""
    counts = _counts_by_event(registrations)
    ranked = sorted(
        (EventWithCount(title=event.title, users=counts.get(event.id, 0)) for event in events),
        key=lambda item: item.users,
        reverse=True,
    )
    if limit is not None:
        ranked = ranked[: max(limit, 0)]
    return ranked


def event_status_counts(events: Sequence[Any]) -> list[StatusCount]:
    counts = Counter(_status_value(event.status) for event in events)
    known = [status.value for status in EventStatus]
    ordered = [status for status in known if status in counts]
    ordered += sorted(status for status in counts if status not in known)
    return [
        StatusCount(
            name=status[:1].upper() + status[1:],
            value=counts[status],
            color=STATUS_COLORS.get(status, FALLBACK_COLOR),
        )
        for status in ordered
    ]


def registration_stats(
    profiles: Sequence[Any],
    events: Sequence[Any],
    registrations: Sequence[Any],
) -> RegistrationStats:
    status_by_event = {event.id: _status_value(event.status) for event in events}
    per_status = Counter(status_by_event.get(registration.event_id) for registration in registrations)
    return RegistrationStats(
        total_users=len(profiles),
        total_registrations=len(registrations),
        upcoming_registrations=per_status.get(EventStatus.UPCOMING.value, 0),
        completed_registrations=per_status.get(EventStatus.COMPLETED.value, 0),
    )


def get_dashboard_aggregates(
    db: Session,
    *,
    actor: Optional[Profile],
    top_n: Optional[int] = None,
) -> Result[DashboardAggregates, DomainError]:
    allowed = require_role(actor)
    if isinstance(allowed, Err):
        return allowed
    try:
        events = db.scalars(select(Event).order_by(Event.created_at.desc())).all()
        registrations = db.scalars(select(Registration)).all()
    except SQLAlchemyError:
        logger.exception("Failed to load dashboard data")
        return Err(DomainError.repository_error("Failed to load dashboard data"))

    return Ok(
        DashboardAggregates(
            metrics=compute_metrics(events, registrations),
            events_with_registration_counts=events_with_registration_counts(events, registrations, top_n),
            event_status_counts=event_status_counts(events),
        )
    )


def get_registration_stats(db: Session, *, actor: Optional[Profile]) -> Result[RegistrationStats, DomainError]:
    allowed = require_role(actor)
    if isinstance(allowed, Err):
        return allowed
    try:
        profiles = db.scalars(select(Profile)).all()
        events = db.scalars(select(Event)).all()
        registrations = db.scalars(select(Registration)).all()
    except SQLAlchemyError:
        logger.exception("Failed to load registration statistics")
        return Err(DomainError.repository_error("Failed to load registration statistics"))
    return Ok(registration_stats(profiles, events, registrations))
