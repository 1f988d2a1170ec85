from pydantic import BaseModel


class DashboardMetricsOut(BaseModel):
    total_events: int
    upcoming_events: int
    total_users: int
    estimated_revenue: float

    class Config:
        from_attributes = True


class EventWithCountOut(BaseModel):
    title: str
    users: int

    class Config:
        from_attributes = True


class StatusCountOut(BaseModel):
    name: str
    value: int
    color: str

    class Config:
        from_attributes = True


class DashboardOut(BaseModel):
    metrics: DashboardMetricsOut
    events_with_registration_counts: list[EventWithCountOut]
    event_status_counts: list[StatusCountOut]

    class Config:
        from_attributes = True


class RegistrationStatsOut(BaseModel):
    total_users: int
    total_registrations: int
    upcoming_registrations: int
    completed_registrations: int

    class Config:
        from_attributes = True
