import datetime as dt
from decimal import Decimal

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine, StaticPool, create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session

from eventadmin.core.redis_config import get_lock_client
from eventadmin.database.db import Base, get_db
from eventadmin.main import app
from eventadmin.models.events import Event
from eventadmin.models.profiles import Profile, ProfileRole

# Use an in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
engine: Engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TODAY = dt.date(2030, 6, 15)


@pytest.fixture(autouse=True)
def setup_database():
    """Fresh schema for every test."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    db: Session = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def fake_redis():
    client = fakeredis.FakeRedis(decode_responses=True)
    yield client
    client.flushall()


@pytest.fixture
def client(fake_redis):
    # Override the database and lock dependencies
    def override_get_db():
        db: Session = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_lock_client] = lambda: fake_redis
    yield TestClient(app)
    app.dependency_overrides.clear()


def _make_profile(db: Session, email: str, role: ProfileRole) -> Profile:
    profile = Profile(email=email, full_name=email.split("@")[0].title(), role=role.value)
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


@pytest.fixture
def admin(db_session: Session) -> Profile:
    return _make_profile(db_session, "admin@example.com", ProfileRole.ADMIN)


@pytest.fixture
def organiser(db_session: Session) -> Profile:
    return _make_profile(db_session, "organiser@example.com", ProfileRole.ORGANISER)


@pytest.fixture
def admin_headers(admin: Profile) -> dict[str, str]:
    return {"X-User-Id": admin.id}


@pytest.fixture
def organiser_headers(organiser: Profile) -> dict[str, str]:
    return {"X-User-Id": organiser.id}


@pytest.fixture
def make_event(db_session: Session):
    """Insert an event directly, bypassing validation."""

    def _make(title: str = "Launch Party", capacity: int = 10, price: str = "0.00", status: str = "upcoming") -> Event:
        event = Event(
            title=title,
            date=TODAY + dt.timedelta(days=30),
            location="Main Hall",
            capacity=capacity,
            price=Decimal(price),
            status=status,
        )
        db_session.add(event)
        db_session.commit()
        db_session.refresh(event)
        return event

    return _make


@pytest.fixture
def drop_table(db_session: Session):
    """Drop a model's table mid-test so every query against it fails."""

    def _drop(model) -> None:
        db_session.commit()
        model.__table__.drop(bind=db_session.get_bind())

    return _drop
