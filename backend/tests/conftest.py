"""
Pytest configuration and shared fixtures for the booking backend tests.
"""

import os
from datetime import date, datetime, timedelta

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, insert
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import get_db
from app.main import app
from app.models.generated import (
    Base,
    EmployeeHours,
    Salons,
    SalonHours,
    Services,
    Staff,
    t_staff_services,
)
from app.redis_client import get_redis


class FakeLock:
    """Non-blocking stand-in for redis.lock.Lock."""

    def __init__(self, held: set, name: str):
        self.held = held
        self.name = name

    def acquire(self):
        if self.name in self.held:
            return False
        self.held.add(self.name)
        return True

    def release(self):
        self.held.discard(self.name)


class FakeRedis:
    def __init__(self):
        self.held = set()

    def lock(self, name, timeout=None, blocking_timeout=None):
        return FakeLock(self.held, name)

    def ping(self):
        return True


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def client(engine, fake_redis):
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = Session()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = lambda: fake_redis
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def target_date():
    """A day safely in the future and inside the booking horizon."""
    return date.today() + timedelta(days=7)


@pytest.fixture
def at(target_date):
    """Build a datetime on target_date: at("10:30")."""
    def _at(hhmm: str) -> datetime:
        hours, minutes = (int(part) for part in hhmm.split(":"))
        return datetime.combine(target_date, datetime.min.time()) + timedelta(hours=hours, minutes=minutes)
    return _at


@pytest.fixture
def sample_salon(db_session, target_date):
    """
    Salon open 10:00-20:00 every day with a 45-minute service.

    Staff "Anna" works salon hours; staff "Boris" works 10:00-18:00 with a
    13:00-14:00 break on the target weekday. Both provide the service.
    """
    salon = Salons(name="Test Salon", slug="test-salon")
    db_session.add(salon)
    db_session.flush()

    service = Services(salon_id=salon.id, name="Haircut", duration_minutes=45, price=30.0)
    anna = Staff(salon_id=salon.id, display_name="Anna")
    boris = Staff(salon_id=salon.id, display_name="Boris")
    db_session.add_all([service, anna, boris])
    db_session.flush()

    for day_of_week in range(7):
        db_session.add(SalonHours(
            salon_id=salon.id,
            day_of_week=day_of_week,
            open_time="10:00",
            close_time="20:00",
            is_closed=0,
        ))

    weekday = (target_date.weekday() + 1) % 7
    db_session.add(EmployeeHours(
        salon_id=salon.id,
        staff_id=boris.id,
        day_of_week=weekday,
        start_time="10:00",
        end_time="18:00",
        is_off=0,
        break_start="13:00",
        break_end="14:00",
    ))

    db_session.execute(insert(t_staff_services), [
        {"staff_id": anna.id, "service_id": service.id, "is_active": 1},
        {"staff_id": boris.id, "service_id": service.id, "is_active": 1},
    ])
    db_session.commit()

    return {
        "salon_id": salon.id,
        "service_id": service.id,
        "anna_id": anna.id,
        "boris_id": boris.id,
    }
