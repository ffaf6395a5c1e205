"""
Pytest configuration and shared fixtures.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["CALENDAR_ENCRYPTION_KEY"] = "ZmDfcTF7_60GrrY167zsiPd67pEvs0aGOv2oasOM1Pg="

from datetime import datetime, timezone
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from courtside.api.dependencies import create_access_token
from courtside.config.database import get_db
from courtside.main import app
from courtside.models import (
    Base,
    DayType,
    Facility,
    FacilityPricing,
    FacilityReservation,
    FacilitySchedule,
    PlatformRole,
    ReservationStatus,
    User,
)

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def now():
    """Wednesday 2029-12-26 noon; booking tests use dates after it."""
    return datetime(2029, 12, 26, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def db():
    """Fresh schema per test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def queued_tasks():
    """Capture background task dispatch instead of talking to a broker."""
    with patch("courtside.tasks.calendar_tasks.sync_reservation_to_calendar.delay") as sync, \
            patch("courtside.tasks.calendar_tasks.delete_reservation_calendar_event.delay") as delete, \
            patch("courtside.tasks.email_tasks.send_reservation_confirmation_email.delay") as email:
        yield {"sync": sync, "delete": delete, "email": email}


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role=PlatformRole.USER, **kwargs):
        counter["n"] += 1
        user = User(email=f"player{counter['n']}@example.com", full_name="Test Player", role=role, **kwargs)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def manager(make_user):
    return make_user(role=PlatformRole.MANAGER)


@pytest.fixture
def make_facility(db):
    def _make(manager_id=None, schedules=None, pricing=None, **kwargs):
        """
        Create a facility with weekly rules.

        schedules: {DayType: (open, close)}
        pricing: [(DayType, start, end, price)]
        """
        facility = Facility(name=kwargs.pop("name", "Court 1"), city="Sofia", address="1 Park Lane",
                            sport="tennis", manager_id=manager_id, **kwargs)
        db.add(facility)
        db.flush()

        for day_type, (open_time, close_time) in (schedules or {}).items():
            db.add(FacilitySchedule(facility_id=facility.id, day_type=day_type.value,
                                    open_time=open_time, close_time=close_time))
        for day_type, start_hour, end_hour, price in (pricing or []):
            db.add(FacilityPricing(facility_id=facility.id, day_type=day_type.value,
                                   start_hour=start_hour, end_hour=end_hour, price_per_hour=price))

        db.commit()
        db.refresh(facility)
        return facility

    return _make


@pytest.fixture
def facility(make_facility, manager):
    """Open 08-22 on weekdays, 09-20 on weekends; evening weekday hours cost more."""
    return make_facility(
        manager_id=manager.id,
        schedules={
            DayType.WEEKDAY: ("08:00:00", "22:00:00"),
            DayType.WEEKEND: ("09:00:00", "20:00:00"),
        },
        pricing=[
            (DayType.WEEKDAY, "08:00:00", "18:00:00", 10.0),
            (DayType.WEEKDAY, "18:00:00", "22:00:00", 15.0),
            (DayType.WEEKEND, "09:00:00", "20:00:00", 18.0),
        ],
    )


@pytest.fixture
def make_reservation(db):
    def _make(user_id, facility_id, start_time, end_time, status=ReservationStatus.PENDING.value, **kwargs):
        reservation = FacilityReservation(
            user_id=user_id,
            facility_id=facility_id,
            start_time=start_time,
            end_time=end_time,
            status=status,
            total_price=kwargs.pop("total_price", 0.0),
            **kwargs
        )
        db.add(reservation)
        db.commit()
        db.refresh(reservation)
        return reservation

    return _make


@pytest.fixture
def client(db):
    """API client bound to the test session."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user):
        token = create_access_token({"sub": str(user.id)})
        return {"Authorization": f"Bearer {token}"}

    return _headers
