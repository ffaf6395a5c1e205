#!/usr/bin/env python3
"""
Script to create a demo facility with opening hours and pricing
Usage: python -m courtside.scripts.create_facility [manager_email]
"""
import sys
from sqlalchemy.orm import Session

from courtside.config.database import SessionLocal
from courtside.models.facility import DayType, Facility, FacilitySchedule, FacilityPricing
from courtside.models.user import PlatformRole, User

SCHEDULES = {
    DayType.WEEKDAY: ("08:00:00", "22:00:00"),
    DayType.WEEKEND: ("09:00:00", "20:00:00"),
}

# (day type, start, end, price per hour)
PRICING = [
    (DayType.WEEKDAY, "08:00:00", "18:00:00", 10.0),
    (DayType.WEEKDAY, "18:00:00", "22:00:00", 15.0),
    (DayType.WEEKEND, "09:00:00", "20:00:00", 18.0),
]


def create_facility(manager_email: str = "manager@courtside.local"):
    """Create a demo tennis court managed by ``manager_email``"""
    db: Session = SessionLocal()

    try:
        manager = db.query(User).filter(User.email == manager_email).first()
        if manager is None:
            manager = User(email=manager_email, full_name="Demo Manager", role=PlatformRole.MANAGER)
            db.add(manager)
            db.flush()

        facility = Facility(
            name="Central Park Court 1",
            city="Sofia",
            address="1 Park Lane",
            sport="tennis",
            manager_id=manager.id,
            is_active=True,
        )
        db.add(facility)
        db.flush()

        for day_type, (open_time, close_time) in SCHEDULES.items():
            db.add(FacilitySchedule(
                facility_id=facility.id,
                day_type=day_type.value,
                open_time=open_time,
                close_time=close_time,
            ))

        for day_type, start_hour, end_hour, price in PRICING:
            db.add(FacilityPricing(
                facility_id=facility.id,
                day_type=day_type.value,
                start_hour=start_hour,
                end_hour=end_hour,
                price_per_hour=price,
            ))

        db.commit()
        print(f"Created facility {facility.id} ({facility.name}) managed by {manager.email}")

    except Exception as e:
        db.rollback()
        print(f"Error creating facility: {e}")
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    create_facility(*sys.argv[1:2])
