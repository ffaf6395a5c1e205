# ===== courtside/models/facility.py =====
from sqlalchemy import (
    Column, String, Integer, Boolean, Float, DateTime, ForeignKey,
    UniqueConstraint, CheckConstraint, Index,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
from courtside.models.base import Base


class DayType(str, enum.Enum):
    """Which recurring rule set applies to a calendar date"""
    WEEKDAY = "weekday"
    WEEKEND = "weekend"


class Facility(Base):
    """A bookable court, pitch or hall"""
    __tablename__ = "facilities"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    city = Column(String(100), nullable=True)
    address = Column(String(255), nullable=True)
    sport = Column(String(100), nullable=True)
    manager_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    # Admins activate a facility after verification
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    schedules = relationship("FacilitySchedule", back_populates="facility", cascade="all, delete-orphan")
    pricings = relationship("FacilityPricing", back_populates="facility", cascade="all, delete-orphan")

    @property
    def location(self) -> str:
        return ", ".join(part for part in (self.address, self.city) if part)

    def __repr__(self):
        return f"<Facility(id={self.id}, name={self.name})>"


class FacilitySchedule(Base):
    """Opening hours for one day-type. Times are zero-padded HH:MM:SS."""
    __tablename__ = "facility_schedules"
    __table_args__ = (
        UniqueConstraint("facility_id", "day_type", name="uq_facility_schedule_day_type"),
        CheckConstraint("open_time < close_time", name="ck_facility_schedule_open_before_close"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    facility_id = Column(Integer, ForeignKey("facilities.id", ondelete="CASCADE"), nullable=False)

    day_type = Column(String(10), nullable=False)  # weekday, weekend
    open_time = Column(String(8), nullable=False)
    close_time = Column(String(8), nullable=False)

    facility = relationship("Facility", back_populates="schedules")


class FacilityPricing(Base):
    """Hourly price for an interval of the day. Times are zero-padded HH:MM:SS."""
    __tablename__ = "facility_pricings"
    __table_args__ = (
        Index("idx_facility_pricings_lookup", "facility_id", "day_type", "start_hour"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    facility_id = Column(Integer, ForeignKey("facilities.id", ondelete="CASCADE"), nullable=False)

    day_type = Column(String(10), nullable=False)
    start_hour = Column(String(8), nullable=False)
    end_hour = Column(String(8), nullable=False)
    price_per_hour = Column(Float, nullable=False)

    facility = relationship("Facility", back_populates="pricings")
