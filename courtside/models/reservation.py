# ===== courtside/models/reservation.py =====
from sqlalchemy import Column, String, Integer, Float, Text, DateTime, ForeignKey, Index, CheckConstraint, DDL, event
from sqlalchemy.sql import func
import enum
from courtside.models.base import Base


class ReservationStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class FacilityReservation(Base):
    __tablename__ = "facility_reservations"
    __table_args__ = (
        Index("idx_facility_reservations_facility_start", "facility_id", "start_time"),
        Index("idx_facility_reservations_user", "user_id"),
        CheckConstraint("end_time > start_time", name="ck_facility_reservations_positive_interval"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)

    # References
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    facility_id = Column(Integer, ForeignKey("facilities.id"), nullable=False)

    # Booked interval, UTC, half-open [start_time, end_time)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)

    # Status tracking
    status = Column(String(20), nullable=False, default=ReservationStatus.PENDING.value)  # pending, confirmed, cancelled, completed
    total_price = Column(Float, nullable=False, default=0.0)

    # Calendar sync
    google_calendar_event_id = Column(String, nullable=True)
    sync_status = Column(String, default="pending")  # pending, synced, failed, sync_disabled
    sync_attempts = Column(Integer, default=0)
    last_sync_error = Column(Text, nullable=True)
    last_synced_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    @property
    def duration_hours(self) -> float:
        return (self.end_time - self.start_time).total_seconds() / 3600

    def __repr__(self):
        return (
            f"<FacilityReservation(id={self.id}, facility_id={self.facility_id}, "
            f"start={self.start_time}, status={self.status})>"
        )


# No two active reservations of one facility may overlap on PostgreSQL, also
# when the schema comes from create_all() instead of the Alembic migration
event.listen(
    FacilityReservation.__table__,
    "before_create",
    DDL("CREATE EXTENSION IF NOT EXISTS btree_gist").execute_if(dialect="postgresql"),
)
event.listen(
    FacilityReservation.__table__,
    "after_create",
    DDL(
        "ALTER TABLE facility_reservations "
        "ADD CONSTRAINT ex_facility_reservations_no_overlap "
        "EXCLUDE USING gist ("
        "facility_id WITH =, "
        "tstzrange(start_time, end_time, '[)') WITH &&"
        ") WHERE (status <> 'cancelled')"
    ).execute_if(dialect="postgresql"),
)
