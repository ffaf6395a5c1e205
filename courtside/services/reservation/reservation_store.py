# ============================================================================
# courtside/services/reservation/reservation_store.py
# ============================================================================
"""Data access for schedules, pricing and reservations"""
from contextlib import contextmanager
from datetime import datetime
from typing import List, Optional
import logging

from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import Session

from courtside.core.exceptions import TransientStoreError
from courtside.models.facility import Facility, FacilitySchedule, FacilityPricing
from courtside.models.reservation import FacilityReservation, ReservationStatus

logger = logging.getLogger(__name__)


@contextmanager
def store_errors(action: str):
    """Turn driver failures into TransientStoreError. Constraint violations pass through."""
    try:
        yield
    except IntegrityError:
        raise
    except DBAPIError as exc:
        logger.error(f"Store failure while {action}: {exc}")
        raise TransientStoreError(f"Store failure while {action}") from exc


class ReservationStore:
    """Reads the recurring facility rules and reads/writes reservations"""

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Facilities and rules (read-only)
    # ------------------------------------------------------------------

    def get_facility(self, facility_id: int) -> Optional[Facility]:
        with store_errors("loading facility"):
            return self.db.query(Facility).filter(Facility.id == facility_id).first()

    def lock_facility(self, facility_id: int) -> Optional[Facility]:
        """Load the facility row FOR UPDATE, serialising bookings per facility"""
        with store_errors("locking facility"):
            return (
                self.db.query(Facility)
                .filter(Facility.id == facility_id)
                .with_for_update()
                .first()
            )

    def get_schedules(self, facility_id: int) -> List[FacilitySchedule]:
        with store_errors("loading schedules"):
            return (
                self.db.query(FacilitySchedule)
                .filter(FacilitySchedule.facility_id == facility_id)
                .order_by(FacilitySchedule.day_type)
                .all()
            )

    def get_pricing(self, facility_id: int) -> List[FacilityPricing]:
        # Order defines the tie-break for overlapping intervals: earliest start wins
        with store_errors("loading pricing"):
            return (
                self.db.query(FacilityPricing)
                .filter(FacilityPricing.facility_id == facility_id)
                .order_by(FacilityPricing.day_type, FacilityPricing.start_hour, FacilityPricing.id)
                .all()
            )

    # ------------------------------------------------------------------
    # Reservations
    # ------------------------------------------------------------------

    def get(self, reservation_id: int) -> Optional[FacilityReservation]:
        with store_errors("loading reservation"):
            return (
                self.db.query(FacilityReservation)
                .filter(FacilityReservation.id == reservation_id)
                .first()
            )

    def get_reservations_in_range(
            self,
            facility_id: int,
            start: datetime,
            end: datetime
    ) -> List[FacilityReservation]:
        """Non-cancelled reservations intersecting [start, end)"""
        with store_errors("loading reservations"):
            return (
                self.db.query(FacilityReservation)
                .filter(
                    FacilityReservation.facility_id == facility_id,
                    FacilityReservation.status != ReservationStatus.CANCELLED.value,
                    FacilityReservation.start_time < end,
                    FacilityReservation.end_time > start,
                )
                .order_by(FacilityReservation.start_time)
                .all()
            )

    def insert(self, reservation: FacilityReservation) -> FacilityReservation:
        with store_errors("inserting reservation"):
            self.db.add(reservation)
            self.db.flush()
        return reservation

    def cancel(
            self,
            reservation_id: int,
            user_id: int,
            cancelled_at: datetime
    ) -> Optional[FacilityReservation]:
        """
        Cancel only if the row belongs to ``user_id`` and is not cancelled yet.

        Returns the updated reservation, or None when nothing matched.
        """
        with store_errors("cancelling reservation"):
            updated = (
                self.db.query(FacilityReservation)
                .filter(
                    FacilityReservation.id == reservation_id,
                    FacilityReservation.user_id == user_id,
                    FacilityReservation.status != ReservationStatus.CANCELLED.value,
                )
                .update(
                    {
                        FacilityReservation.status: ReservationStatus.CANCELLED.value,
                        FacilityReservation.cancelled_at: cancelled_at,
                    },
                    synchronize_session="fetch",
                )
            )
            if not updated:
                return None
            return self.get(reservation_id)

    def update_status(self, reservation_id: int, status: str) -> int:
        with store_errors("updating reservation status"):
            return (
                self.db.query(FacilityReservation)
                .filter(FacilityReservation.id == reservation_id)
                .update({FacilityReservation.status: status}, synchronize_session="fetch")
            )

    def list_for_user(self, user_id: int) -> List[FacilityReservation]:
        with store_errors("listing user reservations"):
            return (
                self.db.query(FacilityReservation)
                .filter(FacilityReservation.user_id == user_id)
                .order_by(FacilityReservation.start_time.desc())
                .all()
            )

    def list_upcoming_for_user(
            self,
            user_id: int,
            now: datetime,
            statuses: List[str]
    ) -> List[FacilityReservation]:
        with store_errors("listing upcoming reservations"):
            return (
                self.db.query(FacilityReservation)
                .filter(
                    FacilityReservation.user_id == user_id,
                    FacilityReservation.status.in_(statuses),
                    FacilityReservation.start_time > now,
                )
                .order_by(FacilityReservation.start_time)
                .all()
            )

    def count_pending_for_user(self, user_id: int, now: datetime) -> int:
        with store_errors("counting pending reservations"):
            return (
                self.db.query(FacilityReservation)
                .filter(
                    FacilityReservation.user_id == user_id,
                    FacilityReservation.status == ReservationStatus.PENDING.value,
                    FacilityReservation.start_time > now,
                )
                .count()
            )
