# ============================================================================
# courtside/services/reservation/reservation_service.py
# ============================================================================
"""Service for availability queries, booking and cancellation"""
from datetime import date, datetime, timedelta
from typing import List, Optional
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from courtside.config.settings import get_settings
from courtside.core.exceptions import (
    AuthorizationError,
    BookingError,
    ConfigurationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from courtside.models.reservation import FacilityReservation, ReservationStatus
from courtside.models.user import User
from courtside.schemas.reservation import DayAvailability
from courtside.services.availability.availability_service import AvailabilityService
from courtside.services.reservation.conflict import is_occupied
from courtside.services.reservation.pricing import total_price
from courtside.services.reservation.reservation_store import ReservationStore, store_errors
from courtside.utils.time_utils import as_utc, start_of_day, utcnow

logger = logging.getLogger(__name__)

INITIAL_STATUSES = {ReservationStatus.PENDING.value, ReservationStatus.CONFIRMED.value}
ACTIVE_STATUSES = [ReservationStatus.PENDING.value, ReservationStatus.CONFIRMED.value]


class ReservationService:
    """Handles reservation operations"""

    # ------------------------------------------------------------------
    # Availability
    # ------------------------------------------------------------------

    @staticmethod
    def get_availability(
            db: Session,
            facility_id: int,
            start_date: Optional[date] = None,
            end_date: Optional[date] = None,
            today: Optional[date] = None
    ) -> List[DayAvailability]:
        """Availability calendar; start defaults to today, end to start + AVAILABILITY_DEFAULT_DAYS"""
        settings = get_settings()

        if start_date is None:
            start_date = today or utcnow().date()
        if end_date is None:
            end_date = start_date + timedelta(days=settings.AVAILABILITY_DEFAULT_DAYS)

        return AvailabilityService.build_availability(db, facility_id, start_date, end_date)

    # ------------------------------------------------------------------
    # Booking
    # ------------------------------------------------------------------

    @staticmethod
    def create_reservation(
            db: Session,
            user_id: int,
            facility_id: int,
            start_time: datetime,
            end_time: datetime,
            now: Optional[datetime] = None
    ) -> FacilityReservation:
        """
        Book [start_time, end_time) on a facility.

        Checks run in order: interval is positive, start is not in the past,
        facility exists, no overlapping active reservation, price. The
        conflict check and insert share one transaction holding a row lock
        on the facility, so two overlapping requests cannot both succeed.
        """
        settings = get_settings()
        start_time = as_utc(start_time)
        end_time = as_utc(end_time)
        now = as_utc(now) if now else utcnow()

        if end_time <= start_time:
            raise ValidationError("end time must be after start time")

        if start_time < now:
            raise ValidationError("cannot book in the past")

        initial_status = settings.RESERVATION_INITIAL_STATUS
        if initial_status not in INITIAL_STATUSES:
            raise ConfigurationError(f"unsupported RESERVATION_INITIAL_STATUS: {initial_status}")

        store = ReservationStore(db)

        try:
            facility = store.lock_facility(facility_id)
            if facility is None or not facility.is_active:
                raise NotFoundError("Facility not found")

            existing = store.get_reservations_in_range(facility_id, start_time, end_time)
            if is_occupied(start_time, end_time, existing):
                raise ConflictError("this time slot is already reserved")

            pricings = store.get_pricing(facility_id)
            if not pricings:
                raise ConfigurationError(f"no pricing found for facility {facility_id}")

            price = total_price(start_time, end_time, pricings)
            if price == 0.0:
                logger.warning(
                    f"Reservation on facility {facility_id} at {start_time.isoformat()} priced at 0.0; "
                    f"pricing rules probably do not cover this time"
                )

            reservation = store.insert(FacilityReservation(
                user_id=user_id,
                facility_id=facility_id,
                start_time=start_time,
                end_time=end_time,
                status=initial_status,
                total_price=price,
            ))
            with store_errors("committing reservation"):
                db.commit()

        except IntegrityError as e:
            # Exclusion constraint caught an overlap committed by a concurrent request
            db.rollback()
            logger.info(f"Overlap rejected by store for facility {facility_id}: {e.orig}")
            raise ConflictError("this time slot is already reserved") from e
        except BookingError:
            db.rollback()
            raise

        db.refresh(reservation)
        logger.info(
            f"Created reservation {reservation.id} for user {user_id} on facility {facility_id} "
            f"({start_time.isoformat()} - {end_time.isoformat()}, {price:.2f})"
        )

        ReservationService._schedule_calendar_sync(reservation.id)
        return reservation

    @staticmethod
    def cancel_reservation(
            db: Session,
            reservation_id: int,
            user_id: int,
            now: Optional[datetime] = None
    ) -> FacilityReservation:
        """
        Cancel a reservation owned by ``user_id``.

        Cancelling twice raises NotFoundError the second time and triggers no
        side effects.
        """
        store = ReservationStore(db)
        cancelled_at = as_utc(now) if now else utcnow()

        try:
            reservation = store.cancel(reservation_id, user_id, cancelled_at)

            if reservation is None:
                existing = store.get(reservation_id)
                if existing is None or existing.status == ReservationStatus.CANCELLED.value:
                    raise NotFoundError("Reservation not found or already cancelled")
                raise AuthorizationError("Reservation does not belong to this user")

            with store_errors("committing cancellation"):
                db.commit()
        except BookingError:
            db.rollback()
            raise

        db.refresh(reservation)
        logger.info(f"Cancelled reservation {reservation.id} for user {user_id}")

        if reservation.google_calendar_event_id:
            ReservationService._schedule_calendar_delete(user_id, reservation.google_calendar_event_id)

        return reservation

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    @staticmethod
    def list_user_reservations(db: Session, user_id: int) -> List[FacilityReservation]:
        return ReservationStore(db).list_for_user(user_id)

    @staticmethod
    def list_upcoming_reservations(
            db: Session,
            user_id: int,
            now: Optional[datetime] = None
    ) -> List[FacilityReservation]:
        """Pending and confirmed reservations that have not started yet"""
        return ReservationStore(db).list_upcoming_for_user(user_id, now or utcnow(), ACTIVE_STATUSES)

    @staticmethod
    def count_pending_reservations(db: Session, user_id: int, now: Optional[datetime] = None) -> int:
        return ReservationStore(db).count_pending_for_user(user_id, now or utcnow())

    @staticmethod
    def list_facility_bookings(
            db: Session,
            facility_id: int,
            user: User,
            start_date: date,
            end_date: date
    ) -> List[FacilityReservation]:
        """Active bookings of a facility, for its manager or an admin"""
        store = ReservationStore(db)

        facility = store.get_facility(facility_id)
        if facility is None:
            raise NotFoundError("Facility not found")
        if not user.can_manage(facility):
            raise AuthorizationError("Only the facility manager can view its bookings")
        if end_date < start_date:
            raise ValidationError("end_date must not be before start_date")

        return store.get_reservations_in_range(
            facility_id,
            start_of_day(start_date),
            start_of_day(end_date + timedelta(days=1)),
        )

    # ------------------------------------------------------------------
    # Side effects (after commit, never fail the booking)
    # ------------------------------------------------------------------

    @staticmethod
    def _schedule_calendar_sync(reservation_id: int) -> None:
        try:
            from courtside.tasks.calendar_tasks import sync_reservation_to_calendar
            sync_reservation_to_calendar.delay(reservation_id)
        except Exception as e:
            logger.error(f"[CALENDAR] Could not queue sync for reservation {reservation_id}: {e}")

    @staticmethod
    def _schedule_calendar_delete(user_id: int, event_id: str) -> None:
        try:
            from courtside.tasks.calendar_tasks import delete_reservation_calendar_event
            delete_reservation_calendar_event.delay(user_id, event_id)
        except Exception as e:
            logger.error(f"[CALENDAR] Could not queue deletion of event {event_id}: {e}")
