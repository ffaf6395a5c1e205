# ===== courtside/services/availability/availability_service.py =====
from typing import List, Optional
from datetime import date, datetime, timedelta
from sqlalchemy.orm import Session
import logging

from courtside.config.settings import get_settings
from courtside.core.exceptions import ConfigurationError, NotFoundError, ValidationError
from courtside.models.facility import FacilitySchedule, FacilityPricing
from courtside.models.reservation import FacilityReservation
from courtside.schemas.reservation import AvailableSlot, DayAvailability
from courtside.services.reservation.conflict import is_occupied
from courtside.services.reservation.pricing import day_type_for, parse_time_of_day, price_for_slot
from courtside.services.reservation.reservation_store import ReservationStore
from courtside.utils.time_utils import start_of_day

logger = logging.getLogger(__name__)

SLOT_LENGTH = timedelta(hours=1)


class AvailabilityService:
    """Builds the bookable slot calendar from weekly rules and live reservations"""

    @staticmethod
    def build_availability(
            db: Session,
            facility_id: int,
            start_date: date,
            end_date: date
    ) -> List[DayAvailability]:
        """
        Day-by-day availability for [start_date, end_date], ascending.

        Raises ConfigurationError when the facility has no schedule or no
        pricing rows at all. A day whose day type has no schedule is a normal
        closed day.
        """
        settings = get_settings()

        if end_date < start_date:
            raise ValidationError("end_date must not be before start_date")

        day_count = (end_date - start_date).days + 1
        if day_count > settings.AVAILABILITY_MAX_DAYS:
            raise ValidationError(
                f"date range too long: at most {settings.AVAILABILITY_MAX_DAYS} days can be queried"
            )

        store = ReservationStore(db)

        facility = store.get_facility(facility_id)
        if facility is None or not facility.is_active:
            raise NotFoundError("Facility not found")

        schedules = store.get_schedules(facility_id)
        if not schedules:
            raise ConfigurationError(f"no schedules found for facility {facility_id}")

        pricings = store.get_pricing(facility_id)
        if not pricings:
            raise ConfigurationError(f"no pricing found for facility {facility_id}")

        # One extra day covers reservations that end on the range boundary
        reservations = store.get_reservations_in_range(
            facility_id,
            start_of_day(start_date),
            start_of_day(end_date + timedelta(days=1)),
        )

        logger.info(
            f"Building availability for facility {facility_id} "
            f"{start_date} -> {end_date} ({len(reservations)} active reservations)"
        )

        return [
            AvailabilityService._build_day(
                start_date + timedelta(days=offset), schedules, pricings, reservations
            )
            for offset in range(day_count)
        ]

    @staticmethod
    def _build_day(
            day: date,
            schedules: List[FacilitySchedule],
            pricings: List[FacilityPricing],
            reservations: List[FacilityReservation]
    ) -> DayAvailability:
        """Generate the hourly slots for a single day"""
        day_type = day_type_for(day)

        schedule: Optional[FacilitySchedule] = next(
            (s for s in schedules if s.day_type == day_type), None
        )

        if schedule is None:
            return DayAvailability(date=day.isoformat(), is_open=False, slots=[])

        try:
            open_time = parse_time_of_day(schedule.open_time)
            close_time = parse_time_of_day(schedule.close_time)
        except ValueError as e:
            logger.warning(f"Unusable schedule {schedule.id} for facility {schedule.facility_id}: {e}")
            return DayAvailability(date=day.isoformat(), is_open=True, slots=[])

        day_start = start_of_day(day)
        current_slot = datetime.combine(day, open_time, tzinfo=day_start.tzinfo)
        day_end = datetime.combine(day, close_time, tzinfo=day_start.tzinfo)

        slots = []
        # A trailing remainder shorter than one slot is not offered
        while current_slot + SLOT_LENGTH <= day_end:
            slot_end = current_slot + SLOT_LENGTH

            slots.append(AvailableSlot(
                start_time=current_slot.strftime("%H:%M"),
                end_time=slot_end.strftime("%H:%M"),
                price_per_hour=price_for_slot(day_type, current_slot, pricings),
                available=not is_occupied(current_slot, slot_end, reservations),
            ))

            current_slot = slot_end

        return DayAvailability(date=day.isoformat(), is_open=True, slots=slots)
