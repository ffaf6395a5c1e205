# ===== courtside/tasks/calendar_tasks.py =====
from datetime import datetime, timezone
from sqlalchemy import func
from courtside.config.celery_config import celery_app
from courtside.config.database import SessionLocal
from courtside.models.facility import Facility
from courtside.models.reservation import FacilityReservation, ReservationStatus
from courtside.models.user import User
from courtside.services.calendar.google_calendar_service import GoogleCalendarService
import logging

logger = logging.getLogger(__name__)


def _event_data(reservation: FacilityReservation, facility: Facility) -> dict:
    description = (
        f"Facility: {facility.name}\n"
        f"Sport: {facility.sport or '-'}\n"
        f"Price: {reservation.total_price:.2f}"
    )
    return {
        'summary': f"Courtside Booking - {facility.name}",
        'description': description,
        'location': facility.location,
        'start': reservation.start_time,
        'end': reservation.end_time,
    }


@celery_app.task(bind=True, max_retries=3)
def sync_reservation_to_calendar(self, reservation_id: int):
    """Push a reservation to the booking user's Google Calendar (best effort)"""
    db = SessionLocal()
    try:
        reservation = db.query(FacilityReservation).filter_by(id=reservation_id).first()
        if not reservation:
            logger.error(f"[CALENDAR] Reservation {reservation_id} not found")
            return {"status": "failed", "reason": "reservation_not_found"}

        if reservation.status == ReservationStatus.CANCELLED.value:
            return {"status": "skipped", "reason": "reservation_cancelled"}

        user = db.query(User).filter_by(id=reservation.user_id).first()
        if not user or not user.has_calendar_link:
            logger.info(f"[CALENDAR] User {reservation.user_id} has no calendar tokens")
            reservation.sync_status = "sync_disabled"
            db.commit()
            return {"status": "skipped", "reason": "no_calendar_link"}

        facility = db.query(Facility).filter_by(id=reservation.facility_id).first()
        if not facility:
            logger.error(f"[CALENDAR] Facility {reservation.facility_id} not found")
            return {"status": "failed", "reason": "facility_not_found"}

        service = GoogleCalendarService()
        event = service.create_event(user, db, _event_data(reservation, facility))

        # Only link the event if no cancellation committed in the meantime
        linked = (
            db.query(FacilityReservation)
            .filter(
                FacilityReservation.id == reservation_id,
                FacilityReservation.status != ReservationStatus.CANCELLED.value,
            )
            .update(
                {
                    FacilityReservation.google_calendar_event_id: event['event_id'],
                    FacilityReservation.sync_status: "synced",
                    FacilityReservation.last_synced_at: datetime.now(timezone.utc),
                    FacilityReservation.sync_attempts: func.coalesce(FacilityReservation.sync_attempts, 0) + 1,
                },
                synchronize_session=False,
            )
        )
        db.commit()

        if not linked:
            logger.info(f"[CALENDAR] Reservation {reservation_id} cancelled during sync, removing event")
            service.delete_event(user, db, event['event_id'])
            return {"status": "skipped", "reason": "reservation_cancelled"}

        logger.info(f"[CALENDAR] Synced reservation {reservation_id} as event {event['event_id']}")
        return {"status": "synced", "event_id": event['event_id']}

    except Exception as exc:
        logger.error(f"[CALENDAR] Sync failed for reservation {reservation_id}: {exc}")
        db.rollback()

        reservation = db.query(FacilityReservation).filter_by(id=reservation_id).first()
        if reservation:
            reservation.sync_status = "failed"
            reservation.sync_attempts = (reservation.sync_attempts or 0) + 1
            reservation.last_sync_error = str(exc)
            db.commit()

        raise self.retry(exc=exc, countdown=60 * (self.request.retries + 1))
    finally:
        db.close()


@celery_app.task(bind=True, max_retries=3)
def delete_reservation_calendar_event(self, user_id: int, event_id: str):
    """Remove the calendar event of a cancelled reservation (best effort)"""
    db = SessionLocal()
    try:
        user = db.query(User).filter_by(id=user_id).first()
        if not user or not user.has_calendar_link:
            logger.info(f"[CALENDAR] User {user_id} has no calendar tokens, event {event_id} left as is")
            return {"status": "skipped", "reason": "no_calendar_link"}

        GoogleCalendarService().delete_event(user, db, event_id)
        return {"status": "deleted", "event_id": event_id}

    except Exception as exc:
        logger.error(f"[CALENDAR] Failed to delete calendar event {event_id}: {exc}")
        raise self.retry(exc=exc, countdown=60 * (self.request.retries + 1))
    finally:
        db.close()
