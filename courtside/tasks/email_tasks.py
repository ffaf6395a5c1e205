# ===== courtside/tasks/email_tasks.py =====
import logging

from courtside.config.celery_config import celery_app
from courtside.config.database import SessionLocal
from courtside.models.facility import Facility
from courtside.models.payment import Payment
from courtside.models.reservation import FacilityReservation
from courtside.models.user import User
from courtside.services.email.email_service import EmailService
from courtside.utils.time_utils import as_utc

logger = logging.getLogger(__name__)

TIME_LABEL = "%Y-%m-%d %H:%M UTC"


@celery_app.task(bind=True, max_retries=3)
def send_reservation_confirmation_email(self, reservation_id: int):
    """
    Send the booking confirmation for a paid reservation

    Args:
        reservation_id: Confirmed reservation
    """
    db = SessionLocal()
    try:
        reservation = db.query(FacilityReservation).filter_by(id=reservation_id).first()
        if not reservation:
            return {"status": "failed", "reason": "reservation_not_found"}

        user = db.query(User).filter_by(id=reservation.user_id).first()
        facility = db.query(Facility).filter_by(id=reservation.facility_id).first()
        if not user or not facility:
            return {"status": "failed", "reason": "user_or_facility_not_found"}

        payment = db.query(Payment).filter_by(reservation_id=reservation_id).first()

        logger.info(f"Sending confirmation email for reservation {reservation_id} to {user.email}")

        EmailService.send_reservation_confirmation_email(
            email=user.email,
            facility_name=facility.name,
            location=facility.location,
            start_label=as_utc(reservation.start_time).strftime(TIME_LABEL),
            end_label=as_utc(reservation.end_time).strftime(TIME_LABEL),
            total_price=reservation.total_price,
            payment_method=payment.payment_method if payment else None,
            user_name=user.full_name
        )

        return {"status": "success", "email": user.email}

    except Exception as exc:
        logger.error(f"Failed to send confirmation email for reservation {reservation_id}: {exc}")

        # Retry with exponential backoff: 1min, 2min, 4min
        raise self.retry(
            exc=exc,
            countdown=60 * (2 ** self.request.retries)
        )
    finally:
        db.close()
