# ============================================================================
# courtside/services/payment/payment_service.py
# ============================================================================
"""Payment processing; the only path that confirms a pending reservation"""
from datetime import datetime
from typing import Optional
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from courtside.config.settings import get_settings
from courtside.core.exceptions import (
    AuthorizationError,
    BookingError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from courtside.models.payment import Payment, PaymentMethod, PaymentStatus
from courtside.models.reservation import ReservationStatus
from courtside.services.reservation.reservation_store import ReservationStore, store_errors
from courtside.utils.time_utils import as_utc, utcnow

logger = logging.getLogger(__name__)


class PaymentService:

    @staticmethod
    def get_payment_for_reservation(db: Session, reservation_id: int) -> Optional[Payment]:
        with store_errors("loading payment"):
            return db.query(Payment).filter(Payment.reservation_id == reservation_id).first()

    @staticmethod
    def process_payment(
            db: Session,
            reservation_id: int,
            user_id: int,
            payment_method: str,
            now: Optional[datetime] = None
    ) -> Payment:
        """
        Record payment for a reservation and confirm it.

        Paying an already paid reservation returns the existing payment and
        changes nothing.
        """
        settings = get_settings()
        paid_at = as_utc(now) if now else utcnow()

        if payment_method not in {m.value for m in PaymentMethod}:
            raise ValidationError("invalid payment method. Must be 'on_place' or 'card'")

        store = ReservationStore(db)

        try:
            reservation = store.get(reservation_id)
            if reservation is None:
                raise NotFoundError("Reservation not found")
            if reservation.user_id != user_id:
                raise AuthorizationError("Reservation does not belong to this user")
            if reservation.status == ReservationStatus.CANCELLED.value:
                raise ValidationError("cannot pay for cancelled reservation")

            payment = PaymentService.get_payment_for_reservation(db, reservation_id)
            if payment is not None and payment.payment_status == PaymentStatus.COMPLETED.value:
                return payment

            if payment is None:
                payment = Payment(
                    reservation_id=reservation_id,
                    user_id=user_id,
                    amount=reservation.total_price,
                    currency=settings.CURRENCY,
                )
                db.add(payment)

            payment.payment_method = payment_method
            payment.payment_status = PaymentStatus.COMPLETED.value
            payment.paid_at = paid_at

            if reservation.status == ReservationStatus.PENDING.value:
                store.update_status(reservation_id, ReservationStatus.CONFIRMED.value)

            with store_errors("committing payment"):
                db.commit()
        except BookingError:
            db.rollback()
            raise
        except IntegrityError:
            # A concurrent request recorded the payment first
            db.rollback()
            existing = PaymentService.get_payment_for_reservation(db, reservation_id)
            if existing is None or existing.payment_status != PaymentStatus.COMPLETED.value:
                raise ConflictError("payment for this reservation is already being processed")
            logger.info(f"Reservation {reservation_id} already paid by a concurrent request (payment {existing.id})")
            return existing

        db.refresh(payment)
        logger.info(f"Payment {payment.id} completed for reservation {reservation_id} via {payment_method}")

        PaymentService._schedule_confirmation_email(reservation_id)
        return payment

    @staticmethod
    def _schedule_confirmation_email(reservation_id: int) -> None:
        try:
            from courtside.tasks.email_tasks import send_reservation_confirmation_email
            send_reservation_confirmation_email.delay(reservation_id)
        except Exception as e:
            logger.error(f"Could not queue confirmation email for reservation {reservation_id}: {e}")
