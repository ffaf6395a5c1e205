"""
Tests for payment processing and reservation confirmation.
"""

from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from courtside.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from courtside.models.payment import Payment, PaymentStatus
from courtside.models.reservation import ReservationStatus
from courtside.services.payment.payment_service import PaymentService


@pytest.fixture
def reservation(facility, user, make_reservation):
    return make_reservation(
        user.id, facility.id,
        datetime(2030, 1, 1, 17, 0, tzinfo=timezone.utc),
        datetime(2030, 1, 1, 19, 0, tzinfo=timezone.utc),
        total_price=20.0,
    )


class TestProcessPayment:
    """Test paying for a reservation."""

    def test_payment_confirms_pending_reservation(self, db, user, reservation, now, queued_tasks):
        payment = PaymentService.process_payment(db, reservation.id, user.id, "card", now=now)

        assert payment.payment_status == PaymentStatus.COMPLETED.value
        assert payment.amount == 20.0
        assert payment.currency == "EUR"
        assert payment.payment_method == "card"

        db.refresh(reservation)
        assert reservation.status == ReservationStatus.CONFIRMED.value
        queued_tasks["email"].assert_called_once_with(reservation.id)

    def test_paying_twice_returns_existing_payment(self, db, user, reservation, now, queued_tasks):
        first = PaymentService.process_payment(db, reservation.id, user.id, "on_place", now=now)
        second = PaymentService.process_payment(db, reservation.id, user.id, "card", now=now)

        assert second.id == first.id
        assert second.payment_method == "on_place"
        assert db.query(Payment).count() == 1
        assert queued_tasks["email"].call_count == 1

    def test_invalid_method(self, db, user, reservation, now):
        with pytest.raises(ValidationError, match="invalid payment method"):
            PaymentService.process_payment(db, reservation.id, user.id, "bitcoin", now=now)

    def test_cancelled_reservation_cannot_be_paid(self, db, user, facility, make_reservation, now):
        cancelled = make_reservation(
            user.id, facility.id,
            datetime(2030, 1, 1, 9, 0, tzinfo=timezone.utc),
            datetime(2030, 1, 1, 10, 0, tzinfo=timezone.utc),
            status=ReservationStatus.CANCELLED.value,
        )
        with pytest.raises(ValidationError, match="cannot pay for cancelled reservation"):
            PaymentService.process_payment(db, cancelled.id, user.id, "card", now=now)

        assert db.query(Payment).count() == 0

    def test_only_owner_can_pay(self, db, reservation, make_user, now):
        with pytest.raises(AuthorizationError):
            PaymentService.process_payment(db, reservation.id, make_user().id, "card", now=now)

    def test_unknown_reservation(self, db, user, now):
        with pytest.raises(NotFoundError):
            PaymentService.process_payment(db, 4242, user.id, "card", now=now)

    def test_confirmed_reservation_stays_confirmed(self, db, user, facility, make_reservation, now):
        confirmed = make_reservation(
            user.id, facility.id,
            datetime(2030, 1, 2, 9, 0, tzinfo=timezone.utc),
            datetime(2030, 1, 2, 10, 0, tzinfo=timezone.utc),
            status=ReservationStatus.CONFIRMED.value,
        )

        PaymentService.process_payment(db, confirmed.id, user.id, "on_place", now=now)

        db.refresh(confirmed)
        assert confirmed.status == ReservationStatus.CONFIRMED.value

    def test_concurrent_payment_returns_the_recorded_one(self, db, user, reservation, now, queued_tasks):
        """Both requests saw no payment; the second insert hits the unique reservation id."""
        recorded = Payment(
            reservation_id=reservation.id,
            user_id=user.id,
            amount=20.0,
            currency="EUR",
            payment_method="on_place",
            payment_status=PaymentStatus.COMPLETED.value,
            paid_at=now,
        )
        db.add(recorded)
        db.commit()
        recorded_id = recorded.id

        lookup = PaymentService.get_payment_for_reservation
        lookups = {"n": 0}

        def stale_first_lookup(session, reservation_id):
            lookups["n"] += 1
            if lookups["n"] == 1:
                return None
            return lookup(session, reservation_id)

        with patch.object(PaymentService, "get_payment_for_reservation", side_effect=stale_first_lookup):
            payment = PaymentService.process_payment(db, reservation.id, user.id, "card", now=now)

        assert payment.id == recorded_id
        assert payment.payment_method == "on_place"
        assert db.query(Payment).count() == 1
        queued_tasks["email"].assert_not_called()
