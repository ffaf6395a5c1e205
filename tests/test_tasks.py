"""
Tests for calendar sync and email background tasks.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from courtside.models.reservation import FacilityReservation, ReservationStatus
from courtside.tasks.calendar_tasks import delete_reservation_calendar_event, sync_reservation_to_calendar
from courtside.tasks.email_tasks import send_reservation_confirmation_email


@pytest.fixture
def task_session(db):
    """Hand the test session to tasks that open their own."""
    with patch("courtside.tasks.calendar_tasks.SessionLocal", return_value=db), \
            patch("courtside.tasks.email_tasks.SessionLocal", return_value=db):
        yield db


@pytest.fixture
def calendar_user(make_user):
    return make_user(google_access_token_encrypted=b"access", google_refresh_token_encrypted=b"refresh")


def book(make_reservation, user, facility, **kwargs):
    return make_reservation(
        user.id, facility.id,
        datetime(2030, 1, 1, 10, 0, tzinfo=timezone.utc),
        datetime(2030, 1, 1, 11, 0, tzinfo=timezone.utc),
        total_price=10.0,
        **kwargs
    )


def reload(db, reservation_id):
    return db.query(FacilityReservation).filter_by(id=reservation_id).first()


class TestCalendarSync:
    """Test pushing reservations to Google Calendar."""

    def test_user_without_calendar_is_skipped(self, task_session, facility, user, make_reservation):
        reservation = book(make_reservation, user, facility)
        reservation_id = reservation.id

        with patch("courtside.tasks.calendar_tasks.GoogleCalendarService") as service_cls:
            result = sync_reservation_to_calendar.run(reservation_id)

        assert result == {"status": "skipped", "reason": "no_calendar_link"}
        service_cls.assert_not_called()
        assert reload(task_session, reservation_id).sync_status == "sync_disabled"

    def test_synced_event_id_is_stored(self, task_session, facility, calendar_user, make_reservation):
        reservation = book(make_reservation, calendar_user, facility)
        reservation_id = reservation.id
        service = MagicMock()
        service.create_event.return_value = {"event_id": "evt_1", "event_url": "https://calendar/evt_1"}

        with patch("courtside.tasks.calendar_tasks.GoogleCalendarService", return_value=service):
            result = sync_reservation_to_calendar.run(reservation_id)

        assert result == {"status": "synced", "event_id": "evt_1"}
        event_data = service.create_event.call_args[0][2]
        assert event_data["summary"] == "Courtside Booking - Court 1"
        assert event_data["location"] == "1 Park Lane, Sofia"

        stored = reload(task_session, reservation_id)
        assert stored.google_calendar_event_id == "evt_1"
        assert stored.sync_status == "synced"

    def test_cancelled_reservation_is_not_synced(self, task_session, facility, calendar_user, make_reservation):
        reservation = book(make_reservation, calendar_user, facility, status=ReservationStatus.CANCELLED.value)

        with patch("courtside.tasks.calendar_tasks.GoogleCalendarService") as service_cls:
            result = sync_reservation_to_calendar.run(reservation.id)

        assert result["reason"] == "reservation_cancelled"
        service_cls.assert_not_called()

    def test_cancel_during_sync_removes_event(self, task_session, facility, calendar_user, make_reservation):
        reservation = book(make_reservation, calendar_user, facility)
        reservation_id = reservation.id

        def create_then_cancel(user, db, event_data):
            # The booker cancels while Google is still creating the event
            db.query(FacilityReservation).filter_by(id=reservation_id).update(
                {"status": ReservationStatus.CANCELLED.value}, synchronize_session=False
            )
            db.commit()
            return {"event_id": "evt_2", "event_url": "https://calendar/evt_2"}

        service = MagicMock()
        service.create_event.side_effect = create_then_cancel

        with patch("courtside.tasks.calendar_tasks.GoogleCalendarService", return_value=service):
            result = sync_reservation_to_calendar.run(reservation_id)

        assert result == {"status": "skipped", "reason": "reservation_cancelled"}
        service.delete_event.assert_called_once()
        assert service.delete_event.call_args[0][2] == "evt_2"

        stored = reload(task_session, reservation_id)
        assert stored.status == ReservationStatus.CANCELLED.value
        assert stored.google_calendar_event_id is None

    def test_failure_is_recorded(self, task_session, facility, calendar_user, make_reservation):
        reservation = book(make_reservation, calendar_user, facility)
        reservation_id = reservation.id
        service = MagicMock()
        service.create_event.side_effect = RuntimeError("calendar API unavailable")

        with patch("courtside.tasks.calendar_tasks.GoogleCalendarService", return_value=service):
            with pytest.raises(RuntimeError):
                sync_reservation_to_calendar.run(reservation_id)

        stored = reload(task_session, reservation_id)
        assert stored.sync_status == "failed"
        assert stored.last_sync_error == "calendar API unavailable"

    def test_delete_event(self, task_session, calendar_user):
        service = MagicMock()

        with patch("courtside.tasks.calendar_tasks.GoogleCalendarService", return_value=service):
            result = delete_reservation_calendar_event.run(calendar_user.id, "evt_9")

        assert result == {"status": "deleted", "event_id": "evt_9"}
        service.delete_event.assert_called_once()
        assert service.delete_event.call_args[0][2] == "evt_9"


class TestConfirmationEmail:
    """Test the booking confirmation email task."""

    def test_sends_confirmation(self, task_session, facility, user, make_reservation):
        reservation = book(make_reservation, user, facility, status=ReservationStatus.CONFIRMED.value)
        email = user.email

        with patch("courtside.tasks.email_tasks.EmailService.send_reservation_confirmation_email") as send:
            result = send_reservation_confirmation_email.run(reservation.id)

        assert result == {"status": "success", "email": email}
        kwargs = send.call_args.kwargs
        assert kwargs["facility_name"] == "Court 1"
        assert kwargs["start_label"] == "2030-01-01 10:00 UTC"
        assert kwargs["total_price"] == 10.0

    def test_missing_reservation(self, task_session):
        assert send_reservation_confirmation_email.run(999) == {
            "status": "failed", "reason": "reservation_not_found"
        }
