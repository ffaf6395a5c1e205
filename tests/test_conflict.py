"""
Unit tests for interval overlap detection.
"""

from datetime import datetime, timezone

from courtside.models.reservation import FacilityReservation
from courtside.services.reservation.conflict import is_occupied, overlaps


def at(hour, minute=0):
    return datetime(2030, 1, 1, hour, minute, tzinfo=timezone.utc)


def booked(start, end):
    return FacilityReservation(start_time=start, end_time=end, status="pending")


class TestOverlaps:
    """Test the half-open overlap rule."""

    def test_partial_overlap(self):
        assert overlaps(at(9), at(10, 30), at(10), at(11))
        assert overlaps(at(10), at(11), at(9), at(10, 30))

    def test_containment(self):
        assert overlaps(at(8), at(12), at(9), at(10))
        assert overlaps(at(9), at(10), at(8), at(12))

    def test_touching_intervals_do_not_overlap(self):
        assert not overlaps(at(9), at(10), at(10), at(11))
        assert not overlaps(at(10), at(11), at(9), at(10))

    def test_disjoint(self):
        assert not overlaps(at(8), at(9), at(11), at(12))


class TestIsOccupied:
    """Test checks against stored reservations."""

    def test_no_reservations(self):
        assert not is_occupied(at(9), at(10), [])

    def test_back_to_back_booking_allowed(self):
        reservations = [booked(at(9), at(10)), booked(at(11), at(12))]
        assert not is_occupied(at(10), at(11), reservations)

    def test_any_overlap_blocks(self):
        reservations = [booked(at(9), at(10)), booked(at(11), at(12))]
        assert is_occupied(at(11, 30), at(13), reservations)

    def test_naive_store_values_compare_as_utc(self):
        """SQLite hands back naive datetimes."""
        reservations = [booked(datetime(2030, 1, 1, 9, 0), datetime(2030, 1, 1, 10, 30))]
        assert is_occupied(at(10), at(11), reservations)
        assert not is_occupied(at(10, 30), at(11), reservations)
