# courtside/services/reservation/conflict.py
"""Half-open interval overlap used for both slot marking and booking checks"""
from datetime import datetime
from typing import Iterable

from courtside.models.reservation import FacilityReservation
from courtside.utils.time_utils import as_utc


def overlaps(start: datetime, end: datetime, other_start: datetime, other_end: datetime) -> bool:
    """[start, end) and [other_start, other_end) share at least one instant"""
    return start < other_end and end > other_start


def is_occupied(
        start: datetime,
        end: datetime,
        reservations: Iterable[FacilityReservation],
) -> bool:
    """
    True if any reservation overlaps [start, end).

    ``reservations`` must already exclude cancelled rows. Touching intervals
    (one ends exactly when the other starts) do not conflict.
    """
    start = as_utc(start)
    end = as_utc(end)

    for reservation in reservations:
        if overlaps(start, end, as_utc(reservation.start_time), as_utc(reservation.end_time)):
            return True
    return False
