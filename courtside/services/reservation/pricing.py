# ============================================================================
# courtside/services/reservation/pricing.py
# ============================================================================
"""
Price lookup for slots and reservations.

Pricing rows are matched with a lexical comparison of zero-padded
"HH:MM:SS" strings: ``start_hour <= time_of_day < end_hour``. Stored hours
must therefore be 24-hour and zero-padded. Rows are scanned in the order
given (the store returns them ordered by day type, start hour, id) and the
first match wins. No match prices the slot at 0.0.
"""
from datetime import date, datetime, time
from typing import Iterable, Union

from courtside.models.facility import DayType, FacilityPricing
from courtside.utils.time_utils import as_utc

TimeLike = Union[str, time, datetime]


def day_type_for(day: date) -> DayType:
    """Saturday and Sunday are weekend days, everything else is a weekday"""
    if day.weekday() >= 5:
        return DayType.WEEKEND
    return DayType.WEEKDAY


def to_hhmmss(value: TimeLike) -> str:
    """
    Render a time-of-day as the "HH:MM:SS" string used for pricing lookups.

    "HH:MM" strings get ":00" appended. Other strings are returned as they
    are so that malformed data keeps its lexical ordering.
    """
    if isinstance(value, datetime):
        return value.strftime("%H:%M:%S")
    if isinstance(value, time):
        return value.strftime("%H:%M:%S")
    value = value.strip()
    if len(value) == 5:
        return f"{value}:00"
    return value


def parse_time_of_day(value: str) -> time:
    """Parse "HH:MM:SS" or "HH:MM" into a time"""
    for fmt in ("%H:%M:%S", "%H:%M"):
        try:
            return datetime.strptime(value.strip(), fmt).time()
        except ValueError:
            continue
    raise ValueError(f"invalid time format: {value}")


def price_for_slot(
        day_type: DayType,
        time_of_day: TimeLike,
        pricing_rows: Iterable[FacilityPricing],
) -> float:
    """Hourly rate of the first pricing row covering ``time_of_day``, else 0.0"""
    slot_hour = to_hhmmss(time_of_day)

    for row in pricing_rows:
        if row.day_type != day_type:
            continue
        if to_hhmmss(row.start_hour) <= slot_hour < to_hhmmss(row.end_hour):
            return float(row.price_per_hour)

    return 0.0


def total_price(
        start_time: datetime,
        end_time: datetime,
        pricing_rows: Iterable[FacilityPricing],
) -> float:
    """
    Price a reservation at the rate in force when it starts.

    The whole interval is charged at that single hourly rate, even when it
    runs into another pricing interval or past midnight into another day
    type. Fractional hours are charged pro rata.
    """
    start_time = as_utc(start_time)
    end_time = as_utc(end_time)

    hours = (end_time - start_time).total_seconds() / 3600
    rate = price_for_slot(day_type_for(start_time.date()), start_time, pricing_rows)

    return round(rate * hours, 2)
