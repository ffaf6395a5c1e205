# courtside/models/__init__.py
from .base import Base
from .user import User, PlatformRole
from .facility import Facility, FacilitySchedule, FacilityPricing, DayType
from .reservation import FacilityReservation, ReservationStatus
from .payment import Payment, PaymentMethod, PaymentStatus

__all__ = [
    "Base",
    "User",
    "PlatformRole",
    "Facility",
    "FacilitySchedule",
    "FacilityPricing",
    "DayType",
    "FacilityReservation",
    "ReservationStatus",
    "Payment",
    "PaymentMethod",
    "PaymentStatus",
]
