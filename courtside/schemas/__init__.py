# courtside/schemas/__init__.py
from .reservation import (
    AvailableSlot,
    DayAvailability,
    CreateReservationRequest,
    ProcessPaymentRequest,
    ReservationResponse,
    PaymentResponse,
    PendingCountResponse,
    MessageResponse
)
