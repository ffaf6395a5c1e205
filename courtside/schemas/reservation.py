"""
Pydantic schemas for availability and reservations
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional
from datetime import datetime, timezone


# ============================================================================
# Availability (derived, never persisted)
# ============================================================================

class AvailableSlot(BaseModel):
    """One bookable hour on a given day"""
    start_time: str = Field(..., description="Slot start, HH:MM")
    end_time: str = Field(..., description="Slot end, HH:MM")
    price_per_hour: float = Field(..., description="Hourly rate for the slot start")
    available: bool = Field(True, description="False when an active reservation overlaps")


class DayAvailability(BaseModel):
    """All slots for one calendar day"""
    date: str = Field(..., description="YYYY-MM-DD")
    is_open: bool
    slots: List[AvailableSlot] = Field(default_factory=list)


# ============================================================================
# Request Schemas
# ============================================================================

class CreateReservationRequest(BaseModel):
    """Body of POST /reservations. Times are RFC3339; naive values are read as UTC."""
    facility_id: int = Field(..., gt=0)
    start_time: datetime
    end_time: datetime

    @field_validator("start_time", "end_time")
    @classmethod
    def to_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)


class ProcessPaymentRequest(BaseModel):
    payment_method: str = Field(..., description="on_place or card")


# ============================================================================
# Response Schemas
# ============================================================================

class ReservationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    facility_id: int
    start_time: datetime
    end_time: datetime
    status: str
    total_price: float
    created_at: Optional[datetime] = None
    google_calendar_event_id: Optional[str] = None


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    reservation_id: int
    amount: float
    currency: str
    payment_method: Optional[str] = None
    payment_status: str
    paid_at: Optional[datetime] = None


class PendingCountResponse(BaseModel):
    pending: int


class MessageResponse(BaseModel):
    message: str
