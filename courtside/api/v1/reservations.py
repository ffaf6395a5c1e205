# ============================================================================
# FILE: courtside/api/v1/reservations.py
# Session authenticated booking endpoints - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session
from typing import List

from courtside.config.database import get_db
from courtside.models.user import User
from courtside.api.dependencies import get_current_active_user
from courtside.schemas.reservation import (
    CreateReservationRequest,
    MessageResponse,
    PaymentResponse,
    PendingCountResponse,
    ProcessPaymentRequest,
    ReservationResponse,
)
from courtside.services.payment.payment_service import PaymentService
from courtside.services.reservation.reservation_service import ReservationService

router = APIRouter(prefix="/reservations", tags=["reservations"])


@router.post("", response_model=ReservationResponse, status_code=status.HTTP_201_CREATED)
async def create_reservation(
        request: CreateReservationRequest,
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
):
    """
    Book a facility for [start_time, end_time).
    Returns 400 for a bad interval, 409 when the time is taken.
    """
    return ReservationService.create_reservation(
        db=db,
        user_id=current_user.id,
        facility_id=request.facility_id,
        start_time=request.start_time,
        end_time=request.end_time
    )


@router.get("", response_model=List[ReservationResponse])
async def list_my_reservations(
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
):
    """All reservations of the current user, newest first."""
    return ReservationService.list_user_reservations(db=db, user_id=current_user.id)


@router.get("/upcoming", response_model=List[ReservationResponse])
async def list_upcoming_reservations(
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
):
    """Pending and confirmed reservations that have not started yet."""
    return ReservationService.list_upcoming_reservations(db=db, user_id=current_user.id)


@router.get("/pending-count", response_model=PendingCountResponse)
async def count_pending_reservations(
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
):
    """Number of upcoming reservations still awaiting payment."""
    return {"pending": ReservationService.count_pending_reservations(db=db, user_id=current_user.id)}


@router.post("/{reservation_id}/cancel", response_model=MessageResponse)
async def cancel_reservation(
        reservation_id: int = Path(..., gt=0, description="The reservation ID"),
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
):
    """Cancel one of your reservations."""
    ReservationService.cancel_reservation(
        db=db,
        reservation_id=reservation_id,
        user_id=current_user.id
    )
    return {"message": "Reservation cancelled successfully"}


@router.post("/{reservation_id}/payment", response_model=PaymentResponse)
async def pay_reservation(
        request: ProcessPaymentRequest,
        reservation_id: int = Path(..., gt=0, description="The reservation ID"),
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
):
    """Pay for a reservation; a pending reservation becomes confirmed."""
    return PaymentService.process_payment(
        db=db,
        reservation_id=reservation_id,
        user_id=current_user.id,
        payment_method=request.payment_method
    )
