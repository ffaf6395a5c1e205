# ============================================================================
# FILE: courtside/api/v1/facilities.py
# Public availability plus manager booking overview - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, Query, Path
from sqlalchemy.orm import Session
from datetime import date, timedelta
from typing import List, Optional

from courtside.config.database import get_db
from courtside.models.user import User
from courtside.api.dependencies import get_current_active_user
from courtside.schemas.reservation import DayAvailability, ReservationResponse
from courtside.services.reservation.reservation_service import ReservationService
from courtside.utils.time_utils import utcnow

router = APIRouter(prefix="/facilities", tags=["facilities"])


@router.get("/{facility_id}/availability", response_model=List[DayAvailability])
async def get_facility_availability(
        facility_id: int = Path(..., gt=0, description="The facility ID"),
        start_date: Optional[date] = Query(None, description="First day (YYYY-MM-DD), defaults to today"),
        end_date: Optional[date] = Query(None, description="Last day (YYYY-MM-DD), defaults to start + 7 days"),
        db: Session = Depends(get_db)
):
    """
    Hourly slot calendar for a facility.
    No authentication required.
    """
    return ReservationService.get_availability(
        db=db,
        facility_id=facility_id,
        start_date=start_date,
        end_date=end_date
    )


@router.get("/{facility_id}/bookings", response_model=List[ReservationResponse])
async def get_facility_bookings(
        facility_id: int = Path(..., gt=0, description="The facility ID"),
        start_date: Optional[date] = Query(None, description="First day (YYYY-MM-DD), defaults to today"),
        end_date: Optional[date] = Query(None, description="Last day (YYYY-MM-DD), defaults to start + 7 days"),
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
):
    """
    Active bookings of a facility.
    Requires the facility manager or an admin.
    """
    start_date = start_date or utcnow().date()
    end_date = end_date or start_date + timedelta(days=7)

    return ReservationService.list_facility_bookings(
        db=db,
        facility_id=facility_id,
        user=current_user,
        start_date=start_date,
        end_date=end_date
    )
