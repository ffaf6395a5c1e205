"""
API v1 router setup
Organized into: public facility routes and JWT-authenticated reservation routes
"""
from fastapi import APIRouter

from courtside.api.v1 import facilities, reservations

api_v1_router = APIRouter()

# ============================================================================
# FACILITY ROUTES (availability is public, bookings need manager JWT)
# ============================================================================
api_v1_router.include_router(
    facilities.router,
    tags=["Facilities"]
)

# ============================================================================
# RESERVATION ROUTES (JWT authentication required)
# ============================================================================
api_v1_router.include_router(
    reservations.router,
    tags=["Reservations"]
)


# ============================================================================
# ROOT ENDPOINT - API Info
# ============================================================================
@api_v1_router.get("/", tags=["Info"])
async def api_info():
    """API information and available endpoints."""
    return {
        "version": "1.0",
        "authentication": {
            "facilities": "Availability is public; bookings overview needs a manager or admin JWT",
            "reservations": "JWT Bearer token required (user login)",
        }
    }
