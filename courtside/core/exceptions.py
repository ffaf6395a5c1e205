# courtside/core/exceptions.py
"""Booking error taxonomy and its HTTP mapping"""
import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class BookingError(Exception):
    """Base class for errors raised by the booking services"""

    status_code = 500
    client_safe = True

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def public_message(self) -> str:
        if self.client_safe:
            return self.message
        return "Internal server error"


class ValidationError(BookingError):
    """Malformed interval, start in the past, end not after start"""
    status_code = 400


class ConflictError(BookingError):
    """Requested interval overlaps an existing booking"""
    status_code = 409


class AuthorizationError(BookingError):
    status_code = 403


class NotFoundError(BookingError):
    status_code = 404


class ConfigurationError(BookingError):
    """Facility has no schedule or no pricing rules"""
    status_code = 500
    client_safe = False


class TransientStoreError(BookingError):
    """Backing store unreachable or failed mid-request"""
    status_code = 503
    client_safe = False


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    """Render a BookingError as {"error": ...}"""
    if not exc.client_safe:
        logger.error(
            f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}"
        )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.public_message})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render malformed query or body input as a 400 {"error": ...}"""
    errors = exc.errors()
    logger.warning(f"Validation error for {request.method} {request.url.path}: {errors}")

    if not errors:
        return JSONResponse(status_code=400, content={"error": "invalid request"})

    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    reason = first.get("msg", "invalid value")
    return JSONResponse(
        status_code=400,
        content={"error": f"invalid {field}: {reason}" if field else reason},
    )
