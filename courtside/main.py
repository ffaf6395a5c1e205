"""
FastAPI application for facility availability and reservations

Bookings are committed synchronously; calendar sync and emails run in workers
"""
import logging
import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute
from contextlib import asynccontextmanager

from courtside.config.settings import get_settings
from courtside.core.exceptions import BookingError, booking_error_handler, request_validation_handler
from courtside.core.middleware import correlation_id_middleware, request_logging_middleware
from courtside.core.monitoring import health_router
from courtside.api.v1.router import api_v1_router
from courtside.utils.my_logging import setup_logging

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    setup_logging()
    logger.info(f"{settings.APP_NAME} API starting up...")

    routes_list = sorted(
        (method, route.path)
        for route in app.routes
        if isinstance(route, APIRoute)
        for method in route.methods
    )
    for method, path in routes_list:
        logger.debug(f"  {method:8} {path}")
    logger.info(f"Total routes registered: {len(routes_list)}")

    yield

    # Shutdown
    logger.info(f"{settings.APP_NAME} API shutting down...")


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""

    app = FastAPI(
        title="Courtside Booking API",
        description="Sports facility availability, reservations and payments",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "PUT"],
        allow_headers=["*"],
    )

    # Logging runs inside the correlation middleware so it sees the id
    app.middleware("http")(request_logging_middleware)
    app.middleware("http")(correlation_id_middleware)

    app.add_exception_handler(BookingError, booking_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # Include routers
    app.include_router(health_router, prefix="/health", tags=["monitoring"])
    app.include_router(api_v1_router, prefix="/api/v1")

    @app.get("/")
    async def root():
        return {
            "service": "Courtside Booking API",
            "version": "0.1.0",
            "status": "running",
            "endpoints": {
                "api": "/api/v1/",
                "health": "/health",
                "docs": "/docs" if settings.DEBUG else "disabled"
            }
        }

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "courtside.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
