# courtside/core/middleware.py
"""Custom middleware for request handling"""
import uuid
import time
import logging
from starlette.requests import Request

logger = logging.getLogger(__name__)

# Load balancer health checks would drown the booking traffic in the logs
QUIET_PATH_PREFIXES = ("/health",)


async def correlation_id_middleware(request: Request, call_next):
    """Reuse or mint an X-Correlation-ID and echo it on the response"""
    correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
    request.state.correlation_id = correlation_id

    response = await call_next(request)
    response.headers["X-Correlation-ID"] = correlation_id
    return response


async def request_logging_middleware(request: Request, call_next):
    """Log method, path, status and duration of every booking API call"""
    if request.url.path.startswith(QUIET_PATH_PREFIXES):
        return await call_next(request)

    start_time = time.perf_counter()
    response = await call_next(request)
    correlation_id = getattr(request.state, "correlation_id", "unknown")

    duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
    log = logger.warning if response.status_code >= 500 else logger.info
    log(
        f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms} ms)",
        extra={
            "correlation_id": correlation_id,
            "client": request.client.host if request.client else "unknown",
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        }
    )

    return response
