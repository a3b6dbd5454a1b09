"""Request timing middleware."""

import time

from fastapi import Request, Response
from starlette.middleware.base import RequestResponseEndpoint

from store_service.utils.logging import get_logger

log = get_logger(__name__)


async def response_time_middleware(request: Request, call_next: RequestResponseEndpoint) -> Response:
    """Log path, method, status and response time of every request."""
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    response.headers["X-Response-Time-Ms"] = f"{duration_ms:.2f}"
    log.info(
        "Path: %s, Method: %s, Status: %d, Response Time: %.2fms",
        request.url.path,
        request.method,
        response.status_code,
        duration_ms,
        extra={
            "path": request.url.path,
            "method": request.method,
            "status": response.status_code,
            "duration_ms": round(duration_ms, 2),
        },
    )
    return response
