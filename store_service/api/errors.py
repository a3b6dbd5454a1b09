"""Centralized error transformation for the HTTP layer.

Maps service errors to status codes. Client errors carry `{"message": ...}`,
server errors `{"error": ...}`.
"""

from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from store_service.errors import (
    AlreadyExistsError,
    CollaboratorError,
    InvalidInputError,
    NotFoundError,
    PartialFailureError,
    StoreServiceError,
)
from store_service.utils.logging import get_logger

log = get_logger(__name__)

ERROR_STATUS_MAP: Dict[type, int] = {
    NotFoundError: 404,
    InvalidInputError: 400,
    AlreadyExistsError: 409,
    CollaboratorError: 500,
    PartialFailureError: 500,
}


def status_for(error: StoreServiceError) -> int:
    for error_type in type(error).__mro__:
        if error_type in ERROR_STATUS_MAP:
            return ERROR_STATUS_MAP[error_type]
    return 500


def error_body(status_code: int, message: str) -> Dict[str, Any]:
    if status_code >= 500:
        return {"error": message}
    return {"message": message}


def _describe_validation(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts) or "invalid request"


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StoreServiceError)
    async def store_error_handler(request: Request, exc: StoreServiceError):
        status_code = status_for(exc)
        if status_code >= 500:
            log.error(
                "Request failed on %s %s: %s",
                request.method,
                request.url.path,
                exc.message,
                extra={"error_type": type(exc).__name__},
            )
        return JSONResponse(status_code=status_code, content=error_body(status_code, exc.message))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _describe_validation(exc)})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        log.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})
