"""Maps service exceptions to HTTP responses."""

import logging

from fastapi.encoders import jsonable_encoder
from starlette.requests import Request
from starlette.responses import JSONResponse

from core.exceptions import (
    AuthorizationError,
    DuplicateIdError,
    InvalidStateError,
    NotFoundError,
    RideServiceError,
    ValidationError,
)

logger = logging.getLogger(__name__)

STATUS_CODES: dict[type[RideServiceError], int] = {
    ValidationError: 400,
    AuthorizationError: 403,
    NotFoundError: 404,
    InvalidStateError: 409,
    DuplicateIdError: 409,
}


def status_for(exc: RideServiceError) -> int:
    """HTTP status for ``exc``, resolved through its class hierarchy."""
    for cls in type(exc).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return 500


def error_body(exc: RideServiceError) -> dict[str, object]:
    return {
        "error": exc.code,
        "message": exc.message,
        "details": jsonable_encoder(exc.details),
    }


async def ride_service_error_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, RideServiceError)
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("Unhandled %s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    else:
        logger.info(
            "%s %s -> %d %s", request.method, request.url.path, status_code, exc.code
        )
    return JSONResponse(status_code=status_code, content=error_body(exc))
