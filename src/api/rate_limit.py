"""Rate limiting configuration using slowapi."""

import logging

from opentelemetry import metrics
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

logger = logging.getLogger(__name__)

RIDE_REQUEST_LIMIT = "30/minute"
PAYMENT_LIMIT = "30/minute"

meter = metrics.get_meter("ride-service")

rate_limit_hits = meter.create_counter(
    name="api_rate_limit_hits_total",
    description="Requests rejected by rate limiting",
    unit="1",
)


def get_session_or_ip(request: Request) -> str:
    """Rate limit by bearer session if present, otherwise by IP."""
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return f"session:{token.strip()}"
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(key_func=get_session_or_ip)


def rate_limit_exceeded_handler(request: Request, exc: Exception) -> Response:
    """429 with a ``retry-after`` header set to the limit window."""
    assert isinstance(exc, RateLimitExceeded)
    logger.warning("Rate limit exceeded on %s %s", request.method, request.url.path)
    rate_limit_hits.add(1, {"endpoint": request.url.path, "method": request.method})

    # Window length of the exceeded limit, e.g. 60 for "30/minute"
    retry_after = str(exc.limit.limit.get_expiry())

    response = JSONResponse(
        status_code=429,
        content={
            "error": "rate_limited",
            "message": f"Rate limit exceeded: {exc.detail}",
            "details": {},
        },
    )
    response.headers["retry-after"] = retry_after
    return response
