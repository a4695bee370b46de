"""FastAPI application factory for the ride service."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from slowapi.errors import RateLimitExceeded

from api.auth import SessionVerifier
from api.errors import ride_service_error_handler
from api.middleware import CorrelationIdMiddleware, SecurityHeadersMiddleware
from api.rate_limit import limiter, rate_limit_exceeded_handler
from api.routes import locations, payments, rides
from core.exceptions import RideServiceError
from fare import FareEstimator
from rides import PaymentMethodService, PaymentService, RideLifecycleManager
from settings import Settings, get_settings

logger = logging.getLogger(__name__)


def create_app(
    lifecycle: RideLifecycleManager,
    payment_service: PaymentService,
    estimator: FareEstimator,
    payment_methods: PaymentMethodService,
    session_verifier: SessionVerifier,
    settings: Settings | None = None,
) -> FastAPI:
    """Create FastAPI application with injected dependencies.

    Args:
        lifecycle: RideLifecycleManager owning ride state
        payment_service: PaymentService recording payments
        estimator: FareEstimator for trip estimates
        payment_methods: PaymentMethodService for cards on file
        session_verifier: resolves bearer tokens to user ids
        settings: Settings; loaded from the environment when omitted
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Ride Service API",
        version="1.0.0",
        description="Ride requests, driver assignment, fares and payments",
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(RideServiceError, ride_service_error_handler)

    # Set dependencies immediately (not in lifespan) so they're available for testing
    app.state.lifecycle = lifecycle
    app.state.payments = payment_service
    app.state.estimator = estimator
    app.state.payment_methods = payment_methods
    app.state.session_verifier = session_verifier
    app.state.settings = settings

    origins = [o.strip() for o in settings.cors.origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(CorrelationIdMiddleware)

    app.include_router(rides.router, prefix="/rides", tags=["rides"])
    app.include_router(payments.router, prefix="/payments", tags=["payments"])
    app.include_router(locations.router, prefix="/locations", tags=["locations"])

    @app.get("/health")
    def health_check() -> dict[str, str]:
        """Health check endpoint for monitoring (unauthenticated for infrastructure)."""
        return {"status": "ok"}

    # Traces every HTTP request; spans are dropped unless an SDK is configured
    FastAPIInstrumentor.instrument_app(app)

    logger.info("API ready with CORS origins %s", origins)
    return app
