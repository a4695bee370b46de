"""
Ride Service - Entry Point

Builds the stores and services from environment settings and serves the
FastAPI app with uvicorn.
"""

import logging

import uvicorn

from api.app import create_app
from api.auth import StaticSessionVerifier
from bootstrap import build_services
from ride_logging import setup_logging
from settings import get_settings

logger = logging.getLogger(__name__)


def main() -> None:
    """Main entry point - initializes and runs the service."""
    settings = get_settings()

    setup_logging(
        level=settings.log.level,
        json_output=settings.log.format == "json",
        environment=settings.log.environment,
    )

    logger.info("Starting ride service...")
    services = build_services(settings)

    sessions = settings.auth.session_map()
    if not sessions:
        logger.warning("AUTH_SESSIONS is empty; every authenticated route will return 401")

    app = create_app(
        lifecycle=services.lifecycle,
        payment_service=services.payment_service,
        estimator=services.estimator,
        payment_methods=services.payment_methods,
        session_verifier=StaticSessionVerifier(sessions),
        settings=settings,
    )

    logger.info("Serving on %s:%d", settings.api.host, settings.api.port)
    uvicorn.run(
        app,
        host=settings.api.host,
        port=settings.api.port,
        log_level=settings.log.level.lower(),
    )


if __name__ == "__main__":
    main()
