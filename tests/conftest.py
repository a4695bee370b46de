from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.app import create_app
from api.auth import StaticSessionVerifier
from api.rate_limit import limiter
from driver import Driver
from fare import FareEstimator
from matching import RandomDriverMatcher
from ride_logging.context import LogContext
from rides import PaymentMethodService, PaymentService, RideLifecycleManager
from settings import APISettings, AuthSettings, RideSettings, Settings
from store import (
    InMemoryDriverStore,
    InMemoryPaymentMethodStore,
    InMemoryPaymentStore,
    InMemoryRideStore,
)
from tests.factories import make_driver

TEST_API_KEY = "test-api-key"


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Keep thread-local log fields from leaking between tests."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def sample_drivers() -> list[Driver]:
    """Three drivers around Midtown Manhattan, all available."""
    return [
        make_driver("driver_1", 40.7431, -73.9712, rating=4.8),
        make_driver("driver_2", 40.7589, -73.9851, rating=4.9),
        make_driver("driver_3", 40.7549, -73.9840, rating=4.7),
    ]


@pytest.fixture
def ride_store() -> InMemoryRideStore:
    return InMemoryRideStore()


@pytest.fixture
def driver_store(sample_drivers: list[Driver]) -> InMemoryDriverStore:
    return InMemoryDriverStore(sample_drivers)


@pytest.fixture
def payment_store() -> InMemoryPaymentStore:
    return InMemoryPaymentStore()


@pytest.fixture
def estimator() -> FareEstimator:
    return FareEstimator()


@pytest.fixture
def lifecycle(ride_store, driver_store, estimator) -> RideLifecycleManager:
    """Strict lifecycle manager with a seeded random matcher."""
    return RideLifecycleManager(
        ride_store,
        driver_store,
        estimator,
        RandomDriverMatcher(seed=42),
    )


@pytest.fixture
def permissive_lifecycle(ride_store, driver_store, estimator) -> RideLifecycleManager:
    return RideLifecycleManager(
        ride_store,
        driver_store,
        estimator,
        RandomDriverMatcher(seed=42),
        ride_settings=RideSettings(strict_transitions=False),
    )


@pytest.fixture
def payment_service(payment_store, ride_store, lifecycle) -> PaymentService:
    return PaymentService(payment_store, ride_store, lifecycle)


@pytest.fixture
def payment_method_service() -> PaymentMethodService:
    return PaymentMethodService(InMemoryPaymentMethodStore())


@pytest.fixture
def temp_sqlite_db(tmp_path: Path) -> Path:
    """Temporary SQLite database path."""
    return tmp_path / "test.db"


@pytest.fixture
def api_settings() -> Settings:
    return Settings(
        api=APISettings(key=TEST_API_KEY),
        auth=AuthSettings(sessions="token-alice:alice,token-bob:bob"),
    )


@pytest.fixture
def app(lifecycle, payment_service, estimator, payment_method_service, api_settings) -> FastAPI:
    # The limiter is module-level; counters would otherwise carry over between tests
    limiter.reset()
    return create_app(
        lifecycle=lifecycle,
        payment_service=payment_service,
        estimator=estimator,
        payment_methods=payment_method_service,
        session_verifier=StaticSessionVerifier(api_settings.auth.session_map()),
        settings=api_settings,
    )


@pytest.fixture
def test_client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": "Bearer token-alice"}


@pytest.fixture
def other_auth_headers() -> dict[str, str]:
    return {"Authorization": "Bearer token-bob"}


@pytest.fixture
def api_key_headers() -> dict[str, str]:
    return {"X-API-Key": TEST_API_KEY}
