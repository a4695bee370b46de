"""Wires stores, estimator and services from settings."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from core.exceptions import ConfigurationError, DuplicateIdError
from db import init_database
from db.repositories import (
    DriverRepository,
    PaymentMethodRepository,
    PaymentRepository,
    RideRepository,
)
from driver import Driver
from fare import FareEstimator
from matching import create_driver_matcher
from rides import PaymentMethodService, PaymentService, RideLifecycleManager
from settings import Settings, StorageSettings
from store import (
    DriverStore,
    InMemoryDriverStore,
    InMemoryPaymentMethodStore,
    InMemoryPaymentStore,
    InMemoryRideStore,
    PaymentMethodStore,
    PaymentStore,
    RideStore,
)

logger = logging.getLogger(__name__)

_drivers_adapter = TypeAdapter(list[Driver])


@dataclass
class ServiceContainer:
    rides: RideStore
    drivers: DriverStore
    payments: PaymentStore
    estimator: FareEstimator
    lifecycle: RideLifecycleManager
    payment_service: PaymentService
    payment_methods: PaymentMethodService


def load_seed_drivers(path: str | Path) -> list[Driver]:
    """Read a JSON list of drivers."""
    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(
            f"Cannot read driver seed file {path}", details={"path": str(path)}
        ) from e
    try:
        return _drivers_adapter.validate_python(raw)
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"Invalid driver seed file {path}",
            details={"path": str(path), "errors": e.errors(include_url=False)},
        ) from e


def seed_drivers(store: DriverStore, drivers: list[Driver]) -> int:
    """Add drivers that are not stored yet; returns how many were added."""
    added = 0
    for driver in drivers:
        try:
            store.add(driver)
        except DuplicateIdError:
            logger.debug("Driver %s already stored, skipping seed", driver.driver_id)
            continue
        added += 1
    return added


def create_stores(
    settings: StorageSettings,
) -> tuple[RideStore, DriverStore, PaymentStore, PaymentMethodStore]:
    if settings.backend == "sqlite":
        session_maker = init_database(settings.sqlite_path)
        logger.info("Using SQLite storage at %s", settings.sqlite_path)
        return (
            RideRepository(session_maker),
            DriverRepository(session_maker),
            PaymentRepository(session_maker),
            PaymentMethodRepository(session_maker),
        )
    logger.info("Using in-memory storage")
    return (
        InMemoryRideStore(),
        InMemoryDriverStore(),
        InMemoryPaymentStore(),
        InMemoryPaymentMethodStore(),
    )


def build_services(settings: Settings) -> ServiceContainer:
    rides, drivers, payments, saved_methods = create_stores(settings.storage)

    seed_path = settings.storage.drivers_seed_path
    if seed_path:
        added = seed_drivers(drivers, load_seed_drivers(seed_path))
        logger.info("Seeded %d drivers from %s", added, seed_path)
    else:
        logger.warning("Driver seeding disabled; assignment needs stored drivers")

    estimator = FareEstimator(settings.fare)
    lifecycle = RideLifecycleManager(
        rides,
        drivers,
        estimator,
        create_driver_matcher(settings.matching),
        ride_settings=settings.ride,
        rating_settings=settings.rating,
    )
    return ServiceContainer(
        rides=rides,
        drivers=drivers,
        payments=payments,
        estimator=estimator,
        lifecycle=lifecycle,
        payment_service=PaymentService(payments, rides, lifecycle),
        payment_methods=PaymentMethodService(saved_methods),
    )
