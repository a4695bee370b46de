"""Ride lifecycle: state machine, ownership checks and driver bookkeeping."""

import logging
from collections.abc import Iterator, Mapping
from contextlib import AbstractContextManager, contextmanager
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from core.exceptions import (
    AuthorizationError,
    InvalidStateError,
    NoDriverAvailableError,
    NotFoundError,
    ValidationError,
)
from core.locks import KeyedLocks
from driver import Driver
from fare import FareBreakdown, FareEstimator
from matching import DriverMatcher
from ride import Location, Ride, RideRating, RideStatus, RideType, check_transition
from ride_logging import log_ride_context
from settings import RatingSettings, RideSettings
from store import DriverStore, RideStore

from .summaries import (
    DriverSummary,
    RatingReceipt,
    RideDetails,
    RideHistoryEntry,
    RideStatusSnapshot,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def coerce_model(model: type[ModelT], value: Any, field: str) -> ModelT:
    """Build ``model`` from a mapping or attribute-bearing object."""
    if isinstance(value, model):
        return value
    try:
        if isinstance(value, Mapping):
            return model.model_validate(dict(value))
        return model.model_validate(value, from_attributes=True)
    except PydanticValidationError as e:
        raise ValidationError(
            f"Invalid {field}",
            details={"field": field, "errors": e.errors(include_url=False, include_context=False)},
        ) from e


def coerce_enum(enum_type: type[RideType] | type[RideStatus], value: Any, field: str) -> Any:
    try:
        return enum_type(value)
    except ValueError as e:
        allowed = [member.value for member in enum_type]
        raise ValidationError(
            f"Invalid {field}: {value!r}",
            details={"field": field, "allowed": allowed},
        ) from e


def coerce_estimate(value: Any, field: str, positive: bool = False) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {field}", details={"field": field})
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid {field}", details={"field": field}) from e
    if number < 0:
        raise ValidationError(f"{field} must not be negative", details={"field": field})
    if positive and number == 0:
        raise ValidationError(f"{field} must be positive", details={"field": field})
    return number


def coerce_rating_value(value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError("Rating must be a whole number from 1 to 5")
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError("Rating must be a whole number from 1 to 5") from e
    if not number.is_integer() or not 1 <= number <= 5:
        raise ValidationError(
            "Rating must be a whole number from 1 to 5", details={"rating": value}
        )
    return int(number)


class RideLifecycleManager:
    """Owns every mutation of a ride after it is requested.

    Thread-safe: mutations of one ride are serialised with a per-ride lock,
    and driver availability flips and rating updates with a per-driver lock.
    Operations on different rides run concurrently.
    """

    def __init__(
        self,
        rides: RideStore,
        drivers: DriverStore,
        estimator: FareEstimator,
        matcher: DriverMatcher,
        ride_settings: RideSettings | None = None,
        rating_settings: RatingSettings | None = None,
    ) -> None:
        self._rides = rides
        self._drivers = drivers
        self._estimator = estimator
        self._matcher = matcher
        self._settings = ride_settings or RideSettings()
        self._rating = rating_settings or RatingSettings()
        self._ride_locks = KeyedLocks()
        self._driver_locks = KeyedLocks()

    @property
    def strict(self) -> bool:
        return self._settings.strict_transitions

    # --- Ownership and locking ---

    def ride_lock(self, ride_id: str) -> AbstractContextManager[None]:
        return self._ride_locks.hold(ride_id)

    def resolve_owned(self, ride_id: str, user_id: str) -> Ride:
        """Load a ride and verify it belongs to ``user_id``."""
        ride = self._rides.find_by_id(ride_id)
        if not ride.is_owned_by(user_id):
            logger.warning("User %s denied access to ride %s", user_id, ride_id)
            raise AuthorizationError(
                "Ride belongs to another user", details={"ride_id": ride_id}
            )
        return ride

    @contextmanager
    def locked_ride(self, ride_id: str, user_id: str) -> Iterator[Ride]:
        """Hold the ride lock and yield the caller's ride."""
        with self._ride_locks.hold(ride_id):
            ride = self.resolve_owned(ride_id, user_id)
            with log_ride_context(ride_id, user_id=user_id):
                yield ride

    # --- Operations ---

    def request_ride(
        self,
        user_id: str,
        origin: Any,
        destination: Any,
        ride_type: Any,
        estimated_price: Any = None,
        estimated_time: Any = None,
    ) -> Ride:
        """Create a pending ride.

        Missing estimates are filled from the fare estimator. The
        straight-line distance is stored on the ride either way.
        """
        if not user_id:
            raise ValidationError("Authenticated user is required")
        missing = [
            name
            for name, value in (
                ("origin", origin),
                ("destination", destination),
                ("ride_type", ride_type),
            )
            if value is None or value == ""
        ]
        if missing:
            raise ValidationError(
                "Origin, destination, and ride type are required",
                details={"missing": missing},
            )

        origin_location = coerce_model(Location, origin, "origin")
        destination_location = coerce_model(Location, destination, "destination")
        kind: RideType = coerce_enum(RideType, ride_type, "ride_type")
        price = coerce_estimate(estimated_price, "estimated_price")
        minutes = coerce_estimate(estimated_time, "estimated_time", positive=True)

        distance = self._estimator.distance_km(origin_location, destination_location)
        if distance <= 0:
            raise ValidationError(
                "Origin and destination must be different locations",
                details={
                    "origin": origin_location.coordinates,
                    "destination": destination_location.coordinates,
                },
            )
        ride = Ride(
            user_id=user_id,
            origin=origin_location,
            destination=destination_location,
            ride_type=kind,
            estimated_price=price if price is not None else self._estimator.tier_price(kind, distance),
            estimated_time=minutes if minutes is not None else self._estimator.duration_min(distance),
            distance_km=round(distance, 2),
        )

        with log_ride_context(ride.ride_id, user_id=user_id):
            created = self._rides.create(ride)
            logger.info(
                "Ride %s requested (%s, %.2f km)", created.ride_id, kind.value, distance
            )
        return created

    def assign_driver(self, ride_id: str, requesting_user_id: str) -> Driver:
        with self.locked_ride(ride_id, requesting_user_id) as ride:
            if self.strict and ride.status != RideStatus.PENDING:
                raise InvalidStateError(
                    f"Cannot assign a driver to a ride in status {ride.status.value}",
                    details={"ride_id": ride_id, "status": ride.status.value},
                )

            driver = self._claim_driver(ride)
            try:
                self._rides.update(
                    ride_id,
                    {"driver_id": driver.driver_id, "status": RideStatus.DRIVER_ASSIGNED},
                )
            except Exception:
                self.release_driver(driver.driver_id)
                raise

            if ride.driver_id and ride.driver_id != driver.driver_id:
                self.release_driver(ride.driver_id)

            logger.info("Driver %s assigned to ride %s", driver.driver_id, ride_id)
            return driver

    def get_ride_status(self, ride_id: str, requesting_user_id: str) -> RideStatusSnapshot:
        ride = self.resolve_owned(ride_id, requesting_user_id)
        return RideStatusSnapshot(status=ride.status, updated_at=ride.updated_at)

    def update_status(
        self, ride_id: str, requesting_user_id: str, new_status: Any
    ) -> RideStatusSnapshot:
        if new_status is None or new_status == "":
            raise ValidationError("Status is required")
        status: RideStatus = coerce_enum(RideStatus, new_status, "status")

        with self.locked_ride(ride_id, requesting_user_id) as ride:
            if self.strict:
                if status == RideStatus.DRIVER_ASSIGNED:
                    raise InvalidStateError(
                        "Drivers are assigned through the driver endpoint",
                        details={"ride_id": ride_id, "status": ride.status.value},
                    )
                if status == RideStatus.COMPLETED:
                    raise InvalidStateError(
                        "Rides complete when payment is processed",
                        details={"ride_id": ride_id, "status": ride.status.value},
                    )
                check_transition(ride.status, status)

            updated = self._rides.update(ride_id, {"status": status})
            if status.is_terminal and not ride.status.is_terminal and ride.driver_id:
                self.release_driver(ride.driver_id)

            logger.info("Ride %s status %s -> %s", ride_id, ride.status.value, status.value)
            return RideStatusSnapshot(status=updated.status, updated_at=updated.updated_at)

    def cancel_ride(self, ride_id: str, requesting_user_id: str) -> Ride:
        with self.locked_ride(ride_id, requesting_user_id) as ride:
            if ride.status == RideStatus.COMPLETED:
                raise InvalidStateError(
                    "Cannot cancel a completed ride", details={"ride_id": ride_id}
                )
            if ride.status == RideStatus.CANCELLED:
                return ride

            updated = self._rides.update(ride_id, {"status": RideStatus.CANCELLED})
            if ride.driver_id:
                self.release_driver(ride.driver_id)

            logger.info("Ride %s cancelled from %s", ride_id, ride.status.value)
            return updated

    def get_ride_details(self, ride_id: str, requesting_user_id: str) -> RideDetails:
        ride = self.resolve_owned(ride_id, requesting_user_id)
        if ride.estimated_time is None or ride.estimated_time <= 0:
            raise ValidationError(
                "Ride has no usable time estimate", details={"ride_id": ride_id}
            )
        return RideDetails(
            ride=ride,
            breakdown=self._breakdown(ride),
            payment_method=ride.payment.method if ride.payment else "card",
        )

    def submit_rating(
        self,
        ride_id: str,
        requesting_user_id: str,
        rating_value: Any,
        comment: str | None = None,
        driver_id: str | None = None,
    ) -> RatingReceipt:
        if rating_value is None or not driver_id:
            raise ValidationError("Rating and driver ID are required")
        value = coerce_rating_value(rating_value)

        with self.locked_ride(ride_id, requesting_user_id) as ride:
            if ride.driver_id is not None and ride.driver_id != driver_id:
                raise ValidationError(
                    "Driver did not serve this ride",
                    details={"ride_id": ride_id, "driver_id": driver_id},
                )
            if self.strict:
                if ride.status != RideStatus.COMPLETED or ride.payment is None:
                    raise InvalidStateError(
                        "Only completed and paid rides can be rated",
                        details={"ride_id": ride_id, "status": ride.status.value},
                    )
                if ride.rating is not None:
                    raise InvalidStateError("Ride already rated", details={"ride_id": ride_id})

            self._drivers.get(driver_id)
            rating = RideRating(value=value, comment=comment or "")
            self._rides.update(ride_id, {"rating": rating})
            driver = self._record_driver_rating(driver_id, value)

            logger.info(
                "Ride %s rated %d, driver %s now %.3f", ride_id, value, driver_id, driver.rating
            )
            return RatingReceipt(message="Rating submitted successfully", rating=rating)

    def get_ride_history(self, user_id: str) -> list[RideHistoryEntry]:
        """All of the user's rides, most recent first."""
        entries = []
        drivers: dict[str, Driver | None] = {}
        for ride in self._rides.find_by_user(user_id):
            driver = None
            if ride.driver_id:
                if ride.driver_id not in drivers:
                    drivers[ride.driver_id] = self._find_driver(ride.driver_id)
                driver = drivers[ride.driver_id]

            breakdown = self._breakdown(ride)
            entries.append(
                RideHistoryEntry(
                    id=ride.ride_id,
                    origin=ride.origin,
                    destination=ride.destination,
                    date=ride.created_at,
                    status=ride.status,
                    ride_type=ride.ride_type,
                    distance=breakdown.distance_km,
                    duration=ride.estimated_time,
                    fare=breakdown.fare,
                    driver=DriverSummary.from_driver(driver) if driver else None,
                )
            )
        entries.sort(key=lambda entry: entry.date, reverse=True)
        return entries

    def list_drivers(self) -> list[Driver]:
        return self._drivers.list_all()

    # --- Driver bookkeeping ---

    def release_driver(self, driver_id: str) -> None:
        """Mark a driver available again once their ride ends."""
        with self._driver_locks.hold(driver_id):
            try:
                self._drivers.update(driver_id, {"is_available": True})
            except NotFoundError:
                logger.warning("Cannot release unknown driver %s", driver_id)

    def _claim_driver(self, ride: Ride) -> Driver:
        """Select an available driver and flip them to unavailable.

        A candidate claimed by a concurrent assignment between listing and
        locking is skipped and selection runs again without it.
        """
        excluded: set[str] = set()
        while True:
            candidates = [
                d for d in self._drivers.list_available() if d.driver_id not in excluded
            ]
            chosen = self._matcher.select(ride, candidates)
            if chosen is None:
                logger.warning("No driver available for ride %s", ride.ride_id)
                raise NoDriverAvailableError(
                    "No drivers available",
                    details={"ride_id": ride.ride_id, "candidates": len(candidates)},
                )
            with self._driver_locks.hold(chosen.driver_id):
                current = self._drivers.get(chosen.driver_id)
                if current.is_available:
                    return self._drivers.update(chosen.driver_id, {"is_available": False})
            excluded.add(chosen.driver_id)

    def _record_driver_rating(self, driver_id: str, value: int) -> Driver:
        with self._driver_locks.hold(driver_id):
            driver = self._drivers.get(driver_id)
            count = driver.rating_count + 1
            total = driver.rating_total + value
            if self._rating.mode == "running_mean":
                average = total / count
            else:
                weight = self._rating.prior_weight
                current = driver.rating or self._rating.default_driver_rating
                average = (current * weight + value) / (weight + 1)
            return self._drivers.update(
                driver_id,
                {"rating": average, "rating_count": count, "rating_total": total},
            )

    def _find_driver(self, driver_id: str) -> Driver | None:
        try:
            return self._drivers.get(driver_id)
        except NotFoundError:
            logger.warning("Ride references unknown driver %s", driver_id)
            return None

    def _breakdown(self, ride: Ride) -> FareBreakdown:
        return self._estimator.fare_breakdown(
            ride,
            use_stored_distance=self._settings.breakdown_distance_source == "stored",
        )
