"""Dict-backed stores for development and tests."""

import threading
from typing import Any

from core.exceptions import DuplicateIdError, NotFoundError
from driver import Driver
from payment import Payment, PaymentStatus, SavedPaymentMethod
from ride import Ride
from utils.timestamps import utc_now

from .base import check_driver_patch, check_ride_patch, merge_patch


class InMemoryRideStore:
    """Keyed ride collection.

    Thread-safe: all methods hold one lock. Python dicts keep insertion
    order, which ``find_by_user`` relies on.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._rides: dict[str, Ride] = {}

    def create(self, ride: Ride) -> Ride:
        with self._lock:
            if ride.ride_id in self._rides:
                raise DuplicateIdError(
                    f"Ride {ride.ride_id} already exists", details={"ride_id": ride.ride_id}
                )
            self._rides[ride.ride_id] = ride.model_copy(deep=True)
            return ride.model_copy(deep=True)

    def find_by_id(self, ride_id: str) -> Ride:
        with self._lock:
            ride = self._rides.get(ride_id)
            if ride is None:
                raise NotFoundError("Ride not found", details={"ride_id": ride_id})
            return ride.model_copy(deep=True)

    def find_by_user(self, user_id: str) -> list[Ride]:
        with self._lock:
            return [r.model_copy(deep=True) for r in self._rides.values() if r.user_id == user_id]

    def update(self, ride_id: str, patch: dict[str, Any]) -> Ride:
        check_ride_patch(patch)
        with self._lock:
            ride = self._rides.get(ride_id)
            if ride is None:
                raise NotFoundError("Ride not found", details={"ride_id": ride_id})
            updated = merge_patch(ride, patch)
            self._rides[ride_id] = updated
            return updated.model_copy(deep=True)

    def __len__(self) -> int:
        with self._lock:
            return len(self._rides)


class InMemoryDriverStore:
    def __init__(self, drivers: list[Driver] | None = None) -> None:
        self._lock = threading.Lock()
        self._drivers: dict[str, Driver] = {}
        for driver in drivers or []:
            self.add(driver)

    def add(self, driver: Driver) -> Driver:
        with self._lock:
            if driver.driver_id in self._drivers:
                raise DuplicateIdError(
                    f"Driver {driver.driver_id} already exists",
                    details={"driver_id": driver.driver_id},
                )
            self._drivers[driver.driver_id] = driver.model_copy(deep=True)
            return driver.model_copy(deep=True)

    def get(self, driver_id: str) -> Driver:
        with self._lock:
            driver = self._drivers.get(driver_id)
            if driver is None:
                raise NotFoundError("Driver not found", details={"driver_id": driver_id})
            return driver.model_copy(deep=True)

    def list_all(self) -> list[Driver]:
        with self._lock:
            return [d.model_copy(deep=True) for d in self._drivers.values()]

    def list_available(self) -> list[Driver]:
        with self._lock:
            return [d.model_copy(deep=True) for d in self._drivers.values() if d.is_available]

    def update(self, driver_id: str, patch: dict[str, Any]) -> Driver:
        check_driver_patch(patch)
        with self._lock:
            driver = self._drivers.get(driver_id)
            if driver is None:
                raise NotFoundError("Driver not found", details={"driver_id": driver_id})
            updated = merge_patch(driver, patch)
            self._drivers[driver_id] = updated
            return updated.model_copy(deep=True)


class InMemoryPaymentStore:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._payments: dict[str, Payment] = {}

    def create(self, payment: Payment) -> Payment:
        with self._lock:
            if payment.payment_id in self._payments:
                raise DuplicateIdError(
                    f"Payment {payment.payment_id} already exists",
                    details={"payment_id": payment.payment_id},
                )
            self._payments[payment.payment_id] = payment.model_copy(deep=True)
            return payment.model_copy(deep=True)

    def get(self, payment_id: str) -> Payment:
        with self._lock:
            payment = self._payments.get(payment_id)
            if payment is None:
                raise NotFoundError("Payment not found", details={"payment_id": payment_id})
            return payment.model_copy(deep=True)

    def find_by_user(self, user_id: str) -> list[Payment]:
        with self._lock:
            return [p.model_copy(deep=True) for p in self._payments.values() if p.user_id == user_id]

    def update_status(self, payment_id: str, status: PaymentStatus) -> Payment:
        with self._lock:
            payment = self._payments.get(payment_id)
            if payment is None:
                raise NotFoundError("Payment not found", details={"payment_id": payment_id})
            updated = payment.model_copy(update={"status": status, "updated_at": utc_now()})
            self._payments[payment_id] = updated
            return updated.model_copy(deep=True)


class InMemoryPaymentMethodStore:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._methods: dict[str, SavedPaymentMethod] = {}

    def add(self, method: SavedPaymentMethod) -> SavedPaymentMethod:
        with self._lock:
            if method.method_id in self._methods:
                raise DuplicateIdError(
                    f"Payment method {method.method_id} already exists",
                    details={"method_id": method.method_id},
                )
            self._methods[method.method_id] = method.model_copy(deep=True)
            return method.model_copy(deep=True)

    def list_for_user(self, user_id: str) -> list[SavedPaymentMethod]:
        with self._lock:
            return [m.model_copy(deep=True) for m in self._methods.values() if m.user_id == user_id]

    def delete(self, user_id: str, method_id: str) -> SavedPaymentMethod:
        with self._lock:
            method = self._methods.get(method_id)
            if method is None or method.user_id != user_id:
                raise NotFoundError("Payment method not found", details={"method_id": method_id})
            del self._methods[method_id]
            return method

    def set_default(self, user_id: str, method_id: str) -> None:
        with self._lock:
            method = self._methods.get(method_id)
            if method is None or method.user_id != user_id:
                raise NotFoundError("Payment method not found", details={"method_id": method_id})
            for key, existing in self._methods.items():
                if existing.user_id == user_id:
                    self._methods[key] = existing.model_copy(
                        update={"is_default": key == method_id}
                    )
