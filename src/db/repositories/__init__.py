"""Repository layer implementing the store interfaces on SQLite."""

from .driver_repository import DriverRepository
from .payment_method_repository import PaymentMethodRepository
from .payment_repository import PaymentRepository
from .ride_repository import RideRepository

__all__ = [
    "DriverRepository",
    "PaymentMethodRepository",
    "PaymentRepository",
    "RideRepository",
]
