"""Storage interfaces and the in-memory backend."""

from .base import DriverStore, PaymentMethodStore, PaymentStore, RideStore
from .memory import (
    InMemoryDriverStore,
    InMemoryPaymentMethodStore,
    InMemoryPaymentStore,
    InMemoryRideStore,
)

__all__ = [
    "DriverStore",
    "InMemoryDriverStore",
    "InMemoryPaymentMethodStore",
    "InMemoryPaymentStore",
    "InMemoryRideStore",
    "PaymentMethodStore",
    "PaymentStore",
    "RideStore",
]
