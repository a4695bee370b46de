"""Ride lifecycle and payment services."""

from .lifecycle import RideLifecycleManager
from .payment_methods import PaymentMethodService
from .payments import PaymentService
from .summaries import (
    DriverSummary,
    PaidRideSummary,
    PaymentView,
    RatingReceipt,
    RideDetails,
    RideHistoryEntry,
    RideStatusSnapshot,
)

__all__ = [
    "DriverSummary",
    "PaidRideSummary",
    "PaymentMethodService",
    "PaymentService",
    "PaymentView",
    "RatingReceipt",
    "RideDetails",
    "RideHistoryEntry",
    "RideLifecycleManager",
    "RideStatusSnapshot",
]
