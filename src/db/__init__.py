"""SQLite persistence for rides, drivers and payments."""

from .database import SCHEMA_VERSION, init_database
from .schema import DriverRow, PaymentMethodRow, PaymentRow, RideRow, ServiceMetadata
from .session import session_scope

__all__ = [
    "SCHEMA_VERSION",
    "DriverRow",
    "PaymentMethodRow",
    "PaymentRow",
    "RideRow",
    "ServiceMetadata",
    "init_database",
    "session_scope",
]
