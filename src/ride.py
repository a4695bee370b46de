"""Ride state machine and models."""

from datetime import datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field

from core.exceptions import InvalidStateError
from utils.timestamps import utc_now


class RideType(str, Enum):
    """Service tiers a rider can request."""

    ECONOMY = "economy"
    STANDARD = "standard"
    PREMIUM = "premium"


class RideStatus(str, Enum):
    """Ride lifecycle states."""

    PENDING = "pending"
    DRIVER_ASSIGNED = "driver_assigned"
    PICKING_UP = "picking_up"
    ARRIVED = "arrived"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({RideStatus.COMPLETED, RideStatus.CANCELLED})

VALID_TRANSITIONS: dict[RideStatus, set[RideStatus]] = {
    RideStatus.PENDING: {RideStatus.DRIVER_ASSIGNED, RideStatus.CANCELLED},
    RideStatus.DRIVER_ASSIGNED: {RideStatus.PICKING_UP, RideStatus.CANCELLED},
    RideStatus.PICKING_UP: {RideStatus.ARRIVED, RideStatus.CANCELLED},
    RideStatus.ARRIVED: {RideStatus.IN_PROGRESS, RideStatus.CANCELLED},
    RideStatus.IN_PROGRESS: {RideStatus.COMPLETED, RideStatus.CANCELLED},
    RideStatus.COMPLETED: set(),
    RideStatus.CANCELLED: set(),
}


def check_transition(current: RideStatus, new_status: RideStatus) -> None:
    """Raise InvalidStateError unless current -> new_status is an edge of the graph."""
    if current.is_terminal:
        raise InvalidStateError(
            f"Cannot transition from terminal status {current.value}",
            details={"status": current.value, "requested": new_status.value},
        )
    if new_status not in VALID_TRANSITIONS[current]:
        raise InvalidStateError(
            f"Invalid transition from {current.value} to {new_status.value}",
            details={"status": current.value, "requested": new_status.value},
        )


class Location(BaseModel):
    """Geographic point with a human-readable address."""

    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    address: str = ""

    @property
    def coordinates(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)


class RidePayment(BaseModel):
    """Payment summary embedded on a completed ride."""

    payment_id: str
    amount: float
    method: str
    status: str


class RideRating(BaseModel):
    """Rating left by the rider after completion."""

    value: int = Field(ge=1, le=5)
    comment: str = ""
    created_at: datetime = Field(default_factory=utc_now)


def new_ride_id() -> str:
    return str(uuid4())


class Ride(BaseModel):
    """Ride record with state machine logic."""

    ride_id: str = Field(default_factory=new_ride_id)
    user_id: str
    driver_id: str | None = None
    origin: Location
    destination: Location
    ride_type: RideType
    estimated_price: float | None = Field(default=None, ge=0)
    estimated_time: float | None = Field(default=None, ge=0)
    distance_km: float | None = Field(default=None, ge=0)
    status: RideStatus = Field(default=RideStatus.PENDING)
    payment: RidePayment | None = None
    rating: RideRating | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def is_owned_by(self, user_id: str) -> bool:
        return self.user_id == user_id


IMMUTABLE_RIDE_FIELDS = frozenset({"ride_id", "user_id", "ride_type", "created_at"})
