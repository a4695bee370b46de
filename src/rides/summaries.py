"""Read models assembled by the lifecycle and payment services."""

from datetime import datetime

from pydantic import BaseModel

from driver import Driver
from fare import FareBreakdown
from payment import Payment
from ride import Location, Ride, RideRating, RideStatus, RideType


class DriverSummary(BaseModel):
    id: str
    name: str
    rating: float
    photo: str

    @classmethod
    def from_driver(cls, driver: Driver) -> "DriverSummary":
        return cls(id=driver.driver_id, name=driver.name, rating=driver.rating, photo=driver.photo)


class RideStatusSnapshot(BaseModel):
    status: RideStatus
    updated_at: datetime


class RideDetails(BaseModel):
    """A ride merged with its itemised fare."""

    ride: Ride
    breakdown: FareBreakdown
    tip_amount: float = 0.0
    payment_method: str = "card"


class RideHistoryEntry(BaseModel):
    id: str
    origin: Location
    destination: Location
    date: datetime
    status: RideStatus
    ride_type: RideType
    distance: float
    duration: float | None
    fare: float
    driver: DriverSummary | None = None


class RatingReceipt(BaseModel):
    message: str
    rating: RideRating


class PaidRideSummary(BaseModel):
    ride_id: str
    origin: Location
    destination: Location
    status: RideStatus
    created_at: datetime

    @classmethod
    def from_ride(cls, ride: Ride) -> "PaidRideSummary":
        return cls(
            ride_id=ride.ride_id,
            origin=ride.origin,
            destination=ride.destination,
            status=ride.status,
            created_at=ride.created_at,
        )


class PaymentView(BaseModel):
    """Payment joined with a summary of the ride it paid for."""

    payment: Payment
    ride: PaidRideSummary | None = None
