from datetime import datetime

from api.models.base import CamelModel, LocationBody, PointBody, money, one_decimal
from driver import Driver
from ride import Location, Ride
from rides import RideDetails, RideHistoryEntry, RideStatusSnapshot


def location_out(location: Location) -> LocationBody:
    return LocationBody(
        latitude=location.latitude, longitude=location.longitude, address=location.address
    )


class RideRequestBody(CamelModel):
    origin: LocationBody | None = None
    destination: LocationBody | None = None
    ride_type: str | None = None
    estimated_price: float | None = None
    estimated_time: float | None = None


class RideResponse(CamelModel):
    ride_id: str
    user_id: str
    driver_id: str | None
    origin: LocationBody
    destination: LocationBody
    ride_type: str
    estimated_price: float | None
    estimated_time: float | None
    distance_km: float | None
    status: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_ride(cls, ride: Ride) -> "RideResponse":
        return cls(
            ride_id=ride.ride_id,
            user_id=ride.user_id,
            driver_id=ride.driver_id,
            origin=location_out(ride.origin),
            destination=location_out(ride.destination),
            ride_type=ride.ride_type.value,
            estimated_price=ride.estimated_price,
            estimated_time=ride.estimated_time,
            distance_km=ride.distance_km,
            status=ride.status.value,
            created_at=ride.created_at,
            updated_at=ride.updated_at,
        )


class VehicleResponse(CamelModel):
    model: str
    color: str
    plate: str


class DriverResponse(CamelModel):
    id: str
    name: str
    rating: float
    photo: str
    car: VehicleResponse
    location: PointBody

    @classmethod
    def from_driver(cls, driver: Driver) -> "DriverResponse":
        return cls.model_validate(driver.public_view())


class StatusBody(CamelModel):
    status: str | None = None


class StatusResponse(CamelModel):
    status: str
    updated_at: datetime

    @classmethod
    def from_snapshot(cls, snapshot: RideStatusSnapshot) -> "StatusResponse":
        return cls(status=snapshot.status.value, updated_at=snapshot.updated_at)


class CancelResponse(CamelModel):
    message: str
    status: str


class RideDetailsResponse(CamelModel):
    """Ride details with monetary amounts as two-decimal strings."""

    ride_id: str
    status: str
    origin: LocationBody
    destination: LocationBody
    ride_type: str
    driver_id: str | None
    created_at: datetime
    updated_at: datetime
    base_fare: str
    distance_fare: str
    time_fare: str
    fare: str
    tip_amount: float
    distance: str
    duration: float | None
    payment_method: str

    @classmethod
    def from_details(cls, details: RideDetails) -> "RideDetailsResponse":
        ride, breakdown = details.ride, details.breakdown
        return cls(
            ride_id=ride.ride_id,
            status=ride.status.value,
            origin=location_out(ride.origin),
            destination=location_out(ride.destination),
            ride_type=ride.ride_type.value,
            driver_id=ride.driver_id,
            created_at=ride.created_at,
            updated_at=ride.updated_at,
            base_fare=money(breakdown.base_fare),
            distance_fare=money(breakdown.distance_fare),
            time_fare=money(breakdown.time_fare),
            fare=money(breakdown.fare),
            tip_amount=details.tip_amount,
            distance=one_decimal(breakdown.distance_km),
            duration=ride.estimated_time,
            payment_method=details.payment_method,
        )


class RatingBody(CamelModel):
    rating: float | None = None
    comment: str | None = None
    driver_id: str | None = None


class RatingResponse(CamelModel):
    message: str
    rating: int


class HistoryDriver(CamelModel):
    id: str
    name: str
    rating: float
    photo: str


class RideHistoryResponse(CamelModel):
    id: str
    origin: LocationBody
    destination: LocationBody
    date: datetime
    status: str
    ride_type: str
    distance: str
    duration: float | None
    fare: str
    driver: HistoryDriver | None

    @classmethod
    def from_entry(cls, entry: RideHistoryEntry) -> "RideHistoryResponse":
        return cls(
            id=entry.id,
            origin=location_out(entry.origin),
            destination=location_out(entry.destination),
            date=entry.date,
            status=entry.status.value,
            ride_type=entry.ride_type.value,
            distance=one_decimal(entry.distance),
            duration=entry.duration,
            fare=money(entry.fare),
            driver=HistoryDriver.model_validate(entry.driver.model_dump()) if entry.driver else None,
        )
