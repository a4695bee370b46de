from fastapi import APIRouter, Request

from api.auth import CurrentUser
from api.dependencies import LifecycleDep
from api.models.rides import (
    CancelResponse,
    DriverResponse,
    RatingBody,
    RatingResponse,
    RideDetailsResponse,
    RideHistoryResponse,
    RideRequestBody,
    RideResponse,
    StatusBody,
    StatusResponse,
)
from api.rate_limit import RIDE_REQUEST_LIMIT, limiter

router = APIRouter()


# Fixed paths are declared before /{ride_id} so they are not captured by it.


@router.get("/drivers", response_model=list[DriverResponse])
def list_drivers(user_id: CurrentUser, lifecycle: LifecycleDep) -> list[DriverResponse]:
    """All drivers with their public details."""
    return [DriverResponse.from_driver(driver) for driver in lifecycle.list_drivers()]


@router.post("", status_code=201, response_model=RideResponse)
@limiter.limit(RIDE_REQUEST_LIMIT)
def request_ride(
    request: Request, body: RideRequestBody, user_id: CurrentUser, lifecycle: LifecycleDep
) -> RideResponse:
    """Request a ride for the authenticated user."""
    ride = lifecycle.request_ride(
        user_id,
        origin=body.origin,
        destination=body.destination,
        ride_type=body.ride_type,
        estimated_price=body.estimated_price,
        estimated_time=body.estimated_time,
    )
    return RideResponse.from_ride(ride)


@router.get("/history", response_model=list[RideHistoryResponse])
def get_ride_history(user_id: CurrentUser, lifecycle: LifecycleDep) -> list[RideHistoryResponse]:
    """The user's rides, most recent first."""
    return [RideHistoryResponse.from_entry(entry) for entry in lifecycle.get_ride_history(user_id)]


@router.api_route("/{ride_id}/driver", methods=["GET", "POST"], response_model=DriverResponse)
def assign_driver(ride_id: str, user_id: CurrentUser, lifecycle: LifecycleDep) -> DriverResponse:
    """Match an available driver to a pending ride."""
    return DriverResponse.from_driver(lifecycle.assign_driver(ride_id, user_id))


@router.get("/{ride_id}/status", response_model=StatusResponse)
def get_ride_status(ride_id: str, user_id: CurrentUser, lifecycle: LifecycleDep) -> StatusResponse:
    return StatusResponse.from_snapshot(lifecycle.get_ride_status(ride_id, user_id))


@router.put("/{ride_id}/status", response_model=StatusResponse)
def update_ride_status(
    ride_id: str, body: StatusBody, user_id: CurrentUser, lifecycle: LifecycleDep
) -> StatusResponse:
    return StatusResponse.from_snapshot(lifecycle.update_status(ride_id, user_id, body.status))


@router.post("/{ride_id}/cancel", response_model=CancelResponse)
def cancel_ride(ride_id: str, user_id: CurrentUser, lifecycle: LifecycleDep) -> CancelResponse:
    ride = lifecycle.cancel_ride(ride_id, user_id)
    return CancelResponse(message="Ride cancelled successfully", status=ride.status.value)


@router.get("/{ride_id}", response_model=RideDetailsResponse)
def get_ride_details(
    ride_id: str, user_id: CurrentUser, lifecycle: LifecycleDep
) -> RideDetailsResponse:
    """Ride with its itemised fare."""
    return RideDetailsResponse.from_details(lifecycle.get_ride_details(ride_id, user_id))


@router.post("/{ride_id}/rating", response_model=RatingResponse)
def submit_rating(
    ride_id: str, body: RatingBody, user_id: CurrentUser, lifecycle: LifecycleDep
) -> RatingResponse:
    receipt = lifecycle.submit_rating(
        ride_id,
        user_id,
        body.rating,
        comment=body.comment,
        driver_id=body.driver_id,
    )
    return RatingResponse(message=receipt.message, rating=receipt.rating.value)
