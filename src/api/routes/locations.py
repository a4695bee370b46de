from fastapi import APIRouter

from api.dependencies import EstimatorDep, SettingsDep
from api.models.base import PointBody, money, one_decimal
from api.models.locations import (
    AddressResponse,
    DirectionsBody,
    DirectionsResponse,
    EstimateResponse,
    TierFaresResponse,
    TripBody,
)
from core.exceptions import ValidationError
from geo import get_directions, reverse_geocode
from geo.directions import RoutePoint
from ride import Location

router = APIRouter()


def _require_endpoints(body: TripBody) -> tuple[PointBody, PointBody]:
    if body.origin is None or body.destination is None:
        raise ValidationError("Origin and destination are required")
    return body.origin, body.destination


@router.post("/estimate", response_model=EstimateResponse)
def estimate_trip(body: TripBody, estimator: EstimatorDep) -> EstimateResponse:
    """Straight-line distance, duration and per-tier prices."""
    origin, destination = _require_endpoints(body)
    estimate = estimator.estimate_trip(
        Location(latitude=origin.latitude, longitude=origin.longitude),
        Location(latitude=destination.latitude, longitude=destination.longitude),
    )
    return EstimateResponse(
        distance=one_decimal(estimate.distance_km),
        duration=estimate.duration_min,
        fare=TierFaresResponse(
            economy=money(estimate.fare.economy),
            standard=money(estimate.fare.standard),
            premium=money(estimate.fare.premium),
        ),
    )


@router.post("/directions", response_model=DirectionsResponse)
def directions(body: DirectionsBody, settings: SettingsDep) -> DirectionsResponse:
    origin, destination = _require_endpoints(body)
    result = get_directions(
        RoutePoint(latitude=origin.latitude, longitude=origin.longitude),
        RoutePoint(latitude=destination.latitude, longitude=destination.longitude),
        waypoints=[RoutePoint(latitude=p.latitude, longitude=p.longitude) for p in body.waypoints],
        km_per_degree=settings.fare.km_per_degree,
        speed_km_per_min=settings.fare.average_speed_km_per_min,
    )
    return DirectionsResponse(
        route=[PointBody(latitude=p.latitude, longitude=p.longitude) for p in result.route],
        distance=one_decimal(result.distance_km),
        duration=result.duration_min,
    )


@router.get("/reverse-geocode", response_model=AddressResponse)
def reverse_geocode_coordinates(
    latitude: float | None = None, longitude: float | None = None
) -> AddressResponse:
    if latitude is None or longitude is None:
        raise ValidationError("Latitude and longitude are required")
    if not -90.0 <= latitude <= 90.0 or not -180.0 <= longitude <= 180.0:
        raise ValidationError(
            "Coordinates out of range",
            details={"latitude": latitude, "longitude": longitude},
        )
    return AddressResponse(address=reverse_geocode(latitude, longitude))
