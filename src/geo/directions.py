"""Straight-line trip directions and coordinate formatting."""

from collections.abc import Sequence

from pydantic import BaseModel, Field

from .distance import KM_PER_DEGREE, planar_distance_km

AVERAGE_SPEED_KM_PER_MIN = 0.5


class RoutePoint(BaseModel):
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)


class Directions(BaseModel):
    route: list[RoutePoint]
    distance_km: float = Field(ge=0)
    duration_min: int = Field(ge=0)


def get_directions(
    origin: RoutePoint,
    destination: RoutePoint,
    waypoints: Sequence[RoutePoint] = (),
    km_per_degree: float = KM_PER_DEGREE,
    speed_km_per_min: float = AVERAGE_SPEED_KM_PER_MIN,
) -> Directions:
    """Route through the waypoints in order with straight legs.

    Distance is the sum of planar leg lengths rounded to 0.1 km; duration
    assumes a constant average speed.
    """
    route = [
        RoutePoint(latitude=p.latitude, longitude=p.longitude)
        for p in (origin, *waypoints, destination)
    ]
    distance = sum(
        planar_distance_km(a.latitude, a.longitude, b.latitude, b.longitude, km_per_degree)
        for a, b in zip(route, route[1:], strict=False)
    )
    return Directions(
        route=route,
        distance_km=round(distance, 1),
        duration_min=round(distance / speed_km_per_min),
    )


def reverse_geocode(latitude: float, longitude: float) -> str:
    """Placeholder address for a coordinate pair until a geocoder is wired in."""
    return f"Location ({latitude:.4f}, {longitude:.4f})"
