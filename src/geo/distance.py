"""Geographic distance calculations.

Two approximations live here: the flat-earth planar distance used for
rider-facing fare and time estimates, and the Haversine great-circle
distance used to rank drivers by proximity.
"""

from math import atan2, cos, radians, sin, sqrt

EARTH_RADIUS_KM = 6_371.0

# Flat-earth conversion used for display estimates, not billing
KM_PER_DEGREE = 111.0


def planar_distance_km(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
    km_per_degree: float = KM_PER_DEGREE,
) -> float:
    """Straight-line distance treating degrees as a flat grid.

    ``sqrt(dlat^2 + dlon^2) * km_per_degree``. Ignores the longitude
    shrink away from the equator, so it over-estimates east-west legs.
    """
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    return sqrt(dlat * dlat + dlon * dlon) * km_per_degree


def haversine_distance_km(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
) -> float:
    """Calculate the great-circle distance between two points in kilometers.

    Args:
        lat1: Latitude of first point in degrees
        lon1: Longitude of first point in degrees
        lat2: Latitude of second point in degrees
        lon2: Longitude of second point in degrees

    Returns:
        Distance between the two points in kilometers
    """
    lat1, lon1, lat2, lon2 = map(radians, [lat1, lon1, lat2, lon2])
    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    c = 2 * atan2(sqrt(a), sqrt(1 - a))

    return EARTH_RADIUS_KM * c
