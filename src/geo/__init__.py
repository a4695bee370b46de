from .directions import Directions, get_directions, reverse_geocode
from .distance import haversine_distance_km, planar_distance_km

__all__ = [
    "Directions",
    "get_directions",
    "haversine_distance_km",
    "planar_distance_km",
    "reverse_geocode",
]
