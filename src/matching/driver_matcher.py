"""Driver selection strategies."""

import logging
import random
from collections.abc import Sequence
from typing import Protocol

from driver import Driver
from geo.distance import haversine_distance_km
from ride import Ride
from settings import MatchingSettings

logger = logging.getLogger(__name__)


class DriverMatcher(Protocol):
    def select(self, ride: Ride, candidates: Sequence[Driver]) -> Driver | None: ...


class RandomDriverMatcher:
    """Uniform random choice among candidates.

    Stand-in for a real dispatch algorithm; pass a seed for reproducible
    assignment in tests.
    """

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def select(self, ride: Ride, candidates: Sequence[Driver]) -> Driver | None:
        if not candidates:
            return None
        return self._rng.choice(list(candidates))


class NearestDriverMatcher:
    """Closest candidate to the pickup point within a radius."""

    def __init__(self, max_distance_km: float = 10.0) -> None:
        self._max_distance_km = max_distance_km

    def rank(self, ride: Ride, candidates: Sequence[Driver]) -> list[tuple[Driver, float]]:
        """Candidates within range with their pickup distance, nearest first."""
        ranked = []
        for driver in candidates:
            distance = haversine_distance_km(
                *ride.origin.coordinates,
                driver.location.latitude,
                driver.location.longitude,
            )
            if distance <= self._max_distance_km:
                ranked.append((driver, distance))
        ranked.sort(key=lambda pair: (pair[1], pair[0].driver_id))
        return ranked

    def select(self, ride: Ride, candidates: Sequence[Driver]) -> Driver | None:
        ranked = self.rank(ride, candidates)
        if not ranked:
            logger.debug(
                "No driver within %.1f km of ride %s", self._max_distance_km, ride.ride_id
            )
            return None
        return ranked[0][0]


def create_driver_matcher(settings: MatchingSettings) -> DriverMatcher:
    if settings.strategy == "nearest":
        return NearestDriverMatcher(max_distance_km=settings.max_pickup_distance_km)
    return RandomDriverMatcher(seed=settings.random_seed)
