from pydantic import BaseModel, Field

from geo.distance import planar_distance_km
from ride import Location, Ride, RideType
from settings import FareSettings


class TierFares(BaseModel):
    economy: float = Field(ge=0)
    standard: float = Field(ge=0)
    premium: float = Field(ge=0)

    def for_type(self, ride_type: RideType) -> float:
        value: float = getattr(self, ride_type.value)
        return value


class TripEstimate(BaseModel):
    """Distance, duration and per-tier price for a prospective trip."""

    distance_km: float = Field(ge=0)
    duration_min: int = Field(ge=0)
    fare: TierFares


class FareBreakdown(BaseModel):
    """Itemised fare for a stored ride."""

    base_fare: float = Field(ge=0)
    distance_km: float = Field(ge=0)
    distance_fare: float = Field(ge=0)
    time_fare: float = Field(ge=0)
    duration_min: float = Field(ge=0)
    fare: float = Field(ge=0)


class FareEstimator:
    """Computes price and time estimates from ride attributes.

    Pure and deterministic: no stored state beyond the configured constants,
    and no input makes it raise. Callers validate coordinates and estimates
    before calling in.
    """

    def __init__(self, settings: FareSettings | None = None) -> None:
        self._settings = settings or FareSettings()
        s = self._settings
        self._base_fees = {
            RideType.ECONOMY: s.economy_base_fee,
            RideType.STANDARD: s.standard_base_fee,
            RideType.PREMIUM: s.premium_base_fee,
        }
        self._per_km_rates = {
            RideType.ECONOMY: s.economy_per_km_rate,
            RideType.STANDARD: s.standard_per_km_rate,
            RideType.PREMIUM: s.premium_per_km_rate,
        }

    def base_fee(self, ride_type: RideType) -> float:
        return self._base_fees[ride_type]

    def distance_km(self, origin: Location, destination: Location) -> float:
        return planar_distance_km(
            *origin.coordinates,
            *destination.coordinates,
            self._settings.km_per_degree,
        )

    def duration_min(self, distance_km: float) -> int:
        return round(distance_km / self._settings.average_speed_km_per_min)

    def tier_price(self, ride_type: RideType, distance_km: float) -> float:
        return round(self._base_fees[ride_type] + distance_km * self._per_km_rates[ride_type], 2)

    def estimate_trip(self, origin: Location, destination: Location) -> TripEstimate:
        """Estimate a trip between two points.

        Reported distance is rounded to 0.1 km; tier prices use the
        unrounded distance.
        """
        distance = self.distance_km(origin, destination)
        return TripEstimate(
            distance_km=round(distance, 1),
            duration_min=self.duration_min(distance),
            fare=TierFares(
                economy=self.tier_price(RideType.ECONOMY, distance),
                standard=self.tier_price(RideType.STANDARD, distance),
                premium=self.tier_price(RideType.PREMIUM, distance),
            ),
        )

    def fare_breakdown(self, ride: Ride, use_stored_distance: bool = False) -> FareBreakdown:
        """Itemise the fare of a stored ride.

        By default the distance is derived from the estimated time
        (``estimated_time / minutes_per_breakdown_km``), independently of
        the coordinate-based distance. With ``use_stored_distance`` the
        ride's recorded ``distance_km`` is used when present.
        """
        s = self._settings
        minutes = ride.estimated_time or 0.0
        if use_stored_distance and ride.distance_km is not None:
            distance = ride.distance_km
        else:
            distance = minutes / s.minutes_per_breakdown_km

        base_fare = round(self._base_fees[ride.ride_type], 2)
        distance_fare = round(distance * s.breakdown_per_km_rate, 2)
        time_fare = round(minutes * s.per_minute_rate, 2)

        return FareBreakdown(
            base_fare=base_fare,
            distance_km=round(distance, 2),
            distance_fare=distance_fare,
            time_fare=time_fare,
            duration_min=minutes,
            fare=round(base_fare + distance_fare + time_fare, 2),
        )
