from datetime import datetime

from pydantic import BaseModel, Field

from utils.timestamps import utc_now


class Vehicle(BaseModel):
    model: str
    color: str
    plate: str


class Coordinates(BaseModel):
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)


class Driver(BaseModel):
    """Driver reference record.

    ``rating`` is the published average. ``rating_count`` and
    ``rating_total`` keep the raw history so a true running mean can be
    derived regardless of how the published value was smoothed.
    """

    driver_id: str
    name: str
    phone: str = ""
    photo: str = ""
    car: Vehicle
    location: Coordinates
    rating: float = Field(default=5.0, ge=0.0, le=5.0)
    rating_count: int = Field(default=0, ge=0)
    rating_total: float = Field(default=0.0, ge=0.0)
    is_available: bool = True
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def public_view(self) -> dict[str, object]:
        """Fields safe to hand to riders."""
        return {
            "id": self.driver_id,
            "name": self.name,
            "rating": self.rating,
            "photo": self.photo,
            "car": self.car.model_dump(),
            "location": self.location.model_dump(),
        }
