from api.models.base import CamelModel, PointBody


class TripBody(CamelModel):
    origin: PointBody | None = None
    destination: PointBody | None = None


class DirectionsBody(TripBody):
    waypoints: list[PointBody] = []


class TierFaresResponse(CamelModel):
    economy: str
    standard: str
    premium: str


class EstimateResponse(CamelModel):
    distance: str
    duration: int
    fare: TierFaresResponse


class DirectionsResponse(CamelModel):
    route: list[PointBody]
    distance: str
    duration: int


class AddressResponse(CamelModel):
    address: str
