from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Serializes with camelCase keys; accepts either casing on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PointBody(CamelModel):
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)


class LocationBody(CamelModel):
    # Bounds are checked by the lifecycle manager so they surface as 400s.
    latitude: float
    longitude: float
    address: str = ""


def money(value: float) -> str:
    return f"{value:.2f}"


def one_decimal(value: float) -> str:
    return f"{value:.1f}"
