from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RideSettings(BaseSettings):
    strict_transitions: bool = Field(
        default=True,
        description="Enforce the ride status graph. False keeps the permissive overwrite behaviour.",
    )
    breakdown_distance_source: Literal["duration", "stored"] = Field(
        default="duration",
        description="duration: derive breakdown distance from estimated time; "
        "stored: use the straight-line distance recorded at request time",
    )

    model_config = SettingsConfigDict(env_prefix="RIDE_")


class FareSettings(BaseSettings):
    """Fare tiers and estimation constants."""

    economy_base_fee: float = Field(default=5.00, ge=0.0)
    standard_base_fee: float = Field(default=7.50, ge=0.0)
    premium_base_fee: float = Field(default=10.00, ge=0.0)
    economy_per_km_rate: float = Field(default=1.5, ge=0.0)
    standard_per_km_rate: float = Field(default=2.5, ge=0.0)
    premium_per_km_rate: float = Field(default=3.5, ge=0.0)
    breakdown_per_km_rate: float = Field(default=2.5, ge=0.0)
    per_minute_rate: float = Field(default=0.25, ge=0.0)
    minutes_per_breakdown_km: float = Field(
        default=3.0,
        gt=0.0,
        description="Estimated minutes divided by this gives the breakdown distance",
    )
    km_per_degree: float = Field(default=111.0, gt=0.0)
    average_speed_km_per_min: float = Field(
        default=0.5,
        gt=0.0,
        description="0.5 km/min = 30 km/h",
    )

    model_config = SettingsConfigDict(env_prefix="FARE_")

    @model_validator(mode="after")
    def validate_tiers_monotonic(self) -> "FareSettings":
        # Strictly rising base fees with non-decreasing rates keep every
        # tier dearer than the one below it at any distance
        bases = (self.economy_base_fee, self.standard_base_fee, self.premium_base_fee)
        rates = (self.economy_per_km_rate, self.standard_per_km_rate, self.premium_per_km_rate)
        if not (bases[0] < bases[1] < bases[2]) or list(rates) != sorted(rates):
            raise ValueError(
                f"Fare tiers must rise from economy to premium: base fees strictly, "
                f"per-km rates never decreasing (base fees: {bases}, per-km rates: {rates})"
            )
        return self


class RatingSettings(BaseSettings):
    mode: Literal["smoothed", "running_mean"] = "smoothed"
    prior_weight: int = Field(
        default=10,
        ge=0,
        description="Weight of the current average when blending in a new rating (smoothed mode)",
    )
    default_driver_rating: float = Field(default=5.0, ge=1.0, le=5.0)

    model_config = SettingsConfigDict(env_prefix="RATING_")


class MatchingSettings(BaseSettings):
    """Driver selection configuration."""

    strategy: Literal["random", "nearest"] = "random"
    max_pickup_distance_km: float = Field(default=10.0, gt=0.0)
    random_seed: int | None = None

    model_config = SettingsConfigDict(env_prefix="MATCHING_")


# Drivers shipped with the project in data/drivers.json
DEFAULT_DRIVERS_SEED_PATH = str(
    Path(__file__).resolve().parent.parent / "data" / "drivers.json"
)


class StorageSettings(BaseSettings):
    backend: Literal["memory", "sqlite"] = "memory"
    sqlite_path: str = "data/rides.db"
    drivers_seed_path: str | None = Field(
        default=DEFAULT_DRIVERS_SEED_PATH,
        description="JSON file with a list of drivers loaded at startup; empty disables seeding",
    )

    model_config = SettingsConfigDict(env_prefix="STORAGE_")


class AuthSettings(BaseSettings):
    sessions: str = Field(
        default="",
        description="Comma-separated token:user_id pairs accepted as bearer sessions",
    )

    model_config = SettingsConfigDict(env_prefix="AUTH_")

    @field_validator("sessions")
    @classmethod
    def validate_sessions(cls, v: str) -> str:
        for pair in filter(None, (p.strip() for p in v.split(","))):
            token, sep, user_id = pair.partition(":")
            if not sep or not token.strip() or not user_id.strip():
                raise ValueError(f"Session entry must look like token:user_id, got {pair!r}")
        return v

    def session_map(self) -> dict[str, str]:
        sessions: dict[str, str] = {}
        for pair in filter(None, (p.strip() for p in self.sessions.split(","))):
            token, _, user_id = pair.partition(":")
            sessions[token.strip()] = user_id.strip()
        return sessions


class APISettings(BaseSettings):
    key: str = ""
    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)

    model_config = SettingsConfigDict(env_prefix="API_")


class CORSSettings(BaseSettings):
    origins: str = "http://localhost:8081,http://localhost:19006"

    model_config = SettingsConfigDict(env_prefix="CORS_")


class LogSettings(BaseSettings):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["text", "json"] = "text"
    environment: str = "development"

    model_config = SettingsConfigDict(env_prefix="LOG_")


class Settings(BaseSettings):
    ride: RideSettings = Field(default_factory=RideSettings)
    fare: FareSettings = Field(default_factory=FareSettings)
    rating: RatingSettings = Field(default_factory=RatingSettings)
    matching: MatchingSettings = Field(default_factory=MatchingSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    api: APISettings = Field(default_factory=APISettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        case_sensitive=False,
    )


def get_settings() -> Settings:
    """Load and validate settings from environment variables."""
    return Settings()
