"""Dashboard configuration pulled from environment variables via pydantic."""
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="config")

# Delhi Technological University, Rohini, New Delhi
DTU_LATITUDE = 28.748635
DTU_LONGITUDE = 77.119972


class Settings(BaseSettings):
    """Environment-driven configuration for the campus weather dashboard."""
    model_config = SettingsConfigDict(env_prefix="DASHBOARD_", extra="ignore")

    location_name: str = "Delhi Technological University"
    location_subtitle: str = "Rohini, New Delhi"
    latitude: float = DTU_LATITUDE
    longitude: float = DTU_LONGITUDE
    timezone: str = "auto"
    forecast_days: int = 7
    hourly_points: int = 24
    refresh_interval_seconds: float = 300.0
    request_timeout_seconds: float = 10.0
    data_source: str = "open_meteo"  # options: open_meteo
    weather_url: str = "https://api.open-meteo.com/v1/forecast"
    air_quality_url: str = "https://air-quality-api.open-meteo.com/v1/air-quality"
    log_level: str = "INFO"

    @field_validator("weather_url", "air_quality_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize endpoint URLs to avoid double slashes."""
        return str(v).rstrip("/")

    @field_validator("refresh_interval_seconds", mode="after")
    @classmethod
    def positive_interval(cls, v: float) -> float:
        """Reject a zero or negative polling interval."""
        if v <= 0:
            raise ValueError("refresh_interval_seconds must be positive")
        return v


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4)}")
