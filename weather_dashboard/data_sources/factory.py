"""Factory helpers for choosing a dashboard data source at startup."""

from __future__ import annotations

from functools import partial

from weather_dashboard import config
from weather_dashboard.data_sources.base import CallableDataSource, DashboardDataSource
from weather_dashboard.data_sources.open_meteo_client import fetch_air_quality, fetch_forecast
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/factory")


DEFAULT_SOURCE_NAME = "open_meteo"


def build_data_source(settings: config.Settings | None = None) -> DashboardDataSource:
    """Instantiate the configured data source."""
    settings = settings or config.settings
    source = (settings.data_source or DEFAULT_SOURCE_NAME).lower()

    if source == "open_meteo":
        logger.info("Using Open-Meteo data source",
                    extra={"weather_url": settings.weather_url, "air_quality_url": settings.air_quality_url})
        return CallableDataSource(
            forecast=partial(fetch_forecast, url=settings.weather_url, timeout=settings.request_timeout_seconds),
            air_quality=partial(fetch_air_quality, url=settings.air_quality_url,
                                timeout=settings.request_timeout_seconds),
        )

    raise ValueError(f"Unknown data source '{source}'")
