"""Data sources that supply raw Open-Meteo bodies to the refresh cycle."""

from .base import CallableDataSource, DashboardDataSource
from .factory import build_data_source
from .open_meteo_client import (
    build_air_quality_params,
    build_forecast_params,
    fetch_air_quality,
    fetch_forecast,
)

__all__ = [
    "build_data_source",
    "DashboardDataSource",
    "CallableDataSource",
    "build_air_quality_params",
    "build_forecast_params",
    "fetch_air_quality",
    "fetch_forecast",
]
