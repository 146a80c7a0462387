"""Helpers for fetching forecast and air-quality bodies from the Open-Meteo APIs."""
from __future__ import annotations

from typing import Any, Dict

import requests

from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag='open_meteo_client')

OPEN_METEO_WEATHER_URL = "https://api.open-meteo.com/v1/forecast"
OPEN_METEO_AIR_URL = "https://air-quality-api.open-meteo.com/v1/air-quality"

# The dashboard always wants fresh readings, so never go through an HTTP cache.
NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store",
    "Pragma": "no-cache",
}

session = requests.Session()
session.headers.update(NO_CACHE_HEADERS)

CURRENT_WEATHER_VARS = [
    "temperature_2m",
    "relative_humidity_2m",
    "apparent_temperature",
    "precipitation",
    "rain",
    "snowfall",
    "weather_code",
    "cloud_cover",
    "pressure_msl",
    "surface_pressure",
    "wind_speed_10m",
    "wind_direction_10m",
    "is_day",
]

HOURLY_WEATHER_VARS = [
    "temperature_2m",
    "relative_humidity_2m",
    "precipitation_probability",
    "weather_code",
    "wind_speed_10m",
    "dew_point_2m",
    "visibility",
]

DAILY_WEATHER_VARS = [
    "weather_code",
    "temperature_2m_max",
    "temperature_2m_min",
    "sunrise",
    "sunset",
    "precipitation_probability_max",
    "uv_index_max",
]

CURRENT_AIR_VARS = [
    "us_aqi",
    "pm10",
    "pm2_5",
    "nitrogen_dioxide",
    "ozone",
    "carbon_monoxide",
]

EXPECTED_WEATHER_UNITS = {
    "temperature_2m": "°C",
    "relative_humidity_2m": "%",
    "apparent_temperature": "°C",
    "precipitation": "mm",
    "snowfall": "cm",
    "cloud_cover": "%",
    "pressure_msl": "hPa",
    "wind_speed_10m": "km/h",
    "wind_direction_10m": "°",
}

EXPECTED_AIR_UNITS = {
    "us_aqi": "USAQI",
    "pm10": "μg/m³",
    "pm2_5": "μg/m³",
    "nitrogen_dioxide": "μg/m³",
    "ozone": "μg/m³",
    "carbon_monoxide": "μg/m³",
}

# Alternative spellings the API is known to use that should not trigger warnings.
ALLOWED_UNIT_SYNONYMS = {
    "relative_humidity_2m": {"percent"},
    "cloud_cover": {"percent"},
    "wind_direction_10m": {"deg", "degrees"},
    "us_aqi": {"aqi", "US AQI"},
    "pm10": {"µg/m³", "ug/m3"},
    "pm2_5": {"µg/m³", "ug/m3"},
    "nitrogen_dioxide": {"µg/m³", "ug/m3"},
    "ozone": {"µg/m³", "ug/m3"},
    "carbon_monoxide": {"µg/m³", "ug/m3"},
}


def _warn_on_unexpected_units(units: Any, expected_units: Dict[str, str], *, context: str) -> None:
    """Log a warning if Open-Meteo returns units the display labels do not match."""
    if not isinstance(units, dict):
        return
    for field, expected in expected_units.items():
        actual = units.get(field)
        if not actual or actual == expected:
            continue
        allowed = ALLOWED_UNIT_SYNONYMS.get(field, set())
        if actual not in allowed:
            logger.warning(
                "Unexpected Open-Meteo unit",
                extra={"context": context, "field": field, "unit": actual, "expected": expected},
            )


def build_forecast_params(latitude: float,
                          longitude: float,
                          *,
                          timezone: str = "auto",
                          forecast_days: int = 7,
                          ) -> Dict[str, Any]:
    """Query parameters for the forecast endpoint (current, hourly and daily blocks)."""
    return {
        "latitude": latitude,
        "longitude": longitude,
        "timezone": timezone,
        "current": ",".join(CURRENT_WEATHER_VARS),
        "hourly": ",".join(HOURLY_WEATHER_VARS),
        "daily": ",".join(DAILY_WEATHER_VARS),
        "forecast_days": forecast_days,
    }


def build_air_quality_params(latitude: float, longitude: float) -> Dict[str, Any]:
    """Query parameters for the air-quality endpoint (current pollutants only)."""
    return {
        "latitude": latitude,
        "longitude": longitude,
        "current": ",".join(CURRENT_AIR_VARS),
    }


def _get_json(url: str, params: Dict[str, Any], *, timeout: float) -> Any:
    """GET `url` and decode the body; raises on transport errors, non-2xx, or bad JSON."""
    resp = session.get(url, params=params, headers=NO_CACHE_HEADERS, timeout=timeout)
    resp.raise_for_status()
    return resp.json()


def fetch_forecast(latitude: float,
                   longitude: float,
                   *,
                   timezone: str = "auto",
                   forecast_days: int = 7,
                   url: str = OPEN_METEO_WEATHER_URL,
                   timeout: float = 10,
                   ) -> Any:
    """Fetch the raw forecast body for the given coordinates."""
    params = build_forecast_params(latitude, longitude, timezone=timezone, forecast_days=forecast_days)
    data = _get_json(url, params, timeout=timeout)
    if isinstance(data, dict):
        _warn_on_unexpected_units(data.get("current_units"), EXPECTED_WEATHER_UNITS, context="weather_current")
    return data


def fetch_air_quality(latitude: float,
                      longitude: float,
                      *,
                      url: str = OPEN_METEO_AIR_URL,
                      timeout: float = 10,
                      ) -> Any:
    """Fetch the raw air-quality body for the given coordinates."""
    params = build_air_quality_params(latitude, longitude)
    data = _get_json(url, params, timeout=timeout)
    if isinstance(data, dict):
        _warn_on_unexpected_units(data.get("current_units"), EXPECTED_AIR_UNITS, context="air_current")
    return data
