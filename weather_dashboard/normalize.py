"""Map Open-Meteo JSON bodies onto the dashboard's display-ready records.

The provider returns three loosely coupled sections (``current`` scalars,
``hourly`` and ``daily`` parallel arrays). Each section is normalized on its
own so a missing ``daily`` block does not cost us the current conditions.

Fields the provider may omit or null out are filled from ``FIELD_DEFAULTS``;
every other field is required and a missing or mistyped value raises
``NormalizationError``. Numeric display fields are rounded half-up at this
stage so every consumer renders the same integers.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from weather_dashboard.weather_codes import WeatherCode, parse_weather_code
from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="normalize")

HOURLY_POINTS = 24

# Single source of truth for silent defaults, keyed by "<section>.<record field>".
FIELD_DEFAULTS: Dict[str, float] = {
    "current.visibility_km": 10,
    "current.dew_point": 0,
    "current.uv_index": 0,
    "current.precipitation": 0,
    "current.snowfall": 0,
    "hourly.precipitation_probability": 0,
    "daily.precipitation_probability": 0,
    "daily.uv_index_max": 0,
    "air.aqi": 0,
    "air.pm10": 0,
    "air.pm2_5": 0,
    "air.no2": 0,
    "air.o3": 0,
    "air.co": 0,
}


class NormalizationError(ValueError):
    """The provider body did not have the shape we expect."""


@dataclass(frozen=True)
class CurrentConditions:
    """Current conditions at the dashboard location."""
    temperature: int
    feels_like: int
    humidity: float
    wind_speed: int
    wind_direction: float
    pressure: int
    visibility_km: int
    dew_point: int
    cloud_cover: float
    uv_index: float
    precipitation: float
    snowfall: float
    is_day: bool
    code: WeatherCode
    sunrise: Optional[str] = None  # provider local time, e.g. "2024-11-02T06:34"
    sunset: Optional[str] = None


@dataclass(frozen=True)
class HourlyPoint:
    """One hour of the short-term forecast."""
    time: str
    temperature: int
    humidity: float
    precipitation_probability: float
    code: WeatherCode
    wind_speed: int


@dataclass(frozen=True)
class DailyForecast:
    """One day of the multi-day forecast."""
    date: str
    temperature_max: int
    temperature_min: int
    code: WeatherCode
    precipitation_probability: float
    sunrise: str
    sunset: str
    uv_index_max: float


@dataclass(frozen=True)
class AirQualitySnapshot:
    """Current air quality; concentrations in µg/m³, AQI on the US scale."""
    aqi: int
    pm10: int
    pm2_5: int
    no2: int
    o3: int
    co: int


@dataclass(frozen=True)
class ForecastRecords:
    """Everything derived from one forecast response; absent sections are None."""
    current: Optional[CurrentConditions]
    hourly: Optional[Tuple[HourlyPoint, ...]]
    daily: Optional[Tuple[DailyForecast, ...]]


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (2.5 -> 3, -2.5 -> -2)."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return int(math.floor(value + 0.5))


def _number(value: Any, field: str) -> float:
    """Return value if it is a real number, otherwise raise NormalizationError."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise NormalizationError(f"Expected a number for '{field}', got {value!r}")
    if isinstance(value, float) and math.isnan(value):
        raise NormalizationError(f"Got NaN for '{field}'")
    return value


def _optional_number(value: Any, field: str, default_key: str) -> float:
    """Return value if present, the FIELD_DEFAULTS entry if it is None."""
    if value is None:
        return FIELD_DEFAULTS[default_key]
    return _number(value, field)


def _text(value: Any, field: str) -> str:
    if not isinstance(value, str):
        raise NormalizationError(f"Expected a string for '{field}', got {value!r}")
    return value


def _code(value: Any, field: str) -> WeatherCode:
    try:
        return parse_weather_code(value)
    except ValueError as exc:
        raise NormalizationError(f"Unknown weather code in '{field}': {value!r}") from exc


def _section(payload: Any, name: str) -> Optional[Mapping[str, Any]]:
    """Return payload[name] if it is a non-empty mapping, None if absent."""
    if not isinstance(payload, Mapping):
        raise NormalizationError(f"Expected a JSON object, got {type(payload).__name__}")
    block = payload.get(name)
    if block is None or block == {}:
        return None
    if not isinstance(block, Mapping):
        raise NormalizationError(f"Expected '{name}' to be an object, got {type(block).__name__}")
    return block


def _series(block: Mapping[str, Any], field: str, *, required: bool = True) -> Optional[List[Any]]:
    """Return a parallel array from an hourly/daily block."""
    values = block.get(field)
    if values is None:
        if required:
            raise NormalizationError(f"Missing series '{field}'")
        return None
    if not isinstance(values, list):
        raise NormalizationError(f"Expected '{field}' to be a list, got {type(values).__name__}")
    return values


def _first(block: Optional[Mapping[str, Any]], field: str) -> Any:
    """First element of an optional series, or None when any level is missing."""
    if block is None:
        return None
    values = block.get(field)
    if not isinstance(values, list) or not values:
        return None
    return values[0]


def _item(values: List[Any], index: int, field: str) -> Any:
    try:
        return values[index]
    except IndexError:
        raise NormalizationError(f"Series '{field}' is shorter than the time axis") from None


def normalize_current(payload: Mapping[str, Any]) -> Optional[CurrentConditions]:
    """Build CurrentConditions from a forecast body, or None without a `current` block.

    Visibility and dew point come from the first hourly slot, UV index and
    sun times from the first daily slot, since the provider does not report
    them as current values.
    """
    current = _section(payload, "current")
    if current is None:
        return None
    hourly = _section(payload, "hourly")
    daily = _section(payload, "daily")

    visibility_m = _first(hourly, "visibility")
    if visibility_m is None:
        visibility_km = FIELD_DEFAULTS["current.visibility_km"]
    else:
        visibility_km = round_half_up(_number(visibility_m, "hourly.visibility") / 1000)

    dew_point = _first(hourly, "dew_point_2m")
    sunrise = _first(daily, "sunrise")
    sunset = _first(daily, "sunset")

    return CurrentConditions(
        temperature=round_half_up(_number(current.get("temperature_2m"), "current.temperature_2m")),
        feels_like=round_half_up(_number(current.get("apparent_temperature"), "current.apparent_temperature")),
        humidity=_number(current.get("relative_humidity_2m"), "current.relative_humidity_2m"),
        wind_speed=round_half_up(_number(current.get("wind_speed_10m"), "current.wind_speed_10m")),
        wind_direction=_number(current.get("wind_direction_10m"), "current.wind_direction_10m"),
        pressure=round_half_up(_number(current.get("pressure_msl"), "current.pressure_msl")),
        visibility_km=int(visibility_km),
        dew_point=round_half_up(_optional_number(dew_point, "hourly.dew_point_2m", "current.dew_point")),
        cloud_cover=_number(current.get("cloud_cover"), "current.cloud_cover"),
        uv_index=_optional_number(_first(daily, "uv_index_max"), "daily.uv_index_max", "current.uv_index"),
        precipitation=_optional_number(current.get("precipitation"), "current.precipitation",
                                       "current.precipitation"),
        snowfall=_optional_number(current.get("snowfall"), "current.snowfall", "current.snowfall"),
        is_day=bool(_number(current.get("is_day"), "current.is_day")),
        code=_code(current.get("weather_code"), "current.weather_code"),
        sunrise=_text(sunrise, "daily.sunrise") if sunrise is not None else None,
        sunset=_text(sunset, "daily.sunset") if sunset is not None else None,
    )


def normalize_hourly(payload: Mapping[str, Any], *, limit: int = HOURLY_POINTS) -> Optional[Tuple[HourlyPoint, ...]]:
    """Return the first `limit` hours of the hourly block in provider order."""
    hourly = _section(payload, "hourly")
    if hourly is None or hourly.get("time") is None:
        return None

    times = _series(hourly, "time")[:limit]
    temperature = _series(hourly, "temperature_2m")
    humidity = _series(hourly, "relative_humidity_2m")
    precip_prob = _series(hourly, "precipitation_probability", required=False)
    codes = _series(hourly, "weather_code")
    wind_speed = _series(hourly, "wind_speed_10m")

    out: List[HourlyPoint] = []
    for i, t in enumerate(times):
        pop = precip_prob[i] if precip_prob is not None and i < len(precip_prob) else None
        out.append(
            HourlyPoint(
                time=_text(t, "hourly.time"),
                temperature=round_half_up(_number(_item(temperature, i, "temperature_2m"), "hourly.temperature_2m")),
                humidity=_number(_item(humidity, i, "relative_humidity_2m"), "hourly.relative_humidity_2m"),
                precipitation_probability=_optional_number(
                    pop, "hourly.precipitation_probability", "hourly.precipitation_probability"
                ),
                code=_code(_item(codes, i, "weather_code"), "hourly.weather_code"),
                wind_speed=round_half_up(_number(_item(wind_speed, i, "wind_speed_10m"), "hourly.wind_speed_10m")),
            )
        )
    return tuple(out)


def normalize_daily(payload: Mapping[str, Any]) -> Optional[Tuple[DailyForecast, ...]]:
    """Return one DailyForecast per entry of the daily time axis (no truncation)."""
    daily = _section(payload, "daily")
    if daily is None or daily.get("time") is None:
        return None

    dates = _series(daily, "time")
    codes = _series(daily, "weather_code")
    t_max = _series(daily, "temperature_2m_max")
    t_min = _series(daily, "temperature_2m_min")
    sunrise = _series(daily, "sunrise")
    sunset = _series(daily, "sunset")
    precip_prob = _series(daily, "precipitation_probability_max", required=False)
    uv_max = _series(daily, "uv_index_max", required=False)

    out: List[DailyForecast] = []
    for i, d in enumerate(dates):
        pop = precip_prob[i] if precip_prob is not None and i < len(precip_prob) else None
        uv = uv_max[i] if uv_max is not None and i < len(uv_max) else None
        out.append(
            DailyForecast(
                date=_text(d, "daily.time"),
                temperature_max=round_half_up(_number(_item(t_max, i, "temperature_2m_max"), "daily.temperature_2m_max")),
                temperature_min=round_half_up(_number(_item(t_min, i, "temperature_2m_min"), "daily.temperature_2m_min")),
                code=_code(_item(codes, i, "weather_code"), "daily.weather_code"),
                precipitation_probability=_optional_number(
                    pop, "daily.precipitation_probability_max", "daily.precipitation_probability"
                ),
                sunrise=_text(_item(sunrise, i, "sunrise"), "daily.sunrise"),
                sunset=_text(_item(sunset, i, "sunset"), "daily.sunset"),
                uv_index_max=_optional_number(uv, "daily.uv_index_max", "daily.uv_index_max"),
            )
        )
    return tuple(out)


def normalize_forecast(payload: Any, *, hourly_limit: int = HOURLY_POINTS) -> ForecastRecords:
    """Normalize all three sections of a forecast body independently."""
    if not isinstance(payload, Mapping):
        raise NormalizationError(f"Expected a JSON object, got {type(payload).__name__}")
    records = ForecastRecords(
        current=normalize_current(payload),
        hourly=normalize_hourly(payload, limit=hourly_limit),
        daily=normalize_daily(payload),
    )
    logger.debug(
        "Normalized forecast",
        extra={
            "current": records.current is not None,
            "hours": len(records.hourly or ()),
            "days": len(records.daily or ()),
        },
    )
    return records


def normalize_air_quality(payload: Any) -> Optional[AirQualitySnapshot]:
    """Build an AirQualitySnapshot; every missing pollutant reads as 0."""
    current = _section(payload, "current")
    if current is None:
        return None

    def _pollutant(field: str, default_key: str) -> int:
        return round_half_up(_optional_number(current.get(field), f"current.{field}", default_key))

    return AirQualitySnapshot(
        aqi=_pollutant("us_aqi", "air.aqi"),
        pm10=_pollutant("pm10", "air.pm10"),
        pm2_5=_pollutant("pm2_5", "air.pm2_5"),
        no2=_pollutant("nitrogen_dioxide", "air.no2"),
        o3=_pollutant("ozone", "air.o3"),
        co=_pollutant("carbon_monoxide", "air.co"),
    )
