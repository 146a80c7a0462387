"""Turn a DashboardState into the serialized view the front end renders."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from weather_dashboard.classification import aqi_category, compass_direction, uv_category
from weather_dashboard.normalize import (
    AirQualitySnapshot,
    CurrentConditions,
    DailyForecast,
    HourlyPoint,
    round_half_up,
)
from weather_dashboard.store import DashboardState, DashboardStatus
from weather_dashboard.weather_codes import code_label, code_pictogram
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="presentation")

LAST_UPDATED_FORMAT = "%H:%M:%S"


class DetailRow(BaseModel):
    """A label/value row in the 'details' card."""
    label: str
    value: str


class CurrentView(BaseModel):
    """Current conditions with display derivations attached."""
    temperature: int
    feels_like: int
    humidity: float
    wind_speed: int
    wind_direction: float
    wind_compass: str
    pressure: int
    visibility_km: int
    dew_point: int
    cloud_cover: float
    uv_index: float
    uv_category: str
    precipitation: float
    snowfall: float
    is_day: bool
    code: int
    label: str
    pictogram: str
    glyph: str
    sunrise: Optional[str] = None
    sunset: Optional[str] = None
    daylight_hours: Optional[int] = None
    details: List[DetailRow]


class HourlyView(BaseModel):
    """One hourly forecast point."""
    time: str
    temperature: int
    humidity: float
    precipitation_probability: float
    code: int
    label: str
    pictogram: str
    wind_speed: int


class DailyView(BaseModel):
    """One daily forecast entry."""
    date: str
    temperature_max: int
    temperature_min: int
    code: int
    label: str
    pictogram: str
    precipitation_probability: float
    sunrise: str
    sunset: str
    uv_index_max: float


class AirQualityView(BaseModel):
    """Air quality with its AQI tier."""
    aqi: int
    category: str
    pm10: int
    pm2_5: int
    no2: int
    o3: int
    co: int


class DashboardView(BaseModel):
    """Everything the page needs for one render."""
    status: DashboardStatus
    loading: bool
    location: str
    subtitle: str
    last_updated: Optional[datetime] = None
    last_updated_display: str = ""
    forecast_updated: Optional[datetime] = None
    air_quality_updated: Optional[datetime] = None
    stale_sections: List[str] = []
    current: Optional[CurrentView] = None
    hourly: List[HourlyView] = []
    daily: List[DailyView] = []
    air_quality: Optional[AirQualityView] = None


def _fmt(value: float) -> str:
    """Render 3.0 as '3' and 0.4 as '0.4'."""
    return f"{value:g}"


def daylight_hours(sunrise: Optional[str], sunset: Optional[str]) -> Optional[int]:
    """Whole hours between sunrise and sunset, or None if either is missing or unparseable."""
    if not sunrise or not sunset:
        return None
    try:
        start = datetime.fromisoformat(sunrise)
        end = datetime.fromisoformat(sunset)
    except ValueError:
        logger.warning("Could not parse sun times", extra={"sunrise": sunrise, "sunset": sunset})
        return None
    return round_half_up((end - start).total_seconds() / 3600)


def detail_rows(current: CurrentConditions) -> List[DetailRow]:
    """Rows for the details card; precipitation and snowfall only appear when non-zero."""
    rows = [
        DetailRow(label="Dew Point", value=f"{current.dew_point}°C"),
        DetailRow(label="UV Index", value=f"{_fmt(current.uv_index)} ({uv_category(current.uv_index).value})"),
        DetailRow(label="Cloud Cover", value=f"{_fmt(current.cloud_cover)}%"),
    ]
    if current.precipitation > 0:
        rows.append(DetailRow(label="Precipitation", value=f"{_fmt(current.precipitation)} mm"))
    if current.snowfall > 0:
        rows.append(DetailRow(label="Snowfall", value=f"{_fmt(current.snowfall)} cm"))
    return rows


def current_view(current: CurrentConditions) -> CurrentView:
    pictogram = code_pictogram(current.code)
    return CurrentView(
        temperature=current.temperature,
        feels_like=current.feels_like,
        humidity=current.humidity,
        wind_speed=current.wind_speed,
        wind_direction=current.wind_direction,
        wind_compass=compass_direction(current.wind_direction),
        pressure=current.pressure,
        visibility_km=current.visibility_km,
        dew_point=current.dew_point,
        cloud_cover=current.cloud_cover,
        uv_index=current.uv_index,
        uv_category=uv_category(current.uv_index).value,
        precipitation=current.precipitation,
        snowfall=current.snowfall,
        is_day=current.is_day,
        code=int(current.code),
        label=code_label(current.code),
        pictogram=pictogram.value,
        glyph=pictogram.glyph,
        sunrise=current.sunrise,
        sunset=current.sunset,
        daylight_hours=daylight_hours(current.sunrise, current.sunset),
        details=detail_rows(current),
    )


def hourly_view(point: HourlyPoint) -> HourlyView:
    return HourlyView(
        time=point.time,
        temperature=point.temperature,
        humidity=point.humidity,
        precipitation_probability=point.precipitation_probability,
        code=int(point.code),
        label=code_label(point.code),
        pictogram=code_pictogram(point.code).value,
        wind_speed=point.wind_speed,
    )


def daily_view(day: DailyForecast) -> DailyView:
    return DailyView(
        date=day.date,
        temperature_max=day.temperature_max,
        temperature_min=day.temperature_min,
        code=int(day.code),
        label=code_label(day.code),
        pictogram=code_pictogram(day.code).value,
        precipitation_probability=day.precipitation_probability,
        sunrise=day.sunrise,
        sunset=day.sunset,
        uv_index_max=day.uv_index_max,
    )


def air_quality_view(air: AirQualitySnapshot) -> AirQualityView:
    return AirQualityView(
        aqi=air.aqi,
        category=aqi_category(air.aqi).value,
        pm10=air.pm10,
        pm2_5=air.pm2_5,
        no2=air.no2,
        o3=air.o3,
        co=air.co,
    )


def stale_sections(state: DashboardState) -> List[str]:
    """Providers whose records are older than the freshest provider's."""
    stamps = {"forecast": state.forecast_updated, "air_quality": state.air_quality_updated}
    known = [ts for ts in stamps.values() if ts is not None]
    if not known:
        return []
    newest = max(known)
    return [name for name, ts in stamps.items() if ts is not None and ts < newest]


def build_dashboard_view(state: DashboardState, *, location: str = "", subtitle: str = "") -> DashboardView:
    """Serialize a snapshot; missing records stay None/empty rather than raising."""
    return DashboardView(
        status=state.status,
        loading=state.loading,
        location=location,
        subtitle=subtitle,
        last_updated=state.last_updated,
        last_updated_display=state.last_updated.astimezone().strftime(LAST_UPDATED_FORMAT)
        if state.last_updated else "",
        forecast_updated=state.forecast_updated,
        air_quality_updated=state.air_quality_updated,
        stale_sections=stale_sections(state),
        current=current_view(state.current) if state.current else None,
        hourly=[hourly_view(p) for p in state.hourly or ()],
        daily=[daily_view(d) for d in state.daily or ()],
        air_quality=air_quality_view(state.air_quality) if state.air_quality else None,
    )
