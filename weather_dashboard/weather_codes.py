"""WMO weather-interpretation codes and their display vocabulary.

Open-Meteo reports sky and precipitation state as a WMO code. The set of codes
it emits is closed, so it is modelled as an IntEnum and both lookup tables are
checked for exhaustiveness when this module is imported: adding a member to
``WeatherCode`` without a label and pictogram fails immediately rather than
rendering a blank cell at runtime.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Dict


class WeatherCode(IntEnum):
    """WMO weather-interpretation codes emitted by Open-Meteo."""
    CLEAR_SKY = 0
    MAINLY_CLEAR = 1
    PARTLY_CLOUDY = 2
    OVERCAST = 3
    FOG = 45
    DEPOSITING_RIME_FOG = 48
    LIGHT_DRIZZLE = 51
    MODERATE_DRIZZLE = 53
    DENSE_DRIZZLE = 55
    FREEZING_DRIZZLE = 56
    DENSE_FREEZING_DRIZZLE = 57
    LIGHT_RAIN = 61
    MODERATE_RAIN = 63
    HEAVY_RAIN = 65
    FREEZING_RAIN = 66
    HEAVY_FREEZING_RAIN = 67
    SLIGHT_SNOW = 71
    MODERATE_SNOW = 73
    HEAVY_SNOW = 75
    SNOW_GRAINS = 77
    LIGHT_SHOWERS = 80
    MODERATE_SHOWERS = 81
    VIOLENT_SHOWERS = 82
    SNOW_SHOWERS = 85
    HEAVY_SNOW_SHOWERS = 86
    THUNDERSTORM = 95
    THUNDERSTORM_WITH_HAIL = 96
    SEVERE_THUNDERSTORM_WITH_HAIL = 99


class Pictogram(str, Enum):
    """Pictogram category a weather code is drawn with."""
    CLEAR = "clear"
    PARTLY_CLOUDY = "partly_cloudy"
    OVERCAST = "overcast"
    FOG = "fog"
    RAIN = "rain"
    SNOW = "snow"
    THUNDERSTORM = "thunderstorm"
    FREEZING = "freezing"

    @property
    def glyph(self) -> str:
        """Emoji used by text front ends for this category."""
        return PICTOGRAM_GLYPHS[self]


PICTOGRAM_GLYPHS: Dict[Pictogram, str] = {
    Pictogram.CLEAR: "☀️",
    Pictogram.PARTLY_CLOUDY: "⛅",
    Pictogram.OVERCAST: "☁️",
    Pictogram.FOG: "🌫️",
    Pictogram.RAIN: "🌧️",
    Pictogram.SNOW: "🌨️",
    Pictogram.THUNDERSTORM: "⛈️",
    Pictogram.FREEZING: "🌧️❄️",
}

WEATHER_CODE_LABELS: Dict[WeatherCode, str] = {
    WeatherCode.CLEAR_SKY: "Clear sky",
    WeatherCode.MAINLY_CLEAR: "Mainly clear",
    WeatherCode.PARTLY_CLOUDY: "Partly cloudy",
    WeatherCode.OVERCAST: "Overcast",
    WeatherCode.FOG: "Fog",
    WeatherCode.DEPOSITING_RIME_FOG: "Depositing rime fog",
    WeatherCode.LIGHT_DRIZZLE: "Light drizzle",
    WeatherCode.MODERATE_DRIZZLE: "Moderate drizzle",
    WeatherCode.DENSE_DRIZZLE: "Dense drizzle",
    WeatherCode.FREEZING_DRIZZLE: "Freezing drizzle",
    WeatherCode.DENSE_FREEZING_DRIZZLE: "Dense freezing drizzle",
    WeatherCode.LIGHT_RAIN: "Light rain",
    WeatherCode.MODERATE_RAIN: "Moderate rain",
    WeatherCode.HEAVY_RAIN: "Heavy rain",
    WeatherCode.FREEZING_RAIN: "Freezing rain",
    WeatherCode.HEAVY_FREEZING_RAIN: "Heavy freezing rain",
    WeatherCode.SLIGHT_SNOW: "Slight snow",
    WeatherCode.MODERATE_SNOW: "Moderate snow",
    WeatherCode.HEAVY_SNOW: "Heavy snow",
    WeatherCode.SNOW_GRAINS: "Snow grains",
    WeatherCode.LIGHT_SHOWERS: "Light showers",
    WeatherCode.MODERATE_SHOWERS: "Moderate showers",
    WeatherCode.VIOLENT_SHOWERS: "Violent showers",
    WeatherCode.SNOW_SHOWERS: "Snow showers",
    WeatherCode.HEAVY_SNOW_SHOWERS: "Heavy snow showers",
    WeatherCode.THUNDERSTORM: "Thunderstorm",
    WeatherCode.THUNDERSTORM_WITH_HAIL: "Thunderstorm with hail",
    WeatherCode.SEVERE_THUNDERSTORM_WITH_HAIL: "Severe thunderstorm with hail",
}

WEATHER_CODE_PICTOGRAMS: Dict[WeatherCode, Pictogram] = {
    WeatherCode.CLEAR_SKY: Pictogram.CLEAR,
    WeatherCode.MAINLY_CLEAR: Pictogram.PARTLY_CLOUDY,
    WeatherCode.PARTLY_CLOUDY: Pictogram.PARTLY_CLOUDY,
    WeatherCode.OVERCAST: Pictogram.OVERCAST,
    WeatherCode.FOG: Pictogram.FOG,
    WeatherCode.DEPOSITING_RIME_FOG: Pictogram.FOG,
    WeatherCode.LIGHT_DRIZZLE: Pictogram.RAIN,
    WeatherCode.MODERATE_DRIZZLE: Pictogram.RAIN,
    WeatherCode.DENSE_DRIZZLE: Pictogram.RAIN,
    WeatherCode.FREEZING_DRIZZLE: Pictogram.FREEZING,
    WeatherCode.DENSE_FREEZING_DRIZZLE: Pictogram.FREEZING,
    WeatherCode.LIGHT_RAIN: Pictogram.RAIN,
    WeatherCode.MODERATE_RAIN: Pictogram.RAIN,
    WeatherCode.HEAVY_RAIN: Pictogram.RAIN,
    WeatherCode.FREEZING_RAIN: Pictogram.FREEZING,
    WeatherCode.HEAVY_FREEZING_RAIN: Pictogram.FREEZING,
    WeatherCode.SLIGHT_SNOW: Pictogram.SNOW,
    WeatherCode.MODERATE_SNOW: Pictogram.SNOW,
    WeatherCode.HEAVY_SNOW: Pictogram.SNOW,
    WeatherCode.SNOW_GRAINS: Pictogram.SNOW,
    WeatherCode.LIGHT_SHOWERS: Pictogram.RAIN,
    WeatherCode.MODERATE_SHOWERS: Pictogram.RAIN,
    WeatherCode.VIOLENT_SHOWERS: Pictogram.RAIN,
    WeatherCode.SNOW_SHOWERS: Pictogram.SNOW,
    WeatherCode.HEAVY_SNOW_SHOWERS: Pictogram.SNOW,
    WeatherCode.THUNDERSTORM: Pictogram.THUNDERSTORM,
    WeatherCode.THUNDERSTORM_WITH_HAIL: Pictogram.THUNDERSTORM,
    WeatherCode.SEVERE_THUNDERSTORM_WITH_HAIL: Pictogram.THUNDERSTORM,
}


def _check_exhaustive() -> None:
    """Fail loudly if a WeatherCode member is missing from either table."""
    for table_name, table in (("labels", WEATHER_CODE_LABELS), ("pictograms", WEATHER_CODE_PICTOGRAMS)):
        missing = [code for code in WeatherCode if code not in table]
        if missing:
            raise RuntimeError(f"Weather code {table_name} table is missing {sorted(int(c) for c in missing)}")
    missing_glyphs = [p for p in Pictogram if p not in PICTOGRAM_GLYPHS]
    if missing_glyphs:
        raise RuntimeError(f"Pictogram glyph table is missing {[p.value for p in missing_glyphs]}")


_check_exhaustive()


def parse_weather_code(value) -> WeatherCode:
    """Convert a raw provider value into a WeatherCode.

    Raises ValueError for anything outside the enumeration, including floats
    with a fractional part and booleans.
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Invalid weather code: {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"Invalid weather code: {value!r}")
        value = int(value)
    return WeatherCode(value)


def code_label(code: WeatherCode | int) -> str:
    """Human-readable label for a weather code."""
    return WEATHER_CODE_LABELS[WeatherCode(code)]


def code_pictogram(code: WeatherCode | int) -> Pictogram:
    """Pictogram category for a weather code."""
    return WEATHER_CODE_PICTOGRAMS[WeatherCode(code)]
