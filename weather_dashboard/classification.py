"""Banding helpers that turn raw readings into the tiers shown on the dashboard."""

from __future__ import annotations

import math
from enum import Enum


class AqiCategory(str, Enum):
    """US EPA Air Quality Index tiers."""
    GOOD = "Good"
    MODERATE = "Moderate"
    UNHEALTHY_SENSITIVE = "Unhealthy (Sensitive)"
    UNHEALTHY = "Unhealthy"
    VERY_UNHEALTHY = "Very Unhealthy"
    HAZARDOUS = "Hazardous"


class UvCategory(str, Enum):
    """WHO UV index exposure tiers."""
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"
    VERY_HIGH = "Very High"
    EXTREME = "Extreme"


# Inclusive upper bounds, checked in order.
AQI_BANDS = (
    (50, AqiCategory.GOOD),
    (100, AqiCategory.MODERATE),
    (150, AqiCategory.UNHEALTHY_SENSITIVE),
    (200, AqiCategory.UNHEALTHY),
    (300, AqiCategory.VERY_UNHEALTHY),
)

UV_BANDS = (
    (2, UvCategory.LOW),
    (5, UvCategory.MODERATE),
    (7, UvCategory.HIGH),
    (10, UvCategory.VERY_HIGH),
)

COMPASS_POINTS = (
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
)


def aqi_category(aqi: float) -> AqiCategory:
    """Classify a US AQI value; 150 is still Unhealthy (Sensitive), 151 is Unhealthy."""
    for upper, category in AQI_BANDS:
        if aqi <= upper:
            return category
    return AqiCategory.HAZARDOUS


def uv_category(uv_index: float) -> UvCategory:
    """Classify a UV index reading."""
    for upper, category in UV_BANDS:
        if uv_index <= upper:
            return category
    return UvCategory.EXTREME


def compass_direction(degrees: float) -> str:
    """Map a wind direction in degrees to one of 16 compass points."""
    index = math.floor(degrees / 22.5 + 0.5) % len(COMPASS_POINTS)
    return COMPASS_POINTS[index]
