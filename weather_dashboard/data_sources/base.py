"""Interfaces and helpers for dashboard data sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Protocol


class DashboardDataSource(Protocol):
    """Interface for anything that can provide raw forecast and air-quality bodies."""

    def fetch_forecast(
        self,
        latitude: float,
        longitude: float,
        *,
        timezone: str = "auto",
        forecast_days: int = 7,
    ) -> Any:
        """Return the decoded forecast body (current, hourly and daily blocks)."""
        ...

    def fetch_air_quality(
        self,
        latitude: float,
        longitude: float,
    ) -> Any:
        """Return the decoded air-quality body (current block)."""
        ...


@dataclass
class CallableDataSource(DashboardDataSource):
    """Wrap two callables so they can be swapped for different backends."""

    forecast: Callable[..., Any]
    air_quality: Callable[..., Any]

    def fetch_forecast(self, *args, **kwargs) -> Any:
        """Delegate to the configured forecast callable."""
        return self.forecast(*args, **kwargs)

    def fetch_air_quality(self, *args, **kwargs) -> Any:
        """Delegate to the configured air-quality callable."""
        return self.air_quality(*args, **kwargs)
