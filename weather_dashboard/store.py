"""Observable in-memory container for the latest dashboard records.

The refresh worker is the only writer. Readers (the HTTP API, tests, any
front end) either pull a ``DashboardState`` snapshot or subscribe to be told
whenever one is replaced. Snapshots are frozen, so a reader never sees a
half-applied refresh.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional, Tuple

from weather_dashboard.normalize import AirQualitySnapshot, CurrentConditions, DailyForecast, ForecastRecords, HourlyPoint
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="store")


class DashboardStatus(str, Enum):
    """What the presentation layer should show."""
    LOADING = "loading"
    READY = "ready"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class DashboardState:
    """Immutable snapshot of everything the dashboard displays."""
    loading: bool = True
    current: Optional[CurrentConditions] = None
    hourly: Optional[Tuple[HourlyPoint, ...]] = None
    daily: Optional[Tuple[DailyForecast, ...]] = None
    air_quality: Optional[AirQualitySnapshot] = None
    last_updated: Optional[datetime] = None
    forecast_updated: Optional[datetime] = None
    air_quality_updated: Optional[datetime] = None

    @property
    def status(self) -> DashboardStatus:
        """READY once current conditions exist; before that LOADING or UNAVAILABLE."""
        if self.current is not None:
            return DashboardStatus.READY
        if self.loading:
            return DashboardStatus.LOADING
        return DashboardStatus.UNAVAILABLE


Listener = Callable[[DashboardState], None]


class DashboardStore:
    """Thread-safe, single-writer holder of the latest DashboardState."""

    def __init__(self, initial: DashboardState | None = None) -> None:
        logger.debug("Initializing DashboardStore")
        self._state = initial or DashboardState()
        self._listeners: List[Listener] = []
        self._lock = threading.Lock()

    def snapshot(self) -> DashboardState:
        """Return the current state."""
        with self._lock:
            return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener and return a callable that removes it."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def _update(self, **changes) -> DashboardState:
        """Replace the state with a copy carrying `changes` and notify listeners."""
        with self._lock:
            self._state = replace(self._state, **changes)
            state = self._state
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(state)
            except Exception:
                logger.exception("Dashboard listener failed")
        return state

    def begin_cycle(self) -> DashboardState:
        """Mark a refresh cycle as in flight."""
        return self._update(loading=True)

    def end_cycle(self) -> DashboardState:
        """Mark the in-flight refresh cycle as finished, whatever its outcome."""
        return self._update(loading=False)

    def commit_forecast(self, records: ForecastRecords, *, at: datetime | None = None) -> DashboardState:
        """
        Replace the forecast-derived records; sections absent from `records` keep their prior value.

        `at` stamps when this provider last delivered, independently of `last_updated`.
        """
        changes = {}
        if records.current is not None:
            changes["current"] = records.current
        if records.hourly is not None:
            changes["hourly"] = records.hourly
        if records.daily is not None:
            changes["daily"] = records.daily
        if not changes:
            return self.snapshot()
        if at is not None:
            changes["forecast_updated"] = at
        return self._update(**changes)

    def commit_air_quality(self, snapshot: Optional[AirQualitySnapshot], *, at: datetime | None = None) -> DashboardState:
        """Replace the air-quality record (a None snapshot leaves the prior one)."""
        if snapshot is None:
            return self.snapshot()
        if at is None:
            return self._update(air_quality=snapshot)
        return self._update(air_quality=snapshot, air_quality_updated=at)

    def mark_updated(self, at: datetime) -> DashboardState:
        """Advance the last-updated timestamp; never moves it backwards."""
        current = self.snapshot().last_updated
        if current is not None and at < current:
            logger.warning("Ignoring out-of-order last-updated timestamp",
                           extra={"current": current.isoformat(), "proposed": at.isoformat()})
            return self.snapshot()
        return self._update(last_updated=at)
