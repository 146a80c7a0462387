"""Fetch-and-normalize refresh cycle and the fixed-interval scheduler that drives it."""
from __future__ import annotations

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

import requests

from weather_dashboard import config
from weather_dashboard.data_sources import DashboardDataSource
from weather_dashboard.normalize import normalize_air_quality, normalize_forecast
from weather_dashboard.store import DashboardStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="refresh")

# Transport errors, non-2xx responses, undecodable bodies and NormalizationError.
CYCLE_ERRORS = (requests.RequestException, ValueError)


@dataclass(frozen=True)
class CycleResult:
    """Which providers produced data during one cycle."""
    weather_ok: bool
    air_ok: bool

    @property
    def ok(self) -> bool:
        return self.weather_ok and self.air_ok


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _apply_forecast(store: DashboardStore, future: Future, settings: config.Settings,
                    at: datetime) -> bool:
    """Normalize the forecast body and commit it; False if either step failed."""
    try:
        records = normalize_forecast(future.result(), hourly_limit=settings.hourly_points)
    except CYCLE_ERRORS as exc:
        logger.warning(f"Forecast refresh failed: {exc}", extra={"error": type(exc).__name__})
        return False
    except Exception:
        logger.exception("Unexpected error while refreshing forecast")
        return False
    store.commit_forecast(records, at=at)
    return True


def _apply_air_quality(store: DashboardStore, future: Future, at: datetime) -> bool:
    """Normalize the air-quality body and commit it; False if either step failed."""
    try:
        snapshot = normalize_air_quality(future.result())
    except CYCLE_ERRORS as exc:
        logger.warning(f"Air-quality refresh failed: {exc}", extra={"error": type(exc).__name__})
        return False
    except Exception:
        logger.exception("Unexpected error while refreshing air quality")
        return False
    store.commit_air_quality(snapshot, at=at)
    return True


def run_cycle(
    store: DashboardStore,
    data_source: DashboardDataSource,
    settings: config.Settings | None = None,
    *,
    now: Callable[[], datetime] = _utcnow,
) -> CycleResult:
    """
    Run one fetch-and-normalize cycle against `data_source` and commit into `store`.

    Both requests are issued concurrently. Each provider's records are
    committed only when its fetch and normalization both succeeded, so a
    failure never overwrites earlier data with partial results. The
    last-updated timestamp advances only when both providers succeeded; each
    provider also stamps its own freshness so a stale section can be told apart.
    Failures are logged, never raised.
    """
    settings = settings or config.settings
    store.begin_cycle()
    try:
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="dashboard-fetch") as pool:
            forecast_future = pool.submit(
                data_source.fetch_forecast,
                settings.latitude,
                settings.longitude,
                timezone=settings.timezone,
                forecast_days=settings.forecast_days,
            )
            air_future = pool.submit(data_source.fetch_air_quality, settings.latitude, settings.longitude)
            wait((forecast_future, air_future))
            # One stamp per cycle so both providers compare equal when both delivered.
            stamp = now()
            weather_ok = _apply_forecast(store, forecast_future, settings, stamp)
            air_ok = _apply_air_quality(store, air_future, stamp)

        result = CycleResult(weather_ok=weather_ok, air_ok=air_ok)
        if result.ok:
            store.mark_updated(stamp)
            logger.info("Dashboard refreshed")
        else:
            logger.warning("Dashboard refresh incomplete; keeping previous data",
                           extra={"weather_ok": weather_ok, "air_ok": air_ok})
        return result
    finally:
        store.end_cycle()


class RefreshScheduler:
    """
    Run a refresh cycle immediately, then once per fixed interval, on a worker thread.

    Cycles are serialized: a tick that comes due while a cycle is in flight
    is skipped, never queued. Ticks are anchored to the start time, so a
    slow cycle does not push later ticks back; ticks it overran are dropped.

    Every worker owns its stop and wake events. A worker that outlives a
    timed-out ``stop()`` keeps its own (already set) stop event, so a later
    ``start()`` never revives it.
    """

    def __init__(
        self,
        store: DashboardStore,
        data_source: DashboardDataSource,
        settings: config.Settings | None = None,
        *,
        interval_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.store = store
        self.data_source = data_source
        self.settings = settings or config.settings
        self.interval = interval_seconds if interval_seconds is not None else self.settings.refresh_interval_seconds
        if self.interval <= 0:
            raise ValueError("interval_seconds must be positive")
        self._clock = clock
        self._stop: Optional[threading.Event] = None
        self._wake: Optional[threading.Event] = None
        self._cycle_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        """True while a worker is alive and has not been told to stop."""
        return (
            self._thread is not None
            and self._thread.is_alive()
            and self._stop is not None
            and not self._stop.is_set()
        )

    @property
    def busy(self) -> bool:
        """True while a cycle is in flight."""
        return self._cycle_lock.locked()

    def start(self) -> None:
        """Start a worker; its first cycle runs right away."""
        if self.running:
            logger.debug("Refresh scheduler already running")
            return
        if self._thread is not None and self._thread.is_alive():
            logger.info("Previous refresh worker is still finishing its cycle; it will exit on its own")
        self._stop = threading.Event()
        self._wake = threading.Event()
        self._thread = threading.Thread(
            target=self._run,
            args=(self._stop, self._wake),
            name="dashboard-refresh",
            daemon=True,
        )
        self._thread.start()
        logger.info(f"Refresh scheduler started (every {self.interval:g}s)")

    def stop(self, timeout: float | None = None) -> None:
        """Cancel future ticks and wait for the worker; an in-flight cycle is allowed to finish."""
        if self._stop is not None:
            self._stop.set()
        if self._wake is not None:
            self._wake.set()
        thread = self._thread
        if thread is not None:
            thread.join(timeout)
            if thread.is_alive():
                logger.warning("Refresh worker still finishing a cycle after stop()")
            else:
                self._thread = None
        logger.info("Refresh scheduler stopped")

    def trigger(self) -> bool:
        """
        Ask the worker for an immediate out-of-band cycle.

        Returns False, and does nothing, when the scheduler is not running or a
        cycle is already in flight. The fixed-rate schedule is unchanged.
        """
        if not self.running or self.busy:
            logger.info("Ignoring refresh trigger", extra={"running": self.running, "busy": self.busy})
            return False
        self._wake.set()
        return True

    def refresh_now(self) -> Optional[CycleResult]:
        """Run one cycle on the calling thread unless another is in flight."""
        if not self._cycle_lock.acquire(blocking=False):
            logger.info("Skipping refresh; a cycle is already in flight")
            return None
        try:
            return run_cycle(self.store, self.data_source, self.settings)
        finally:
            self._cycle_lock.release()

    def _cycle(self, stop: threading.Event, *, block: bool) -> None:
        if not self._cycle_lock.acquire(blocking=block):
            logger.info("Skipping refresh tick; a cycle is already in flight")
            return
        try:
            if stop.is_set():
                return
            run_cycle(self.store, self.data_source, self.settings)
        finally:
            self._cycle_lock.release()

    def _run(self, stop: threading.Event, wake: threading.Event) -> None:
        started = self._clock()
        ticks = 0
        # A restarted scheduler may find the previous worker's last cycle in
        # flight; its first cycle queues behind that one instead of being lost.
        self._cycle(stop, block=True)
        while not stop.is_set():
            elapsed = self._clock() - started
            next_tick = int(elapsed // self.interval) + 1
            if next_tick > ticks + 1:
                logger.warning("Refresh cycle overran the interval; skipping missed ticks",
                               extra={"skipped": next_tick - ticks - 1})
            ticks = next_tick
            delay = max(0.0, started + ticks * self.interval - self._clock())
            woken = wake.wait(delay)
            if stop.is_set():
                break
            if woken:
                wake.clear()
                logger.info("Running triggered refresh")
            self._cycle(stop, block=False)
