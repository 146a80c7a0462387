import unittest
from datetime import datetime, timedelta, timezone

from payloads import make_air_payload, make_forecast_payload

from weather_dashboard.normalize import ForecastRecords, normalize_air_quality, normalize_forecast
from weather_dashboard.store import DashboardState, DashboardStatus, DashboardStore


class TestDashboardState(unittest.TestCase):
    def test_initial_state_is_loading_without_records(self):
        state = DashboardStore().snapshot()
        self.assertTrue(state.loading)
        self.assertIsNone(state.current)
        self.assertIsNone(state.air_quality)
        self.assertIsNone(state.last_updated)
        self.assertEqual(state.status, DashboardStatus.LOADING)

    def test_unavailable_when_idle_without_data(self):
        self.assertEqual(DashboardState(loading=False).status, DashboardStatus.UNAVAILABLE)


class TestDashboardStore(unittest.TestCase):
    def test_commit_forecast_replaces_present_sections_only(self):
        store = DashboardStore()
        records = normalize_forecast(make_forecast_payload())
        store.commit_forecast(records)

        store.commit_forecast(ForecastRecords(current=None, hourly=(), daily=None))
        state = store.snapshot()
        self.assertEqual(state.current, records.current)
        self.assertEqual(state.hourly, ())
        self.assertEqual(state.daily, records.daily)
        self.assertEqual(state.status, DashboardStatus.READY)

    def test_commit_air_quality_none_keeps_previous(self):
        store = DashboardStore()
        air = normalize_air_quality(make_air_payload())
        store.commit_air_quality(air)
        store.commit_air_quality(None)
        self.assertEqual(store.snapshot().air_quality, air)

    def test_mark_updated_is_monotonic(self):
        store = DashboardStore()
        later = datetime(2024, 11, 2, 9, 0, tzinfo=timezone.utc)
        store.mark_updated(later)
        store.mark_updated(later - timedelta(minutes=5))
        self.assertEqual(store.snapshot().last_updated, later)

    def test_subscribers_see_each_change(self):
        store = DashboardStore()
        seen = []
        unsubscribe = store.subscribe(seen.append)

        store.begin_cycle()
        store.end_cycle()
        self.assertEqual([s.loading for s in seen], [True, False])

        unsubscribe()
        store.begin_cycle()
        self.assertEqual(len(seen), 2)

    def test_failing_subscriber_does_not_break_writer(self):
        store = DashboardStore()
        seen = []

        def broken(_state):
            raise RuntimeError("boom")

        store.subscribe(broken)
        store.subscribe(seen.append)
        state = store.end_cycle()
        self.assertFalse(state.loading)
        self.assertEqual(seen, [state])

    def test_commits_stamp_provider_freshness(self):
        store = DashboardStore()
        at = datetime(2024, 11, 2, 9, 0, tzinfo=timezone.utc)
        store.commit_forecast(normalize_forecast(make_forecast_payload()), at=at)
        state = store.snapshot()
        self.assertEqual(state.forecast_updated, at)
        self.assertIsNone(state.air_quality_updated)
        self.assertIsNone(state.last_updated)

        store.commit_air_quality(None, at=at)
        self.assertIsNone(store.snapshot().air_quality_updated)
        store.commit_air_quality(normalize_air_quality(make_air_payload()), at=at)
        self.assertEqual(store.snapshot().air_quality_updated, at)


if __name__ == "__main__":
    unittest.main()
