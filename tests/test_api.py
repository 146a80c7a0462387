import unittest

from fastapi.testclient import TestClient

from payloads import make_air_payload, make_forecast_payload

from weather_dashboard.data_sources import CallableDataSource
from weather_dashboard.main import app as fastapi_app
from weather_dashboard.refresh import run_cycle
from weather_dashboard.store import DashboardStore


class TestApi(unittest.TestCase):
    def setUp(self):
        import weather_dashboard.api as api_mod

        self.api_mod = api_mod
        self._orig_store = api_mod.STORE
        api_mod.STORE = DashboardStore()
        # No lifespan: TestClient is not used as a context manager, so no network polling.
        self.client = TestClient(fastapi_app)

    def tearDown(self):
        self.api_mod.STORE = self._orig_store

    def test_dashboard_loading_before_first_cycle(self):
        resp = self.client.get("/v1/dashboard")
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["status"], "loading")
        self.assertIsNone(data["current"])
        self.assertEqual(data["location"], "Delhi Technological University")

    def test_dashboard_after_cycle(self):
        source = CallableDataSource(forecast=lambda *a, **k: make_forecast_payload(hours=30),
                                    air_quality=lambda *a, **k: make_air_payload())
        run_cycle(self.api_mod.STORE, source)

        data = self.client.get("/v1/dashboard").json()
        self.assertEqual(data["status"], "ready")
        self.assertFalse(data["loading"])
        self.assertEqual(data["current"]["temperature"], 24)
        self.assertEqual(data["current"]["label"], "Light rain")
        self.assertEqual(len(data["hourly"]), 24)
        self.assertEqual(data["air_quality"]["aqi"], 142)
        self.assertEqual(data["air_quality"]["category"], "Unhealthy (Sensitive)")
        self.assertIsNotNone(data["last_updated"])

    def test_dashboard_unavailable_after_failed_first_cycle(self):
        def fail(*_a, **_k):
            raise ValueError("malformed")

        run_cycle(self.api_mod.STORE, CallableDataSource(forecast=fail, air_quality=fail))
        data = self.client.get("/v1/dashboard").json()
        self.assertEqual(data["status"], "unavailable")
        self.assertEqual(data["last_updated_display"], "")

    def test_dashboard_flags_stale_air_quality(self):
        from datetime import datetime, timedelta, timezone

        t0 = datetime(2024, 11, 2, 8, 30, tzinfo=timezone.utc)
        good = CallableDataSource(forecast=lambda *a, **k: make_forecast_payload(),
                                  air_quality=lambda *a, **k: make_air_payload())
        run_cycle(self.api_mod.STORE, good, now=lambda: t0)

        def offline(*_a, **_k):
            raise ValueError("offline")

        partial = CallableDataSource(forecast=lambda *a, **k: make_forecast_payload(), air_quality=offline)
        run_cycle(self.api_mod.STORE, partial, now=lambda: t0 + timedelta(minutes=5))

        data = self.client.get("/v1/dashboard").json()
        self.assertEqual(data["stale_sections"], ["air_quality"])
        self.assertEqual(data["air_quality"]["aqi"], 142)

    def test_health(self):
        resp = self.client.get("/v1/health")
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["status"], "ok")
        self.assertEqual(data["dashboard"], "loading")
        self.assertFalse(data["refreshing"])


if __name__ == "__main__":
    unittest.main()
