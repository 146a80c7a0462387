import unittest

from payloads import make_air_payload, make_forecast_payload

from weather_dashboard.normalize import (
    FIELD_DEFAULTS,
    NormalizationError,
    normalize_air_quality,
    normalize_current,
    normalize_daily,
    normalize_forecast,
    normalize_hourly,
    round_half_up,
)
from weather_dashboard.weather_codes import Pictogram, WeatherCode, code_label, code_pictogram


class TestRoundHalfUp(unittest.TestCase):
    def test_rounds_to_nearest(self):
        self.assertEqual(round_half_up(23.6), 24)
        self.assertEqual(round_half_up(23.4), 23)
        self.assertEqual(round_half_up(-3.7), -4)

    def test_halves_go_up(self):
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(0.5), 1)
        self.assertEqual(round_half_up(-2.5), -2)

    def test_integers_are_unchanged(self):
        for value in (-12, 0, 7, 1013):
            self.assertEqual(round_half_up(value), value)
            self.assertEqual(round_half_up(float(value)), value)
            self.assertEqual(round_half_up(round_half_up(value + 0.3)), round_half_up(value + 0.3))


class TestNormalizeCurrent(unittest.TestCase):
    def test_rounds_display_fields(self):
        current = normalize_current(make_forecast_payload())
        self.assertEqual(current.temperature, 24)
        self.assertEqual(current.feels_like, 24)
        self.assertEqual(current.wind_speed, 8)
        self.assertEqual(current.pressure, 1013)
        self.assertEqual(current.dew_point, 13)
        self.assertEqual(current.visibility_km, 24)

    def test_passes_through_bounded_fields(self):
        current = normalize_current(make_forecast_payload())
        self.assertEqual(current.humidity, 48)
        self.assertEqual(current.cloud_cover, 75)
        self.assertEqual(current.wind_direction, 300)
        self.assertTrue(current.is_day)
        self.assertEqual(current.precipitation, 0.4)
        self.assertEqual(current.snowfall, 0.0)

    def test_reads_uv_and_sun_times_from_first_day(self):
        current = normalize_current(make_forecast_payload())
        self.assertEqual(current.uv_index, 5.35)
        self.assertEqual(current.sunrise, "2024-11-02T06:34")
        self.assertEqual(current.sunset, "2024-11-02T17:37")

    def test_light_rain_end_to_end(self):
        current = normalize_current(make_forecast_payload())
        self.assertEqual(current.temperature, 24)
        self.assertEqual(current.code, WeatherCode.LIGHT_RAIN)
        self.assertEqual(code_label(current.code), "Light rain")
        self.assertEqual(code_pictogram(current.code), Pictogram.RAIN)

    def test_missing_visibility_defaults_to_ten_km(self):
        payload = make_forecast_payload()
        del payload["hourly"]["visibility"]
        self.assertEqual(normalize_current(payload).visibility_km, 10)

        payload["hourly"]["visibility"] = [None, 2000.0, 2000.0]
        self.assertEqual(normalize_current(payload).visibility_km, 10)

    def test_missing_hourly_and_daily_use_defaults(self):
        payload = make_forecast_payload()
        del payload["hourly"]
        del payload["daily"]
        current = normalize_current(payload)
        self.assertEqual(current.visibility_km, FIELD_DEFAULTS["current.visibility_km"])
        self.assertEqual(current.dew_point, 0)
        self.assertEqual(current.uv_index, 0)
        self.assertIsNone(current.sunrise)
        self.assertIsNone(current.sunset)

    def test_missing_precipitation_and_snowfall_default_to_zero(self):
        payload = make_forecast_payload()
        del payload["current"]["precipitation"]
        payload["current"]["snowfall"] = None
        current = normalize_current(payload)
        self.assertEqual(current.precipitation, 0)
        self.assertEqual(current.snowfall, 0)

    def test_missing_current_block_returns_none(self):
        payload = make_forecast_payload()
        del payload["current"]
        self.assertIsNone(normalize_current(payload))

    def test_missing_required_field_raises(self):
        payload = make_forecast_payload()
        del payload["current"]["temperature_2m"]
        with self.assertRaises(NormalizationError):
            normalize_current(payload)

    def test_unknown_weather_code_raises(self):
        payload = make_forecast_payload()
        payload["current"]["weather_code"] = 42
        with self.assertRaises(NormalizationError):
            normalize_current(payload)

    def test_non_numeric_field_raises(self):
        payload = make_forecast_payload()
        payload["current"]["pressure_msl"] = "high"
        with self.assertRaises(NormalizationError):
            normalize_current(payload)


class TestNormalizeHourly(unittest.TestCase):
    def test_truncates_to_first_24_in_order(self):
        payload = make_forecast_payload(hours=30)
        hours = normalize_hourly(payload)
        self.assertEqual(len(hours), 24)
        self.assertEqual([h.time for h in hours], payload["hourly"]["time"][:24])

    def test_fewer_than_24_kept_as_is(self):
        hours = normalize_hourly(make_forecast_payload(hours=5))
        self.assertEqual(len(hours), 5)

    def test_rounds_temperature_and_wind(self):
        hours = normalize_hourly(make_forecast_payload(hours=2))
        self.assertEqual(hours[0].temperature, 20)
        self.assertEqual(hours[1].temperature, 21)
        self.assertEqual(hours[0].wind_speed, 6)
        self.assertEqual(hours[0].humidity, 50)
        self.assertEqual(hours[0].code, WeatherCode.OVERCAST)

    def test_missing_precipitation_probability_defaults_to_zero(self):
        payload = make_forecast_payload(hours=3)
        payload["hourly"]["precipitation_probability"] = [None, 30, None]
        hours = normalize_hourly(payload)
        self.assertEqual([h.precipitation_probability for h in hours], [0, 30, 0])

        del payload["hourly"]["precipitation_probability"]
        hours = normalize_hourly(payload)
        self.assertEqual([h.precipitation_probability for h in hours], [0, 0, 0])

    def test_without_time_axis_returns_none(self):
        payload = make_forecast_payload()
        del payload["hourly"]["time"]
        self.assertIsNone(normalize_hourly(payload))

    def test_short_series_raises(self):
        payload = make_forecast_payload(hours=3)
        payload["hourly"]["temperature_2m"] = [20.0]
        with self.assertRaises(NormalizationError):
            normalize_hourly(payload)


class TestNormalizeDaily(unittest.TestCase):
    def test_maps_every_day_without_truncation(self):
        days = normalize_daily(make_forecast_payload(days=9))
        self.assertEqual(len(days), 9)
        self.assertEqual(days[0].date, "2024-11-02")
        self.assertEqual(days[0].temperature_max, 29)
        self.assertEqual(days[0].temperature_min, 15)
        self.assertEqual(days[0].precipitation_probability, 40)
        self.assertEqual(days[0].sunrise, "2024-11-02T06:34")

    def test_missing_precipitation_probability_defaults_to_zero(self):
        payload = make_forecast_payload(days=2)
        payload["daily"]["precipitation_probability_max"] = [None, None]
        days = normalize_daily(payload)
        self.assertEqual([d.precipitation_probability for d in days], [0, 0])


class TestNormalizeForecast(unittest.TestCase):
    def test_sections_are_independent(self):
        payload = make_forecast_payload()
        del payload["current"]
        records = normalize_forecast(payload)
        self.assertIsNone(records.current)
        self.assertEqual(len(records.hourly), 3)
        self.assertEqual(len(records.daily), 2)

        payload = make_forecast_payload()
        del payload["hourly"]
        records = normalize_forecast(payload)
        self.assertIsNotNone(records.current)
        self.assertIsNone(records.hourly)
        self.assertIsNotNone(records.daily)

    def test_non_object_body_raises(self):
        with self.assertRaises(NormalizationError):
            normalize_forecast(["not", "an", "object"])


class TestNormalizeAirQuality(unittest.TestCase):
    def test_rounds_pollutants(self):
        air = normalize_air_quality(make_air_payload())
        self.assertEqual(air.aqi, 142)
        self.assertEqual(air.pm10, 121)
        self.assertEqual(air.pm2_5, 52)
        self.assertEqual(air.no2, 32)
        self.assertEqual(air.o3, 88)
        self.assertEqual(air.co, 512)

    def test_missing_pm2_5_is_zero(self):
        payload = make_air_payload()
        del payload["current"]["pm2_5"]
        air = normalize_air_quality(payload)
        self.assertEqual(air.pm2_5, 0)
        self.assertIsInstance(air.pm2_5, int)

    def test_everything_missing_is_zero(self):
        air = normalize_air_quality({"current": {"time": "2024-11-02T14:00"}})
        self.assertEqual((air.aqi, air.pm10, air.pm2_5, air.no2, air.o3, air.co), (0, 0, 0, 0, 0, 0))

    def test_missing_current_block_returns_none(self):
        self.assertIsNone(normalize_air_quality({"latitude": 28.75}))


if __name__ == "__main__":
    unittest.main()
