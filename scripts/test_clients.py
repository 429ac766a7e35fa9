#!/usr/bin/env python3
"""Offline tests for the Open-Meteo, NOAA tides and NDBC buoy clients.

HTTP is replaced by canned responses; no network access is needed.

Run from project root:
    python scripts/test_clients.py
"""

import sys
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from fakes import FakeResponse, FakeSession, hourly_times
from surfscore.clients.buoy_client import NDBC_TXT_URL, BuoyClient, BuoyError
from surfscore.clients.cache import ResponseCache
from surfscore.clients.noaa_tides_client import (
    COOPS_BASE_URL,
    NOAATidesClient,
    NOAATidesError,
    determine_tide_state,
)
from surfscore.clients.open_meteo_client import (
    FORECAST_URL,
    MARINE_URL,
    MarineForecastClient,
    MarineForecastError,
    local_now,
)


NDBC_SAMPLE = """\
#YY  MM DD hh mm WDIR WSPD GST  WVHT   DPD   APD MWD   PRES  ATMP  WTMP  DEWP  VIS PTDY  TIDE
#yr  mo dy hr mn degT m/s  m/s     m   sec   sec degT   hPa  degC  degC  degC  nmi  hPa    ft
2024 01 15 12 00 270  5.0  6.0   1.2    12   8.1 280 1015.2  15.1  16.0  10.2   MM   MM    MM
2024 01 15 11 30 260  4.0  5.0   1.1    11   7.9 275 1015.0  15.0  16.0  10.1   MM   MM    MM
"""

NDBC_MISSING_WAVES = """\
#YY  MM DD hh mm WDIR WSPD GST  WVHT   DPD   APD MWD   PRES
#yr  mo dy hr mn degT m/s  m/s     m   sec   sec degT   hPa
2024 01 15 12 00  MM   MM   MM    MM    MM    MM  MM 1015.2
"""


# -- Buoy -------------------------------------------------------------------

def make_buoy_client(text: str = NDBC_SAMPLE, status_code: int = 200) -> BuoyClient:
    url = NDBC_TXT_URL.format(station="46254")
    session = FakeSession({url: FakeResponse(text=text, status_code=status_code)})
    return BuoyClient(session=session, use_cache=False)


def test_buoy_observation_is_converted():
    observation = make_buoy_client().get_observation("46254")

    assert observation is not None
    assert observation.station_id == "46254"
    assert abs(observation.wave_height_ft - 1.2 * 3.28084) < 1e-6
    assert observation.dominant_period_s == 12.0
    assert abs(observation.wind_speed_mph - 5.0 * 2.23694) < 1e-6
    assert observation.wind_direction_deg == 270.0
    assert observation.timestamp == datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


def test_buoy_columns_found_by_header_name():
    records = make_buoy_client()._parse_ndbc_standard(NDBC_SAMPLE)
    assert len(records) == 2
    assert records[1]["wave_height_m"] == 1.1
    assert records[1]["wind_direction_deg"] == 260.0


def test_buoy_without_wave_or_wind_data_is_absent():
    assert make_buoy_client(NDBC_MISSING_WAVES).get_observation("46254") is None


def test_buoy_short_file_is_absent():
    assert make_buoy_client("#YY MM DD\n#yr mo dy\n").get_observation("46254") is None


def test_buoy_http_error_raises():
    with pytest.raises(BuoyError):
        make_buoy_client(status_code=503).get_observation("46254")


# -- Tides ------------------------------------------------------------------

def test_tide_state_from_neighbours():
    assert determine_tide_state([1.0, 2.0, 1.5], 1) == "high"
    assert determine_tide_state([2.0, 1.0, 1.5], 1) == "low"
    assert determine_tide_state([1.0, 1.5, 2.0], 1) == "rising"
    assert determine_tide_state([1.5, 1.5, 1.0], 1) == "rising"  # level with previous
    assert determine_tide_state([2.0, 1.5, 1.0], 1) == "falling"
    assert determine_tide_state([1.0, 1.2], 0) == "rising"
    assert determine_tide_state([1.2, 1.0], 0) == "falling"
    assert determine_tide_state([1.2, 1.0], 1) == "falling"
    assert determine_tide_state([1.0], 0) == "rising"


def make_tides_client(payload: dict) -> NOAATidesClient:
    session = FakeSession({COOPS_BASE_URL: FakeResponse(json_data=payload)})
    return NOAATidesClient(session=session, use_cache=False)


def test_current_tide_uses_nearest_prediction():
    payload = {
        "predictions": [
            {"t": "2024-06-01 07:54", "v": "2.100"},
            {"t": "2024-06-01 08:00", "v": "2.300"},
            {"t": "2024-06-01 08:06", "v": "2.500"},
        ]
    }
    client = make_tides_client(payload)

    tide = client.get_tide_conditions("9410230", at=datetime(2024, 6, 1, 8, 1))

    assert tide is not None
    assert tide.tide_height_ft == 2.3
    assert tide.tide_state == "rising"


def test_tide_request_parameters():
    client = make_tides_client({"predictions": [{"t": "2024-06-01 08:00", "v": "1.0"}]})
    client.get_tide_conditions("9410230", at=datetime(2024, 6, 1, 8, 0))

    _, params = client.session.calls[0]
    assert params["station"] == "9410230"
    assert params["begin_date"] == "20240601"
    assert params["datum"] == "MLLW"
    assert params["units"] == "english"
    assert params["interval"] == "6"


def test_no_tide_predictions_is_absent():
    client = make_tides_client({"predictions": []})
    assert client.get_tide_conditions("9410230", at=datetime(2024, 6, 1, 8, 0)) is None


def test_tide_api_error_raises():
    client = make_tides_client({"error": {"message": "No data was found"}})
    with pytest.raises(NOAATidesError):
        client.get_tide_conditions("9410230", at=datetime(2024, 6, 1, 8, 0))


def test_tide_forecast_days():
    predictions = []
    for day in (1, 2):
        for hour in range(24):
            # Falling through the morning on day 1, rising on day 2
            value = 4.0 - hour * 0.1 if day == 1 else 1.0 + hour * 0.1
            predictions.append({"t": f"2024-06-0{day} {hour:02d}:00", "v": f"{value:.3f}"})
    client = make_tides_client({"predictions": predictions})

    by_day = client.get_tide_forecast_days(
        "9410230", date(2024, 6, 1), date(2024, 6, 3), hour=8
    )

    assert set(by_day) == {date(2024, 6, 1), date(2024, 6, 2)}
    assert abs(by_day[date(2024, 6, 1)].tide_height_ft - 3.2) < 1e-9
    assert by_day[date(2024, 6, 1)].tide_state == "falling"
    assert abs(by_day[date(2024, 6, 2)].tide_height_ft - 1.8) < 1e-9
    assert by_day[date(2024, 6, 2)].tide_state == "rising"


# -- Open-Meteo -------------------------------------------------------------

def make_marine_payloads(start: date, days: int, null_wind: bool = False):
    times = hourly_times(start, days)
    hours = len(times)
    marine = {
        "utc_offset_seconds": -25200,
        "hourly": {
            "time": times,
            "wave_height": [1.0 + (i % 24) * 0.01 for i in range(hours)],
            "wave_period": [10.0] * hours,
            "wave_direction": [270.0] * hours,
            "swell_wave_height": [0.5 * (1 + i // 24) for i in range(hours)],
            "swell_wave_period": [12.0 + i // 24 for i in range(hours)],
            "swell_wave_direction": [265.0] * hours,
            "wind_wave_height": [0.2] * hours,
        },
    }
    forecast = {
        "hourly": {
            "time": times,
            "wind_speed_10m": [None if null_wind else 16.0] * hours,
            "wind_direction_10m": [90.0] * hours,
        }
    }
    return marine, forecast


def make_marine_client(marine: dict, forecast: dict, status_code: int = 200) -> MarineForecastClient:
    session = FakeSession({
        MARINE_URL: FakeResponse(json_data=marine, status_code=status_code),
        FORECAST_URL: FakeResponse(json_data=forecast),
    })
    return MarineForecastClient(session=session, use_cache=False)


def test_marine_forecast_one_reading_per_day():
    marine, forecast = make_marine_payloads(date(2024, 6, 1), days=3)
    client = make_marine_client(marine, forecast)

    days = client.get_forecast(33.0, -117.3, days=3, hour=8)

    assert [d.date for d in days] == [date(2024, 6, 1), date(2024, 6, 2), date(2024, 6, 3)]
    first = days[0]
    assert abs(first.wave_height_ft - 1.08 * 3.28084) < 1e-6
    assert abs(first.swell_height_ft - 0.5 * 3.28084) < 1e-6
    assert first.swell_period_s == 12.0
    assert first.swell_direction_deg == 265.0
    assert abs(first.wind_speed_mph - 16.0 * 0.621371) < 1e-6
    assert first.wind_direction_deg == 90.0
    assert abs(first.wind_wave_height_ft - 0.2 * 3.28084) < 1e-6
    assert first.local_time is None
    assert days[2].swell_period_s == 14.0


def test_marine_current_hour():
    marine, forecast = make_marine_payloads(date(2024, 6, 1), days=2)
    client = make_marine_client(marine, forecast)

    current = client.get_current_conditions(33.0, -117.3, now=datetime(2024, 6, 2, 5, 40))

    assert current.date == date(2024, 6, 2)
    assert current.local_time == datetime(2024, 6, 2, 5, 40)
    assert abs(current.wave_height_ft - 1.05 * 3.28084) < 1e-6
    assert abs(current.swell_height_ft - 1.0 * 3.28084) < 1e-6


def test_marine_current_hour_outside_forecast_uses_first_hour():
    marine, forecast = make_marine_payloads(date(2024, 6, 1), days=1)
    client = make_marine_client(marine, forecast)

    current = client.get_current_conditions(33.0, -117.3, now=datetime(2030, 1, 1, 12, 0))

    assert current.date == date(2024, 6, 1)
    assert abs(current.wave_height_ft - 1.0 * 3.28084) < 1e-6


def test_local_now_uses_location_offset():
    before = datetime.now(timezone.utc).replace(tzinfo=None)
    local = local_now(-25200)
    after = datetime.now(timezone.utc).replace(tzinfo=None)

    assert before - timedelta(hours=7) <= local <= after - timedelta(hours=7)
    assert local.tzinfo is None


def test_marine_current_hour_defaults_to_location_clock():
    marine, forecast = make_marine_payloads(date(2024, 6, 1), days=1)
    client = make_marine_client(marine, forecast)

    current = client.get_current_conditions(33.0, -117.3)
    expected = datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(hours=7)

    assert abs((current.local_time - expected).total_seconds()) < 60


def test_marine_missing_values_become_zero():
    marine, forecast = make_marine_payloads(date(2024, 6, 1), days=1, null_wind=True)
    client = make_marine_client(marine, forecast)

    days = client.get_forecast(33.0, -117.3, days=1)

    assert days[0].wind_speed_mph == 0.0


def test_marine_http_error_raises():
    marine, forecast = make_marine_payloads(date(2024, 6, 1), days=1)
    client = make_marine_client(marine, forecast, status_code=500)

    with pytest.raises(MarineForecastError):
        client.get_forecast(33.0, -117.3, days=1)


# -- Cache ------------------------------------------------------------------

def test_response_cache_round_trip(tmp_path):
    cache = ResponseCache("test", ttl_seconds=60, cache_path=tmp_path / "test.db")
    key = ResponseCache.make_key({"station": "9410230", "date": "20240601"})

    assert cache.get(key) is None
    cache.set(key, [{"time": "2024-06-01 08:00", "water_level_ft": 2.3}])
    assert cache.get(key) == [{"time": "2024-06-01 08:00", "water_level_ft": 2.3}]


def test_response_cache_expires(tmp_path):
    cache = ResponseCache("test", ttl_seconds=-1, cache_path=tmp_path / "test.db")
    key = ResponseCache.make_key("https://example.test/data")
    cache.set(key, {"a": 1})
    assert cache.get(key) is None


def test_cached_buoy_data_skips_second_request(tmp_path):
    url = NDBC_TXT_URL.format(station="46254")
    session = FakeSession({url: FakeResponse(text=NDBC_SAMPLE)})
    client = BuoyClient(session=session, cache_path=tmp_path / "buoy.db")

    client.get_observation("46254")
    client.get_observation("46254")

    assert len(session.calls) == 1


def run_all_tests():
    """Run the tests that need no pytest fixtures."""
    tests = [
        test_buoy_observation_is_converted,
        test_buoy_columns_found_by_header_name,
        test_buoy_without_wave_or_wind_data_is_absent,
        test_buoy_short_file_is_absent,
        test_buoy_http_error_raises,
        test_tide_state_from_neighbours,
        test_current_tide_uses_nearest_prediction,
        test_tide_request_parameters,
        test_no_tide_predictions_is_absent,
        test_tide_api_error_raises,
        test_tide_forecast_days,
        test_marine_forecast_one_reading_per_day,
        test_marine_current_hour,
        test_marine_current_hour_outside_forecast_uses_first_hour,
        test_local_now_uses_location_offset,
        test_marine_current_hour_defaults_to_location_clock,
        test_marine_missing_values_become_zero,
        test_marine_http_error_raises,
    ]

    failed = 0
    for test_func in tests:
        try:
            test_func()
            print(f"  ✓ {test_func.__name__}")
        except AssertionError as e:
            failed += 1
            print(f"  ✗ FAILED: {test_func.__name__} {e}")

    print(f"\n  Passed: {len(tests) - failed}  Failed: {failed}  Total: {len(tests)}")
    return failed == 0


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
