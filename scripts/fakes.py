"""Offline stand-ins for HTTP sessions and data-source clients used by the tests."""

from datetime import date, datetime, timedelta, timezone

import requests

from surfscore.clients.buoy_client import BuoyError
from surfscore.clients.noaa_tides_client import NOAATidesError
from surfscore.clients.open_meteo_client import MarineForecastError
from surfscore.core.breaks import Coordinates, SurfBreak
from surfscore.core.readings import BuoyObservation, MarineForecastDay, TideConditions


class FakeResponse:
    """Minimal requests.Response replacement."""

    def __init__(self, text: str = "", json_data=None, status_code: int = 200):
        self.text = text
        self._json = json_data
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")

    def json(self):
        if self._json is None:
            raise ValueError("No JSON body")
        return self._json


class FakeSession:
    """Returns canned responses keyed by URL prefix and records calls."""

    def __init__(self, routes: dict):
        self.routes = routes
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params))
        for prefix, response in self.routes.items():
            if url.startswith(prefix):
                if isinstance(response, Exception):
                    raise response
                return response
        return FakeResponse(status_code=404)


def make_break(**overrides) -> SurfBreak:
    """A west-facing beach break with a tide station and a buoy."""
    fields = {
        "id": "test_beach",
        "name": "Test Beach",
        "region": "Test Coast",
        "coordinates": Coordinates(lat=33.0, lon=-117.3),
        "break_type": "beach",
        "orientation_deg": 270,
        "optimal_swell_dir_min": 260,
        "optimal_swell_dir_max": 280,
        "optimal_tide_low": 1.0,
        "optimal_tide_high": 4.0,
        "exposure_factor": None,
        "nearest_tide_station": "9410230",
        "nearest_buoy_station": "46254",
    }
    fields.update(overrides)
    return SurfBreak(**fields)


def make_forecast_day(day: date, **overrides) -> MarineForecastDay:
    fields = {
        "date": day,
        "wave_height_ft": 5.0,
        "swell_height_ft": 5.0,
        "swell_period_s": 14.0,
        "swell_direction_deg": 270.0,
        "wind_speed_mph": 12.0,
        "wind_direction_deg": 90.0,
    }
    fields.update(overrides)
    return MarineForecastDay(**fields)


class FakeMarineClient:
    def __init__(self, days: list, current=None, error: bool = False):
        self.days = days
        self.current = current or (days[0] if days else None)
        self.error = error

    def get_forecast(self, lat, lon, days=7, hour=8):
        if self.error:
            raise MarineForecastError("Open-Meteo request failed: 503")
        return self.days

    def get_current_conditions(self, lat, lon, now=None, days=1):
        if self.error or self.current is None:
            raise MarineForecastError("No marine forecast hours")
        return self.current


class FakeBuoyClient:
    def __init__(self, observation=None, error: bool = False):
        self.observation = observation
        self.error = error
        self.requested = []

    def get_observation(self, station_id):
        self.requested.append(station_id)
        if self.error:
            raise BuoyError(f"Failed to fetch standard data for {station_id}: timeout")
        return self.observation


class FakeTidesClient:
    def __init__(self, today=None, by_day=None, error: bool = False):
        self.today = today
        self.by_day = by_day or {}
        self.error = error
        self.requested_at = []

    def get_tide_conditions(self, station_id, at=None):
        self.requested_at.append(at)
        if self.error:
            raise NOAATidesError("CO-OPS API error: station not found")
        return self.today

    def get_tide_forecast_days(self, station_id, start_date, end_date, hour=8):
        if self.error:
            raise NOAATidesError("CO-OPS API error: station not found")
        return self.by_day


def make_observation(**overrides) -> BuoyObservation:
    fields = {
        "station_id": "46254",
        "timestamp": datetime(2024, 6, 1, 15, 0, tzinfo=timezone.utc),
        "wave_height_ft": 4.0,
        "dominant_period_s": 15.0,
        "wind_speed_mph": 3.0,
        "wind_direction_deg": 80.0,
    }
    fields.update(overrides)
    return BuoyObservation(**fields)


def make_tide(height: float = 2.5, state: str = "rising") -> TideConditions:
    return TideConditions(tide_height_ft=height, tide_state=state)


def hourly_times(start: date, days: int) -> list[str]:
    """Open-Meteo style local time strings, one per hour."""
    first = datetime(start.year, start.month, start.day)
    return [
        (first + timedelta(hours=h)).strftime("%Y-%m-%dT%H:%M")
        for h in range(days * 24)
    ]
