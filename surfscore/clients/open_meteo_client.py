"""Open-Meteo client for marine (swell) and wind forecasts.

Combines two free APIs that need no key:
- Marine API: wave height, swell height/period/direction, wind-wave height
- Forecast API: 10m wind speed (km/h) and direction

Times are requested in the location's own timezone (timezone=auto).
Docs: https://open-meteo.com/en/docs/marine-weather-api
"""

import logging
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

import pandas as pd
import requests

from surfscore.clients.cache import ResponseCache
from surfscore.core.geometry import kmh_to_mph, meters_to_feet
from surfscore.core.readings import MarineForecastDay
from surfscore.settings import FORECAST_DAYS, FORECAST_HOUR, HTTP_TIMEOUT


MARINE_URL = "https://marine-api.open-meteo.com/v1/marine"
FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
CACHE_TTL_SECONDS = 3600  # 1 hour

MARINE_VARIABLES = [
    "wave_height",
    "wave_period",
    "wave_direction",
    "swell_wave_height",
    "swell_wave_period",
    "swell_wave_direction",
    "wind_wave_height",
]
WIND_VARIABLES = ["wind_speed_10m", "wind_direction_10m"]

logger = logging.getLogger(__name__)


class MarineForecastClient:
    """Client for fetching hourly marine and wind forecasts from Open-Meteo."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        cache_path: Optional[Path] = None,
        use_cache: bool = True,
    ):
        """Initialize the Open-Meteo client.

        Args:
            session: HTTP session. Defaults to a new requests.Session.
            cache_path: Path to SQLite cache file. Defaults to <cache dir>/marine.db
            use_cache: Whether to cache responses.
        """
        self.session = session or requests.Session()
        self.use_cache = use_cache
        self.cache = ResponseCache("marine", CACHE_TTL_SECONDS, cache_path) if use_cache else None

    def _get_json(self, url: str, params: dict) -> dict:
        try:
            response = self.session.get(url, params=params, timeout=HTTP_TIMEOUT)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise MarineForecastError(f"Open-Meteo request to {url} failed: {e}") from e

        if data.get("error"):
            raise MarineForecastError(f"Open-Meteo error: {data.get('reason', 'Unknown error')}")
        if "hourly" not in data:
            raise MarineForecastError(f"Open-Meteo response from {url} has no hourly data")
        return data

    def _fetch_hourly(self, lat: float, lon: float, days: int) -> tuple[list, int]:
        """Fetch merged marine + wind hourly records.

        Returns:
            Tuple of (records, utc_offset_seconds)
        """
        common = {
            "latitude": round(lat, 4),
            "longitude": round(lon, 4),
            "timezone": "auto",
            "forecast_days": days,
        }
        cache_key = ResponseCache.make_key(common)

        if self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                return cached["records"], cached["utc_offset_seconds"]

        marine = self._get_json(MARINE_URL, {**common, "hourly": ",".join(MARINE_VARIABLES)})
        forecast = self._get_json(FORECAST_URL, {**common, "hourly": ",".join(WIND_VARIABLES)})

        wind_by_time = {}
        wind_hourly = forecast["hourly"]
        for i, t in enumerate(wind_hourly.get("time", [])):
            wind_by_time[t] = {
                name: _at(wind_hourly.get(name), i) for name in WIND_VARIABLES
            }

        records = []
        marine_hourly = marine["hourly"]
        for i, t in enumerate(marine_hourly.get("time", [])):
            record = {"time": t}
            for name in MARINE_VARIABLES:
                record[name] = _at(marine_hourly.get(name), i)
            record.update(wind_by_time.get(t, {name: None for name in WIND_VARIABLES}))
            records.append(record)

        utc_offset = int(marine.get("utc_offset_seconds", 0) or 0)

        if self.cache is not None and records:
            self.cache.set(cache_key, {"records": records, "utc_offset_seconds": utc_offset})

        return records, utc_offset

    def get_hourly_forecast(self, lat: float, lon: float, days: int = FORECAST_DAYS) -> pd.DataFrame:
        """Get the hourly forecast in feet/mph.

        Args:
            lat: Latitude
            lon: Longitude
            days: Number of forecast days

        Returns:
            DataFrame indexed by local time with columns: wave_height_ft,
            swell_height_ft, swell_period_s, swell_direction_deg,
            wind_wave_height_ft, wind_speed_mph, wind_direction_deg
        """
        records, _ = self._fetch_hourly(lat, lon, days)
        return _to_frame(records)

    def get_current_conditions(
        self,
        lat: float,
        lon: float,
        now: Optional[datetime] = None,
        days: int = 1,
    ) -> MarineForecastDay:
        """Get the forecast for the current hour at a location.

        Args:
            lat: Latitude
            lon: Longitude
            now: Local time to look up. Defaults to now in the location's timezone.
            days: Forecast days to request (match get_forecast to share its cache entry)

        Returns:
            MarineForecastDay for the current hour, or the first hour if not found,
            with local_time set to the break-local time that was looked up
        """
        records, utc_offset = self._fetch_hourly(lat, lon, days)
        df = _to_frame(records)
        if df.empty:
            raise MarineForecastError(f"No marine forecast hours for {lat},{lon}")

        if now is None:
            now = local_now(utc_offset)

        current_hour = pd.Timestamp(now).floor("h")
        if current_hour in df.index:
            return _row_to_day(df.loc[current_hour], current_hour.date(), local_time=now)

        logger.debug(f"Hour {current_hour} not in forecast for {lat},{lon}, using first hour")
        return _row_to_day(df.iloc[0], df.index[0].date(), local_time=now)

    def get_forecast(
        self,
        lat: float,
        lon: float,
        days: int = FORECAST_DAYS,
        hour: int = FORECAST_HOUR,
    ) -> list[MarineForecastDay]:
        """Get one forecast reading per day.

        Each day is sampled at the hour closest to `hour` (local time).

        Args:
            lat: Latitude
            lon: Longitude
            days: Number of days
            hour: Local hour to sample

        Returns:
            List of MarineForecastDay in date order
        """
        df = self.get_hourly_forecast(lat, lon, days)
        if df.empty:
            return []

        forecast_days = []
        for day, group in df.groupby(df.index.date):
            distance = abs(group.index.hour - hour)
            row = group.iloc[int(distance.argmin())]
            forecast_days.append(_row_to_day(row, day))

        return forecast_days


def local_now(utc_offset_seconds: int) -> datetime:
    """Naive wall clock time at a location, independent of the host timezone."""
    return (datetime.now(timezone.utc) + timedelta(seconds=utc_offset_seconds)).replace(tzinfo=None)


def _at(values: Optional[list], i: int):
    if values is None or i >= len(values):
        return None
    return values[i]


def _to_frame(records: list) -> pd.DataFrame:
    """Convert raw API records to a unit-converted DataFrame.

    Missing values become 0, the same as a calm/flat reading.
    """
    if not records:
        return pd.DataFrame()

    raw = pd.DataFrame(records)
    raw["time"] = pd.to_datetime(raw["time"])
    raw = raw.set_index("time").sort_index()
    raw = raw.apply(pd.to_numeric, errors="coerce").fillna(0.0)

    return pd.DataFrame(
        {
            "wave_height_ft": raw["wave_height"].map(meters_to_feet),
            "swell_height_ft": raw["swell_wave_height"].map(meters_to_feet),
            "swell_period_s": raw["swell_wave_period"],
            "swell_direction_deg": raw["swell_wave_direction"],
            "wind_wave_height_ft": raw["wind_wave_height"].map(meters_to_feet),
            "wind_speed_mph": raw["wind_speed_10m"].map(kmh_to_mph),
            "wind_direction_deg": raw["wind_direction_10m"],
        },
        index=raw.index,
    )


def _row_to_day(row: pd.Series, day: date, local_time: Optional[datetime] = None) -> MarineForecastDay:
    return MarineForecastDay(
        date=day,
        wave_height_ft=float(row["wave_height_ft"]),
        swell_height_ft=float(row["swell_height_ft"]),
        swell_period_s=float(row["swell_period_s"]),
        swell_direction_deg=float(row["swell_direction_deg"]),
        wind_speed_mph=float(row["wind_speed_mph"]),
        wind_direction_deg=float(row["wind_direction_deg"]),
        wind_wave_height_ft=float(row["wind_wave_height_ft"]),
        local_time=local_time,
    )


class MarineForecastError(Exception):
    """Exception raised for Open-Meteo client errors."""

    pass
