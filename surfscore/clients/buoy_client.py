"""NDBC buoy client for real-time wave and wind observations.

Reads the standard meteorological realtime2 file for a station. The file
is whitespace separated with two header rows (column names, then units),
newest observation first. Columns are located by name so stations with
extra or missing sensors parse the same way. Missing values are "MM".

Docs: https://www.ndbc.noaa.gov/docs/ndbc_web_data_guide.pdf
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import pandas as pd
import requests

from surfscore.clients.cache import ResponseCache
from surfscore.core.geometry import meters_to_feet, ms_to_mph
from surfscore.core.readings import BuoyObservation
from surfscore.settings import HTTP_TIMEOUT


NDBC_TXT_URL = "https://www.ndbc.noaa.gov/data/realtime2/{station}.txt"

CACHE_TTL_SECONDS = 600  # 10 minutes for real-time buoy data

MISSING_VALUES = ("MM", "999", "99.0", "9999", "99.00")

logger = logging.getLogger(__name__)


class BuoyClient:
    """Client for fetching buoy data from NDBC."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        cache_path: Optional[Path] = None,
        use_cache: bool = True,
    ):
        """Initialize the Buoy client.

        Args:
            session: HTTP session. Defaults to a new requests.Session.
            cache_path: Path to SQLite cache file. Defaults to <cache dir>/buoy.db
            use_cache: Whether to cache responses.
        """
        self.session = session or requests.Session()
        self.cache = ResponseCache("buoy", CACHE_TTL_SECONDS, cache_path) if use_cache else None

    def _parse_ndbc_standard(self, text: str) -> list[dict]:
        """Parse NDBC standard meteorological data text format."""
        lines = text.strip().split("\n")
        # Need at least header + units + 1 data row
        if len(lines) < 3:
            return []

        headers = lines[0].lstrip("#").split()

        records = []
        for line in lines[2:]:
            if line.startswith("#"):
                continue
            parts = line.split()
            if len(parts) < len(headers):
                continue

            row = dict(zip(headers, parts))
            records.append({
                "time": self._parse_time(row),
                "wave_height_m": self._safe_float(row.get("WVHT")),
                "dominant_period_s": self._safe_float(row.get("DPD")),
                "wind_speed_mps": self._safe_float(row.get("WSPD")),
                "wind_direction_deg": self._safe_float(row.get("WDIR")),
            })

        return records

    def _parse_time(self, row: dict) -> Optional[str]:
        """Build an ISO UTC timestamp from the YY MM DD hh mm columns."""
        try:
            year = int(row["YY"])
            if year < 100:
                year += 2000
            observed = datetime(
                year, int(row["MM"]), int(row["DD"]), int(row["hh"]), int(row["mm"]),
                tzinfo=timezone.utc,
            )
        except (KeyError, ValueError):
            return None
        return observed.isoformat()

    def _safe_float(self, value: Optional[str]) -> Optional[float]:
        """Safely convert to float, returning None for missing values."""
        if value is None or value in MISSING_VALUES:
            return None
        try:
            return float(value)
        except ValueError:
            return None

    def get_standard_data(self, station_id: str) -> pd.DataFrame:
        """Get standard meteorological data from a buoy.

        Args:
            station_id: NDBC station ID (e.g., "46025")

        Returns:
            DataFrame with time, wave height, dominant period and wind, newest first
        """
        url = NDBC_TXT_URL.format(station=station_id)
        cache_key = ResponseCache.make_key(url)

        if self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                return pd.DataFrame(cached)

        try:
            response = self.session.get(url, timeout=HTTP_TIMEOUT)
            response.raise_for_status()
            records = self._parse_ndbc_standard(response.text)
        except requests.RequestException as e:
            raise BuoyError(f"Failed to fetch standard data for {station_id}: {e}") from e

        if self.cache is not None and records:
            self.cache.set(cache_key, records)

        return pd.DataFrame(records)

    def get_observation(self, station_id: str) -> Optional[BuoyObservation]:
        """Get the latest observation from a buoy in feet/mph.

        Args:
            station_id: NDBC station ID

        Returns:
            BuoyObservation, or None if the buoy reported no usable wave or wind data
        """
        df = self.get_standard_data(station_id)
        if df.empty:
            logger.warning(f"Insufficient buoy data for station {station_id}")
            return None

        latest = df.iloc[0]
        wave_height_m = _value(latest, "wave_height_m")
        period_s = _value(latest, "dominant_period_s")
        wind_speed_mps = _value(latest, "wind_speed_mps")

        if wave_height_m is None and period_s is None and wind_speed_mps is None:
            logger.warning(f"No usable buoy data for station {station_id}")
            return None

        time_str = latest.get("time")
        if isinstance(time_str, str):
            timestamp = datetime.fromisoformat(time_str)
        else:
            timestamp = datetime.now(timezone.utc)

        return BuoyObservation(
            station_id=station_id,
            timestamp=timestamp,
            wave_height_ft=meters_to_feet(wave_height_m),
            dominant_period_s=period_s,
            wind_speed_mph=ms_to_mph(wind_speed_mps),
            wind_direction_deg=_value(latest, "wind_direction_deg"),
        )


def _value(row: pd.Series, key: str) -> Optional[float]:
    """Read a float from a DataFrame row, mapping NaN/None to None."""
    value = row.get(key)
    if value is None or pd.isna(value):
        return None
    return float(value)


class BuoyError(Exception):
    """Exception raised for Buoy client errors."""

    pass
