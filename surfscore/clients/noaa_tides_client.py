"""NOAA CO-OPS API client for tide predictions.

Provides the predicted tide height and phase at a station for now and for
each day of a forecast window. Heights are feet above MLLW, times are the
station's local standard/daylight time.

Docs: https://api.tidesandcurrents.noaa.gov/api/prod/
"""

import logging
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Literal, Optional

import pandas as pd
import requests

from surfscore.clients.cache import ResponseCache
from surfscore.core.readings import TideConditions, TideState
from surfscore.settings import FORECAST_HOUR, HTTP_TIMEOUT


COOPS_BASE_URL = "https://api.tidesandcurrents.noaa.gov/api/prod/datagetter"
CACHE_TTL_SECONDS = 3600  # 1 hour

logger = logging.getLogger(__name__)


def determine_tide_state(heights: list[float], idx: int) -> TideState:
    """Classify the tide phase at heights[idx] from its neighbours.

    A local peak is "high", a local trough is "low", otherwise the tide is
    "rising" when at or above the previous sample and "falling" below it.
    The first sample compares with the next one, the last with the previous.

    Args:
        heights: Predicted heights in time order
        idx: Index of the sample to classify

    Returns:
        One of "rising", "falling", "high", "low"
    """
    current = heights[idx]

    if 0 < idx < len(heights) - 1:
        prev_height = heights[idx - 1]
        next_height = heights[idx + 1]

        if current > prev_height and current > next_height:
            return "high"
        if current < prev_height and current < next_height:
            return "low"
        if current >= prev_height:
            return "rising"
        return "falling"

    if idx == 0 and len(heights) > 1:
        return "rising" if current <= heights[1] else "falling"

    if idx > 0:
        return "rising" if current >= heights[idx - 1] else "falling"

    return "rising"


class NOAATidesClient:
    """Client for fetching tide data from NOAA CO-OPS API."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        cache_path: Optional[Path] = None,
        use_cache: bool = True,
    ):
        """Initialize the NOAA Tides client.

        Args:
            session: HTTP session. Defaults to a new requests.Session.
            cache_path: Path to SQLite cache file. Defaults to <cache dir>/tides.db
            use_cache: Whether to cache responses.
        """
        self.session = session or requests.Session()
        self.cache = ResponseCache("tides", CACHE_TTL_SECONDS, cache_path) if use_cache else None

    def _fetch_data(self, params: dict) -> list:
        """Fetch data from CO-OPS API."""
        try:
            response = self.session.get(COOPS_BASE_URL, params=params, timeout=HTTP_TIMEOUT)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise NOAATidesError(f"Failed to fetch tide data: {e}") from e

        if "error" in data:
            raise NOAATidesError(f"CO-OPS API error: {data['error'].get('message', 'Unknown error')}")

        return data.get("predictions", [])

    def get_tide_predictions(
        self,
        station_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        interval: Literal["6", "h"] = "6",
    ) -> pd.DataFrame:
        """Get tide predictions for a station.

        Args:
            station_id: NOAA station ID (e.g., "9410230" for La Jolla)
            start_date: Start date. Defaults to today.
            end_date: End date. Defaults to start date.
            interval: "6" for 6-minute, "h" for hourly. Defaults to "6".

        Returns:
            DataFrame with columns: time (datetime), water_level_ft, in time order
        """
        if start_date is None:
            start_date = datetime.now().date()
        if end_date is None:
            end_date = start_date

        params = {
            "station": station_id,
            "begin_date": start_date.strftime("%Y%m%d"),
            "end_date": end_date.strftime("%Y%m%d"),
            "product": "predictions",
            "datum": "MLLW",
            "units": "english",
            "time_zone": "lst_ldt",
            "format": "json",
            "interval": interval,
        }

        cache_key = ResponseCache.make_key(params)
        records = self.cache.get(cache_key) if self.cache is not None else None

        if records is None:
            predictions = self._fetch_data(params)
            records = []
            for pred in predictions:
                try:
                    records.append({
                        "time": pred["t"],
                        "water_level_ft": float(pred["v"]),
                    })
                except (KeyError, TypeError, ValueError):
                    continue

            if self.cache is not None and records:
                self.cache.set(cache_key, records)

        df = pd.DataFrame(records, columns=["time", "water_level_ft"])
        if df.empty:
            return df

        df["time"] = pd.to_datetime(df["time"])
        return df.sort_values("time").reset_index(drop=True)

    def _conditions_at(self, df: pd.DataFrame, at: datetime) -> TideConditions:
        """Tide height and state at the prediction nearest to `at`."""
        distance = (df["time"] - pd.Timestamp(at)).abs()
        idx = int(distance.to_numpy().argmin())
        heights = df["water_level_ft"].tolist()

        return TideConditions(
            tide_height_ft=heights[idx],
            tide_state=determine_tide_state(heights, idx),
        )

    def get_tide_conditions(
        self,
        station_id: str,
        at: Optional[datetime] = None,
    ) -> Optional[TideConditions]:
        """Get the current tide height and whether it is rising or falling.

        Args:
            station_id: NOAA station ID
            at: Station-local time to evaluate. Defaults to now.

        Returns:
            TideConditions, or None if the station returned no predictions
        """
        if at is None:
            at = datetime.now()

        df = self.get_tide_predictions(station_id, start_date=at.date(), interval="6")
        if df.empty:
            logger.warning(f"No tide predictions for station {station_id}")
            return None

        return self._conditions_at(df, at)

    def get_tide_forecast_days(
        self,
        station_id: str,
        start_date: date,
        end_date: date,
        hour: int = FORECAST_HOUR,
    ) -> dict[date, TideConditions]:
        """Get one tide reading per day over a date range.

        Each day is evaluated at `hour` local time using hourly predictions.

        Args:
            station_id: NOAA station ID
            start_date: First day
            end_date: Last day (inclusive)
            hour: Local hour to evaluate each day

        Returns:
            Dict mapping date to TideConditions; days without predictions are absent
        """
        df = self.get_tide_predictions(station_id, start_date, end_date, interval="h")
        if df.empty:
            logger.warning(f"No tide forecast for station {station_id}")
            return {}

        by_day = {}
        day = start_date
        while day <= end_date:
            day_rows = df[df["time"].dt.date == day]
            if not day_rows.empty:
                at = datetime(day.year, day.month, day.day, hour)
                by_day[day] = self._conditions_at(df, at)
            day += timedelta(days=1)

        return by_day


class NOAATidesError(Exception):
    """Exception raised for NOAA Tides client errors."""

    pass
