"""Normalized readings returned by the data-source clients.

Units are already converted: feet, mph, seconds, degrees.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Literal, Optional


TideState = Literal["rising", "falling", "high", "low"]


@dataclass(frozen=True)
class MarineForecastDay:
    """Forecast conditions for one day (or the current hour) at a break."""
    date: date
    wave_height_ft: float
    swell_height_ft: float
    swell_period_s: float
    swell_direction_deg: float
    wind_speed_mph: float
    wind_direction_deg: float  # where the wind blows FROM
    wind_wave_height_ft: float = 0.0
    # Break-local wall clock time, set on current-hour readings only
    local_time: Optional[datetime] = None


@dataclass(frozen=True)
class BuoyObservation:
    """Latest real-time buoy observation. Missing sensors are None."""
    station_id: str
    timestamp: datetime
    wave_height_ft: Optional[float] = None
    dominant_period_s: Optional[float] = None
    wind_speed_mph: Optional[float] = None
    wind_direction_deg: Optional[float] = None


@dataclass(frozen=True)
class TideConditions:
    """Predicted tide height and phase at a point in time."""
    tide_height_ft: float
    tide_state: TideState
