"""Condition fusion.

Merges a marine forecast with an optional buoy observation and an optional
tide reading into the ConditionsInput the scorer consumes.

A buoy value is used only when it is present and strictly positive. The
NDBC feed reports a dead sensor the same way as a missing one, so a zero is
treated as "no data" and the forecast value is kept. Swell direction always
comes from the forecast.
"""

from dataclasses import dataclass, field
from typing import Optional

from surfscore.core.readings import BuoyObservation, MarineForecastDay, TideConditions
from surfscore.core.scorer import ConditionsInput


DEFAULT_EXPOSURE_FACTOR = 0.7


@dataclass(frozen=True)
class FusedConditions:
    """Scoring input plus the intermediate heights used to build it."""
    conditions: ConditionsInput
    wave_height_ft: float
    swell_height_ft: float
    face_height_ft: float
    tide_state: Optional[str] = None
    buoy_fields: tuple[str, ...] = field(default_factory=tuple)

    @property
    def used_buoy(self) -> bool:
        return bool(self.buoy_fields)


def prefer_observation(observed: Optional[float], forecast: float) -> float:
    """Return the observed value if it is present and > 0, else the forecast."""
    if observed is not None and observed > 0:
        return observed
    return forecast


def face_height(swell_height_ft: float, exposure_factor: Optional[float] = None) -> float:
    """Estimate breaking face height from open-ocean swell height."""
    if exposure_factor is None:
        exposure_factor = DEFAULT_EXPOSURE_FACTOR
    return swell_height_ft * exposure_factor


def fuse_conditions(
    forecast: MarineForecastDay,
    observation: Optional[BuoyObservation] = None,
    tide: Optional[TideConditions] = None,
    exposure_factor: Optional[float] = None,
) -> FusedConditions:
    """Build the scoring input for one break and one day.

    Args:
        forecast: Marine forecast for the day (required)
        observation: Real-time buoy observation; only pass one for today
        tide: Tide reading for the day, if the break has a station
        exposure_factor: Break exposure factor, 0.7 when None

    Returns:
        FusedConditions with the normalized ConditionsInput
    """
    buoy_fields = []

    def pick(name: str, observed: Optional[float], forecast_value: float) -> float:
        if observed is not None and observed > 0:
            buoy_fields.append(name)
        return prefer_observation(observed, forecast_value)

    observed_wave = observation.wave_height_ft if observation else None
    observed_period = observation.dominant_period_s if observation else None
    observed_wind_speed = observation.wind_speed_mph if observation else None
    observed_wind_dir = observation.wind_direction_deg if observation else None

    wave_height_ft = pick("wave_height_ft", observed_wave, forecast.wave_height_ft)
    # The buoy only reports total wave height, which also stands in for swell height
    swell_height_ft = prefer_observation(observed_wave, forecast.swell_height_ft)
    swell_period_s = pick("swell_period_s", observed_period, forecast.swell_period_s)
    wind_speed_mph = pick("wind_speed_mph", observed_wind_speed, forecast.wind_speed_mph)
    wind_direction_deg = pick("wind_direction_deg", observed_wind_dir, forecast.wind_direction_deg)

    face_height_ft = face_height(swell_height_ft, exposure_factor)

    conditions = ConditionsInput(
        wave_height_ft=face_height_ft,
        swell_period_s=swell_period_s,
        swell_direction_deg=forecast.swell_direction_deg,
        wind_speed_mph=wind_speed_mph,
        wind_direction_deg=wind_direction_deg,
        tide_height_ft=tide.tide_height_ft if tide else None,
    )

    return FusedConditions(
        conditions=conditions,
        wave_height_ft=wave_height_ft,
        swell_height_ft=swell_height_ft,
        face_height_ft=face_height_ft,
        tide_state=tide.tide_state if tide else None,
        buoy_fields=tuple(buoy_fields),
    )
