"""Compass geometry and unit conversion helpers.

All bearings are compass degrees (0 = North, clockwise). Conversions are
applied by the data-source clients so that everything reaching the scorer
is already in feet, mph, seconds and degrees.
"""

from typing import Optional


METERS_TO_FEET = 3.28084
KMH_TO_MPH = 0.621371
MS_TO_MPH = 2.23694

# Partial-credit band around the edges of a break's optimal swell window
CLOSE_MISS_DEG = 30

COMPASS_POINTS = [
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
]


def normalize_bearing(deg: float) -> float:
    """Wrap a bearing into [0, 360)."""
    return deg % 360


def angle_diff(a: float, b: float) -> float:
    """Absolute angular difference between two compass bearings.

    Args:
        a: First bearing in degrees
        b: Second bearing in degrees

    Returns:
        Difference in degrees, 0-180
    """
    diff = abs(a - b) % 360
    if diff > 180:
        diff = 360 - diff
    return diff


def is_in_range(direction: float, min_deg: float, max_deg: float) -> bool:
    """Check if a bearing lies on the arc from min_deg clockwise to max_deg.

    The arc is closed at both ends and may wrap through north
    (e.g. min=350, max=20 contains 5).

    Args:
        direction: Bearing to test
        min_deg: Start of the arc
        max_deg: End of the arc

    Returns:
        True if direction is inside the arc
    """
    direction = normalize_bearing(direction)
    min_deg = normalize_bearing(min_deg)
    max_deg = normalize_bearing(max_deg)

    if min_deg <= max_deg:
        return min_deg <= direction <= max_deg
    # Wraps around 0/360
    return direction >= min_deg or direction <= max_deg


def is_within_30_degrees(direction: float, min_deg: float, max_deg: float) -> bool:
    """Check if a bearing is within 30 degrees of either arc endpoint.

    Range membership is not considered, only distance to the edges.
    """
    return (
        angle_diff(direction, min_deg) <= CLOSE_MISS_DEG
        or angle_diff(direction, max_deg) <= CLOSE_MISS_DEG
    )


def meters_to_feet(meters: Optional[float]) -> Optional[float]:
    """Convert meters to feet, passing None through."""
    if meters is None:
        return None
    return meters * METERS_TO_FEET


def kmh_to_mph(kmh: Optional[float]) -> Optional[float]:
    """Convert km/h to mph, passing None through."""
    if kmh is None:
        return None
    return kmh * KMH_TO_MPH


def ms_to_mph(ms: Optional[float]) -> Optional[float]:
    """Convert m/s to mph, passing None through."""
    if ms is None:
        return None
    return ms * MS_TO_MPH


def direction_to_compass(degrees: Optional[float]) -> str:
    """Convert degrees to a 16-point compass direction.

    Args:
        degrees: Direction in degrees (0-360)

    Returns:
        Compass direction (N, NNE, NE, etc.), or "Unknown"
    """
    if degrees is None:
        return "Unknown"

    idx = round(normalize_bearing(degrees) / 22.5) % 16
    return COMPASS_POINTS[idx]
