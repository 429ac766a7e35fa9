"""Surf quality scoring algorithm.

Scoring approach:
- Five factors are scored independently against fixed point bands
- Factor points are summed and capped at 100
- The total maps onto a quality label

Scoring Factors (max points):
- Wave/face height: 20 - Best between 3 and 5 ft
- Swell period: 30 - Longer period = more organized swell
- Wind: 25 - Offshore best, calm close behind, onshore worthless
- Swell direction: 15 - Inside the break's optimal window
- Tide: 10 - Inside the break's optimal tide range (needs tide data)

Every band table is ordered and evaluated first-match-wins; a value that
matches no band scores 0.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from surfscore.core.geometry import angle_diff, is_in_range, is_within_30_degrees


MAX_SCORE = 100


class QualityLabel(Enum):
    """Human-readable surf quality."""
    EPIC = "Epic"
    VERY_GOOD = "Very Good"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"


@dataclass(frozen=True)
class Band:
    """A scored interval of a measured value."""
    points: int
    low: float = -math.inf
    high: float = math.inf
    low_inclusive: bool = True
    high_inclusive: bool = True

    def contains(self, value: float) -> bool:
        above_low = value >= self.low if self.low_inclusive else value > self.low
        below_high = value <= self.high if self.high_inclusive else value < self.high
        return above_low and below_high


# Face height in feet, bell curve around 3-5ft
WAVE_HEIGHT_BANDS = (
    Band(20, 3, 5),
    Band(15, 2, 3, high_inclusive=False),
    Band(15, 5, 8, low_inclusive=False),
    Band(10, 1, 2, high_inclusive=False),
    Band(5, 8, math.inf, low_inclusive=False),
)

# Swell period in seconds
SWELL_PERIOD_BANDS = (
    Band(30, 13),
    Band(25, 10),
    Band(15, 8),
    Band(5, 6),
)

# Minimum score for each label, highest first
LABEL_THRESHOLDS = (
    (81, QualityLabel.EPIC),
    (61, QualityLabel.VERY_GOOD),
    (41, QualityLabel.GOOD),
    (21, QualityLabel.FAIR),
)


@dataclass(frozen=True)
class BreakInfo:
    """Static scoring reference data for one surf break."""
    orientation_deg: float
    optimal_swell_dir_min: float
    optimal_swell_dir_max: float
    optimal_tide_low: float
    optimal_tide_high: float
    exposure_factor: Optional[float] = None


@dataclass(frozen=True)
class ConditionsInput:
    """Normalized conditions for one scoring call (today or one forecast day)."""
    wave_height_ft: float  # estimated face height
    swell_period_s: float
    swell_direction_deg: float
    wind_speed_mph: float
    wind_direction_deg: float  # where the wind blows FROM
    tide_height_ft: Optional[float] = None


@dataclass
class ScoringResult:
    """Complete scoring result with the per-factor breakdown."""
    total_score: int
    label: QualityLabel

    # Component points
    wave_height_score: int
    swell_period_score: int
    wind_score: int
    swell_direction_score: int
    tide_score: int

    wind_type: str = "onshore"  # "offshore", "calm", "cross-offshore", "onshore"
    summary: str = ""


def _band_points(bands: tuple, value: float) -> int:
    for band in bands:
        if band.contains(value):
            return band.points
    return 0


class SurfScorer:
    """Scores surf conditions for a break."""

    # Wind thresholds
    OFFSHORE_MIN_ANGLE = 150        # 25 pts
    CALM_WIND_MPH = 5               # 20 pts, below this direction is irrelevant
    CROSS_OFFSHORE_MIN_ANGLE = 120  # 10 pts

    WIND_OFFSHORE_POINTS = 25
    WIND_CALM_POINTS = 20
    WIND_CROSS_OFFSHORE_POINTS = 10

    SWELL_DIR_IN_RANGE_POINTS = 15
    SWELL_DIR_CLOSE_POINTS = 10

    TIDE_POINTS = 10

    def score_wave_height(self, wave_height_ft: float) -> int:
        """Score face height in feet (max 20)."""
        return _band_points(WAVE_HEIGHT_BANDS, wave_height_ft)

    def score_swell_period(self, swell_period_s: float) -> int:
        """Score swell period in seconds (max 30)."""
        return _band_points(SWELL_PERIOD_BANDS, swell_period_s)

    def score_wind(
        self,
        wind_speed_mph: float,
        wind_direction_deg: float,
        orientation_deg: float,
    ) -> tuple[int, str]:
        """Score wind relative to the break orientation (max 25).

        Offshore is checked first. Below the calm threshold any remaining
        direction scores as calm, so a light onshore breeze still gets 20.

        Args:
            wind_speed_mph: Wind speed
            wind_direction_deg: Wind direction (where it's coming FROM)
            orientation_deg: Break orientation bearing

        Returns:
            Tuple of (points, wind_type)
        """
        wind_angle = angle_diff(wind_direction_deg, orientation_deg)

        if wind_angle >= self.OFFSHORE_MIN_ANGLE:
            return self.WIND_OFFSHORE_POINTS, "offshore"
        if wind_speed_mph < self.CALM_WIND_MPH:
            return self.WIND_CALM_POINTS, "calm"
        if wind_angle >= self.CROSS_OFFSHORE_MIN_ANGLE:
            return self.WIND_CROSS_OFFSHORE_POINTS, "cross-offshore"
        return 0, "onshore"

    def score_swell_direction(self, swell_direction_deg: float, break_info: BreakInfo) -> int:
        """Score swell direction against the optimal window (max 15)."""
        dir_min = break_info.optimal_swell_dir_min
        dir_max = break_info.optimal_swell_dir_max

        if is_in_range(swell_direction_deg, dir_min, dir_max):
            return self.SWELL_DIR_IN_RANGE_POINTS
        if is_within_30_degrees(swell_direction_deg, dir_min, dir_max):
            return self.SWELL_DIR_CLOSE_POINTS
        return 0

    def score_tide(self, tide_height_ft: Optional[float], break_info: BreakInfo) -> int:
        """Score tide height against the optimal range (max 10, 0 without data)."""
        if tide_height_ft is None:
            return 0
        if break_info.optimal_tide_low <= tide_height_ft <= break_info.optimal_tide_high:
            return self.TIDE_POINTS
        return 0

    def score(self, break_info: BreakInfo, conditions: ConditionsInput) -> ScoringResult:
        """Calculate the complete surf score with its breakdown.

        Args:
            break_info: Break reference data
            conditions: Normalized conditions

        Returns:
            Complete scoring result
        """
        wave_height_score = self.score_wave_height(conditions.wave_height_ft)
        swell_period_score = self.score_swell_period(conditions.swell_period_s)
        wind_score, wind_type = self.score_wind(
            conditions.wind_speed_mph,
            conditions.wind_direction_deg,
            break_info.orientation_deg,
        )
        swell_direction_score = self.score_swell_direction(
            conditions.swell_direction_deg, break_info
        )
        tide_score = self.score_tide(conditions.tide_height_ft, break_info)

        total_score = min(
            wave_height_score
            + swell_period_score
            + wind_score
            + swell_direction_score
            + tide_score,
            MAX_SCORE,
        )
        label = classify_score(total_score)

        return ScoringResult(
            total_score=total_score,
            label=label,
            wave_height_score=wave_height_score,
            swell_period_score=swell_period_score,
            wind_score=wind_score,
            swell_direction_score=swell_direction_score,
            tide_score=tide_score,
            wind_type=wind_type,
            summary=self._generate_summary(label, conditions, wind_type),
        )

    def _generate_summary(
        self,
        label: QualityLabel,
        conditions: ConditionsInput,
        wind_type: str,
    ) -> str:
        summary_parts = [
            label.value,
            f"Waves: {conditions.wave_height_ft:.1f}ft @ {conditions.swell_period_s:.0f}s",
            f"Wind: {conditions.wind_speed_mph:.0f}mph {wind_type}",
        ]
        if conditions.tide_height_ft is not None:
            summary_parts.append(f"Tide: {conditions.tide_height_ft:.1f}ft")
        return " | ".join(summary_parts)


def classify_score(score: int) -> QualityLabel:
    """Map a 0-100 score to its quality label."""
    for threshold, label in LABEL_THRESHOLDS:
        if score >= threshold:
            return label
    return QualityLabel.POOR


_default_scorer = SurfScorer()


def calculate_score(break_info: BreakInfo, conditions: ConditionsInput) -> int:
    """Calculate the 0-100 surf quality score for one break and one day."""
    return _default_scorer.score(break_info, conditions).total_score


def get_quality_label(score: int) -> str:
    """Get the quality label text ("Epic" ... "Poor") for a score."""
    return classify_score(score).value
