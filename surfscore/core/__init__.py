"""Core surf condition fusion, scoring and ranking engine."""

from surfscore.core.breaks import (
    BreakDatabase,
    Coordinates,
    SurfBreak,
    get_break,
    get_break_database,
)
from surfscore.core.fusion import (
    FusedConditions,
    fuse_conditions,
)
from surfscore.core.geometry import (
    angle_diff,
    is_in_range,
    is_within_30_degrees,
)
from surfscore.core.readings import (
    BuoyObservation,
    MarineForecastDay,
    TideConditions,
)
from surfscore.core.scorer import (
    BreakInfo,
    ConditionsInput,
    QualityLabel,
    ScoringResult,
    SurfScorer,
    calculate_score,
    get_quality_label,
)

__all__ = [
    # Breaks
    "BreakDatabase",
    "Coordinates",
    "SurfBreak",
    "get_break",
    "get_break_database",
    # Fusion
    "FusedConditions",
    "fuse_conditions",
    # Geometry
    "angle_diff",
    "is_in_range",
    "is_within_30_degrees",
    # Readings
    "BuoyObservation",
    "MarineForecastDay",
    "TideConditions",
    # Scorer
    "BreakInfo",
    "ConditionsInput",
    "QualityLabel",
    "ScoringResult",
    "SurfScorer",
    "calculate_score",
    "get_quality_label",
]
