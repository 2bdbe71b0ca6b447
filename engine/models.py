# engine/models.py
# -----------------------------------------------------------------------------
# Purpose:
#   Plain, immutable records passed in and out of the forecasting engine.
#
# What lives here:
#   - Enumerations: ConfidenceLevel (RSM ladder), DistributionType, ActivityStatus
#   - Inputs: Activity, ScenarioSettings, Holiday, Calendar
#   - Outputs: ScheduledActivity, DeterministicSchedule, HistogramBin, CDFPoint,
#     SimulationRun, ScheduleBuffer, PercentileCI
#
# Notes:
#   - Every record is a frozen dataclass; collections are tuples so nothing
#     handed back by the engine can be mutated in place.
#   - from_dict() helpers accept the snake_case keys used in CSV/YAML inputs.
# -----------------------------------------------------------------------------

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import numpy as np

ENGINE_VERSION = "1.0.0"

STANDARD_PERCENTILES: Tuple[int, ...] = (5, 10, 25, 50, 75, 85, 90, 95, 96, 97, 98, 99)

MIN_TRIAL_COUNT = 1_000
MAX_TRIAL_COUNT = 500_000
DEFAULT_TRIAL_COUNT = 50_000


class ConfidenceLevel(str, Enum):
    """Ten ordered subjective confidence levels, narrowest spread first."""

    NEAR_CERTAINTY = "near_certainty"
    VERY_HIGH = "very_high_confidence"
    HIGH = "high_confidence"
    MEDIUM_HIGH = "medium_high_confidence"
    MEDIUM = "medium_confidence"
    MEDIUM_LOW = "medium_low_confidence"
    LOW = "low_confidence"
    VERY_LOW = "very_low_confidence"
    EXTREMELY_LOW = "extremely_low_confidence"
    GUESSTIMATE = "guesstimate"

    @property
    def k(self) -> float:
        return RSM_K[self]

    @property
    def rsm(self) -> float:
        """Ratio Scale Modifier: sqrt(k) / 10."""
        return math.sqrt(RSM_K[self]) / 10.0

    @property
    def label(self) -> str:
        return RSM_LABELS[self]


RSM_K: Dict[ConfidenceLevel, float] = {
    ConfidenceLevel.NEAR_CERTAINTY: 0.5,
    ConfidenceLevel.VERY_HIGH: 1.0,
    ConfidenceLevel.HIGH: 2.0,
    ConfidenceLevel.MEDIUM_HIGH: 3.0,
    ConfidenceLevel.MEDIUM: 4.0,
    ConfidenceLevel.MEDIUM_LOW: 5.5,
    ConfidenceLevel.LOW: 7.5,
    ConfidenceLevel.VERY_LOW: 10.0,
    ConfidenceLevel.EXTREMELY_LOW: 12.5,
    ConfidenceLevel.GUESSTIMATE: 16.5,
}

RSM_LABELS: Dict[ConfidenceLevel, str] = {
    ConfidenceLevel.NEAR_CERTAINTY: "Near certainty",
    ConfidenceLevel.VERY_HIGH: "Very high",
    ConfidenceLevel.HIGH: "High",
    ConfidenceLevel.MEDIUM_HIGH: "Medium-high",
    ConfidenceLevel.MEDIUM: "Medium",
    ConfidenceLevel.MEDIUM_LOW: "Medium-low",
    ConfidenceLevel.LOW: "Low",
    ConfidenceLevel.VERY_LOW: "Very low",
    ConfidenceLevel.EXTREMELY_LOW: "Extremely low",
    ConfidenceLevel.GUESSTIMATE: "Guesstimate",
}


class DistributionType(str, Enum):
    NORMAL = "normal"
    LOG_NORMAL = "log_normal"
    TRIANGULAR = "triangular"
    UNIFORM = "uniform"


class ActivityStatus(str, Enum):
    PLANNED = "planned"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


# -----------------------------------------------------------------------------
# Inputs
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Activity:
    """
    One link in the activity chain.

    min / most_likely / max are working-day estimates. sd_override bypasses
    the RSM-derived standard deviation. actual_duration is only used once the
    activity is complete.
    """

    id: str
    name: str
    min: float
    most_likely: float
    max: float
    confidence_level: ConfidenceLevel = ConfidenceLevel.MEDIUM
    distribution_type: DistributionType = DistributionType.NORMAL
    status: ActivityStatus = ActivityStatus.PLANNED
    sd_override: Optional[float] = None
    actual_duration: Optional[float] = None

    @property
    def uses_actual(self) -> bool:
        """True when the engine should use actual_duration instead of a distribution."""
        return self.status is ActivityStatus.COMPLETE and self.actual_duration is not None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Activity":
        """Blank id/name cells become "" so validation rejects them; name falls back to id."""
        activity_id = _optional_str(d.get("id"))
        return cls(
            id=activity_id,
            name=_optional_str(d.get("name")) or activity_id,
            min=float(d["min"]),
            most_likely=float(d["most_likely"]),
            max=float(d["max"]),
            confidence_level=ConfidenceLevel(d.get("confidence_level") or ConfidenceLevel.MEDIUM),
            distribution_type=DistributionType(d.get("distribution_type") or DistributionType.NORMAL),
            status=ActivityStatus(d.get("status") or ActivityStatus.PLANNED),
            sd_override=_optional_float(d.get("sd_override")),
            actual_duration=_optional_float(d.get("actual_duration")),
        )


@dataclass(frozen=True)
class ScenarioSettings:
    probability_target: float = 0.50
    project_probability_target: float = 0.95
    trial_count: int = DEFAULT_TRIAL_COUNT
    rng_seed: str = "spert"
    default_confidence_level: ConfidenceLevel = ConfidenceLevel.MEDIUM
    default_distribution_type: DistributionType = DistributionType.NORMAL


@dataclass(frozen=True)
class Holiday:
    start_date: str  # YYYY-MM-DD
    end_date: str  # YYYY-MM-DD, same as start_date for a single day
    name: str = ""
    id: str = ""


@dataclass(frozen=True)
class Calendar:
    holidays: Tuple[Holiday, ...] = ()


# -----------------------------------------------------------------------------
# Outputs
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ScheduledActivity:
    activity_id: str
    name: str
    duration: float  # working days
    start_date: str
    end_date: str
    is_actual: bool


@dataclass(frozen=True)
class DeterministicSchedule:
    activities: Tuple[ScheduledActivity, ...]
    total_duration_days: float
    project_end_date: str


@dataclass(frozen=True)
class HistogramBin:
    bin_start: float
    bin_end: float
    count: int


@dataclass(frozen=True)
class CDFPoint:
    value: float
    probability: float


@dataclass(frozen=True, eq=False)
class SimulationRun:
    """
    Summary of one Monte Carlo run.

    samples is the full sorted series as a read-only float64 array.
    percentiles is keyed by the integers in STANDARD_PERCENTILES.
    """

    trial_count: int
    seed: str
    engine_version: str
    percentiles: Dict[int, float]
    histogram_bins: Tuple[HistogramBin, ...]
    mean: float
    standard_deviation: float
    min_sample: float
    max_sample: float
    samples: np.ndarray = field(repr=False)


@dataclass(frozen=True)
class ScheduleBuffer:
    deterministic_total: float
    project_target_duration: float
    buffer_days: int
    activity_probability_target: float
    project_probability_target: float


@dataclass(frozen=True)
class PercentileCI:
    percentile: int
    point: float
    lower: float
    upper: float
    confidence: float


def _optional_float(x: Any) -> Optional[float]:
    """None for missing/blank/NaN cells, float otherwise."""
    if x is None:
        return None
    if isinstance(x, str) and not x.strip():
        return None
    value = float(x)
    if math.isnan(value):
        return None
    return value


def _optional_str(x: Any) -> str:
    """Empty string for missing/NaN cells, stripped str otherwise."""
    if x is None or (isinstance(x, float) and math.isnan(x)):
        return ""
    return str(x).strip()
