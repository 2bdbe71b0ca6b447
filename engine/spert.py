# engine/spert.py
# -----------------------------------------------------------------------------
# Purpose:
#   Statistical PERT: turn (min, most likely, max, confidence level) into a
#   mean and a standard deviation.
#
#   mean = (min + 4*ml + max) / 6
#   sd   = (max - min) * RSM(level),  RSM = sqrt(k) / 10
# -----------------------------------------------------------------------------

from __future__ import annotations

from typing import Dict, Optional

from engine.models import ConfidenceLevel


def compute_pert_mean(min_value: float, ml: float, max_value: float) -> float:
    """PERT weighted mean: (min + 4*ml + max) / 6."""
    return (min_value + 4.0 * ml + max_value) / 6.0


def compute_spert_sd(min_value: float, max_value: float, level: ConfidenceLevel) -> float:
    """SPERT standard deviation: (max - min) * RSM."""
    return (max_value - min_value) * ConfidenceLevel(level).rsm


def resolve_sd(
    min_value: float,
    max_value: float,
    level: ConfidenceLevel,
    sd_override: Optional[float] = None,
) -> float:
    """sd_override when provided, otherwise the SPERT standard deviation."""
    if sd_override is not None:
        return sd_override
    return compute_spert_sd(min_value, max_value, level)


def derive_min_max_from_ml(ml: float, min_pct: float, max_pct: float) -> Dict[str, float]:
    """
    Build an estimate range from a single most-likely value.

    >>> derive_min_max_from_ml(10, 0.2, 0.5)
    {'min': 8.0, 'max': 15.0}
    """
    return {"min": ml * (1 - min_pct), "max": ml * (1 + max_pct)}


def compute_skew_indicator(
    min_value: float,
    ml: float,
    max_value: float,
    level: ConfidenceLevel,
    sd_override: Optional[float] = None,
) -> float:
    """(mean - ml) / sd. Positive = right-skewed; 0 when sd is 0."""
    mean = compute_pert_mean(min_value, ml, max_value)
    sd = resolve_sd(min_value, max_value, level, sd_override)
    if sd == 0:
        return 0.0
    return (mean - ml) / sd


def compute_cv(mean: float, sd: float) -> float:
    """Coefficient of variation sd / mean; 0 when mean is 0."""
    if mean == 0:
        return 0.0
    return sd / mean
