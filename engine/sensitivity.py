# engine/sensitivity.py
# -----------------------------------------------------------------------------
# Purpose:
#   Rank activities by how much they drive project uncertainty, and suggest a
#   distribution type from an estimate's skew and spread.
#
# Notes:
#   - Impact score: change in (mean + 1.645 * sd) when every estimate (and any
#     sd_override) grows by 10%. 1.645 is the one-sided 95% normal z-score.
#   - Variance contribution assumes independent activities.
# -----------------------------------------------------------------------------

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from engine.models import Activity, ConfidenceLevel, DistributionType
from engine.spert import (
    compute_cv,
    compute_pert_mean,
    compute_skew_indicator,
    compute_spert_sd,
    resolve_sd,
)

Z_95 = 1.645
SCALE_STEP = 1.1


@dataclass(frozen=True)
class SensitivityResult:
    activity_id: str
    activity_name: str
    impact_score: float
    variance_contribution: float
    standard_deviation: float
    mean_duration: float
    coefficient_of_variation: float


@dataclass(frozen=True)
class DistributionRecommendation:
    recommended: DistributionType
    rationale: str


def compute_sensitivity_analysis(activities: Sequence[Activity]) -> List[SensitivityResult]:
    """All activities, most sensitive (highest impact score) first."""
    if not activities:
        return []

    stats = []
    for a in activities:
        m = compute_pert_mean(a.min, a.most_likely, a.max)
        sd = resolve_sd(a.min, a.max, a.confidence_level, a.sd_override)
        stats.append((a, m, sd))

    total_variance = sum(sd * sd for _, _, sd in stats)

    results = []
    for a, m, sd in stats:
        scaled_mean = compute_pert_mean(a.min * SCALE_STEP, a.most_likely * SCALE_STEP, a.max * SCALE_STEP)
        scaled_sd = resolve_sd(
            a.min * SCALE_STEP,
            a.max * SCALE_STEP,
            a.confidence_level,
            a.sd_override * SCALE_STEP if a.sd_override else None,
        )
        impact = (scaled_mean + Z_95 * scaled_sd) - (m + Z_95 * sd)
        results.append(
            SensitivityResult(
                activity_id=a.id,
                activity_name=a.name,
                impact_score=impact,
                variance_contribution=(sd * sd) / total_variance if total_variance > 0 else 0.0,
                standard_deviation=sd,
                mean_duration=m,
                coefficient_of_variation=sd / m if m > 0 else 0.0,
            )
        )

    results.sort(key=lambda r: r.impact_score, reverse=True)
    return results


def top_sensitive_activities(activities: Sequence[Activity], top_n: int = 5) -> List[SensitivityResult]:
    return compute_sensitivity_analysis(activities)[:top_n]


def recommend_distribution(
    min_value: float, ml: float, max_value: float, level: ConfidenceLevel
) -> DistributionRecommendation:
    """
    |skew| < 0.1 and CV < 0.3 -> Normal
    skew > 0.1 and CV > 0.3   -> LogNormal
    otherwise                 -> Triangular
    """
    m = compute_pert_mean(min_value, ml, max_value)
    sd = compute_spert_sd(min_value, max_value, level)

    if sd == 0 or m == 0:
        return DistributionRecommendation(
            DistributionType.NORMAL, "No variance in estimates; Normal is a safe default."
        )

    skew = compute_skew_indicator(min_value, ml, max_value, level)
    cv = compute_cv(m, sd)

    if abs(skew) < 0.1 and cv < 0.3:
        return DistributionRecommendation(
            DistributionType.NORMAL,
            "Low skew and low coefficient of variation indicate a symmetric distribution.",
        )
    if skew > 0.1 and cv > 0.3:
        return DistributionRecommendation(
            DistributionType.LOG_NORMAL,
            "Right skew with high variability suggests a LogNormal distribution.",
        )
    return DistributionRecommendation(
        DistributionType.TRIANGULAR,
        "Moderate asymmetry best modeled with a Triangular distribution.",
    )
