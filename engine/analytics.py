# engine/analytics.py
# -----------------------------------------------------------------------------
# Purpose:
#   Descriptive statistics over Monte Carlo sample series.
#
# What this module provides:
#   - sort_samples, percentile, compute_standard_percentiles
#   - mean, standard_deviation (population)
#   - histogram (equal-width bins), cdf (empirical, optionally downsampled)
#   - bootstrap_percentile_ci, compute_standard_percentile_cis
#
# Notes:
#   - percentile() expects an ascending series and interpolates linearly
#     between the floor/ceil ranks of p * (n - 1).
#   - Inputs may be lists or numpy arrays; nothing passed in is modified.
# -----------------------------------------------------------------------------

from __future__ import annotations

import math
from typing import Dict, List, Optional, Sequence, Union

import numpy as np

from engine.models import STANDARD_PERCENTILES, CDFPoint, HistogramBin, PercentileCI
from engine.rng import seed_to_int

Samples = Union[Sequence[float], np.ndarray]


def sort_samples(samples: Samples) -> np.ndarray:
    """Return a new ascending float64 array."""
    return np.sort(np.asarray(samples, dtype=float))


def percentile(sorted_samples: Samples, p: float) -> float:
    """
    Linear-interpolated percentile of a pre-sorted series.

    Parameters
    ----------
    sorted_samples : ascending array-like
    p : float
        Fraction, e.g. 0.95 for P95. p <= 0 gives the minimum, p >= 1 the maximum.

    Raises
    ------
    ValueError
        If the series is empty.
    """
    n = len(sorted_samples)
    if n == 0:
        raise ValueError("Cannot compute percentile of empty array")
    if p <= 0:
        return float(sorted_samples[0])
    if p >= 1:
        return float(sorted_samples[n - 1])

    index = p * (n - 1)
    lower = math.floor(index)
    upper = math.ceil(index)
    fraction = index - lower
    if lower == upper:
        return float(sorted_samples[lower])
    return float(sorted_samples[lower]) * (1 - fraction) + float(sorted_samples[upper]) * fraction


def compute_standard_percentiles(sorted_samples: Samples) -> Dict[int, float]:
    """P5 ... P99 keyed by integer percentile."""
    return {p: percentile(sorted_samples, p / 100) for p in STANDARD_PERCENTILES}


def mean(samples: Samples) -> float:
    if len(samples) == 0:
        return 0.0
    return float(np.mean(np.asarray(samples, dtype=float)))


def standard_deviation(samples: Samples) -> float:
    """Population standard deviation (ddof=0); 0 for an empty series."""
    if len(samples) == 0:
        return 0.0
    return float(np.std(np.asarray(samples, dtype=float), ddof=0))


def histogram(samples: Samples, bin_count: int) -> List[HistogramBin]:
    """
    Equal-width bins over [min, max].

    An all-equal series collapses to a single bin. Values landing on or past
    the top edge (floating-point rounding) are counted in the last bin.
    """
    arr = np.asarray(samples, dtype=float)
    if arr.size == 0:
        return []

    lo = float(arr.min())
    hi = float(arr.max())
    if lo == hi:
        return [HistogramBin(bin_start=lo, bin_end=hi, count=int(arr.size))]

    width = (hi - lo) / bin_count
    idx = np.floor((arr - lo) / width).astype(int)
    idx = np.minimum(idx, bin_count - 1)
    counts = np.bincount(idx, minlength=bin_count)

    return [
        HistogramBin(bin_start=lo + i * width, bin_end=lo + (i + 1) * width, count=int(counts[i]))
        for i in range(bin_count)
    ]


def cdf(sorted_samples: Samples, max_points: Optional[int] = None) -> List[CDFPoint]:
    """
    Empirical CDF points (value, cumulative probability).

    With max_points smaller than the series, every ceil(n / max_points)-th
    sample is kept. The last point always has probability 1.
    """
    n = len(sorted_samples)
    if n == 0:
        return []

    step = math.ceil(n / max_points) if max_points and max_points < n else 1
    points = [
        CDFPoint(value=float(sorted_samples[i]), probability=(i + 1) / n)
        for i in range(0, n, step)
    ]
    if points[-1].probability < 1:
        points.append(CDFPoint(value=float(sorted_samples[n - 1]), probability=1.0))
    return points


# -----------------------------------------------------------------------------
# Bootstrap confidence intervals
# -----------------------------------------------------------------------------
def bootstrap_percentile_ci(
    samples: Samples,
    p: int,
    iterations: int = 1000,
    ci_level: float = 0.95,
    seed: Optional[str] = None,
) -> PercentileCI:
    """
    Percentile-bootstrap confidence interval for P`p`.

    Each of `iterations` resamples draws n values with replacement; the CI
    bounds are order statistics of the sorted resample estimates. The point
    estimate comes from the original series.

    seed=None draws from fresh OS entropy; pass a seed string for a
    reproducible interval.
    """
    arr = np.asarray(samples, dtype=float)
    n = arr.size
    if n == 0:
        raise ValueError("Cannot bootstrap a percentile of an empty sample series")
    if not 0 < ci_level < 1:
        raise ValueError(f"ci_level must be in (0, 1), got {ci_level}")

    point = percentile(np.sort(arr), p / 100)

    gen = np.random.default_rng(None if seed is None else seed_to_int(seed))
    estimates = np.empty(iterations)
    for i in range(iterations):
        resample = np.sort(arr[gen.integers(0, n, size=n)])
        estimates[i] = percentile(resample, p / 100)
    estimates.sort()

    alpha = (1 - ci_level) / 2
    lower_idx = max(0, math.floor(alpha * iterations))
    upper_idx = max(0, min(iterations - 1, math.floor((1 - alpha) * iterations) - 1))

    if iterations == 0:
        lower = upper = point
    else:
        lower = float(estimates[lower_idx])
        upper = float(estimates[upper_idx])

    return PercentileCI(percentile=p, point=point, lower=lower, upper=upper, confidence=ci_level)


def compute_standard_percentile_cis(
    samples: Samples,
    iterations: int = 500,
    seed: Optional[str] = None,
    ci_level: float = 0.95,
) -> Dict[int, PercentileCI]:
    """Bootstrap CIs for every standard percentile. Expensive; use sparingly."""
    return {
        p: bootstrap_percentile_ci(
            samples, p, iterations, ci_level, seed=None if seed is None else f"{seed}:P{p}"
        )
        for p in STANDARD_PERCENTILES
    }
