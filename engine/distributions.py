# engine/distributions.py
# -----------------------------------------------------------------------------
# Purpose:
#   The four activity-duration distributions and the factory that picks one
#   for an Activity.
#
# Contract shared by every variant:
#   sample(rng) -> float, mean(), variance(), inverse_cdf(p), parameters()
#
# Notes:
#   - The variant set is closed: Normal, LogNormal, Triangular, Uniform.
#     create_distribution_for_activity() is the only dispatch point.
#   - Invalid parameters raise ValueError at construction.
#   - normal_quantile() is Acklam's rational approximation (|err| ~ 1.15e-9).
# -----------------------------------------------------------------------------

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Union

from engine.models import Activity, DistributionType
from engine.rng import SeededRng
from engine.spert import compute_pert_mean, resolve_sd

# Acklam coefficients
_A = (-3.969683028665376e1, 2.209460984245205e2, -2.759285104469687e2,
      1.383577518672690e2, -3.066479806614716e1, 2.506628277459239e0)
_B = (-5.447609879822406e1, 1.615858368580409e2, -1.556989798598866e2,
      6.680131188771972e1, -1.328068155288572e1)
_C = (-7.784894002430293e-3, -3.223964580411365e-1, -2.400758277161838e0,
      -2.549732539343734e0, 4.374664141464968e0, 2.938163982698783e0)
_D = (7.784695709041462e-3, 3.224671290700398e-1, 2.445134137142996e0,
      3.754408661907416e0)

_P_LOW = 0.02425
_P_HIGH = 1 - _P_LOW


def normal_quantile(p: float) -> float:
    """Standard normal inverse CDF for p in the open interval (0, 1)."""
    if p <= 0 or p >= 1:
        raise ValueError(f"normal_quantile: p must be in (0, 1), got {p}")

    a, b, c, d = _A, _B, _C, _D
    if p < _P_LOW:
        q = math.sqrt(-2 * math.log(p))
        return (((((c[0] * q + c[1]) * q + c[2]) * q + c[3]) * q + c[4]) * q + c[5]) / \
            ((((d[0] * q + d[1]) * q + d[2]) * q + d[3]) * q + 1)
    if p <= _P_HIGH:
        q = p - 0.5
        r = q * q
        return (((((a[0] * r + a[1]) * r + a[2]) * r + a[3]) * r + a[4]) * r + a[5]) * q / \
            (((((b[0] * r + b[1]) * r + b[2]) * r + b[3]) * r + b[4]) * r + 1)
    q = math.sqrt(-2 * math.log(1 - p))
    return -(((((c[0] * q + c[1]) * q + c[2]) * q + c[3]) * q + c[4]) * q + c[5]) / \
        ((((d[0] * q + d[1]) * q + d[2]) * q + d[3]) * q + 1)


def _check_probability(p: float) -> None:
    if p < 0 or p > 1:
        raise ValueError(f"inverse_cdf: p must be in [0, 1], got {p}")


# -----------------------------------------------------------------------------
# Variants
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class NormalDistribution:
    mu: float
    sigma: float

    def __post_init__(self) -> None:
        if self.sigma < 0:
            raise ValueError(f"NormalDistribution: sigma must be >= 0, got {self.sigma}")

    def sample(self, rng: SeededRng) -> float:
        """Box-Muller transform. 1 - u keeps the log argument in (0, 1]."""
        u1 = 1.0 - rng.next()
        u2 = rng.next()
        z = math.sqrt(-2 * math.log(u1)) * math.cos(2 * math.pi * u2)
        return self.mu + self.sigma * z

    def mean(self) -> float:
        return self.mu

    def variance(self) -> float:
        return self.sigma * self.sigma

    def parameters(self) -> Dict[str, float]:
        return {"mu": self.mu, "sigma": self.sigma}

    def inverse_cdf(self, p: float) -> float:
        _check_probability(p)
        if self.sigma == 0:
            return self.mu
        if p == 0:
            return -math.inf
        if p == 1:
            return math.inf
        return self.mu + self.sigma * normal_quantile(p)


@dataclass(frozen=True)
class LogNormalDistribution:
    """Parameterised by natural-scale mean and SD; log-scale values are derived."""

    natural_mean: float
    natural_sd: float
    mu_log: float = field(init=False)
    sigma_log: float = field(init=False)
    _normal: NormalDistribution = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.natural_mean <= 0:
            raise ValueError(
                f"LogNormalDistribution: natural_mean must be > 0, got {self.natural_mean}"
            )
        if self.natural_sd < 0:
            raise ValueError(
                f"LogNormalDistribution: natural_sd must be >= 0, got {self.natural_sd}"
            )
        variance = self.natural_sd * self.natural_sd
        sigma_log_sq = math.log(variance / (self.natural_mean * self.natural_mean) + 1)
        object.__setattr__(self, "sigma_log", math.sqrt(sigma_log_sq))
        object.__setattr__(self, "mu_log", math.log(self.natural_mean) - sigma_log_sq / 2)
        object.__setattr__(self, "_normal", NormalDistribution(self.mu_log, self.sigma_log))

    def sample(self, rng: SeededRng) -> float:
        return math.exp(self._normal.sample(rng))

    def mean(self) -> float:
        return self.natural_mean

    def variance(self) -> float:
        return self.natural_sd * self.natural_sd

    def parameters(self) -> Dict[str, float]:
        return {
            "natural_mean": self.natural_mean,
            "natural_sd": self.natural_sd,
            "mu_log": self.mu_log,
            "sigma_log": self.sigma_log,
        }

    def inverse_cdf(self, p: float) -> float:
        _check_probability(p)
        if self.sigma_log == 0:
            return self.natural_mean
        if p == 0:
            return 0.0
        if p == 1:
            return math.inf
        return math.exp(self.mu_log + self.sigma_log * normal_quantile(p))


@dataclass(frozen=True)
class TriangularDistribution:
    """a = min, c = mode, b = max."""

    a: float
    c: float
    b: float

    def __post_init__(self) -> None:
        if self.a > self.c or self.c > self.b:
            raise ValueError(
                f"TriangularDistribution: must have a <= c <= b, got a={self.a}, c={self.c}, b={self.b}"
            )
        if self.a == self.b:
            raise ValueError(
                f"TriangularDistribution: a must be < b for a valid distribution, got a=b={self.a}"
            )

    @property
    def fc(self) -> float:
        return (self.c - self.a) / (self.b - self.a)

    def sample(self, rng: SeededRng) -> float:
        return self.inverse_cdf(rng.next())

    def mean(self) -> float:
        return (self.a + self.b + self.c) / 3

    def variance(self) -> float:
        a, b, c = self.a, self.b, self.c
        return (a * a + b * b + c * c - a * b - a * c - b * c) / 18

    def parameters(self) -> Dict[str, float]:
        return {"a": self.a, "c": self.c, "b": self.b}

    def inverse_cdf(self, p: float) -> float:
        _check_probability(p)
        if p == 0:
            return self.a
        if p == 1:
            return self.b
        a, b, c, fc = self.a, self.b, self.c, self.fc
        if p < fc:
            return a + math.sqrt(p * (b - a) * (c - a))
        if p == fc:
            return c
        return b - math.sqrt((1 - p) * (b - a) * (b - c))


@dataclass(frozen=True)
class UniformDistribution:
    a: float
    b: float

    def __post_init__(self) -> None:
        if self.a > self.b:
            raise ValueError(f"UniformDistribution: must have a <= b, got a={self.a}, b={self.b}")

    def sample(self, rng: SeededRng) -> float:
        return self.a + rng.next() * (self.b - self.a)

    def mean(self) -> float:
        return (self.a + self.b) / 2

    def variance(self) -> float:
        width = self.b - self.a
        return width * width / 12

    def parameters(self) -> Dict[str, float]:
        return {"a": self.a, "b": self.b}

    def inverse_cdf(self, p: float) -> float:
        if p <= 0:
            return self.a
        if p >= 1:
            return self.b
        return self.a + p * (self.b - self.a)


Distribution = Union[
    NormalDistribution,
    LogNormalDistribution,
    TriangularDistribution,
    UniformDistribution,
]


# -----------------------------------------------------------------------------
# Factory
# -----------------------------------------------------------------------------
def create_distribution_for_activity(activity: Activity) -> Distribution:
    """
    Build the distribution for `activity` from its PERT mean, resolved SD and
    distribution_type.

    Raises
    ------
    ValueError
        LogNormal chosen but the PERT mean is not > 0, an unknown type tag, or
        parameters rejected by the chosen variant.
    """
    mean = compute_pert_mean(activity.min, activity.most_likely, activity.max)
    sd = resolve_sd(activity.min, activity.max, activity.confidence_level, activity.sd_override)
    kind = DistributionType(activity.distribution_type)

    if kind is DistributionType.NORMAL:
        return NormalDistribution(mean, sd)
    if kind is DistributionType.LOG_NORMAL:
        if mean <= 0:
            raise ValueError(
                f'Cannot create LogNormal distribution for activity "{activity.name}": '
                f"PERT mean must be > 0, got {mean}"
            )
        return LogNormalDistribution(mean, sd)
    if kind is DistributionType.TRIANGULAR:
        return TriangularDistribution(activity.min, activity.most_likely, activity.max)
    if kind is DistributionType.UNIFORM:
        return UniformDistribution(activity.min, activity.max)
    raise ValueError(f"Unknown distribution type: {activity.distribution_type}")
