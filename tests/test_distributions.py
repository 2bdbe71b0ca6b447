"""
tests/test_distributions.py

Each distribution variant: construction guards, inverse CDF at known points,
moments, and sample means over a seeded stream.
"""

import math

import numpy as np
import pytest

from engine.distributions import (
    LogNormalDistribution,
    NormalDistribution,
    TriangularDistribution,
    UniformDistribution,
    normal_quantile,
)
from engine.rng import create_seeded_rng

N = 20_000


def _draw(dist, seed: str = "dist") -> np.ndarray:
    rng = create_seeded_rng(seed)
    return np.array([dist.sample(rng) for _ in range(N)])


# -----------------------------------------------------------------------------
# normal_quantile
# -----------------------------------------------------------------------------
@pytest.mark.parametrize(
    "p,z",
    [(0.5, 0.0), (0.975, 1.959963985), (0.025, -1.959963985), (0.95, 1.644853627), (0.001, -3.090232306)],
)
def test_normal_quantile_known_values(p, z) -> None:
    assert normal_quantile(p) == pytest.approx(z, abs=1e-6)


@pytest.mark.parametrize("p", [0.0, 1.0, -0.1, 1.5])
def test_normal_quantile_rejects_closed_endpoints(p) -> None:
    with pytest.raises(ValueError):
        normal_quantile(p)


# -----------------------------------------------------------------------------
# Normal
# -----------------------------------------------------------------------------
def test_normal_inverse_cdf() -> None:
    d = NormalDistribution(10, 2)
    assert d.inverse_cdf(0.5) == pytest.approx(10)
    assert d.inverse_cdf(0.975) == pytest.approx(10 + 2 * 1.959963985, abs=1e-5)
    assert d.inverse_cdf(0) == -math.inf
    assert d.inverse_cdf(1) == math.inf
    with pytest.raises(ValueError):
        d.inverse_cdf(1.2)


def test_normal_zero_sigma_is_degenerate() -> None:
    d = NormalDistribution(7, 0)
    assert d.inverse_cdf(0.9) == 7
    assert d.sample(create_seeded_rng("z")) == 7


def test_normal_rejects_negative_sigma() -> None:
    with pytest.raises(ValueError):
        NormalDistribution(0, -1)


def test_normal_sample_moments() -> None:
    d = NormalDistribution(0, 1)
    xs = _draw(d)
    assert xs.mean() == pytest.approx(0, abs=0.05)
    assert xs.var() == pytest.approx(1, abs=0.05)
    assert d.parameters() == {"mu": 0, "sigma": 1}


# -----------------------------------------------------------------------------
# LogNormal
# -----------------------------------------------------------------------------
def test_lognormal_derived_parameters() -> None:
    d = LogNormalDistribution(10, 3)
    assert d.sigma_log == pytest.approx(math.sqrt(math.log(1.09)))
    assert d.mu_log == pytest.approx(math.log(10) - math.log(1.09) / 2)
    assert d.mean() == 10
    assert d.variance() == 9
    assert set(d.parameters()) == {"natural_mean", "natural_sd", "mu_log", "sigma_log"}


def test_lognormal_inverse_cdf() -> None:
    d = LogNormalDistribution(10, 3)
    assert d.inverse_cdf(0.5) == pytest.approx(10 / math.sqrt(1.09))
    assert d.inverse_cdf(0) == 0.0
    assert d.inverse_cdf(1) == math.inf
    assert LogNormalDistribution(4, 0).inverse_cdf(0.9) == 4


def test_lognormal_sample_mean_and_positive() -> None:
    xs = _draw(LogNormalDistribution(10, 3))
    assert (xs > 0).all()
    assert xs.mean() == pytest.approx(10, abs=0.2)


@pytest.mark.parametrize("mean,sd", [(0, 1), (-2, 1), (5, -1)])
def test_lognormal_rejects_bad_parameters(mean, sd) -> None:
    with pytest.raises(ValueError):
        LogNormalDistribution(mean, sd)


# -----------------------------------------------------------------------------
# Triangular
# -----------------------------------------------------------------------------
def test_triangular_inverse_cdf_and_moments() -> None:
    d = TriangularDistribution(0, 5, 10)
    assert d.fc == pytest.approx(0.5)
    assert d.inverse_cdf(0) == 0
    assert d.inverse_cdf(0.125) == pytest.approx(2.5)
    assert d.inverse_cdf(0.5) == pytest.approx(5)
    assert d.inverse_cdf(0.875) == pytest.approx(7.5)
    assert d.inverse_cdf(1) == 10
    assert d.mean() == pytest.approx(5)
    assert d.variance() == pytest.approx(75 / 18)


def test_triangular_samples_stay_in_range() -> None:
    xs = _draw(TriangularDistribution(2, 3, 9))
    assert xs.min() >= 2 and xs.max() <= 9
    assert xs.mean() == pytest.approx(14 / 3, abs=0.05)


@pytest.mark.parametrize("a,c,b", [(5, 5, 5), (6, 5, 10), (0, 11, 10)])
def test_triangular_rejects_bad_parameters(a, c, b) -> None:
    with pytest.raises(ValueError):
        TriangularDistribution(a, c, b)


# -----------------------------------------------------------------------------
# Uniform
# -----------------------------------------------------------------------------
def test_uniform_inverse_cdf_clamps() -> None:
    d = UniformDistribution(2, 6)
    assert d.inverse_cdf(-0.5) == 2
    assert d.inverse_cdf(0) == 2
    assert d.inverse_cdf(0.25) == pytest.approx(3)
    assert d.inverse_cdf(1) == 6
    assert d.inverse_cdf(3) == 6
    assert d.variance() == pytest.approx(16 / 12)


def test_uniform_samples() -> None:
    xs = _draw(UniformDistribution(2, 4))
    assert xs.min() >= 2 and xs.max() < 4
    assert xs.mean() == pytest.approx(3, abs=0.05)


def test_uniform_rejects_reversed_bounds() -> None:
    with pytest.raises(ValueError):
        UniformDistribution(3, 2)


def test_degenerate_uniform_is_allowed() -> None:
    assert UniformDistribution(4, 4).inverse_cdf(0.3) == 4


@pytest.mark.parametrize("a,b", [(0, 1), (2, 6), (5, 5)])
def test_uniform_inverse_cdf_non_decreasing(a, b) -> None:
    d = UniformDistribution(a, b)
    values = [d.inverse_cdf(p) for p in np.linspace(0, 1, 101)]
    assert values[0] == a and values[-1] == b
    assert all(y >= x for x, y in zip(values, values[1:]))
