"""Tests for the samplers: moment matching, percentile placement and validation."""

import numpy as np
import pytest

from neofermi import distributions as d
from neofermi.config import make_rng
from neofermi.errors import InvalidParameterError

N = 50000


def test_poisson_moments(rng):
    small = d.poisson(4, n=N, rng=rng)
    assert small.mean() == pytest.approx(4, rel=0.03)
    assert small.variance() == pytest.approx(4, rel=0.05)
    large = d.poisson(100, n=N, rng=rng)
    assert large.mean() == pytest.approx(100, rel=0.01)
    assert large.min() >= 0


def test_binomial_moments(rng):
    direct = d.binomial(10, 0.5, n=N, rng=rng)
    assert direct.mean() == pytest.approx(5, rel=0.02)
    assert direct.variance() == pytest.approx(2.5, rel=0.05)
    approx = d.binomial(200, 0.3, n=N, rng=rng)
    assert approx.mean() == pytest.approx(60, rel=0.01)
    assert approx.variance() == pytest.approx(42, rel=0.05)
    assert 0 <= approx.min() and approx.max() <= 200


def test_exponential_moments(rng):
    assert d.exponential(2, n=N, rng=rng).mean() == pytest.approx(0.5, rel=0.03)
    assert d.exponential_mean(3, n=N, rng=rng).mean() == pytest.approx(3, rel=0.03)


def test_beta_family_means(rng):
    assert d.outof(3, 10, n=N, rng=rng).mean() == pytest.approx(4 / 12, rel=0.02)
    assert d.against(2, 8, n=N, rng=rng).mean() == pytest.approx(0.2, rel=0.03)
    q = d.beta(2, 5, n=N, rng=rng)
    assert 0 < q.min() and q.max() < 1


def test_gamma_moments(rng):
    g = d.gamma(2.5, 2.0, n=N, rng=rng)
    assert g.mean() == pytest.approx(5.0, rel=0.02)
    assert g.variance() == pytest.approx(10.0, rel=0.05)
    boosted = d.gamma(0.5, 1.0, n=N, rng=rng)
    assert boosted.mean() == pytest.approx(0.5, rel=0.04)


def test_lognormal_interval_matches_confidence(rng):
    q = d.lognormal(1, 100, "m", n=N, rng=rng)
    assert q.unit_string == "m"
    assert q.percentile(0.05) == pytest.approx(1, rel=0.1)
    assert q.percentile(0.95) == pytest.approx(100, rel=0.1)
    assert q.percentile(0.5) == pytest.approx(10, rel=0.05)


def test_normal_and_plusminus(rng):
    q = d.normal(0, 10, n=N, rng=rng)
    assert q.mean() == pytest.approx(5, abs=0.1)
    assert q.percentile(0.05) == pytest.approx(0, abs=0.3)
    assert q.percentile(0.95) == pytest.approx(10, abs=0.3)
    pm = d.plusminus(10, 2, n=N, rng=rng)
    assert pm.std() == pytest.approx(2, rel=0.03)


def test_uniform_bounds(rng):
    q = d.uniform(2, 4, n=N, rng=rng)
    assert q.min() >= 2 and q.max() < 4
    assert q.mean() == pytest.approx(3, abs=0.02)


def test_to_picks_lognormal_or_normal(rng):
    positive = d.to(1, 10, n=N, rng=rng)
    assert positive.min() > 0
    assert positive.percentile(0.5) == pytest.approx(np.sqrt(10), rel=0.05)
    straddling = d.to(-1, 1, n=N, rng=rng)
    assert straddling.mean() == pytest.approx(0, abs=0.03)
    assert straddling.min() < 0


def test_error_factors(rng):
    pct = d.percent(10, n=N, rng=rng)
    assert pct.unit.is_dimensionless
    assert pct.percentile(0.95) == pytest.approx(1.1, rel=0.02)
    assert pct.percentile(0.05) == pytest.approx(1 / 1.1, rel=0.02)
    decibel = d.db(10, n=N, rng=rng)
    assert decibel.percentile(0.05) == pytest.approx(0.1, rel=0.1)
    assert decibel.percentile(0.95) == pytest.approx(10, rel=0.1)


def test_weighted_set(rng):
    q = d.weighted([365, 366], [303, 97], "day", n=N, rng=rng)
    assert q.unit_string == "day"
    assert set(np.unique(q.value)) <= {365.0, 366.0}
    assert np.mean(q.value == 366) == pytest.approx(97 / 400, abs=0.01)


def test_z_factor():
    assert d.z_factor(0.9) == pytest.approx(1.6448536, rel=1e-6)


def test_sample_count_and_reproducibility():
    a = d.lognormal(1, 2, n=10, rng=make_rng(5))
    b = d.lognormal(1, 2, n=10, rng=make_rng(5))
    assert a.sample_count == 10
    np.testing.assert_array_equal(a.value, b.value)
    with pytest.raises(ValueError, match="sample count"):
        d.lognormal(1, 2, n=0)


@pytest.mark.parametrize(
    "make",
    [
        lambda: d.lognormal(-1, 10),
        lambda: d.lognormal(10, 1),
        lambda: d.normal(5, 1),
        lambda: d.uniform(3, 3),
        lambda: d.poisson(0),
        lambda: d.binomial(10.5, 0.5),
        lambda: d.binomial(10, 1.5),
        lambda: d.gamma(0, 1),
        lambda: d.gamma(1, 0),
        lambda: d.beta(0, 1),
        lambda: d.exponential(0),
        lambda: d.exponential_mean(-2),
        lambda: d.outof(5, 3),
        lambda: d.outof(-1, 3),
        lambda: d.against(0, 1),
        lambda: d.weighted([], []),
        lambda: d.weighted([1, 2], [1]),
        lambda: d.weighted([1, 2], [-1, 2]),
        lambda: d.weighted([1], [0]),
        lambda: d.percent(0),
        lambda: d.db(0),
        lambda: d.z_factor(1.0),
        lambda: d.uniform(1, float("inf")),
        lambda: d.lognormal(1, float("inf")),
        lambda: d.normal(float("-inf"), 1),
        lambda: d.plusminus(float("nan"), 1),
        lambda: d.poisson(float("inf")),
        lambda: d.gamma(float("inf"), 1),
        lambda: d.weighted([1, float("inf")], [1, 1]),
    ],
)
def test_parameter_validation(make):
    with pytest.raises(InvalidParameterError):
        make()
