"""Tests for the built-in math and distribution functions."""

import math

import numpy as np
import pytest

from neofermi import functions as f
from neofermi.config import make_rng
from neofermi.core import Quantity
from neofermi.errors import IncompatibleUnitsError, InvalidParameterError


def test_roots_transform_units():
    root = f.sqrt(Quantity(9, "m^2"))
    assert root.unit_string == "m"
    assert root.value == pytest.approx(3)
    cube = f.cbrt(Quantity(27, "m^3"))
    assert cube.unit_string == "m"
    assert cube.value == pytest.approx(3)


def test_trig_accepts_angles_and_rejects_lengths():
    assert f.sin(Quantity(90, "degree")).value == pytest.approx(1.0)
    assert f.cos(Quantity(0)).value == pytest.approx(1.0)
    with pytest.raises(IncompatibleUnitsError, match="angle"):
        f.sin(Quantity(1, "m"))
    angle = f.asin(Quantity(1))
    assert angle.unit_string == "rad"
    assert angle.value == pytest.approx(math.pi / 2)


def test_transcendental_functions_need_dimensionless_input():
    assert f.exp(Quantity(0)).value == pytest.approx(1.0)
    assert f.log10(Quantity(1000)).value == pytest.approx(3.0)
    assert f.MATH_FUNCTIONS["ln"](Quantity(math.e)).value == pytest.approx(1.0)
    with pytest.raises(IncompatibleUnitsError, match="dimensionless"):
        f.log(Quantity(1, "m"))


def test_unit_preserving_and_sign():
    assert f.abs_(Quantity(-3, "kg")).unit_string == "kg"
    assert f.floor(Quantity(2.7, "s")).value == 2
    signs = f.sign(Quantity([-2, 0, 3], "m"))
    assert signs.unit.is_dimensionless
    np.testing.assert_array_equal(signs.value, [-1, 0, 1])


def test_min_max_convert_into_first_unit():
    low = f.min_(Quantity(1, "km"), Quantity(500, "m"))
    assert low.unit_string == "km"
    assert low.value == pytest.approx(0.5)
    assert f.max_(Quantity([1, 5]), Quantity(3)).value.tolist() == [3, 5]
    with pytest.raises(IncompatibleUnitsError):
        f.max_(Quantity(1, "m"), Quantity(1, "s"))


def test_clamp_hypot_atan2():
    clamped = f.clamp(Quantity([-1, 5, 20]), Quantity(0), Quantity(10))
    np.testing.assert_array_equal(clamped.value, [0, 5, 10])
    assert f.hypot(Quantity(3, "m"), Quantity(4, "m")).value == pytest.approx(5)
    angle = f.atan2(Quantity(1, "m"), Quantity(100, "cm"))
    assert angle.unit_string == "rad"
    assert angle.value == pytest.approx(math.pi / 4)


def test_pow_with_scalar_and_distribution_exponents():
    cubed = f.pow_(Quantity(2, "m"), Quantity(3))
    assert cubed.unit_string == "m^3"
    assert cubed.value == pytest.approx(8)
    spread = f.pow_(Quantity(2), Quantity([1, 2, 3]))
    np.testing.assert_allclose(spread.value, [2, 4, 8])
    with pytest.raises(IncompatibleUnitsError):
        f.pow_(Quantity(2), Quantity(3, "m"))


def test_distribution_functions_use_sampling_context():
    ctx = f.SamplingContext(sample_count=100, confidence=0.9, rng=make_rng(1))
    q = f.DISTRIBUTION_FUNCTIONS["to"](ctx, 1, 10)
    assert q.sample_count == 100
    assert f.DISTRIBUTION_FUNCTIONS["gamma"](ctx, 2).sample_count == 100
    assert f.DISTRIBUTION_FUNCTIONS["db"](ctx).unit.is_dimensionless


def test_raw_argument():
    assert f.raw_argument(Quantity(3, "m")) == 3
    assert f.raw_argument(Quantity([1, 2, 3])) == pytest.approx(2)
    with pytest.raises(InvalidParameterError):
        f.raw_argument(3)


def test_builtin_names_cover_both_tables():
    names = f.builtin_names()
    assert "lognormal" in names
    assert "sqrt" in names
    assert "crps" in names
