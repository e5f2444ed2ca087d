"""Tests for Quantity arithmetic, broadcasting, conversion and statistics."""

import numpy as np
import pytest

from neofermi.core import Quantity, as_quantity
from neofermi.errors import IncompatibleUnitsError, InvalidParameterError, OutOfRangeError


def test_add_requires_compatible_units():
    with pytest.raises(IncompatibleUnitsError, match="Cannot add"):
        Quantity(3, "meters").add(Quantity(4, "seconds"))
    with pytest.raises(IncompatibleUnitsError, match="Cannot subtract"):
        Quantity(3, "meters").subtract(Quantity(4, "kg"))


def test_add_converts_into_left_unit():
    total = Quantity(1, "km") + Quantity(500, "m")
    assert total.unit_string == "km"
    assert total.value == pytest.approx(1.5)


def test_broadcast_equal_lengths_and_singleton():
    assert Quantity([1, 2, 3]).add(Quantity([4, 5, 6])) == Quantity([5, 7, 9])
    assert Quantity(10).add(Quantity([1, 2, 3])) == Quantity([11, 12, 13])


def test_broadcast_unequal_lengths_wraps_cyclically():
    result = Quantity([1, 2, 3, 4]).add(Quantity([10, 20]))
    np.testing.assert_array_equal(result.value, [11, 22, 13, 24])


def test_scalar_and_distribution_state():
    scalar = Quantity(2) * Quantity(3)
    assert scalar.is_scalar()
    assert scalar.value == 6
    mixed = Quantity(2) * Quantity([1, 2])
    assert mixed.is_distribution()
    assert mixed.sample_count == 2


def test_multiply_divide_pow_units():
    area = Quantity(2, "m") * Quantity(3, "m")
    assert area.unit_string == "m^2"
    assert area.value == 6
    speed = Quantity(10, "m") / Quantity(2, "s")
    assert speed.unit_string == "m / s"
    assert speed.value == 5
    side = Quantity(4, "m^2").pow(0.5)
    assert side.unit_string == "m"
    assert side.value == pytest.approx(2)


def test_scalar_statistics_degrade_to_value():
    q = Quantity(7.5, "kg")
    assert q.mean() == q.median() == q.value == 7.5
    assert q.std() == 0
    assert q.percentile(0.3) == 7.5


def test_round_trip_conversion():
    km = Quantity(1000, "meters").to("km")
    assert km.value == pytest.approx(1, abs=1e-5)
    assert km.to("meters").value == pytest.approx(1000, abs=1e-5)


def test_percentile_uses_floor_order_statistic():
    q = Quantity([5, 1, 4, 2, 3])
    assert q.percentile(0.0) == 1
    assert q.percentile(1.0) == 5
    assert q.percentile(0.5) == 3
    assert q.percentile(0.3) == 2
    # Not interpolated: the midpoint of 2 and 3 is never returned.
    assert Quantity([1, 2, 3, 4]).percentile(0.5) == 3


@pytest.mark.parametrize("p", [-0.1, 1.5])
def test_percentile_out_of_range(p):
    with pytest.raises(OutOfRangeError):
        Quantity([1, 2, 3]).percentile(p)


def test_particles_are_read_only():
    q = Quantity([1.0, 2.0, 3.0])
    with pytest.raises(ValueError):
        q.value[0] = 5.0
    copy = q.to_particles()
    copy[0] = 5.0
    assert q.value[0] == 1.0


def test_empty_samples_rejected():
    with pytest.raises(InvalidParameterError):
        Quantity([])


def test_compare_returns_indicator():
    result = Quantity([1, 5, 10], "m").compare(Quantity(400, "cm"), ">")
    np.testing.assert_array_equal(result.value, [0, 1, 1])
    assert result.unit.is_dimensionless
    with pytest.raises(IncompatibleUnitsError):
        Quantity(1, "m").compare(Quantity(1, "s"), "<")


def test_python_operators():
    q = 2 * Quantity(3, "m")
    assert q.unit_string == "m"
    assert q.value == 6
    assert (-q).value == -6
    assert (Quantity(2, "m") ** 2).unit_string == "m^2"
    assert (10 - Quantity(4)).value == 6
    with pytest.raises(InvalidParameterError):
        Quantity(2) ** Quantity([1, 2])


def test_string_forms():
    assert str(Quantity(5, "m")) == "5 m"
    assert repr(Quantity(5, "m")) == "Quantity(5.0, 'm')"
    assert repr(Quantity([1, 2], "m")) == "Quantity(<2 samples>, 'm')"
    assert as_quantity(3).unit_string == ""
