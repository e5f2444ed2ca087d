"""Tests for the lazily built constants table."""

import numpy as np
import pytest

from neofermi.config import make_rng
from neofermi.constants import CONSTANT_ALIASES, ConstantTable, constant_names
from neofermi.core import Quantity
from neofermi.functions import SamplingContext


@pytest.fixture
def table():
    return ConstantTable(SamplingContext(sample_count=200, confidence=0.9, rng=make_rng(0)))


def test_every_constant_builds(table):
    for name in constant_names():
        assert isinstance(table.get(name), Quantity), name


def test_exact_constants_are_scalars(table):
    c = table.get("c")
    assert c.is_scalar()
    assert c.unit_string == "m / s"
    assert c.value == 299792458.0
    assert table.get("pi").value == pytest.approx(np.pi)


def test_measured_constants_use_context(table):
    G = table.get("G")
    assert G.is_distribution()
    assert G.sample_count == 200
    assert G.mean() == pytest.approx(6.6743e-11, rel=1e-3)


def test_constants_are_cached_and_aliases_share_entries(table):
    assert table.get("G") is table.get("G")
    assert table.get("kB") is table.get("k_B")
    assert CONSTANT_ALIASES["days_per_year"] == "year_days"
    table.clear()
    assert "G" in table


def test_weighted_calendar_constants(table):
    year = table.get("year_days")
    assert year.unit_string == "day"
    assert set(np.unique(year.value)) <= {365.0, 366.0}


def test_unknown_names(table):
    assert table.get("not_a_constant") is None
    assert "not_a_constant" not in table
