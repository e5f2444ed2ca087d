"""Tests for histogram and quantile-dotplot data."""

import numpy as np
import pytest

from neofermi.core import Quantity
from neofermi.errors import InvalidParameterError
from neofermi.visualization import dotplot_data, histogram_data, should_use_log_scale


def test_histogram_bins_include_top_edge():
    data = histogram_data(np.arange(10), bins=5)
    np.testing.assert_array_equal(data.counts, [2, 2, 2, 2, 2])
    assert len(data.edges) == 6
    assert data.edges[0] == 0 and data.edges[-1] == 9
    assert data.min == 0 and data.max == 9


def test_histogram_counts_every_sample(rng):
    samples = rng.lognormal(size=1000)
    assert histogram_data(samples, bins=37).counts.sum() == 1000


def test_histogram_of_identical_samples():
    data = histogram_data([3, 3, 3], bins=4)
    np.testing.assert_array_equal(data.counts, [3, 0, 0, 0])
    assert data.min == data.max == 3


def test_histogram_takes_unit_from_quantity():
    assert histogram_data(Quantity([1, 2], "m")).unit == "m"
    assert histogram_data([1, 2], unit="s").unit == "s"


def test_dotplot_quantiles_at_bin_centers():
    data = dotplot_data(np.arange(100), n_dots=10)
    np.testing.assert_array_equal(data.quantiles, [5, 15, 25, 35, 45, 55, 65, 75, 85, 95])
    assert data.min == 0 and data.max == 99


@pytest.mark.parametrize(
    "call",
    [
        lambda: histogram_data([1, 2], bins=0),
        lambda: histogram_data([]),
        lambda: dotplot_data([1, 2], n_dots=0),
        lambda: dotplot_data([]),
    ],
)
def test_invalid_inputs(call):
    with pytest.raises(InvalidParameterError):
        call()


def test_log_scale_decision():
    assert should_use_log_scale([1, 1000])
    assert not should_use_log_scale([1, 10])
    assert not should_use_log_scale([-1, 1000])
