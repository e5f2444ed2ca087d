import matplotlib.pyplot as plt
import pytest
from matplotlib.figure import Figure

from neofermi import distributions as d
from neofermi.core import Quantity
from neofermi.plotting import plot_dotplot, plot_histogram, save_figure
from neofermi.plotting.style import sanitize_filename


def test_plot_histogram_labels_and_markers(rng):
    q = d.normal(10, 12, "m", n=2000, rng=rng)
    fig = plot_histogram(q, title="length")
    ax = fig.axes[0]
    assert isinstance(fig, Figure)
    assert ax.get_xlabel() == "m {length}"
    assert ax.get_title() == "length"
    assert ax.get_xscale() == "linear"
    assert len(ax.lines) == 3
    plt.close(fig)


def test_plot_histogram_switches_to_log_scale(rng):
    fig = plot_histogram(d.lognormal(1, 1e4, n=2000, rng=rng))
    assert fig.axes[0].get_xscale() == "log"
    plt.close(fig)


def test_plot_histogram_of_scalar():
    fig = plot_histogram(Quantity(5, "kg"), xlabel="mass")
    assert fig.axes[0].get_xlabel() == "mass"
    plt.close(fig)


def test_plot_dotplot_draws_one_dot_per_quantile(rng):
    fig = plot_dotplot(d.uniform(0, 1, n=500, rng=rng), n_dots=20)
    offsets = fig.axes[0].collections[0].get_offsets()
    assert len(offsets) == 20
    plt.close(fig)


def test_save_figure_writes_every_format(tmp_path):
    fig = plot_histogram(Quantity([1, 2, 3, 4], "s"))
    first = save_figure(fig, tmp_path / "nested" / "hist", formats=("png", "svg"))
    assert first == tmp_path / "nested" / "hist.png"
    assert (tmp_path / "nested" / "hist.png").exists()
    assert (tmp_path / "nested" / "hist.svg").exists()
    plt.close(fig)


def test_save_figure_rejects_bad_formats(tmp_path):
    fig = plot_histogram(Quantity([1, 2, 3]))
    with pytest.raises(ValueError, match="At least one"):
        save_figure(fig, tmp_path / "x", formats=())
    with pytest.raises(ValueError, match="Unsupported"):
        save_figure(fig, tmp_path / "x", formats=("bmp",))
    plt.close(fig)


def test_sanitize_filename():
    assert sanitize_filename("fuel per year") == "fuel_per_year"
    assert sanitize_filename("a/b:c") == "a_b_c"
    assert sanitize_filename("...") == "figure"
