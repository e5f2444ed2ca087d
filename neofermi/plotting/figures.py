"""Histogram and quantile-dotplot figures of a Quantity's particles."""

from __future__ import annotations

import logging
from typing import Optional

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.figure import Figure

from ..core.quantity import Quantity
from ..visualization import dotplot_data, histogram_data, should_use_log_scale
from .style import STYLE, clean_axis, fig_size, set_global_style

logger = logging.getLogger(__name__)


def _axis_label(quantity: Quantity, label: Optional[str]) -> str:
    if label is not None:
        return label
    return quantity.unit_with_dimension()


def _add_summary_markers(ax, quantity: Quantity) -> None:
    for p, style in ((0.05, ":"), (0.5, "-"), (0.95, ":")):
        ax.axvline(quantity.percentile(p), color=STYLE.MARKER_COLOR, linestyle=style, linewidth=STYLE.LINEWIDTH_THIN)


def plot_histogram(
    quantity: Quantity,
    bins: int = 50,
    title: Optional[str] = None,
    xlabel: Optional[str] = None,
    log_scale: Optional[bool] = None,
) -> Figure:
    """Bar histogram of ``quantity`` with its 5th, 50th and 95th percentiles marked.

    Args:
        quantity: Quantity to plot; a scalar draws a single bar.
        bins: Number of equal-width bins (linear scale only).
        title: Optional axes title.
        xlabel: X-axis label. Defaults to the unit with its dimension name.
        log_scale: Force a log x axis on or off. ``None`` decides from the
            sample spread.

    Returns:
        matplotlib.figure.Figure: The new figure; the caller owns closing it.
    """
    set_global_style()
    use_log = should_use_log_scale(quantity) if log_scale is None else log_scale
    fig, ax = plt.subplots(figsize=fig_size("single"))
    if use_log:
        values = quantity.to_particles()
        edges = np.geomspace(values.min(), values.max(), bins + 1) if values.min() != values.max() else bins
        ax.hist(values, bins=edges, color=STYLE.BAR_COLOR, alpha=STYLE.BAR_ALPHA)
    else:
        data = histogram_data(quantity, bins)
        widths = np.diff(data.edges) if data.max > data.min else np.ones(bins)
        ax.bar(data.edges[:-1], data.counts, width=widths, align="edge", color=STYLE.BAR_COLOR, alpha=STYLE.BAR_ALPHA)
    _add_summary_markers(ax, quantity)
    clean_axis(ax, log_x=use_log)
    ax.set_xlabel(_axis_label(quantity, xlabel))
    if title:
        ax.set_title(title)
    logger.debug("Histogram of %d samples (log=%s)", quantity.sample_count, use_log)
    return fig


def plot_dotplot(
    quantity: Quantity,
    n_dots: int = 20,
    title: Optional[str] = None,
    xlabel: Optional[str] = None,
    log_scale: Optional[bool] = None,
) -> Figure:
    """Quantile dotplot: ``n_dots`` equally likely outcomes, stacked where they coincide.

    Each dot stands for ``1 / n_dots`` of the probability mass, which makes
    the figure readable as frequencies ("3 in 20").
    """
    set_global_style()
    data = dotplot_data(quantity, n_dots)
    use_log = should_use_log_scale(quantity) if log_scale is None else log_scale
    fig, ax = plt.subplots(figsize=fig_size("single"))

    positions = np.log10(data.quantiles) if use_log else data.quantiles
    span = positions.max() - positions.min()
    width = span / max(n_dots, 1) if span > 0 else 1.0
    columns = np.round((positions - positions.min()) / width).astype(int)
    heights = np.zeros_like(columns)
    for i, column in enumerate(columns):
        heights[i] = np.count_nonzero(columns[:i] == column)

    ax.scatter(data.quantiles, heights + 0.5, s=60, color=STYLE.DOT_COLOR, zorder=3)
    ax.set_ylim(0, max(heights.max() + 1.5, 3))
    clean_axis(ax, log_x=use_log)
    ax.set_xlabel(_axis_label(quantity, xlabel))
    if title:
        ax.set_title(title)
    return fig
