"""
Matplotlib figures of estimate distributions.

Figures receive finished Quantities and only render them; no sampling or
unit arithmetic happens here.

Modules:
    figures:
        Histogram with 5th/50th/95th percentile markers, and quantile
        dotplot.

    style:
        rcParams, axis cleanup and multi-format ``save_figure``.
"""

from .figures import plot_dotplot, plot_histogram
from .style import apply_global_style, save_figure, set_global_style

__all__ = ["apply_global_style", "plot_dotplot", "plot_histogram", "save_figure", "set_global_style"]
