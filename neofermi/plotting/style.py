"""Shared figure style, axis cleanup and multi-format save helpers."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

import matplotlib.pyplot as plt
from matplotlib.axes import Axes
from matplotlib.figure import Figure
from matplotlib.ticker import MaxNLocator

OUTPUT_FORMATS: tuple[str, ...] = ("png", "pdf", "svg")
FIGURE_DPI = 300
_STYLE_STATE = {"initialized": False}


@dataclass(frozen=True)
class StyleConfig:
    BASE_FONTSIZE: float = 11.0
    TITLE_FONTSIZE: float = 13.0
    LABEL_FONTSIZE: float = 11.0
    TICK_FONTSIZE: float = 10.0
    LINEWIDTH: float = 1.8
    LINEWIDTH_THIN: float = 1.0
    GRID_ALPHA: float = 0.20
    BAR_COLOR: str = "#4ec9b0"
    BAR_ALPHA: float = 0.8
    DOT_COLOR: str = "#569cd6"
    MARKER_COLOR: str = "#333333"
    FIGSIZE_SINGLE: tuple[float, float] = (6.0, 3.2)
    FIGSIZE_WIDE: tuple[float, float] = (9.0, 3.2)


STYLE = StyleConfig()

FIG_SIZES: dict[str, tuple[float, float]] = {
    "single": STYLE.FIGSIZE_SINGLE,
    "wide": STYLE.FIGSIZE_WIDE,
}


def apply_global_style(font_scale: float = 1.0) -> None:
    """Apply Matplotlib rcParams for estimate figures, scaled by ``font_scale``."""
    scale = float(font_scale)
    plt.rcParams.update(
        {
            "font.size": STYLE.BASE_FONTSIZE * scale,
            "axes.titlesize": STYLE.TITLE_FONTSIZE * scale,
            "axes.labelsize": STYLE.LABEL_FONTSIZE * scale,
            "xtick.labelsize": STYLE.TICK_FONTSIZE * scale,
            "ytick.labelsize": STYLE.TICK_FONTSIZE * scale,
            "axes.linewidth": STYLE.LINEWIDTH_THIN,
            "axes.spines.top": False,
            "axes.spines.right": False,
            "axes.spines.left": False,
            "grid.alpha": STYLE.GRID_ALPHA,
            "grid.linestyle": ":",
            "lines.linewidth": STYLE.LINEWIDTH,
            "figure.dpi": 120,
            "savefig.dpi": FIGURE_DPI,
            "savefig.bbox": "tight",
            "savefig.pad_inches": 0.1,
        }
    )


def set_global_style() -> None:
    """Apply the global style once per process."""
    if not _STYLE_STATE["initialized"]:
        apply_global_style()
        _STYLE_STATE["initialized"] = True


def fig_size(kind: str = "single") -> tuple[float, float]:
    return FIG_SIZES.get(kind, FIG_SIZES["single"])


def clean_axis(ax: Axes, *, log_x: bool = False, nbins_x: int = 6) -> None:
    """Hide the y axis, keep a light x grid and, unless log-scaled, tidy x ticks."""
    ax.yaxis.set_visible(False)
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    ax.spines["left"].set_visible(False)
    ax.spines["bottom"].set_linewidth(STYLE.LINEWIDTH_THIN)
    if log_x:
        ax.set_xscale("log")
    else:
        ax.xaxis.set_major_locator(MaxNLocator(nbins=nbins_x))
    ax.grid(True, axis="x", alpha=STYLE.GRID_ALPHA, linestyle=":", linewidth=0.7)


def sanitize_filename(name: str) -> str:
    """Normalize a filename component into a stable, filesystem-safe token."""
    text = re.sub(r"\s+", "_", str(name).strip())
    text = re.sub(r"[^A-Za-z0-9._-]+", "_", text)
    text = re.sub(r"_+", "_", text).strip("._")
    return text or "figure"


def save_figure(
    fig: Figure,
    savepath_base: str | Path,
    formats: Sequence[str] = OUTPUT_FORMATS,
    dpi: int = FIGURE_DPI,
) -> Path:
    """Save a figure to every format in ``formats`` from one extensionless base.

    Returns:
        Path: The path of the first format written.

    Raises:
        ValueError: If ``formats`` is empty or names an unsupported format.
    """
    if not formats:
        raise ValueError("At least one output format is required")
    unknown = [ext for ext in formats if ext not in OUTPUT_FORMATS]
    if unknown:
        raise ValueError(f"Unsupported format(s) {unknown}. Expected one of {OUTPUT_FORMATS}.")
    base = Path(savepath_base)
    base.parent.mkdir(parents=True, exist_ok=True)
    for ext in formats:
        fig.savefig(str(base.with_suffix(f".{ext}")), dpi=dpi if ext == "png" else None)
    return base.with_suffix(f".{formats[0]}")
