"""Summary tables of evaluated Quantities for display and CSV export."""

from __future__ import annotations

import logging
import os
from typing import Mapping

import numpy as np
import pandas as pd

from .core.quantity import Quantity
from .stats.summary import format_value_with_uncertainty

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = [
    "name",
    "unit",
    "dimension",
    "mean",
    "std",
    "p5",
    "median",
    "p95",
    "samples",
    "reported",
]


def uncertainty_forms(value: float, uncertainty: float) -> tuple[float, float]:
    """Return fractional and percentage forms of an absolute uncertainty.

    Returns:
        tuple[float, float]: ``(fractional, percent)``; ``(nan, nan)`` when
        ``value`` is zero or either input is non-finite.
    """
    v = float(value)
    u = float(uncertainty)
    if not np.isfinite(v) or not np.isfinite(u) or v == 0:
        return np.nan, np.nan
    frac = abs(u / v)
    return float(frac), float(frac * 100.0)


def summarize(quantities: Mapping[str, Quantity]) -> pd.DataFrame:
    """One row of summary statistics per named Quantity.

    Args:
        quantities (Mapping[str, Quantity]): Values by variable name, in
            display order.

    Returns:
        pandas.DataFrame: Columns listed in ``SUMMARY_COLUMNS`` plus the
        fractional and percentage spread (``std / mean``). Statistics are in
        each row's own unit; ``reported`` is ``mean ± std`` rounded to the
        uncertainty.
    """
    rows = []
    for name, q in quantities.items():
        mean, std = q.mean(), q.std()
        frac, pct = uncertainty_forms(mean, std)
        rows.append(
            {
                "name": name,
                "unit": q.unit_string,
                "dimension": q.dimension_name() or "",
                "mean": mean,
                "std": std,
                "p5": q.percentile(0.05),
                "median": q.percentile(0.5),
                "p95": q.percentile(0.95),
                "samples": q.sample_count,
                "reported": format_value_with_uncertainty(mean, std, q.unit_string),
                "fractional spread": frac,
                "percentage spread (%)": pct,
            }
        )
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS + ["fractional spread", "percentage spread (%)"])


def save_summary_csv(df: pd.DataFrame, path: str) -> str:
    """Write a summary table to ``path``, creating parent folders.

    Raises:
        KeyError: If ``df`` lacks any of ``SUMMARY_COLUMNS``.
    """
    missing = [c for c in SUMMARY_COLUMNS if c not in df.columns]
    if missing:
        raise KeyError(f"Summary table is missing column(s): {missing}")
    folder = os.path.dirname(path)
    if folder:
        os.makedirs(folder, exist_ok=True)
    df.to_csv(path, index=False)
    logger.info("Saved summary of %d quantities to %s", len(df), path)
    return path
