"""
Scoring and summary statistics over Quantities.

Modules:
    scoring:
        CRPS and its reliability/resolution terms, with log and dB
        variants. The pairwise term uses the sorted-sample identity so
        scoring stays O(n log n).

    summary:
        Unit-preserving percentile and moment helpers, and value ±
        uncertainty rounding for display.
"""

from .scoring import (
    CRPSComponents,
    crps,
    crps_components,
    crps_reliability,
    crps_resolution,
    dbcrps,
    dbcrps_reliability,
    dbcrps_resolution,
    gini_mean_difference,
    logcrps,
    logcrps_reliability,
    logcrps_resolution,
)
from .summary import (
    describe,
    format_quantity,
    format_value_with_uncertainty,
    mean,
    median,
    p5,
    p10,
    p25,
    p75,
    p90,
    p95,
    p99,
    percentile,
    quantile,
    round_value_to_uncertainty,
    std,
)

__all__ = [
    "CRPSComponents",
    "crps",
    "crps_components",
    "crps_reliability",
    "crps_resolution",
    "dbcrps",
    "dbcrps_reliability",
    "dbcrps_resolution",
    "gini_mean_difference",
    "logcrps",
    "logcrps_reliability",
    "logcrps_resolution",
    "describe",
    "format_quantity",
    "format_value_with_uncertainty",
    "mean",
    "median",
    "p5",
    "p10",
    "p25",
    "p75",
    "p90",
    "p95",
    "p99",
    "percentile",
    "quantile",
    "round_value_to_uncertainty",
    "std",
]
