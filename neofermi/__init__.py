"""
A calculator for order-of-magnitude estimates with units and uncertainty.

Values carry a physical unit and, when uncertain, a Monte Carlo particle set
that is propagated through every arithmetic step.

Modules:
    - core: Dimensions, units and the Quantity value type.
    - distributions: Parametric samplers producing particle Quantities.
    - stats: CRPS scoring, percentiles and value ± uncertainty formatting.
    - functions: Math and distribution functions callable from programs.
    - parser: Tokenizer and parser for the expression language.
    - evaluator: Evaluates parsed programs in a session environment.
    - constants: Mathematical and physical constants.
    - sensitivity: Variance-decomposition sensitivity analysis.
    - visualization: Histogram and quantile-dotplot data.
    - plotting: Matplotlib figures of Quantities.
    - reporting: pandas summary tables and CSV export.
"""

__version__ = "1.0.0"

from .config import DEFAULT_CONFIDENCE, DEFAULT_SAMPLE_COUNT, Settings, make_rng
from .core import Quantity, Unit, parse_unit
from .errors import (
    ArityMismatchError,
    EvaluationError,
    IncompatibleUnitsError,
    InvalidParameterError,
    MixedUnitsError,
    NeoFermiError,
    NonPositiveValueError,
    OutOfRangeError,
    ParseError,
    UndefinedFunctionError,
    UndefinedVariableError,
    UnknownUnitError,
)
from .evaluator import Evaluator, StatementResult
from .parser import parse
from .reporting import save_summary_csv, summarize
from .sensitivity import analyze_sensitivity, format_sensitivity, sensitivity_from_source

__all__ = [
    # Configuration
    "DEFAULT_CONFIDENCE",
    "DEFAULT_SAMPLE_COUNT",
    "Settings",
    "make_rng",
    # Core
    "Quantity",
    "Unit",
    "parse_unit",
    # Evaluation
    "Evaluator",
    "StatementResult",
    "parse",
    # Analysis and reporting
    "analyze_sensitivity",
    "format_sensitivity",
    "sensitivity_from_source",
    "summarize",
    "save_summary_csv",
    # Errors
    "ArityMismatchError",
    "EvaluationError",
    "IncompatibleUnitsError",
    "InvalidParameterError",
    "MixedUnitsError",
    "NeoFermiError",
    "NonPositiveValueError",
    "OutOfRangeError",
    "ParseError",
    "UndefinedFunctionError",
    "UndefinedVariableError",
    "UnknownUnitError",
]
