"""Variance-decomposition sensitivity analysis.

For each uncertain input, the output is recomputed with that input fixed at
its mean. The drop in output variance is the input's contribution; whatever
the single-input contributions leave unexplained is attributed to
interactions between inputs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Sequence

import pandas as pd

from .config import Settings, make_rng
from .core.quantity import Quantity
from .errors import InvalidParameterError, UndefinedVariableError
from .evaluator import Evaluator
from .parser import parse
from .suggestions import find_similar

logger = logging.getLogger(__name__)

BAR_CHAR = "█"


@dataclass(frozen=True)
class InputContribution:
    name: str
    variance_contribution: float
    percent_contribution: float
    input_mean: float
    input_std: float


@dataclass(frozen=True)
class SensitivityResult:
    """Output spread and the share of its variance each input explains.

    Attributes:
        output_mean: Mean of the baseline output.
        output_std: Standard deviation of the baseline output.
        total_variance: Variance of the baseline output.
        contributions: Per-input contributions, largest first.
        unexplained_variance: Variance not explained by any single input.
    """

    output_mean: float
    output_std: float
    total_variance: float
    contributions: List[InputContribution] = field(default_factory=list)
    unexplained_variance: float = 0.0

    @property
    def unexplained_percent(self) -> float:
        if self.total_variance <= 0:
            return 0.0
        return self.unexplained_variance / self.total_variance * 100.0

    def to_dataframe(self) -> pd.DataFrame:
        """One row per input, sorted by contribution."""
        rows = [
            {
                "input": c.name,
                "variance_contribution": c.variance_contribution,
                "percent_contribution": c.percent_contribution,
                "input_mean": c.input_mean,
                "input_std": c.input_std,
            }
            for c in self.contributions
        ]
        return pd.DataFrame(
            rows,
            columns=["input", "variance_contribution", "percent_contribution", "input_mean", "input_std"],
        )


def analyze_sensitivity(
    inputs: Mapping[str, Quantity],
    compute_output: Callable[[Dict[str, Quantity]], Quantity],
) -> SensitivityResult:
    """Rank ``inputs`` by how much of the output variance each one drives.

    Args:
        inputs: Input Quantities by name.
        compute_output: Callable mapping a dict of inputs to the output
            Quantity. It is called once with the original inputs and once
            per input with that input replaced by a scalar at its mean.

    Returns:
        SensitivityResult: Contributions sorted from largest to smallest.
    """
    baseline = compute_output(dict(inputs))
    total_variance = baseline.variance()

    contributions: List[InputContribution] = []
    explained = 0.0
    for name, quantity in inputs.items():
        fixed = dict(inputs)
        fixed[name] = Quantity(quantity.mean(), quantity.unit)
        reduced = max(0.0, total_variance - compute_output(fixed).variance())
        percent = reduced / total_variance * 100.0 if total_variance > 0 else 0.0
        explained += reduced
        contributions.append(InputContribution(name, reduced, percent, quantity.mean(), quantity.std()))
        logger.debug("Fixing %s removes %.3g of variance %.3g", name, reduced, total_variance)

    contributions.sort(key=lambda c: c.variance_contribution, reverse=True)
    return SensitivityResult(
        output_mean=baseline.mean(),
        output_std=baseline.std(),
        total_variance=total_variance,
        contributions=contributions,
        unexplained_variance=max(0.0, total_variance - explained),
    )


def format_sensitivity(result: SensitivityResult) -> str:
    """Text report with one ``█`` per 5% of explained variance."""
    lines = [
        f"Output: {result.output_mean:.3e} ± {result.output_std:.3e}",
        "",
        "Variance Contribution:",
    ]
    for c in result.contributions:
        bar = BAR_CHAR * int(round(c.percent_contribution / 5.0))
        lines.append(f"  {c.name}: {c.percent_contribution:.1f}% {bar}")
    if result.unexplained_percent > 1.0:
        lines.append(f"  (interactions): {result.unexplained_percent:.1f}%")
    return "\n".join(lines)


def sensitivity_from_source(
    source: str,
    output: str,
    inputs: Sequence[str],
    settings: Optional[Settings] = None,
) -> SensitivityResult:
    """Sensitivity of variable ``output`` in a program to the named ``inputs``.

    The program is re-run once per input with that variable pinned at its
    mean. Every run uses the same seed, so the other inputs keep identical
    particles across runs.

    Raises:
        InvalidParameterError: If ``inputs`` is empty.
        UndefinedVariableError: If the program never assigns ``output`` or
            one of ``inputs``.
    """
    if not inputs:
        raise InvalidParameterError("Sensitivity analysis needs at least one input")
    settings = settings or Settings()
    if settings.seed is None:
        settings = settings.with_overrides(seed=int(make_rng().integers(2**32)))
    program = parse(source)

    def run(pinned: Mapping[str, Quantity]) -> Evaluator:
        evaluator = Evaluator(settings)
        for name, value in pinned.items():
            evaluator.pin_variable(name, value)
        evaluator.evaluate(program)
        return evaluator

    def variable(evaluator: Evaluator, name: str) -> Quantity:
        value = evaluator.get_variable(name)
        if value is None:
            raise UndefinedVariableError(name, find_similar(name, evaluator.user_variable_names()))
        return value

    baseline = run({})
    values = {name: variable(baseline, name) for name in inputs}
    variable(baseline, output)

    def compute(current: Dict[str, Quantity]) -> Quantity:
        pinned = {name: q for name, q in current.items() if q is not values[name]}
        if not pinned:
            return variable(baseline, output)
        return variable(run(pinned), output)

    return analyze_sensitivity(values, compute)
