"""Session defaults and random-source construction."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

import numpy as np

DEFAULT_SAMPLE_COUNT: int = 20000
DEFAULT_CONFIDENCE: float = 0.9


@dataclass(frozen=True)
class Settings:
    """Evaluation settings shared by one evaluator session.

    Attributes:
        sample_count: Number of particles drawn by each sampler.
        confidence: Probability mass covered by ``a to b`` style intervals.
        seed: Seed for the session RNG. ``None`` draws fresh OS entropy.
    """

    sample_count: int = DEFAULT_SAMPLE_COUNT
    confidence: float = DEFAULT_CONFIDENCE
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        resolve_sample_count(self.sample_count)
        if not 0.0 < float(self.confidence) < 1.0:
            raise ValueError(
                f"confidence must lie strictly between 0 and 1, got {self.confidence!r}"
            )

    def with_overrides(self, **changes) -> "Settings":
        """Return a copy with the non-``None`` keyword overrides applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def resolve_sample_count(n: Optional[int]) -> int:
    """Return ``n`` or the default sample count, validating it is a positive integer."""
    if n is None:
        return DEFAULT_SAMPLE_COUNT
    if isinstance(n, bool) or int(n) != n or int(n) < 1:
        raise ValueError(f"sample count must be a positive integer, got {n!r}")
    return int(n)


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Create the random source injected into samplers."""
    return np.random.default_rng(seed)


def resolve_rng(rng: Optional[np.random.Generator]) -> np.random.Generator:
    """Use ``rng`` when given, otherwise a fresh unseeded generator."""
    return rng if rng is not None else make_rng()
