"""
Parametric samplers that build distribution-state Quantities.

Every sampler validates its parameters before drawing, accepts an optional
unit, sample count ``n`` and ``numpy.random.Generator`` ``rng``, and never
shares state with other calls.

Modules:
    continuous:
        lognormal, normal, uniform, plusminus, exponential and the
        convenience forms ``to``, ``percent`` and ``db``.

    gamma:
        Marsaglia–Tsang gamma sampling, beta, ``outof`` and ``against``.

    discrete:
        Poisson, binomial and weighted discrete sets.
"""

from .continuous import (
    db,
    exponential,
    exponential_mean,
    lognormal,
    normal,
    percent,
    plusminus,
    to,
    uniform,
    z_factor,
)
from .discrete import binomial, poisson, weighted
from .gamma import against, beta, gamma, outof

__all__ = [
    "against",
    "beta",
    "binomial",
    "db",
    "exponential",
    "exponential_mean",
    "gamma",
    "lognormal",
    "normal",
    "outof",
    "percent",
    "plusminus",
    "poisson",
    "to",
    "uniform",
    "weighted",
    "z_factor",
]
