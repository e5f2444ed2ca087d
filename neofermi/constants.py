"""Mathematical and physical constants available to every evaluator.

Exact constants are scalars. Measured constants carry their published
standard uncertainty (CODATA 2022, IAU nominal values, JPL planetary data)
and are sampled with :func:`~neofermi.distributions.plusminus`, so they are
built per evaluator from its own sample count and RNG, and only when a
program first refers to them.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Dict, Iterable, List, Optional

from . import distributions
from .core.quantity import Quantity
from .functions import SamplingContext

logger = logging.getLogger(__name__)

Factory = Callable[[SamplingContext], Quantity]


def _exact(value: float, unit: Optional[str] = None) -> Factory:
    def build(ctx: SamplingContext) -> Quantity:
        return Quantity(value, unit)

    return build


def _measured(mean: float, sigma: float, unit: Optional[str] = None) -> Factory:
    def build(ctx: SamplingContext) -> Quantity:
        return distributions.plusminus(mean, sigma, unit, n=ctx.sample_count, rng=ctx.rng)

    return build


def _spread(low: float, high: float, unit: Optional[str] = None) -> Factory:
    def build(ctx: SamplingContext) -> Quantity:
        return distributions.lognormal(
            low, high, unit, confidence=ctx.confidence, n=ctx.sample_count, rng=ctx.rng
        )

    return build


def _weighted(values: List[float], weights: List[float], unit: Optional[str] = None) -> Factory:
    def build(ctx: SamplingContext) -> Quantity:
        return distributions.weighted(values, weights, unit, n=ctx.sample_count, rng=ctx.rng)

    return build


CONSTANT_FACTORIES: Dict[str, Factory] = {
    # Mathematical
    "pi": _exact(math.pi),
    "e": _exact(math.e),
    "tau": _exact(2 * math.pi),
    "phi": _exact((1 + math.sqrt(5)) / 2),
    "googol": _exact(1e100),
    # SI defining constants
    "c": _exact(299792458.0, "m/s"),
    "h": _exact(6.62607015e-34, "J s"),
    "hbar": _exact(6.62607015e-34 / (2 * math.pi), "J s"),
    "e_charge": _exact(1.602176634e-19, "C"),
    "k_B": _exact(1.380649e-23, "J/K"),
    "N_A": _exact(6.02214076e23, "1/mol"),
    # Measured
    "G": _measured(6.67430e-11, 0.00015e-11, "N m^2 / kg^2"),
    "g": _exact(9.80665, "m/s^2"),
    "alpha": _measured(7.2973525643e-3, 1.1e-12),
    "amu": _measured(1.66053906892e-27, 5.2e-37, "kg"),
    "a0": _measured(5.29177210544e-11, 8.2e-21, "m"),
    "m_e": _measured(9.1093837139e-31, 2.8e-40, "kg"),
    "m_p": _measured(1.67262192595e-27, 5.2e-37, "kg"),
    "m_n": _measured(1.67492750056e-27, 8.5e-37, "kg"),
    # Derived
    "sigma": _exact(5.670374419e-8, "W / m^2 / K^4"),
    "eps0": _exact(8.8541878128e-12, "F/m"),
    "mu0": _exact(1.25663706212e-6, "H/m"),
    "R": _exact(8.314462618, "J / mol / K"),
    # Astronomical
    "AU": _exact(149597870700.0, "m"),
    "ly": _exact(9.4607304725808e15, "m"),
    "pc": _exact(3.0856775814913673e16, "m"),
    "M_sun": _measured(1.98841e30, 4e25, "kg"),
    "R_sun": _measured(6.96342e8, 6.5e4, "m"),
    "L_sun": _measured(3.828e26, 8e22, "W"),
    "M_earth": _measured(5.9722e24, 6.0e20, "kg"),
    "R_earth": _measured(6.371e6, 1e4, "m"),
    "M_moon": _measured(7.342e22, 1e18, "kg"),
    "R_moon": _measured(1737.4e3, 100, "m"),
    "solar_constant": _measured(1360.8, 0.5, "W/m^2"),
    "milky_way_stars": _spread(100e9, 400e9),
    # Time
    "year_days": _weighted([365, 366], [303, 97], "day"),
    "month_days": _weighted([31, 30, 29, 28], [2800, 1600, 97, 303], "day"),
    # Everyday
    "T0": _exact(273.15, "K"),
    "rho_water": _exact(1000.0, "kg/m^3"),
    "rho_air": _measured(1.225, 0.01, "kg/m^3"),
    "rho_steel": _measured(7850, 100, "kg/m^3"),
    "rho_ice": _measured(917, 10, "kg/m^3"),
    "earth_surface_area": _exact(5.1e14, "m^2"),
    "earth_land_area": _exact(1.49e14, "m^2"),
    "human_basal_power": _measured(80, 10, "W"),
    "energy_density_gasoline": _measured(46e6, 2e6, "J/kg"),
    # Estimation helpers
    "world_population": _measured(8.2e9, 0.1e9),
    "us_population": _measured(335e6, 5e6),
}

CONSTANT_ALIASES: Dict[str, str] = {
    "euler": "e",
    "speed_of_light": "c",
    "planck": "h",
    "kB": "k_B",
    "boltzmann": "k_B",
    "NA": "N_A",
    "avogadro": "N_A",
    "standard_gravity": "g",
    "gas_constant": "R",
    "stefan_boltzmann": "sigma",
    "epsilon0": "eps0",
    "electron_mass": "m_e",
    "proton_mass": "m_p",
    "neutron_mass": "m_n",
    "bohr_radius": "a0",
    "earth_mass": "M_earth",
    "earth_radius": "R_earth",
    "sun_mass": "M_sun",
    "sun_radius": "R_sun",
    "sun_luminosity": "L_sun",
    "moon_mass": "M_moon",
    "moon_radius": "R_moon",
    "days_per_year": "year_days",
}


class ConstantTable:
    """Lazily built constants bound to one sampling context.

    Args:
        context: Sample count, confidence and RNG used for measured
            constants.

    Note:
        Each constant is built once per table, so every reference to ``G``
        within one session sees the same particles.
    """

    def __init__(self, context: SamplingContext):
        self.context = context
        self._cache: Dict[str, Quantity] = {}

    def __contains__(self, name: str) -> bool:
        return name in CONSTANT_FACTORIES or name in CONSTANT_ALIASES

    def get(self, name: str) -> Optional[Quantity]:
        key = CONSTANT_ALIASES.get(name, name)
        factory = CONSTANT_FACTORIES.get(key)
        if factory is None:
            return None
        if key not in self._cache:
            logger.debug("Building constant %s", key)
            self._cache[key] = factory(self.context)
        return self._cache[key]

    def names(self) -> List[str]:
        return list(CONSTANT_FACTORIES) + list(CONSTANT_ALIASES)

    def clear(self) -> None:
        self._cache.clear()


def constant_names() -> Iterable[str]:
    return list(CONSTANT_FACTORIES) + list(CONSTANT_ALIASES)
