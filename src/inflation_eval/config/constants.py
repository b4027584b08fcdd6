"""Fixed numbers and label formats shared across modules.

The module gathers the fixed numbers of the simulation exercise (seasonal
period, default seed, synthetic weighing parameters) and the string formats
used to label results, so that no magic literal is spread across modules.
"""

from __future__ import annotations

from typing import Final

__all__ = [
    "COMPACT_DATE_FORMAT",
    "DEFAULT_CONNECTOR",
    "DEFAULT_DATE_FORMAT",
    "DEFAULT_SEED",
    "DYNAMIC_RW_ATOL",
    "DYNAMIC_RW_LENGTH",
    "DYNAMIC_RW_NFOLDS",
    "DYNAMIC_RW_PHI",
    "DYNAMIC_RW_SIGMA",
    "HUBER_THRESHOLD",
    "INFL_LAG",
    "LASSO_ALPHA",
    "LASSO_MAX_ITER",
    "LASSO_TOL",
    "MONTHS_IN_YEAR",
    "SYNTHETIC_A",
    "SYNTHETIC_EPS",
]


# Simulation ----------------------------------------------------------------

DEFAULT_SEED: Final[int] = 314159
"""Base seed of every simulation."""

MONTHS_IN_YEAR: Final[int] = 12
"""Seasonal block length; the toolkit handles monthly data only."""

INFL_LAG: Final[int] = 11
"""Rows lost when turning monthly changes into year-on-year inflation."""


# Synthetic base-change weighing --------------------------------------------

SYNTHETIC_A: Final[float] = 0.35
SYNTHETIC_EPS: Final[float] = 1e-4


# Dynamic random-walk trend -------------------------------------------------

DYNAMIC_RW_LENGTH: Final[int] = 360
DYNAMIC_RW_PHI: Final[float] = 1.0
DYNAMIC_RW_SIGMA: Final[float] = 0.05
DYNAMIC_RW_NFOLDS: Final[int] = 10
DYNAMIC_RW_ATOL: Final[float] = 0.1


# Metrics and combination ---------------------------------------------------

HUBER_THRESHOLD: Final[float] = 1.0

LASSO_ALPHA: Final[float] = 0.001
LASSO_TOL: Final[float] = 1e-4
LASSO_MAX_ITER: Final[int] = 1000


# Result labelling ----------------------------------------------------------

DEFAULT_CONNECTOR: Final[str] = ", "
DEFAULT_DATE_FORMAT: Final[str] = "%b-%y"
COMPACT_DATE_FORMAT: Final[str] = "%b%y"
