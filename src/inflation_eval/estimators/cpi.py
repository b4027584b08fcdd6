"""Reference inflation estimators.

All estimators reduce every month to a single aggregate monthly change,
chain those changes into an index and report the year-on-year variation in
percent, so a series of ``P`` months yields ``P - 11`` inflation periods.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from inflation_eval.config.constants import MONTHS_IN_YEAR
from inflation_eval.data import Panel, PanelSeries

from .base import Estimator

__all__ = [
    "EnsembleEstimator",
    "InflationConstant",
    "InflationPercentileEq",
    "InflationTotalCPI",
    "yoy_from_monthly",
]


def yoy_from_monthly(monthly: np.ndarray) -> np.ndarray:
    """Year-on-year percent change of the index chained from ``monthly`` changes."""

    monthly = np.asarray(monthly, dtype=float)
    index = np.concatenate(([1.0], np.cumprod(1.0 + monthly)))
    return 100.0 * (index[MONTHS_IN_YEAR:] / index[:-MONTHS_IN_YEAR] - 1.0)


def _weighted_monthly(panel: Panel) -> np.ndarray:
    w = panel.w / panel.w.sum()
    return panel.v @ w


@dataclass(frozen=True)
class InflationTotalCPI(Estimator):
    """Headline CPI: weighted monthly change chained across bases."""

    def __call__(self, series: PanelSeries) -> np.ndarray:
        monthly = np.concatenate([_weighted_monthly(panel) for panel in series])
        return yoy_from_monthly(monthly).reshape(-1, 1)

    @property
    def measure_name(self) -> str:
        return "Total CPI year-on-year variation"

    @property
    def measure_tag(self) -> str:
        return "Total"


@dataclass(frozen=True)
class InflationPercentileEq(Estimator):
    """Equally weighted percentile ``q`` of the monthly item changes."""

    q: float

    def __post_init__(self) -> None:
        if not 0 <= self.q <= 100:
            raise ValueError("q must lie in [0, 100]")

    def __call__(self, series: PanelSeries) -> np.ndarray:
        monthly = np.concatenate([np.percentile(panel.v, self.q, axis=1) for panel in series])
        return yoy_from_monthly(monthly).reshape(-1, 1)

    @property
    def measure_name(self) -> str:
        return f"Equally weighted percentile {self.q:g}"

    @property
    def measure_tag(self) -> str:
        return f"PerEq-{self.q:g}"

    @property
    def params(self) -> tuple[float, ...]:
        return (self.q,)


@dataclass(frozen=True)
class InflationConstant(Estimator):
    """Column of ones; the intercept of a linear combination."""

    def __call__(self, series: PanelSeries) -> np.ndarray:
        return np.ones((series.infl_periods, 1))

    @property
    def measure_name(self) -> str:
        return "Constant"

    @property
    def measure_tag(self) -> str:
        return "C"


class EnsembleEstimator(Estimator):
    """Stacks the outputs of several estimators side by side."""

    def __init__(self, estimators: Sequence[Estimator]) -> None:
        if not estimators:
            raise ValueError("An ensemble needs at least one estimator")
        self.estimators = tuple(estimators)

    def __call__(self, series: PanelSeries) -> np.ndarray:
        return np.hstack([estimator(series) for estimator in self.estimators])

    @property
    def num_measures(self) -> int:
        return sum(estimator.num_measures for estimator in self.estimators)

    @property
    def measure_name(self) -> str:
        return "[" + ", ".join(e.measure_name for e in self.estimators) + "]"

    @property
    def measure_tag(self) -> str:
        return "Ensemble(" + ", ".join(e.measure_tag for e in self.estimators) + ")"

    @property
    def params(self) -> tuple:
        return tuple(e.params for e in self.estimators)

    def __len__(self) -> int:
        return len(self.estimators)
