"""Deterministic trend injectors."""

from __future__ import annotations

import logging
from importlib import resources
from typing import Callable, Union

import numpy as np
import pandas as pd

from inflation_eval.config.constants import MONTHS_IN_YEAR
from inflation_eval.data import Panel, PanelSeries
from inflation_eval.exceptions import TrendConfigError

from .base import ArrayTrend, TrendInjector

__all__ = [
    "RW_TREND_FILE",
    "TrendAnalytical",
    "TrendExponential",
    "TrendIdentity",
    "TrendRandomWalk",
    "load_rw_trend",
]

logger = logging.getLogger(__name__)

RW_TREND_FILE = "rwtrend.csv"

PeriodsLike = Union[int, Panel, PanelSeries]


def _num_periods(periods: PeriodsLike) -> int:
    if isinstance(periods, (Panel, PanelSeries)):
        return periods.periods
    periods = int(periods)
    if periods <= 0:
        raise TrendConfigError("The number of trend periods must be positive")
    return periods


def load_rw_trend(filename: str = RW_TREND_FILE) -> np.ndarray:
    """Load the precalibrated random-walk trend as multiplicative factors.

    The packaged table stores the cumulative log random walk; the factors are
    its exponential.
    """

    source = resources.files("inflation_eval.trends") / "data" / filename
    with resources.as_file(source) as path:
        frame = pd.read_csv(path)
    logger.debug("Loaded %d random-walk trend periods from %s", len(frame), filename)
    return np.exp(frame["log_trend"].to_numpy(dtype=float))


class TrendIdentity(TrendInjector):
    """Neutral trend: returns the very same object."""

    @property
    def name(self) -> str:
        return "Identity trend"

    @property
    def tag(self) -> str:
        return "ID"

    def apply_panel(self, panel: Panel, rows: slice) -> Panel:
        return panel

    def apply_series(self, series: PanelSeries) -> PanelSeries:
        return series

    def __eq__(self, other: object) -> bool:
        return isinstance(other, TrendIdentity)

    def __hash__(self) -> int:
        return hash(TrendIdentity)


class TrendRandomWalk(ArrayTrend):
    """Precalibrated random-walk trend; defaults to the packaged table."""

    def __init__(self, trend=None) -> None:
        self._set_trend(load_rw_trend() if trend is None else trend)

    @property
    def name(self) -> str:
        return "Random walk trend"

    @property
    def tag(self) -> str:
        return "RW"


class TrendAnalytical(ArrayTrend):
    """Trend given by ``fn(t)`` evaluated over ``t = 1..T``.

    Example
    -------
    >>> trend = TrendAnalytical(lambda t: 1 + np.sin(2 * np.pi * t / 12), "Sinusoidal trend", 120)
    """

    def __init__(self, fn: Callable[[int], float], name: str, periods: PeriodsLike) -> None:
        self.fn = fn
        self._name = name
        t = range(1, _num_periods(periods) + 1)
        self._set_trend([fn(i) for i in t])

    @property
    def name(self) -> str:
        return self._name

    @property
    def tag(self) -> str:
        return "TA"


class TrendExponential(ArrayTrend):
    """Exponential growth at annual ``rate``: factor ``((1 + rate) ** (1/12)) ** t``."""

    def __init__(self, periods: PeriodsLike, rate: float = 0.02) -> None:
        if rate >= 1:
            raise TrendConfigError("Growth rate must be less than one")
        self.rate = float(rate)
        t = np.arange(1, _num_periods(periods) + 1)
        self._set_trend(((1 + self.rate) ** (1 / MONTHS_IN_YEAR)) ** t)

    def _pct(self) -> str:
        return f"{round(100 * self.rate, 2)}%"

    @property
    def name(self) -> str:
        return f"Exponential growth trend at {self._pct()}"

    @property
    def tag(self) -> str:
        return f"EXP{self._pct()}"
