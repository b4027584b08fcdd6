"""Common contract of the trend injectors.

A trend injector turns a :class:`~inflation_eval.data.PanelSeries` into a new
series whose monthly changes carry a deterministic trend. Injectors backed by
a factor vector (:class:`ArrayTrend`) slice one vector covering the whole
series into the contiguous row range of each panel and apply it row by row.

Only *positive* monthly changes are scaled; zero and negative entries are
kept bit-identical. The trend models faster or slower price increases, it
does not amplify price decreases: ``v' = v * (trend if v > 0 else 1)``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TypeVar

import numpy as np

from inflation_eval.data import Panel, PanelSeries
from inflation_eval.exceptions import TrendConfigError, UnsupportedInputError

__all__ = ["ArrayTrend", "TrendInjector", "apply_factors", "ranges_for"]

D = TypeVar("D", Panel, PanelSeries)


def ranges_for(series: PanelSeries) -> tuple[slice, ...]:
    """Row slices of every panel inside the concatenated series."""

    ranges = []
    start = 0
    for periods in series.panel_periods:
        ranges.append(slice(start, start + periods))
        start += periods
    return tuple(ranges)


def apply_factors(v: np.ndarray, factors: np.ndarray) -> np.ndarray:
    """Scale the positive entries of ``v`` by the per-row ``factors``."""

    factors = np.asarray(factors, dtype=float).reshape(-1, 1)
    return np.where(v > 0, v * factors, v)


class TrendInjector(ABC):
    """Base class of the trend family."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human readable description."""

    @property
    @abstractmethod
    def tag(self) -> str:
        """Short label used in result file names."""

    @abstractmethod
    def apply_panel(self, panel: Panel, rows: slice) -> Panel:
        """Apply the trend to ``panel``, which occupies ``rows`` of its series."""

    def apply_series(self, series: PanelSeries) -> PanelSeries:
        panels = [self.apply_panel(panel, rows) for panel, rows in zip(series, ranges_for(series))]
        return PanelSeries(tuple(panels))

    def __call__(self, data: D) -> D:
        if isinstance(data, PanelSeries):
            return self.apply_series(data)
        if isinstance(data, Panel):
            return self.apply_panel(data, slice(0, data.periods))
        raise UnsupportedInputError(
            f"{type(self).__name__} cannot be applied to {type(data).__name__}"
        )

    def __str__(self) -> str:
        return self.tag


class ArrayTrend(TrendInjector):
    """Injector holding a precomputed, read-only factor vector ``trend``."""

    trend: np.ndarray

    def _set_trend(self, trend) -> None:
        trend = np.array(trend, dtype=float).reshape(-1)
        if trend.size == 0:
            raise TrendConfigError("Trend vector must not be empty")
        trend.setflags(write=False)
        self.trend = trend

    def __len__(self) -> int:
        return int(self.trend.size)

    def apply_panel(self, panel: Panel, rows: slice) -> Panel:
        if rows.stop > self.trend.size:
            raise TrendConfigError(
                f"Trend vector has {self.trend.size} factors but the data needs {rows.stop} periods"
            )
        return panel.with_values(apply_factors(panel.v, self.trend[rows]))
