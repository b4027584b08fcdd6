"""Seasonal bootstrap weighted toward each row's own year.

For target row ``t`` the candidates are the rows of the same calendar-month
slot. Candidate ``c`` is drawn with probability proportional to
``p ** (|c - t| / 12)``: ``p = 1`` is the plain seasonal IID bootstrap and a
small ``p`` concentrates the draws around the original row, so the
resampled panel keeps the trend of the data. Each panel of a series gets its
own ``p``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from inflation_eval.config.constants import MONTHS_IN_YEAR
from inflation_eval.data import Panel, PanelSeries
from inflation_eval.exceptions import ResamplingConfigError

from .base import ResamplingStrategy

__all__ = ["ResampleTrended", "trended_probabilities"]


def trended_probabilities(n: int, p: float) -> np.ndarray:
    """``(n, n)`` row-stochastic matrix of draw probabilities within one slot."""

    years = np.arange(n)
    distance = np.abs(years[:, None] - years[None, :])
    weights = np.power(p, distance, dtype=float)
    return weights / weights.sum(axis=1, keepdims=True)


def _trended_resample(v: np.ndarray, p: float, rng: np.random.Generator) -> np.ndarray:
    periods, items = v.shape
    out = np.empty_like(v)
    columns = np.arange(items)
    for slot in range(min(MONTHS_IN_YEAR, periods)):
        rows = np.arange(slot, periods, MONTHS_IN_YEAR)
        cdf = np.cumsum(trended_probabilities(rows.size, p), axis=1)
        u = rng.random((rows.size, items))
        for i, row in enumerate(rows):
            picks = np.searchsorted(cdf[i], u[i], side="right")
            picks = np.minimum(picks, rows.size - 1)
            out[row, :] = v[rows[picks], columns]
    return out


def _trended_expectation(v: np.ndarray, p: float) -> np.ndarray:
    periods = v.shape[0]
    out = np.empty_like(v)
    for slot in range(min(MONTHS_IN_YEAR, periods)):
        rows = np.arange(slot, periods, MONTHS_IN_YEAR)
        out[rows, :] = trended_probabilities(rows.size, p) @ v[rows]
    return out


@dataclass(frozen=True)
class ResampleTrended(ResamplingStrategy):
    """Weighted seasonal bootstrap with one parameter ``p`` per panel."""

    p: Sequence[float]

    def __post_init__(self) -> None:
        p = tuple(float(x) for x in np.atleast_1d(self.p))
        if not p:
            raise ResamplingConfigError("p needs one entry per panel")
        if any(not 0 < x <= 1 for x in p):
            raise ResamplingConfigError("every p must lie in (0, 1]")
        object.__setattr__(self, "p", p)

    @property
    def name(self) -> str:
        return "IID bootstrap weighted by months of occurrence, individual bases"

    @property
    def tag(self) -> str:
        return "RSTI"

    def _check(self, series: PanelSeries) -> None:
        if len(self.p) != len(series):
            raise ResamplingConfigError(
                f"Number of p parameters ({len(self.p)}) must match number of bases ({len(series)})"
            )

    def resample_matrix(self, v: np.ndarray, rng: np.random.Generator) -> np.ndarray:
        return _trended_resample(np.asarray(v, dtype=float), self.p[0], rng)

    def resample_series(self, series: PanelSeries, rng: np.random.Generator) -> PanelSeries:
        self._check(series)
        panels = [
            panel.with_values(_trended_resample(panel.v, p, rng))
            for panel, p in zip(series, self.p)
        ]
        return PanelSeries.rebuild(panels)

    def population_panel(self, panel: Panel) -> Panel:
        return panel.with_values(_trended_expectation(panel.v, self.p[0]))

    def population_series(self, series: PanelSeries) -> PanelSeries:
        self._check(series)
        panels = [
            panel.with_values(_trended_expectation(panel.v, p))
            for panel, p in zip(series, self.p)
        ]
        return PanelSeries.rebuild(panels)
