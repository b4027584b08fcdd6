"""Seasonal IID bootstrap by calendar month of occurrence.

Row ``t`` of a monthly panel belongs to the calendar-month slot ``t % 12``
(relative to the first row). The bootstrap replaces every value of a slot by
a draw, with replacement, from the historical values of the same slot and the
same item, so a January value is only ever replaced by another January value.
Seasonality survives; the ordering within each month's sub-series does not.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np

from inflation_eval.config.constants import MONTHS_IN_YEAR
from inflation_eval.data import Panel, PanelSeries
from inflation_eval.exceptions import ResamplingConfigError

from .base import ResamplingStrategy

__all__ = [
    "ResampleExtendedSVM",
    "ResampleIdentity",
    "ResampleSeasonalIID",
    "monthavg",
    "scramble_by_month",
]


def _slots(periods: int, sample_periods: int):
    for slot in range(min(MONTHS_IN_YEAR, sample_periods)):
        source = np.arange(slot, periods, MONTHS_IN_YEAR)
        target = np.arange(slot, sample_periods, MONTHS_IN_YEAR)
        if source.size == 0:
            raise ResamplingConfigError(
                f"Calendar-month slot {slot + 1} has no observations to draw from"
            )
        yield source, target


def scramble_by_month(
    v: np.ndarray,
    rng: np.random.Generator,
    sample_periods: Optional[int] = None,
) -> np.ndarray:
    """Draw ``sample_periods`` rows slot by slot, independently per item."""

    v = np.asarray(v, dtype=float)
    periods, items = v.shape
    sample_periods = periods if sample_periods is None else int(sample_periods)
    out = np.empty((sample_periods, items), dtype=float)
    columns = np.arange(items)
    for source, target in _slots(periods, sample_periods):
        draws = rng.integers(0, source.size, size=(target.size, items))
        out[target, :] = v[source[draws], columns]
    return out


def monthavg(v: np.ndarray, sample_periods: Optional[int] = None) -> np.ndarray:
    """Replace every slot by its historical mean, tiled to ``sample_periods`` rows."""

    v = np.asarray(v, dtype=float)
    periods, items = v.shape
    sample_periods = periods if sample_periods is None else int(sample_periods)
    out = np.empty((sample_periods, items), dtype=float)
    for source, target in _slots(periods, sample_periods):
        out[target, :] = v[source].mean(axis=0)
    return out


class ResampleIdentity(ResamplingStrategy):
    """No-op strategy: returns the very same object."""

    @property
    def name(self) -> str:
        return "Identity Resampling (no-op)"

    @property
    def tag(self) -> str:
        return "IDTY"

    def resample_matrix(self, v: np.ndarray, rng: np.random.Generator) -> np.ndarray:
        return v

    def resample_panel(self, panel: Panel, rng: np.random.Generator) -> Panel:
        return panel

    def resample_series(self, series: PanelSeries, rng: np.random.Generator) -> PanelSeries:
        return series

    def population_panel(self, panel: Panel) -> Panel:
        return panel

    def population_series(self, series: PanelSeries) -> PanelSeries:
        return series

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ResampleIdentity)

    def __hash__(self) -> int:
        return hash(ResampleIdentity)


@dataclass(frozen=True)
class ResampleSeasonalIID(ResamplingStrategy):
    """IID bootstrap by month of occurrence, preserving the row count."""

    @property
    def name(self) -> str:
        return "IID bootstrap by months of occurrence"

    @property
    def tag(self) -> str:
        return "SVM"

    def resample_matrix(self, v: np.ndarray, rng: np.random.Generator) -> np.ndarray:
        return scramble_by_month(v, rng)

    def population_panel(self, panel: Panel) -> Panel:
        return panel.with_values(monthavg(panel.v))


@dataclass(frozen=True)
class ResampleExtendedSVM(ResamplingStrategy):
    """Seasonal IID bootstrap whose output length may differ from the input.

    ``extension_periods`` is either one length applied to every panel or one
    length per panel of the series. A single panel uses the first entry.
    """

    extension_periods: Union[int, Sequence[int]]

    def __post_init__(self) -> None:
        if isinstance(self.extension_periods, (int, np.integer)):
            lengths: tuple[int, ...] = (int(self.extension_periods),)
            scalar = True
        else:
            lengths = tuple(int(p) for p in self.extension_periods)
            scalar = False
        if not lengths:
            raise ResamplingConfigError("extension_periods must not be empty")
        if any(p <= 0 for p in lengths):
            raise ResamplingConfigError("extension_periods must be positive")
        object.__setattr__(self, "extension_periods", lengths[0] if scalar else lengths)

    @property
    def name(self) -> str:
        return "Extended IID bootstrap by months of occurrence"

    @property
    def tag(self) -> str:
        return "ESVM"

    def lengths_for(self, series: PanelSeries) -> tuple[int, ...]:
        if isinstance(self.extension_periods, int):
            return (self.extension_periods,) * len(series)
        if len(self.extension_periods) != len(series):
            raise ResamplingConfigError(
                "The vector of periods must have the same number of panels as the "
                f"series ({len(self.extension_periods)} != {len(series)})"
            )
        return self.extension_periods

    @property
    def first_length(self) -> int:
        if isinstance(self.extension_periods, int):
            return self.extension_periods
        return self.extension_periods[0]

    def resample_matrix(self, v: np.ndarray, rng: np.random.Generator) -> np.ndarray:
        return scramble_by_month(v, rng, self.first_length)

    def resample_series(self, series: PanelSeries, rng: np.random.Generator) -> PanelSeries:
        lengths = self.lengths_for(series)
        panels = [
            panel.with_values(scramble_by_month(panel.v, rng, n))
            for panel, n in zip(series, lengths)
        ]
        return PanelSeries.rebuild(panels)

    def population_panel(self, panel: Panel) -> Panel:
        return panel.with_values(monthavg(panel.v, self.first_length))

    def population_series(self, series: PanelSeries) -> PanelSeries:
        lengths = self.lengths_for(series)
        panels = [panel.with_values(monthavg(panel.v, n)) for panel, n in zip(series, lengths)]
        return PanelSeries.rebuild(panels)
