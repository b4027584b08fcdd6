"""Immutable monthly price-change panels.

A :class:`Panel` holds the matrix of monthly fractional price changes of one
CPI base (rows are months, columns are items), the item weights, one monthly
stamp per row and the base index level. A :class:`PanelSeries` chains the
panels of successive base revisions; its date ranges are contiguous across
panels.

Every transformation returns a new object. Matrices are copied on
construction and flagged read-only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterator, Sequence, Union

import numpy as np
import pandas as pd

from inflation_eval.config.constants import INFL_LAG

__all__ = [
    "MonthLike",
    "Panel",
    "PanelSeries",
    "contiguous_dates",
    "to_month",
]

MonthLike = Union[str, date, datetime, pd.Period, pd.Timestamp]


def to_month(value: MonthLike) -> pd.Period:
    """Coerce ``value`` into a monthly :class:`pandas.Period`."""

    if isinstance(value, pd.Period):
        return value.asfreq("M")
    return pd.Period(value, freq="M")


def contiguous_dates(start: MonthLike, count: int) -> pd.PeriodIndex:
    """Return ``count`` consecutive months starting at ``start``."""

    if count < 0:
        raise ValueError("count must be non-negative")
    return pd.period_range(start=to_month(start), periods=count, freq="M")


def _readonly(array: np.ndarray) -> np.ndarray:
    array.setflags(write=False)
    return array


@dataclass(frozen=True, eq=False)
class Panel:
    """Monthly price changes of one CPI base.

    Parameters
    ----------
    v:
        ``(periods, items)`` matrix of monthly fractional changes.
    w:
        Item weights (``items`` entries).
    dates:
        One month per row, strictly increasing by one month. A single start
        month is also accepted and expanded to a contiguous range.
    baseindex:
        Index level anchoring the base; carried along, not used by the core.
    """

    v: np.ndarray
    w: np.ndarray
    dates: pd.PeriodIndex
    baseindex: float | np.ndarray = 100.0

    def __post_init__(self) -> None:
        v = np.array(self.v, dtype=float)
        if v.ndim == 1:
            v = v.reshape(-1, 1)
        if v.ndim != 2:
            raise ValueError("Panel matrix must be 2-D (periods x items)")
        w = np.array(self.w, dtype=float).reshape(-1)
        if w.shape[0] != v.shape[1]:
            raise ValueError(
                f"Weight vector has {w.shape[0]} entries but the panel has {v.shape[1]} items"
            )

        if isinstance(self.dates, pd.PeriodIndex):
            dates = self.dates.asfreq("M")
        elif isinstance(self.dates, (str, date, pd.Period, pd.Timestamp)):
            dates = contiguous_dates(self.dates, v.shape[0])
        else:
            dates = pd.PeriodIndex([to_month(d) for d in self.dates], freq="M")

        if len(dates) != v.shape[0]:
            raise ValueError(
                f"rows(V) == length(dates) violated: {v.shape[0]} rows, {len(dates)} dates"
            )
        if len(dates) > 1 and not np.all(np.diff(dates.asi8) == 1):
            raise ValueError("Panel dates must be strictly increasing by one month")

        object.__setattr__(self, "v", _readonly(v))
        object.__setattr__(self, "w", _readonly(w))
        object.__setattr__(self, "dates", dates)

    # ------------------------------------------------------------------ #
    @property
    def periods(self) -> int:
        return int(self.v.shape[0])

    @property
    def items(self) -> int:
        return int(self.v.shape[1])

    @property
    def start(self) -> pd.Period:
        return self.dates[0]

    @property
    def end(self) -> pd.Period:
        return self.dates[-1]

    def with_values(self, v: np.ndarray) -> "Panel":
        """Wrap a transformed matrix keeping weights and base index.

        Dates are kept when the row count is unchanged; otherwise a new
        contiguous range of the new length starts at the original start month.
        """

        v = np.asarray(v, dtype=float)
        if v.shape[0] == self.periods:
            dates = self.dates
        else:
            dates = contiguous_dates(self.start, v.shape[0])
        return Panel(v, self.w, dates, self.baseindex)

    def with_dates(self, dates: pd.PeriodIndex) -> "Panel":
        return Panel(self.v, self.w, dates, self.baseindex)

    def up_to(self, final: MonthLike) -> "Panel":
        """Rows dated on or before ``final``."""

        mask = self.dates <= to_month(final)
        return Panel(self.v[mask], self.w, self.dates[mask], self.baseindex)

    def month_rows(self, month: int) -> np.ndarray:
        """Row positions whose calendar month equals ``month`` (1-12)."""

        return np.flatnonzero(self.dates.month == month)

    def __repr__(self) -> str:
        if self.periods:
            span = f"{self.start.strftime('%b-%y')}-{self.end.strftime('%b-%y')}"
        else:
            span = "empty"
        return f"Panel({self.periods}x{self.items}, {span})"


@dataclass(frozen=True, eq=False)
class PanelSeries:
    """Ordered, non-empty sequence of panels from successive base revisions."""

    panels: tuple[Panel, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        panels = tuple(self.panels)
        if not panels:
            raise ValueError("A PanelSeries needs at least one panel")
        for panel in panels:
            if not isinstance(panel, Panel):
                raise TypeError(f"Expected Panel instances, got {type(panel).__name__}")
        for prev, nxt in zip(panels[:-1], panels[1:]):
            if prev.periods and nxt.periods and prev.end + 1 != nxt.start:
                raise ValueError(
                    f"Panels are not contiguous: {prev.end} is followed by {nxt.start}"
                )
        object.__setattr__(self, "panels", panels)

    @classmethod
    def of(cls, *panels: Panel) -> "PanelSeries":
        return cls(tuple(panels))

    @classmethod
    def rebuild(cls, panels: Sequence[Panel]) -> "PanelSeries":
        """Build a series recomputing dates so panels stay contiguous.

        The first panel keeps its start month; every following panel starts
        the month after the previous one ends.
        """

        panels = list(panels)
        if not panels:
            raise ValueError("A PanelSeries needs at least one panel")
        fixed = []
        start = panels[0].start
        for panel in panels:
            dates = contiguous_dates(start, panel.periods)
            fixed.append(panel if dates.equals(panel.dates) else panel.with_dates(dates))
            start = start + panel.periods
        return cls(tuple(fixed))

    # ------------------------------------------------------------------ #
    def __len__(self) -> int:
        return len(self.panels)

    def __iter__(self) -> Iterator[Panel]:
        return iter(self.panels)

    def __getitem__(self, index: int) -> Panel:
        return self.panels[index]

    @property
    def periods(self) -> int:
        return sum(panel.periods for panel in self.panels)

    @property
    def panel_periods(self) -> tuple[int, ...]:
        return tuple(panel.periods for panel in self.panels)

    @property
    def items(self) -> tuple[int, ...]:
        return tuple(panel.items for panel in self.panels)

    @property
    def dates(self) -> pd.PeriodIndex:
        return contiguous_dates(self.panels[0].start, self.periods)

    @property
    def infl_periods(self) -> int:
        """Number of year-on-year inflation periods."""

        return max(self.periods - INFL_LAG, 0)

    @property
    def infl_dates(self) -> pd.PeriodIndex:
        return self.dates[INFL_LAG:]

    def up_to(self, final: MonthLike) -> "PanelSeries":
        """Training-cutoff slice: drop every row dated after ``final``."""

        final = to_month(final)
        kept = [panel.up_to(final) for panel in self.panels if panel.start <= final]
        if not kept:
            raise ValueError(f"No data on or before {final}")
        return PanelSeries(tuple(kept))

    def __repr__(self) -> str:
        inner = ", ".join(repr(panel) for panel in self.panels)
        return f"PanelSeries({inner})"
