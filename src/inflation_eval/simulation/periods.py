"""Evaluation sub-periods.

Metrics can be computed over the whole simulated range
(:class:`CompletePeriod`), one date range (:class:`EvalPeriod`) or a union of
ranges (:class:`PeriodVector`). The period ``tag`` prefixes the metric keys so
that several periods can be stored in one result record; the complete period
has an empty tag.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple

import numpy as np
import pandas as pd

from inflation_eval.config.constants import DEFAULT_DATE_FORMAT
from inflation_eval.data import MonthLike, PanelSeries, to_month

__all__ = [
    "AbstractEvalPeriod",
    "CompletePeriod",
    "DEFAULT_EVALPERIODS",
    "EvalPeriod",
    "GT_EVAL_B00",
    "GT_EVAL_B10",
    "GT_EVAL_T0010",
    "PeriodVector",
    "eval_mask",
    "period_tag",
]


class AbstractEvalPeriod(ABC):
    tag: str

    @abstractmethod
    def mask(self, series: PanelSeries) -> np.ndarray:
        """Boolean mask over the inflation dates of ``series``."""


def _in_range(dates: pd.PeriodIndex, start: pd.Period, final: pd.Period) -> np.ndarray:
    return np.asarray((dates >= start) & (dates <= final))


@dataclass(frozen=True)
class CompletePeriod(AbstractEvalPeriod):
    """Every inflation period of the data."""

    tag: str = ""

    def mask(self, series: PanelSeries) -> np.ndarray:
        return np.ones(series.infl_periods, dtype=bool)

    def __str__(self) -> str:
        return "full:Complete period"


@dataclass(frozen=True)
class EvalPeriod(AbstractEvalPeriod):
    """Inclusive range of months ``start..final`` labelled ``tag``."""

    start: pd.Period
    final: pd.Period
    tag: str

    def __post_init__(self) -> None:
        start, final = to_month(self.start), to_month(self.final)
        if start > final:
            raise ValueError(f"Evaluation period {self.tag} starts after it ends")
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "final", final)

    def mask(self, series: PanelSeries) -> np.ndarray:
        return _in_range(series.infl_dates, self.start, self.final)

    def __str__(self) -> str:
        return (
            f"{self.tag}:{self.start.strftime(DEFAULT_DATE_FORMAT)}"
            f"-{self.final.strftime(DEFAULT_DATE_FORMAT)}"
        )


@dataclass(frozen=True)
class PeriodVector(AbstractEvalPeriod):
    """Union of several inclusive month ranges under one ``tag``."""

    periods: Tuple[Tuple[pd.Period, pd.Period], ...]
    tag: str

    def __post_init__(self) -> None:
        ranges = tuple((to_month(a), to_month(b)) for a, b in self.periods)
        if not ranges:
            raise ValueError("A PeriodVector needs at least one range")
        object.__setattr__(self, "periods", ranges)

    @classmethod
    def of(cls, ranges: Iterable[Sequence[MonthLike]], tag: str) -> "PeriodVector":
        return cls(tuple((a, b) for a, b in ranges), tag)

    def mask(self, series: PanelSeries) -> np.ndarray:
        dates = series.infl_dates
        mask = np.zeros(len(dates), dtype=bool)
        for start, final in self.periods:
            mask |= _in_range(dates, start, final)
        return mask

    def __str__(self) -> str:
        spans = ", ".join(
            f"{a.strftime(DEFAULT_DATE_FORMAT)}-{b.strftime(DEFAULT_DATE_FORMAT)}"
            for a, b in self.periods
        )
        return f"{self.tag}:[{spans}]"


def eval_mask(series: PanelSeries, period: AbstractEvalPeriod) -> np.ndarray:
    return period.mask(series)


def period_tag(period: AbstractEvalPeriod) -> str:
    return period.tag


GT_EVAL_B00 = EvalPeriod("2001-12", "2010-12", "gt_b00")
"""Decade of the 2000 base, including 2010."""

GT_EVAL_B10 = EvalPeriod("2011-12", "2023-12", "gt_b10")
"""Decade of the 2010 base."""

GT_EVAL_T0010 = EvalPeriod("2011-01", "2011-11", "gt_t0010")
"""Transition between the 2000 and 2010 bases."""

DEFAULT_EVALPERIODS: Tuple[AbstractEvalPeriod, ...] = (
    CompletePeriod(),
    GT_EVAL_B00,
    GT_EVAL_T0010,
    GT_EVAL_B10,
)
