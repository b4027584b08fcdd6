"""Estimator capability consumed by the simulation engine."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import numpy as np

from inflation_eval.data import PanelSeries

__all__ = ["Estimator"]


class Estimator(ABC):
    """Maps a :class:`PanelSeries` to a ``(T, M)`` matrix of inflation measures.

    ``T`` equals ``series.infl_periods`` and ``M`` is :attr:`num_measures`.
    """

    @abstractmethod
    def __call__(self, series: PanelSeries) -> np.ndarray:
        ...

    @property
    def num_measures(self) -> int:
        return 1

    @property
    @abstractmethod
    def measure_name(self) -> str:
        ...

    @property
    @abstractmethod
    def measure_tag(self) -> str:
        ...

    @property
    def params(self) -> tuple[Any, ...]:
        return ()

    def __str__(self) -> str:
        return self.measure_tag
