"""Common contract of the resampling strategies.

A strategy is a pure function of ``(data, rng)`` where ``data`` is a
:class:`~inflation_eval.data.Panel` or a
:class:`~inflation_eval.data.PanelSeries`. Strategies that only know how to
transform a matrix implement :meth:`ResamplingStrategy.resample_matrix`; the
panel form wraps the result with :meth:`Panel.with_values` and the series form
applies the panel form to each panel independently, rebuilding contiguous
dates.

Each strategy also supplies the deterministic *population* transform, the
expected-value panel its bootstrap draws average to. It is the ground truth
used to build the population trajectory during evaluation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TypeVar, Union

import numpy as np

from inflation_eval.data import Panel, PanelSeries
from inflation_eval.exceptions import UnsupportedInputError

__all__ = ["PanelData", "PopulationTransform", "ResamplingStrategy"]

PanelData = Union[Panel, PanelSeries]
D = TypeVar("D", Panel, PanelSeries)


class ResamplingStrategy(ABC):
    """Base class of the resampling family."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human readable description used in logs and result records."""

    @property
    @abstractmethod
    def tag(self) -> str:
        """Short label used in result file names."""

    # Sampling ---------------------------------------------------------- #
    def resample_matrix(self, v: np.ndarray, rng: np.random.Generator) -> np.ndarray:
        raise NotImplementedError(
            f"{type(self).__name__} does not define a matrix-level resampling rule"
        )

    def resample_panel(self, panel: Panel, rng: np.random.Generator) -> Panel:
        return panel.with_values(self.resample_matrix(panel.v, rng))

    def resample_series(self, series: PanelSeries, rng: np.random.Generator) -> PanelSeries:
        return PanelSeries.rebuild([self.resample_panel(panel, rng) for panel in series])

    def __call__(self, data: D, rng: np.random.Generator) -> D:
        if isinstance(data, PanelSeries):
            return self.resample_series(data, rng)
        if isinstance(data, Panel):
            return self.resample_panel(data, rng)
        raise UnsupportedInputError(
            f"{type(self).__name__} cannot resample objects of type {type(data).__name__}"
        )

    # Population -------------------------------------------------------- #
    def population_panel(self, panel: Panel) -> Panel:
        raise NotImplementedError(
            f"{type(self).__name__} must define its population function"
        )

    def population_series(self, series: PanelSeries) -> PanelSeries:
        return PanelSeries.rebuild([self.population_panel(panel) for panel in series])

    def population(self, data: D) -> D:
        if isinstance(data, PanelSeries):
            return self.population_series(data)
        if isinstance(data, Panel):
            return self.population_panel(data)
        raise UnsupportedInputError(
            f"{type(self).__name__} cannot build the population of {type(data).__name__}"
        )

    def population_function(self) -> "PopulationTransform":
        """Return the population transform of this strategy.

        Raises
        ------
        NotImplementedError
            When the concrete strategy did not override the population hooks.
        """
        cls = type(self)
        if (
            cls.population_panel is ResamplingStrategy.population_panel
            and cls.population_series is ResamplingStrategy.population_series
        ):
            raise NotImplementedError(
                f"{cls.__name__} must define its population function"
            )
        return PopulationTransform(self)

    def __str__(self) -> str:
        return self.tag


@dataclass(frozen=True)
class PopulationTransform:
    """Deterministic transform ``data -> expected-value data`` of a strategy."""

    strategy: ResamplingStrategy

    def __call__(self, data: D) -> D:
        return self.strategy.population(data)
