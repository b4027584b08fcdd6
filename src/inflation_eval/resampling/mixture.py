"""Per-panel mixture of resampling strategies."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from inflation_eval.data import Panel, PanelSeries
from inflation_eval.exceptions import ResamplingConfigError

from .base import ResamplingStrategy

__all__ = ["ResampleMixture"]


class ResampleMixture(ResamplingStrategy):
    """Apply strategy ``i`` to panel ``i`` of a series.

    The number of strategies must equal the number of panels. On a bare
    :class:`Panel` the mixture uses its *first* strategy only, which lets it
    satisfy the single-panel contract; keep this in mind when reusing a
    mixture outside of series.
    """

    def __init__(self, strategies: Sequence[ResamplingStrategy]) -> None:
        strategies = tuple(strategies)
        if not strategies:
            raise ResamplingConfigError("A mixture needs at least one resampling strategy")
        for strategy in strategies:
            if not isinstance(strategy, ResamplingStrategy):
                raise ResamplingConfigError(
                    f"Mixture members must be resampling strategies, got {type(strategy).__name__}"
                )
        self.strategies = strategies

    @property
    def name(self) -> str:
        return "Mixture of Resampling Methods"

    @property
    def tag(self) -> str:
        return "MIX"

    def validate(self, series: PanelSeries) -> None:
        n_functions, n_bases = len(self.strategies), len(series)
        if n_functions != n_bases:
            raise ResamplingConfigError(
                f"Number of resampling functions ({n_functions}) must match number of bases ({n_bases})"
            )

    def resample_panel(self, panel: Panel, rng: np.random.Generator) -> Panel:
        return self.strategies[0](panel, rng)

    def resample_series(self, series: PanelSeries, rng: np.random.Generator) -> PanelSeries:
        self.validate(series)
        panels = [strategy(panel, rng) for strategy, panel in zip(self.strategies, series)]
        return PanelSeries.rebuild(panels)

    def population_panel(self, panel: Panel) -> Panel:
        return self.strategies[0].population(panel)

    def population_series(self, series: PanelSeries) -> PanelSeries:
        self.validate(series)
        panels = [
            strategy.population(panel) for strategy, panel in zip(self.strategies, series)
        ]
        return PanelSeries.rebuild(panels)

    def __repr__(self) -> str:
        inner = ", ".join(strategy.tag for strategy in self.strategies)
        return f"ResampleMixture([{inner}])"
