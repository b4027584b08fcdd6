"""Population ("parametric") inflation trajectory."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from inflation_eval.estimators import Estimator, InflationTotalCPI
from inflation_eval.resampling import ResampleSeasonalIID, ResamplingStrategy
from inflation_eval.resampling.base import PanelData
from inflation_eval.trends import TrendInjector, TrendRandomWalk

__all__ = ["InflationParameter"]


@dataclass(frozen=True)
class InflationParameter:
    """Composition ``inflfn . trendfn . population(resamplefn)``.

    The population transform of the resampling strategy replaces the data by
    the expectation of its bootstrap draws; applying the trend and the
    estimator to it gives the trajectory the simulations are scored against.
    """

    inflfn: Estimator = field(default_factory=InflationTotalCPI)
    resamplefn: ResamplingStrategy = field(default_factory=ResampleSeasonalIID)
    trendfn: TrendInjector = field(default_factory=TrendRandomWalk)

    def __call__(self, data: PanelData) -> np.ndarray:
        population = self.resamplefn.population_function()(data)
        return np.asarray(self.inflfn(self.trendfn(population)), dtype=float)

    @property
    def tag(self) -> str:
        return f"InflParam: [{self.inflfn.measure_tag}, {self.resamplefn.tag}, {self.trendfn.tag}]"

    def __str__(self) -> str:
        return (
            "InflationParameter\n"
            f"  estimator  : {self.inflfn.measure_name}\n"
            f"  resampling : {self.resamplefn.name}\n"
            f"  trend      : {self.trendfn.name}"
        )
