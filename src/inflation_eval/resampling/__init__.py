"""Resampling strategies producing bootstrap replicas of CPI panels."""

from .base import PanelData, PopulationTransform, ResamplingStrategy
from .blocks import ResampleGSBB, ResampleSBB, gsbb_candidates, stationary_indices
from .mixture import ResampleMixture
from .seasonal import (
    ResampleExtendedSVM,
    ResampleIdentity,
    ResampleSeasonalIID,
    monthavg,
    scramble_by_month,
)
from .synthetic import (
    ActualWeighing,
    PriorWeighing,
    ResampleSynthetic,
    SyntheticWeighing,
    VarietyMatchDistribution,
    WEIGHINGS,
    make_match_array,
)
from .trended import ResampleTrended, trended_probabilities

__all__ = [
    "PanelData",
    "PopulationTransform",
    "ResamplingStrategy",
    "ResampleGSBB",
    "ResampleSBB",
    "gsbb_candidates",
    "stationary_indices",
    "ResampleMixture",
    "ResampleExtendedSVM",
    "ResampleIdentity",
    "ResampleSeasonalIID",
    "monthavg",
    "scramble_by_month",
    "ActualWeighing",
    "PriorWeighing",
    "ResampleSynthetic",
    "SyntheticWeighing",
    "VarietyMatchDistribution",
    "WEIGHINGS",
    "make_match_array",
    "ResampleTrended",
    "trended_probabilities",
]
