"""Estimator capability and reference inflation measures."""

from .base import Estimator
from .cpi import (
    EnsembleEstimator,
    InflationConstant,
    InflationPercentileEq,
    InflationTotalCPI,
    yoy_from_monthly,
)

__all__ = [
    "Estimator",
    "EnsembleEstimator",
    "InflationConstant",
    "InflationPercentileEq",
    "InflationTotalCPI",
    "yoy_from_monthly",
]
