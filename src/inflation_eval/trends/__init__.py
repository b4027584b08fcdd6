"""Trend injectors applied to resampled panels."""

from .base import ArrayTrend, TrendInjector, apply_factors, ranges_for
from .dynamic import TrendDynamicRW, create_dynamic_rw_folds, generate_ar1, zeromean_validation
from .functions import (
    RW_TREND_FILE,
    TrendAnalytical,
    TrendExponential,
    TrendIdentity,
    TrendRandomWalk,
    load_rw_trend,
)

__all__ = [
    "ArrayTrend",
    "TrendInjector",
    "apply_factors",
    "ranges_for",
    "TrendDynamicRW",
    "create_dynamic_rw_folds",
    "generate_ar1",
    "zeromean_validation",
    "RW_TREND_FILE",
    "TrendAnalytical",
    "TrendExponential",
    "TrendIdentity",
    "TrendRandomWalk",
    "load_rw_trend",
]
