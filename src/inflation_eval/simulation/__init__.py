"""Monte Carlo evaluation of inflation estimators."""

from .config import CrossEvalConfig, SimConfig, SimDynamicConfig, dict_config, dict_list, nsim_label
from .dynamic import compute_assessment_sim, compute_lowlevel_sim, merge_metrics
from .online import eval_absme_online, eval_corr_online, eval_mse_online
from .parameter import InflationParameter
from .periods import (
    DEFAULT_EVALPERIODS,
    GT_EVAL_B00,
    GT_EVAL_B10,
    GT_EVAL_T0010,
    AbstractEvalPeriod,
    CompletePeriod,
    EvalPeriod,
    PeriodVector,
    eval_mask,
    period_tag,
)
from .registry import build_estimator, build_resampler, build_trend, configs_from_batch
from .runner import collect_results, evalsim, makesim, makesim_crossval, run_batch
from .trajectories import gentrajinfl, pargentrajinfl

__all__ = [
    "CrossEvalConfig",
    "SimConfig",
    "SimDynamicConfig",
    "dict_config",
    "dict_list",
    "nsim_label",
    "compute_assessment_sim",
    "compute_lowlevel_sim",
    "merge_metrics",
    "eval_absme_online",
    "eval_corr_online",
    "eval_mse_online",
    "InflationParameter",
    "DEFAULT_EVALPERIODS",
    "GT_EVAL_B00",
    "GT_EVAL_B10",
    "GT_EVAL_T0010",
    "AbstractEvalPeriod",
    "CompletePeriod",
    "EvalPeriod",
    "PeriodVector",
    "eval_mask",
    "period_tag",
    "build_estimator",
    "build_resampler",
    "build_trend",
    "configs_from_batch",
    "collect_results",
    "evalsim",
    "makesim",
    "makesim_crossval",
    "run_batch",
    "gentrajinfl",
    "pargentrajinfl",
]
