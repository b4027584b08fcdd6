"""Simulation configurations.

A configuration groups everything one evaluation needs: the estimator under
evaluation, the resampling strategy, the trend injector, the estimator used
for the population trajectory, the number of replications, the training
cutoff and the evaluation periods. ``savename`` derives a deterministic file
name from those choices so batch runs can skip configurations already on
disk.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple, Union

import pandas as pd

from inflation_eval.config.constants import (
    COMPACT_DATE_FORMAT,
    DEFAULT_CONNECTOR,
    DEFAULT_DATE_FORMAT,
)
from inflation_eval.data import to_month
from inflation_eval.estimators import EnsembleEstimator, Estimator
from inflation_eval.resampling import ResamplingStrategy
from inflation_eval.trends import TrendInjector

from .periods import DEFAULT_EVALPERIODS, AbstractEvalPeriod, CompletePeriod, EvalPeriod

__all__ = [
    "CrossEvalConfig",
    "SimConfig",
    "SimDynamicConfig",
    "dict_config",
    "dict_list",
    "nsim_label",
]

AnyConfig = Union["SimConfig", "CrossEvalConfig", "SimDynamicConfig"]


def nsim_label(nsim: int) -> str:
    """``"10k"`` for ``nsim >= 1000``, the plain number otherwise."""

    return f"{nsim // 1000}k" if nsim >= 1000 else str(nsim)


def _join(parts: Iterable[str], suffix: str, prefix: str) -> str:
    head = f"{prefix}_" if prefix else ""
    tail = f".{suffix}" if suffix else ""
    return head + DEFAULT_CONNECTOR.join(parts) + tail


def _check_nsim(nsim: int) -> None:
    if int(nsim) <= 0:
        raise ValueError("nsim must be positive")


def _as_periods(evalperiods) -> tuple:
    if isinstance(evalperiods, AbstractEvalPeriod):
        return (evalperiods,)
    periods = tuple(evalperiods)
    if not periods:
        raise ValueError("At least one evaluation period is required")
    return periods


@dataclass(frozen=True, eq=False)
class SimConfig:
    """Evaluation of one estimator with all data up to ``traindate``."""

    inflfn: Estimator
    resamplefn: ResamplingStrategy
    trendfn: TrendInjector
    paramfn: Estimator
    nsim: int
    traindate: pd.Period
    evalperiods: Tuple[AbstractEvalPeriod, ...] = DEFAULT_EVALPERIODS

    def __post_init__(self) -> None:
        _check_nsim(self.nsim)
        object.__setattr__(self, "traindate", to_month(self.traindate))
        object.__setattr__(self, "evalperiods", _as_periods(self.evalperiods))

    def savename(self, suffix: str = "joblib", prefix: str = "") -> str:
        return _join(
            [
                self.inflfn.measure_tag,
                self.resamplefn.tag,
                self.trendfn.tag,
                self.paramfn.measure_tag,
                nsim_label(self.nsim),
                self.traindate.strftime(COMPACT_DATE_FORMAT),
            ],
            suffix,
            prefix,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Flat, serialisable view used in result records."""

        return {
            "inflfn": self.inflfn.measure_tag,
            "resamplefn": self.resamplefn.tag,
            "trendfn": self.trendfn.tag,
            "paramfn": self.paramfn.measure_tag,
            "nsim": int(self.nsim),
            "traindate": str(self.traindate),
            "evalperiods": [str(p) for p in self.evalperiods],
        }

    def __str__(self) -> str:
        return "\n".join(
            [
                type(self).__name__,
                f"|-> Inflation function          : {self.inflfn.measure_name}",
                f"|-> Resampling function         : {self.resamplefn.name}",
                f"|-> Trend function              : {self.trendfn.name}",
                f"|-> Parametric inflation method : {self.paramfn.measure_name}",
                f"|-> Number of simulations       : {self.nsim}",
                f"|-> End of training set         : {self.traindate.strftime(DEFAULT_DATE_FORMAT)}",
                f"|-> Evaluation periods          : {', '.join(str(p) for p in self.evalperiods)}",
            ]
        )


@dataclass(frozen=True, eq=False)
class CrossEvalConfig:
    """Trajectories of an ensemble for cross-validating combination weights.

    Each evaluation period is a validation window; its training window ends
    the month before the period starts.
    """

    inflfn: EnsembleEstimator
    resamplefn: ResamplingStrategy
    trendfn: TrendInjector
    paramfn: Estimator
    nsim: int
    evalperiods: Tuple[EvalPeriod, ...]

    def __post_init__(self) -> None:
        _check_nsim(self.nsim)
        periods = _as_periods(self.evalperiods)
        if not all(isinstance(p, EvalPeriod) for p in periods):
            raise TypeError("CrossEvalConfig needs EvalPeriod validation windows")
        object.__setattr__(self, "evalperiods", periods)

    def savename(self, suffix: str = "joblib", prefix: str = "") -> str:
        start = min(p.start for p in self.evalperiods)
        final = max(p.final for p in self.evalperiods)
        return _join(
            [
                f"CrossEvalConfig({len(self.inflfn)}, {len(self.evalperiods)})",
                self.resamplefn.tag,
                self.trendfn.tag,
                self.paramfn.measure_tag,
                nsim_label(self.nsim),
                f"{start.strftime(COMPACT_DATE_FORMAT)}-{final.strftime(COMPACT_DATE_FORMAT)}",
            ],
            suffix,
            prefix,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "inflfn": self.inflfn.measure_tag,
            "resamplefn": self.resamplefn.tag,
            "trendfn": self.trendfn.tag,
            "paramfn": self.paramfn.measure_tag,
            "nsim": int(self.nsim),
            "evalperiods": [str(p) for p in self.evalperiods],
        }


@dataclass(frozen=True, eq=False)
class SimDynamicConfig:
    """Evaluation under several dynamic random-walk trends, one per fold."""

    inflfn: Estimator
    resamplefn: ResamplingStrategy
    trendfns: Tuple[TrendInjector, ...]
    paramfn: Estimator
    nsim: int
    traindate: pd.Period
    evalperiod: AbstractEvalPeriod = CompletePeriod()

    def __post_init__(self) -> None:
        _check_nsim(self.nsim)
        trendfns = tuple(self.trendfns)
        if not trendfns:
            raise ValueError("SimDynamicConfig needs at least one trend function")
        object.__setattr__(self, "trendfns", trendfns)
        object.__setattr__(self, "traindate", to_month(self.traindate))

    _REQUIRED = ("inflfn", "resamplefn", "trendfns", "paramfn", "nsim", "traindate", "evalperiod")

    @classmethod
    def from_dict(cls, params: Mapping[str, Any]) -> "SimDynamicConfig":
        missing = [key for key in cls._REQUIRED if key not in params]
        if missing:
            raise ValueError(
                f"Missing keys in params dictionary for SimDynamicConfig: {', '.join(missing)}"
            )
        return cls(**{key: params[key] for key in cls._REQUIRED})

    @property
    def nfolds(self) -> int:
        return len(self.trendfns)

    def savename(self, suffix: str = "joblib", prefix: str = "") -> str:
        period = "CompletePeriod" if isinstance(self.evalperiod, CompletePeriod) else self.evalperiod.tag
        return _join(
            [
                self.inflfn.measure_tag,
                self.resamplefn.tag,
                "DynamicRW",
                self.paramfn.measure_tag,
                nsim_label(self.nsim),
                str(self.nfolds),
                self.traindate.strftime(COMPACT_DATE_FORMAT),
                period,
            ],
            suffix,
            prefix,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "inflfn": self.inflfn.measure_tag,
            "resamplefn": self.resamplefn.tag,
            "trendfns": [t.tag for t in self.trendfns],
            "paramfn": self.paramfn.measure_tag,
            "nsim": int(self.nsim),
            "nfolds": self.nfolds,
            "traindate": str(self.traindate),
            "evalperiod": str(self.evalperiod),
        }

    def __str__(self) -> str:
        return "\n".join(
            [
                type(self).__name__,
                f"|-> Inflation function          : {self.inflfn.measure_name}",
                f"|-> Resampling function         : {self.resamplefn.name}",
                "|-> Trend function              : Dynamic Random Walk",
                f"|-> Parametric inflation method : {self.paramfn.measure_name}",
                f"|-> Number of simulations       : {self.nsim}",
                f"|-> Number of folds             : {self.nfolds}",
                f"|-> End of training set         : {self.traindate.strftime(DEFAULT_DATE_FORMAT)}",
                f"|-> Evaluation period           : {self.evalperiod}",
            ]
        )


def dict_list(params: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """Cartesian expansion of the ``list`` values of ``params``.

    Only ``list`` values are expanded; tuples (such as a tuple of evaluation
    periods) are taken as single values.

    >>> dict_list({"nsim": [100, 1000], "traindate": "2019-12"})
    [{'nsim': 100, 'traindate': '2019-12'}, {'nsim': 1000, 'traindate': '2019-12'}]
    """

    keys = list(params)
    choices = [params[k] if isinstance(params[k], list) else [params[k]] for k in keys]
    return [dict(zip(keys, combo)) for combo in itertools.product(*choices)]


def dict_config(params: Union[Mapping[str, Any], Sequence[Mapping[str, Any]]]):
    """Build a :class:`SimConfig` (``traindate`` given) or :class:`CrossEvalConfig`."""

    if not isinstance(params, Mapping):
        return [dict_config(p) for p in params]
    common = (
        params["inflfn"],
        params["resamplefn"],
        params["trendfn"],
        params["paramfn"],
        params["nsim"],
    )
    if "traindate" in params:
        if "evalperiods" in params:
            return SimConfig(*common, params["traindate"], params["evalperiods"])
        return SimConfig(*common, params["traindate"])
    return CrossEvalConfig(*common, params["evalperiods"])
