"""Build simulation components from their YAML descriptions.

Every family has an alias table (accepted spellings to canonical kind) and a
dispatch table (canonical kind to builder). Builders receive the component
``params`` and, for trends whose length depends on the data, the evaluation
data.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional, Union

from inflation_eval.config.schemas import BatchSpec, ComponentSpec, SimulationSpec
from inflation_eval.data import Panel, PanelSeries
from inflation_eval.estimators import (
    EnsembleEstimator,
    Estimator,
    InflationConstant,
    InflationPercentileEq,
    InflationTotalCPI,
)
from inflation_eval.resampling import (
    ResampleExtendedSVM,
    ResampleGSBB,
    ResampleIdentity,
    ResampleMixture,
    ResampleSBB,
    ResampleSeasonalIID,
    ResampleTrended,
    ResamplingStrategy,
)
from inflation_eval.trends import (
    TrendExponential,
    TrendIdentity,
    TrendInjector,
    TrendRandomWalk,
    load_rw_trend,
)

from .config import SimConfig
from .periods import DEFAULT_EVALPERIODS, CompletePeriod, EvalPeriod

__all__ = [
    "build_estimator",
    "build_resampler",
    "build_trend",
    "configs_from_batch",
    "evalperiods_from_spec",
]

logger = logging.getLogger(__name__)

SpecLike = Union[ComponentSpec, Mapping[str, Any], str]
DataLike = Optional[Union[Panel, PanelSeries]]


def _as_spec(spec: SpecLike) -> ComponentSpec:
    if isinstance(spec, ComponentSpec):
        return spec
    if isinstance(spec, str):
        return ComponentSpec(kind=spec)
    return ComponentSpec.model_validate(spec)


def _canonical(kind: str, aliases: Mapping[str, str], family: str) -> str:
    key = kind.strip().lower().replace("-", "_")
    canonical = aliases.get(key)
    if canonical is None:
        raise ValueError(
            f"Unsupported {family} kind: {kind}. Use one of: {', '.join(sorted(set(aliases.values())))}"
        )
    return canonical


# Resampling ------------------------------------------------------------------

_RESAMPLER_ALIASES: dict[str, str] = {
    "identity": "identity",
    "idty": "identity",
    "seasonal_iid": "seasonal_iid",
    "svm": "seasonal_iid",
    "scramble_var_months": "seasonal_iid",
    "extended_svm": "extended_svm",
    "esvm": "extended_svm",
    "trended": "trended",
    "rsti": "trended",
    "sbb": "sbb",
    "stationary_block": "sbb",
    "gsbb": "gsbb",
    "mixture": "mixture",
    "mix": "mixture",
}


def _build_mixture(params: Mapping[str, Any]) -> ResamplingStrategy:
    members = params.get("strategies")
    if not members:
        raise ValueError("A mixture spec needs a non-empty 'strategies' list")
    return ResampleMixture([build_resampler(member) for member in members])


_RESAMPLER_DISPATCH: dict[str, Callable[[Mapping[str, Any]], ResamplingStrategy]] = {
    "identity": lambda params: ResampleIdentity(),
    "seasonal_iid": lambda params: ResampleSeasonalIID(),
    "extended_svm": lambda params: ResampleExtendedSVM(params["extension_periods"]),
    "trended": lambda params: ResampleTrended(params["p"]),
    "sbb": lambda params: ResampleSBB(**params),
    "gsbb": lambda params: ResampleGSBB(**params),
    "mixture": _build_mixture,
}


def build_resampler(spec: SpecLike) -> ResamplingStrategy:
    """Resampling strategy described by ``spec``.

    >>> build_resampler({"kind": "gsbb", "params": {"blocklength": 36}}).tag
    'GSBB-36'
    """

    spec = _as_spec(spec)
    kind = _canonical(spec.kind, _RESAMPLER_ALIASES, "resampler")
    try:
        return _RESAMPLER_DISPATCH[kind](spec.params)
    except KeyError as exc:
        raise ValueError(f"Resampler '{kind}' is missing parameter {exc}") from exc


# Trends ----------------------------------------------------------------------

_TREND_ALIASES: dict[str, str] = {
    "identity": "identity",
    "id": "identity",
    "none": "identity",
    "random_walk": "random_walk",
    "rw": "random_walk",
    "exponential": "exponential",
    "exp": "exponential",
}


def _build_exponential(params: Mapping[str, Any], data: DataLike) -> TrendInjector:
    periods = params.get("periods", data)
    if periods is None:
        raise ValueError("An exponential trend needs 'periods' or the evaluation data")
    return TrendExponential(periods, rate=params.get("rate", 0.02))


def _build_random_walk(params: Mapping[str, Any], data: DataLike) -> TrendInjector:
    if "filename" in params:
        return TrendRandomWalk(load_rw_trend(params["filename"]))
    return TrendRandomWalk()


_TREND_DISPATCH: dict[str, Callable[[Mapping[str, Any], DataLike], TrendInjector]] = {
    "identity": lambda params, data: TrendIdentity(),
    "random_walk": _build_random_walk,
    "exponential": _build_exponential,
}


def build_trend(spec: SpecLike, data: DataLike = None) -> TrendInjector:
    """Trend injector described by ``spec``.

    ``data`` sizes the trends whose length follows the data (exponential
    growth without an explicit ``periods``).
    """

    spec = _as_spec(spec)
    kind = _canonical(spec.kind, _TREND_ALIASES, "trend")
    return _TREND_DISPATCH[kind](spec.params, data)


# Estimators ------------------------------------------------------------------

_ESTIMATOR_ALIASES: dict[str, str] = {
    "total_cpi": "total_cpi",
    "total": "total_cpi",
    "percentile_eq": "percentile_eq",
    "pereq": "percentile_eq",
    "constant": "constant",
    "c": "constant",
    "ensemble": "ensemble",
}


def _build_ensemble(params: Mapping[str, Any]) -> Estimator:
    members = params.get("estimators")
    if not members:
        raise ValueError("An ensemble spec needs a non-empty 'estimators' list")
    return EnsembleEstimator([build_estimator(member) for member in members])


_ESTIMATOR_DISPATCH: dict[str, Callable[[Mapping[str, Any]], Estimator]] = {
    "total_cpi": lambda params: InflationTotalCPI(),
    "percentile_eq": lambda params: InflationPercentileEq(params["q"]),
    "constant": lambda params: InflationConstant(),
    "ensemble": _build_ensemble,
}


def build_estimator(spec: SpecLike) -> Estimator:
    spec = _as_spec(spec)
    kind = _canonical(spec.kind, _ESTIMATOR_ALIASES, "estimator")
    try:
        return _ESTIMATOR_DISPATCH[kind](spec.params)
    except KeyError as exc:
        raise ValueError(f"Estimator '{kind}' is missing parameter {exc}") from exc


# Batches ---------------------------------------------------------------------


def evalperiods_from_spec(spec: SimulationSpec) -> tuple:
    if spec.evalperiods is None:
        return DEFAULT_EVALPERIODS
    periods = [EvalPeriod(p.start, p.final, p.tag) for p in spec.evalperiods]
    if spec.include_complete_period:
        periods.insert(0, CompletePeriod())
    return tuple(periods)


def configs_from_batch(spec: BatchSpec, data: DataLike = None) -> list[SimConfig]:
    """One :class:`SimConfig` per estimator of ``spec``, sharing the rest.

    ``data`` is only needed by data-sized trends; it is cut at the training
    date before sizing them.
    """

    if data is not None:
        data = data.up_to(spec.traindate)

    resamplefn = build_resampler(spec.resampler)
    trendfn = build_trend(spec.trend, data)
    paramfn = build_estimator(spec.param_estimator)
    evalperiods = evalperiods_from_spec(spec)

    configs = [
        SimConfig(build_estimator(est), resamplefn, trendfn, paramfn, spec.nsim, spec.traindate, evalperiods)
        for est in spec.estimators
    ]
    logger.info("Built %d configurations from batch spec", len(configs))
    return configs
