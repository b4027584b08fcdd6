"""Assessment under several realisations of a dynamic random-walk trend.

Fold ``i`` (1-based) of a :class:`SimDynamicConfig` with ``F`` folds applies
``config.trendfns[i - 1]`` and simulates its replications from the seed
``rndseed + i + F``; see :func:`inflation_eval.utils.seed.fold_seed`.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Sequence, Union

import numpy as np
from tqdm import tqdm

from inflation_eval.config.constants import DEFAULT_SEED
from inflation_eval.data import Panel, PanelSeries
from inflation_eval.evaluation.metrics import eval_metrics
from inflation_eval.utils.seed import fold_seed

from .config import SimDynamicConfig
from .parameter import InflationParameter
from .periods import CompletePeriod, eval_mask, period_tag
from .runner import as_series
from .trajectories import pargentrajinfl

__all__ = ["compute_assessment_sim", "compute_lowlevel_sim", "merge_metrics"]

logger = logging.getLogger(__name__)

SUMMARY_METRICS = ("rmse", "me", "corr")


def compute_lowlevel_sim(
    data: Union[Panel, PanelSeries],
    config: SimDynamicConfig,
    rndseed: int = DEFAULT_SEED,
    shortmetrics: bool = True,
    showprogress: bool = True,
) -> Dict[str, Any]:
    """Simulate every fold of ``config`` and score it on ``config.evalperiod``.

    Returns
    -------
    dict
        ``metrics_list`` (one metrics dict per fold), ``traj_list`` (the
        ``(T, M, K)`` trajectories of each fold), ``traj_pob_list`` (the
        population trajectory of each fold) and ``trendfns``.
    """

    data_eval = as_series(data).up_to(config.traindate)
    population = config.resamplefn.population_function()(data_eval)
    mask = eval_mask(population, config.evalperiod)
    prefix = period_tag(config.evalperiod)

    metrics_list: List[Dict[str, Any]] = []
    traj_list: List[np.ndarray] = []
    traj_pob_list: List[np.ndarray] = []

    for i, trendfn in enumerate(
        tqdm(
            config.trendfns,
            desc="Running simulations with different realizations of the trend",
            unit="fold",
            disable=not showprogress,
        ),
        start=1,
    ):
        sim_seed = fold_seed(rndseed, i, config.nfolds)

        param = InflationParameter(config.paramfn, config.resamplefn, trendfn)
        traj_infl_pob = np.asarray(param(data_eval), dtype=float).reshape(-1)

        traj_infl = pargentrajinfl(
            config.inflfn,
            config.resamplefn,
            trendfn,
            data_eval,
            numreplications=config.nsim,
            rndseed=sim_seed,
            showprogress=False,
        )

        metrics_list.append(
            eval_metrics(traj_infl[mask], traj_infl_pob[mask], short=shortmetrics, prefix=prefix)
        )
        traj_list.append(traj_infl)
        traj_pob_list.append(traj_infl_pob)
        logger.debug("Fold %d/%d done (seed %d)", i, config.nfolds, sim_seed)

    return {
        "metrics_list": metrics_list,
        "traj_list": traj_list,
        "traj_pob_list": traj_pob_list,
        "trendfns": list(config.trendfns),
    }


def merge_metrics(metrics_list: Sequence[Mapping[str, Any]]) -> Dict[str, List[Any]]:
    """Turn per-fold metric dictionaries into ``key -> [value per fold]``."""

    if not metrics_list:
        return {}
    return {key: [m[key] for m in metrics_list] for key in metrics_list[0]}


def _metric_key(config: SimDynamicConfig, metric: str) -> str:
    if isinstance(config.evalperiod, CompletePeriod) or not config.evalperiod.tag:
        return metric
    return f"{config.evalperiod.tag}_{metric}"


def compute_assessment_sim(
    data: Union[Panel, PanelSeries],
    config: SimDynamicConfig,
    rndseed: int = DEFAULT_SEED,
    savetrajectories: bool = False,
    shortmetrics: bool = True,
    showprogress: bool = True,
    verbose: bool = True,
) -> Dict[str, Any]:
    """Run :func:`compute_lowlevel_sim` and assemble a result record.

    The record merges ``config.to_dict()`` with the per-fold metric vectors
    and adds ``measure``, ``params`` and ``trendfns``. With
    ``savetrajectories`` it also holds ``trajinfl`` (folds concatenated along
    the replication axis, ``(T, M, K * F)``) and ``trajinfl_pob``
    (``(T, 1, F)``), the layout expected by the batched form of
    :func:`~inflation_eval.evaluation.eval_metrics`.
    """

    results = compute_lowlevel_sim(
        data, config, rndseed=rndseed, shortmetrics=shortmetrics, showprogress=showprogress
    )
    metrics = merge_metrics(results["metrics_list"])

    if verbose:
        lines = []
        for metric in SUMMARY_METRICS:
            key = _metric_key(config, metric)
            values = np.asarray(metrics[key], dtype=float)
            stderror = values.std(ddof=1) / np.sqrt(config.nfolds) if values.size > 1 else float("nan")
            lines.append(f"  {key}: {values.mean():.6g} ± {stderror:.6g}")
        logger.info("Assessment metrics (mean over folds):\n%s", "\n".join(lines))

    record: Dict[str, Any] = {**config.to_dict(), **metrics}
    record["measure"] = config.inflfn.measure_name
    record["params"] = config.inflfn.params
    record["trendfns"] = results["trendfns"]
    if savetrajectories:
        traj = np.concatenate(results["traj_list"], axis=2)
        pob = np.stack(results["traj_pob_list"], axis=1)[:, None, :]
        record["trajinfl"] = traj
        record["trajinfl_pob"] = pob
    return record
