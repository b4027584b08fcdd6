"""Memory-light evaluators for parameter searches.

Each function streams replications through a running mean instead of keeping
the ``(T, M, K)`` trajectory array, so it can be called many times inside an
optimiser loop. Replication ``k`` uses the same seed as in
:func:`~inflation_eval.simulation.trajectories.gentrajinfl`, hence the values
match the corresponding metrics of :func:`~inflation_eval.evaluation.eval_metrics`.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import Callable, Optional

import numpy as np
from tqdm import tqdm

from inflation_eval.config.constants import DEFAULT_SEED
from inflation_eval.config.settings import get_settings
from inflation_eval.data import PanelSeries
from inflation_eval.utils.parallel import parallel_imap

from .config import SimConfig
from .parameter import InflationParameter
from .trajectories import ReplicationTask

__all__ = ["eval_absme_online", "eval_corr_online", "eval_mse_online"]

logger = logging.getLogger(__name__)

Reducer = Callable[[np.ndarray, np.ndarray], np.ndarray]


def _sq_err(traj: np.ndarray, pi: np.ndarray) -> np.ndarray:
    return (traj - pi[:, None]) ** 2


def _err(traj: np.ndarray, pi: np.ndarray) -> np.ndarray:
    return traj - pi[:, None]


def _corr(traj: np.ndarray, pi: np.ndarray) -> np.ndarray:
    x = traj[:, 0]
    with np.errstate(invalid="ignore", divide="ignore"):
        return np.atleast_1d(np.corrcoef(x, pi)[0, 1])


def _partial_sum(task: ReplicationTask, reducer: Reducer, pi: np.ndarray, k: int) -> tuple[float, int]:
    values = reducer(task(k), pi)
    return float(np.sum(values)), int(values.size)


def _online_mean(
    reducer: Reducer,
    config: SimConfig,
    data: PanelSeries,
    K: int,
    rndseed: int,
    tray_infl_param: Optional[np.ndarray],
    showprogress: Optional[bool],
) -> float:
    if K <= 0:
        raise ValueError("K must be positive")
    if tray_infl_param is None:
        param = InflationParameter(config.paramfn, config.resamplefn, config.trendfn)
        tray_infl_param = param(data)
    pi = np.asarray(tray_infl_param, dtype=float).reshape(-1)

    settings = get_settings()
    showprogress = settings.show_progress if showprogress is None else showprogress
    workers = settings.n_jobs if settings.n_jobs >= 1 else None

    task = ReplicationTask(config.inflfn, config.resamplefn, config.trendfn, data, rndseed)
    func = partial(_partial_sum, task, reducer, pi)

    total, count = 0.0, 0
    results = parallel_imap(func, range(1, K + 1), settings.parallel_backend, workers)
    for partial_sum, n in tqdm(results, total=K, desc=reducer.__name__.strip("_"), unit="sim", disable=not showprogress):
        total += partial_sum
        count += n
    return total / count


def eval_mse_online(
    config: SimConfig,
    data: PanelSeries,
    K: int = 1000,
    rndseed: int = DEFAULT_SEED,
    tray_infl_param: Optional[np.ndarray] = None,
    showprogress: Optional[bool] = None,
) -> float:
    """Mean squared error of ``config.inflfn`` over ``K`` replications.

    ``tray_infl_param`` may be passed to skip recomputing the population
    trajectory when the same data and configuration are evaluated repeatedly.
    """

    return _online_mean(_sq_err, config, data, K, rndseed, tray_infl_param, showprogress)


def eval_absme_online(
    config: SimConfig,
    data: PanelSeries,
    K: int = 1000,
    rndseed: int = DEFAULT_SEED,
    tray_infl_param: Optional[np.ndarray] = None,
    showprogress: Optional[bool] = None,
) -> float:
    """Absolute value of the mean error over ``K`` replications."""

    return abs(_online_mean(_err, config, data, K, rndseed, tray_infl_param, showprogress))


def eval_corr_online(
    config: SimConfig,
    data: PanelSeries,
    K: int = 1000,
    rndseed: int = DEFAULT_SEED,
    tray_infl_param: Optional[np.ndarray] = None,
    showprogress: Optional[bool] = None,
) -> float:
    """Average correlation between each replication and the population trajectory."""

    return _online_mean(_corr, config, data, K, rndseed, tray_infl_param, showprogress)
