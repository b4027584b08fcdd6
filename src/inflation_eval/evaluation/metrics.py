"""Evaluation metrics of simulated inflation trajectories.

``tray_infl`` is the ``(T, M, K)`` array produced by the trajectory
generators (periods x measures x replications) and ``tray_infl_pob`` the
population trajectory it is compared with. Errors are ``X - pi`` broadcast
over the replications.

The full metric set includes the additive decomposition of the MSE of a
single measure::

    mse = mse_bias + mse_var + mse_cov

where ``mse_bias`` is the mean squared time-average error, ``mse_var`` the
mean squared gap between each replication's standard deviation and the
population's, and ``mse_cov`` the cost of imperfect correlation,
``2 (1 - corr_k) s_pop s_k``. All standard deviations in the decomposition
use ``ddof=0``.
"""

from __future__ import annotations

import logging
from typing import Dict, Union

import numpy as np

from inflation_eval.config.constants import HUBER_THRESHOLD

__all__ = [
    "SHORT_METRICS",
    "combination_metrics",
    "eval_metrics",
    "huber_loss",
    "trajectory_correlations",
]

logger = logging.getLogger(__name__)

Metrics = Dict[str, Union[float, int]]

SHORT_METRICS = ("mse", "rmse", "mae", "me", "absme", "huber", "corr")


def huber_loss(x, a: float = HUBER_THRESHOLD):
    """Quadratic for ``|x| <= a``, linear beyond; works elementwise."""

    x = np.asarray(x, dtype=float)
    absx = np.abs(x)
    return np.where(absx <= a, 0.5 * x**2, a * (absx - 0.5 * a))


def _std_around(values: np.ndarray, center: float) -> float:
    """Sample standard deviation (``n - 1``) around a known ``center``."""

    values = np.asarray(values, dtype=float).ravel()
    if values.size < 2:
        return float("nan")
    return float(np.sqrt(np.sum((values - center) ** 2) / (values.size - 1)))


def trajectory_correlations(tray_infl: np.ndarray, tray_infl_pob: np.ndarray) -> np.ndarray:
    """Correlation of the first measure of every replication with ``pi``.

    Constant trajectories give ``nan``.
    """

    x = tray_infl[:, 0, :]
    pi = np.asarray(tray_infl_pob, dtype=float).reshape(-1, 1)
    xc = x - x.mean(axis=0, keepdims=True)
    pc = pi - pi.mean()
    num = np.sum(xc * pc, axis=0)
    den = np.sqrt(np.sum(xc**2, axis=0) * np.sum(pc**2))
    with np.errstate(invalid="ignore", divide="ignore"):
        return num / den


def _as_population(tray_infl_pob: np.ndarray, periods: int) -> np.ndarray:
    pi = np.asarray(tray_infl_pob, dtype=float)
    if pi.ndim == 2:
        if pi.shape[1] != 1:
            raise ValueError("A 2-D population trajectory must have a single column")
        pi = pi[:, 0]
    if pi.ndim != 1 or pi.shape[0] != periods:
        raise ValueError(
            f"Population trajectory has shape {np.shape(tray_infl_pob)}; expected {periods} periods"
        )
    return pi


def _single_metrics(tray_infl: np.ndarray, pi: np.ndarray, short: bool) -> Metrics:
    T, _, K = tray_infl.shape
    err = tray_infl - pi[:, None, None]

    sq_err = err**2
    mse = float(sq_err.mean())
    mse_dist = sq_err.mean(axis=0).ravel()
    rmse_dist = np.sqrt(mse_dist)

    rmse = float(rmse_dist.mean())
    mae = float(np.abs(err).mean())
    me = float(err.mean())
    absme = abs(me)
    huber_err = huber_loss(err)
    huber = float(huber_err.mean())
    corr_dist = trajectory_correlations(tray_infl, pi)
    corr = float(np.mean(corr_dist))

    if short:
        return {
            "mse": mse,
            "rmse": rmse,
            "mae": mae,
            "me": me,
            "absme": absme,
            "huber": huber,
            "corr": corr,
        }

    std_mse_dist = _std_around(mse_dist, mse)
    sqrt_k = np.sqrt(K)
    me_std_error = _std_around(err.mean(axis=1), me) / sqrt_k

    me_dist = err[:, 0, :].mean(axis=0)
    s_param = float(np.std(pi))
    s_tray = np.std(tray_infl[:, 0, :], axis=0)

    return {
        "mse": mse,
        "mse_std_error": std_mse_dist / sqrt_k,
        "std_mse_dist": std_mse_dist,
        "std_sqerr_dist": _std_around(sq_err, mse),
        "rmse": rmse,
        "rmse_std_error": _std_around(rmse_dist, rmse) / sqrt_k,
        "mae": mae,
        "mae_std_error": _std_around(np.abs(err).mean(axis=1), mae) / sqrt_k,
        "me": me,
        "me_std_error": me_std_error,
        "absme": absme,
        "absme_std_error": me_std_error,
        "corr": corr,
        "huber": huber,
        "huber_std_error": _std_around(huber_err.mean(axis=1), huber) / np.sqrt(T * K),
        "mse_bias": float(np.mean(me_dist**2)),
        "mse_var": float(np.mean((s_tray - s_param) ** 2)),
        "mse_cov": float(np.mean(2 * (1 - corr_dist) * s_param * s_tray)),
        "T": int(T),
        "B": int(K),
    }


def _with_prefix(metrics: Metrics, prefix: str) -> Metrics:
    if not prefix:
        return metrics
    return {f"{prefix}_{key}": value for key, value in metrics.items()}


def eval_metrics(
    tray_infl: np.ndarray,
    tray_infl_pob: np.ndarray,
    short: bool = False,
    prefix: str = "",
) -> Metrics:
    """Compute the evaluation metrics of ``tray_infl`` against ``tray_infl_pob``.

    Parameters
    ----------
    tray_infl:
        ``(T, M, K)`` simulated trajectories.
    tray_infl_pob:
        Population trajectory: ``(T,)`` or ``(T, 1)``, or ``(T, 1, F)`` for
        ``F`` folds. In the latter case ``K`` must be a multiple of ``F``;
        replications ``[f * K/F, (f + 1) * K/F)`` are scored against fold
        ``f`` and the per-fold metrics are averaged.
    short:
        Only compute :data:`SHORT_METRICS`.
    prefix:
        Prepended to every key as ``"<prefix>_"``.

    Returns
    -------
    dict
        Metric name to value. The full set adds standard errors, the MSE
        decomposition and the sample sizes ``T`` and ``B``.
    """

    tray_infl = np.asarray(tray_infl, dtype=float)
    if tray_infl.ndim != 3:
        raise ValueError("tray_infl must be a (T, M, K) array")

    pob = np.asarray(tray_infl_pob, dtype=float)
    if pob.ndim == 3:
        return _with_prefix(_batched_metrics(tray_infl, pob, short), prefix)

    pi = _as_population(pob, tray_infl.shape[0])
    return _with_prefix(_single_metrics(tray_infl, pi, short), prefix)


def _batched_metrics(tray_infl: np.ndarray, pob: np.ndarray, short: bool) -> Metrics:
    K = tray_infl.shape[2]
    F = pob.shape[2]
    if pob.shape[0] != tray_infl.shape[0]:
        raise ValueError("Simulated and population trajectories differ in length")
    if K % F != 0:
        raise ValueError(
            f"The number of simulations ({K}) must be a multiple of the number of folds ({F})"
        )
    per_fold = K // F
    results = [
        _single_metrics(
            tray_infl[:, :, f * per_fold : (f + 1) * per_fold],
            _as_population(pob[:, :, f], pob.shape[0]),
            short,
        )
        for f in range(F)
    ]
    merged: Metrics = {}
    for key, first in results[0].items():
        if isinstance(first, int):
            merged[key] = first
        else:
            merged[key] = float(np.mean([r[key] for r in results]))
    return merged


def combination_metrics(
    tray_infl: np.ndarray,
    tray_infl_pob: np.ndarray,
    weights,
    **kwargs,
) -> Metrics:
    """Metrics of the linear combination ``sum_m w_m X[:, m, :]``."""

    tray_infl = np.asarray(tray_infl, dtype=float)
    weights = np.asarray(weights, dtype=float).reshape(1, -1, 1)
    if weights.shape[1] != tray_infl.shape[1]:
        raise ValueError(
            f"Got {weights.shape[1]} weights for {tray_infl.shape[1]} measures"
        )
    combined = np.sum(tray_infl * weights, axis=1, keepdims=True)
    return eval_metrics(combined, tray_infl_pob, **kwargs)
