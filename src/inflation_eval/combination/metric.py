"""Combination weights optimising an arbitrary evaluation metric."""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
from scipy.optimize import minimize

from inflation_eval.evaluation.metrics import SHORT_METRICS, combination_metrics

__all__ = ["eval_combination", "metric_combination_weights"]

logger = logging.getLogger(__name__)

_SIGN_PENALTY = 2.0
_SUM_PENALTY = 5.0


def eval_combination(
    tray_infl,
    tray_infl_param,
    w: np.ndarray,
    metric: str = "corr",
    sum_abstol: float = 1e-2,
) -> float:
    """Objective value of weights ``w``; infeasible weights get a penalty instead.

    Correlation is maximised, so its value is negated.
    """

    w = np.asarray(w, dtype=float)
    penalty = float(np.sum(_SIGN_PENALTY - 2 * w[w < 0]))
    gap = abs(np.sum(w) - 1)
    if not gap < sum_abstol:
        penalty += _SUM_PENALTY + 2 * gap
    if penalty != 0:
        return penalty

    short = metric in SHORT_METRICS
    value = combination_metrics(tray_infl, tray_infl_param, w, short=short)[metric]
    sign = -1.0 if metric == "corr" else 1.0
    return sign * float(value)


def metric_combination_weights(
    tray_infl,
    tray_infl_param,
    metric: str = "corr",
    w_start: Optional[np.ndarray] = None,
    x_abstol: float = 1e-2,
    f_abstol: float = 1e-4,
    sum_abstol: float = 1e-4,
    max_iterations: int = 1000,
) -> np.ndarray:
    """Weights in ``[0, 1]`` optimising ``metric`` by Nelder-Mead.

    ``metric`` is any key returned by
    :func:`~inflation_eval.evaluation.metrics.eval_metrics`; ``"corr"`` is
    maximised, the rest minimised. The sum-to-one constraint is enforced by
    penalty, within ``sum_abstol``.
    """

    n = np.asarray(tray_infl).shape[1]
    w0 = np.full(n, 1.0 / n) if w_start is None else np.asarray(w_start, dtype=float)

    def objective(w: np.ndarray) -> float:
        return eval_combination(tray_infl, tray_infl_param, w, metric, sum_abstol)

    result = minimize(
        objective,
        w0,
        method="Nelder-Mead",
        bounds=[(0.0, 1.0)] * n,
        options={"xatol": x_abstol, "fatol": f_abstol, "maxiter": max_iterations},
    )
    logger.info(
        "Metric combination (%s): objective=%.6g after %d iterations (%s)",
        metric,
        result.fun,
        result.nit,
        result.message,
    )
    return np.asarray(result.x, dtype=float)
