"""Out-of-sample validation of combination weights.

``crossvaldata`` is the dictionary produced by
:func:`inflation_eval.simulation.runner.makesim_crossval`: for every training
and validation cutoff it holds the simulated trajectories (``infl_<yy>``),
the population trajectory (``param_<yy>``) and the inflation dates
(``dates_<yy>``) of the data up to that cutoff, plus the ``config``.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional, Sequence

import numpy as np

from inflation_eval.data import MonthLike, to_month
from inflation_eval.evaluation.metrics import combination_metrics

__all__ = ["add_ones", "crossvalidate", "cv_key"]

logger = logging.getLogger(__name__)

WeightsFunction = Callable[[np.ndarray, np.ndarray], np.ndarray]


def cv_key(prefix: str, date: MonthLike) -> str:
    """Key ``"<prefix>_<yy>"`` of a cross-validation input."""

    return f"{prefix}_{to_month(date).strftime('%y')}"


def add_ones(tray_infl: np.ndarray) -> np.ndarray:
    """Prepend a column of ones (an intercept) to a ``(T, n, K)`` array."""

    tray_infl = np.asarray(tray_infl, dtype=float)
    T, _, K = tray_infl.shape
    return np.concatenate([np.ones((T, 1, K)), tray_infl], axis=1)


def crossvalidate(
    weightsfunction: WeightsFunction,
    crossvaldata: Mapping[str, Any],
    config: Optional[Any] = None,
    metrics: Sequence[str] = ("mse",),
    train_start_date: MonthLike = "2000-12",
    components_mask: Any = slice(None),
    add_intercept: bool = False,
    return_weights: bool = False,
    log_weights: bool = True,
):
    """Fit weights on each training window and score them on the next period.

    For every evaluation period of ``config`` the training cutoff is the
    month before the period starts. Weights are fitted with
    ``weightsfunction(train_tray, train_param)`` on the dates from
    ``train_start_date`` onwards and evaluated with
    :func:`combination_metrics` on the evaluation period.

    Returns
    -------
    numpy.ndarray or tuple
        ``(folds, len(metrics))`` validation results, plus the weights of the
        last fold when ``return_weights`` is set. Missing metrics count as 0.
    """

    config = crossvaldata["config"] if config is None else config
    evalperiods = list(config.evalperiods)
    cv_results = np.zeros((len(evalperiods), len(metrics)))
    train_start = to_month(train_start_date)
    w = None

    for i, evalperiod in enumerate(evalperiods):
        traindate = evalperiod.start - 1
        cvdate = evalperiod.final
        logger.debug("Cross-validation fold %d: train up to %s, validate up to %s", i + 1, traindate, cvdate)

        train_tray = np.asarray(crossvaldata[cv_key("infl", traindate)])
        train_param = np.asarray(crossvaldata[cv_key("param", traindate)]).reshape(-1)
        train_dates = crossvaldata[cv_key("dates", traindate)]
        cv_tray = np.asarray(crossvaldata[cv_key("infl", cvdate)])
        cv_param = np.asarray(crossvaldata[cv_key("param", cvdate)]).reshape(-1)
        cv_dates = crossvaldata[cv_key("dates", cvdate)]

        if add_intercept:
            train_tray = add_ones(train_tray)
            cv_tray = add_ones(cv_tray)

        train_mask = np.asarray(train_dates >= train_start)
        w = weightsfunction(train_tray[train_mask][:, components_mask, :], train_param[train_mask])

        period_mask = np.asarray((cv_dates >= evalperiod.start) & (cv_dates <= evalperiod.final))
        cv_metrics = combination_metrics(
            cv_tray[period_mask][:, components_mask, :], cv_param[period_mask], w
        )
        cv_results[i, :] = [cv_metrics.get(metric, 0) for metric in metrics]

        logger.info(
            "Evaluation (%d/%d): %s trained up to %s -> %s",
            i + 1,
            len(evalperiods),
            evalperiod,
            traindate,
            dict(zip(metrics, cv_results[i])),
        )
        if log_weights:
            logger.info("Weights: %s", np.array2string(np.asarray(w), precision=4))

    if return_weights:
        return cv_results, w
    return cv_results
