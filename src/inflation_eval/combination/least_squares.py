"""Least-squares combination weights and their regularised variants.

For trajectories ``X`` of shape ``(T, n, K)`` and a population trajectory
``pi`` the MSE of the combination ``X beta`` is the quadratic form::

    beta' XtX beta - 2 beta' Xtpi + mean(pi ** 2)

with ``XtX`` and ``Xtpi`` averaged over time and replications
(:func:`average_mats`). Every solver reduces to the closed form
:func:`combination_weights` when its regularisation weight is zero.
"""

from __future__ import annotations

import logging
from typing import Tuple, Union

import numpy as np

from inflation_eval.config.constants import LASSO_ALPHA, LASSO_MAX_ITER, LASSO_TOL

__all__ = [
    "average_mats",
    "combination_weights",
    "elastic_combination_weights",
    "lasso_combination_weights",
    "population_vector",
    "proxl1norm",
    "ridge_combination_weights",
]

logger = logging.getLogger(__name__)

WeightsResult = Union[np.ndarray, Tuple[np.ndarray, np.ndarray]]

# Absolute cost change reported for the first iteration.
_FIRST_ABSTOL = 100.0


def population_vector(tray_infl_param, periods: int) -> np.ndarray:
    """Flatten a ``(T,)`` or ``(T, 1)`` population trajectory."""

    pi = np.asarray(tray_infl_param, dtype=float).reshape(-1)
    if pi.size != periods:
        raise ValueError(
            f"Population trajectory has {pi.size} periods; the trajectories have {periods}"
        )
    return pi


def average_mats(tray_infl, tray_infl_param) -> tuple[np.ndarray, np.ndarray]:
    """Return ``XtX`` and ``Xtpi`` averaged over time and replications."""

    X = np.asarray(tray_infl, dtype=float)
    T, _, K = X.shape
    pi = population_vector(tray_infl_param, T)
    xtx = np.einsum("tik,tjk->ij", X, X) / (T * K)
    xtpi = np.einsum("tik,t->i", X, pi) / (T * K)
    return xtx, xtpi


def combination_weights(tray_infl, tray_infl_param) -> np.ndarray:
    """Closed-form MSE-optimal combination weights."""

    xtx, xtpi = average_mats(tray_infl, tray_infl_param)
    logger.debug("Determinant of the coefficient matrix: %.6g", np.linalg.det(xtx))
    return np.linalg.solve(xtx, xtpi)


def _penalty_identity(n: int, penalize_all: bool) -> np.ndarray:
    eye = np.eye(n)
    if not penalize_all:
        eye[0, 0] = 0.0
    return eye


def ridge_combination_weights(
    tray_infl,
    tray_infl_param,
    lambda_: float,
    penalize_all: bool = True,
) -> np.ndarray:
    """Closed-form ridge weights.

    With ``penalize_all=False`` the first weight (the intercept, when the
    first column of ``tray_infl`` is a column of ones) is not penalised.
    """

    if lambda_ == 0:
        return combination_weights(tray_infl, tray_infl_param)
    if lambda_ < 0:
        raise ValueError("lambda_ must be non-negative")

    xtx, xtpi = average_mats(tray_infl, tray_infl_param)
    penalised = xtx + lambda_ * _penalty_identity(xtx.shape[0], penalize_all)
    logger.debug(
        "Determinant of the coefficient matrix: %.6g (penalised %.6g)",
        np.linalg.det(xtx),
        np.linalg.det(penalised),
    )
    return np.linalg.solve(penalised, xtpi)


def proxl1norm(z: np.ndarray, threshold: float, penalize_all: bool = True) -> np.ndarray:
    """Soft-thresholding operator, the proximal map of ``threshold * ||z||_1``."""

    z = np.asarray(z, dtype=float)
    prox = z - np.clip(z, -threshold, threshold)
    if not penalize_all:
        prox[0] = z[0]
    return prox


def _proximal_descent(
    tray_infl,
    tray_infl_param,
    lambda_: float,
    gamma: float,
    alpha: float,
    tol: float,
    max_iterations: int,
    penalize_all: bool,
    elastic: bool,
) -> tuple[np.ndarray, np.ndarray]:
    label = "Elastic net" if elastic else "LASSO"
    xtx, xtpi = average_mats(tray_infl, tray_infl_param)
    pipi = float(np.mean(np.asarray(tray_infl_param, dtype=float) ** 2))
    beta = np.zeros(xtx.shape[0])
    costs = np.zeros(max_iterations)
    ridge = lambda_ * (1 - gamma)
    start = 0 if penalize_all else 1

    last = 0
    for t in range(max_iterations):
        grad = xtx @ beta - xtpi + ridge * beta
        beta = proxl1norm(beta - alpha * grad, alpha * lambda_ * gamma, penalize_all)

        mse = beta @ xtx @ beta - 2 * beta @ xtpi + pipi
        l1cost = np.sum(np.abs(beta[start:]))
        if not elastic:
            costs[t] = mse + lambda_ * l1cost
        else:
            l2cost = np.sum(beta[start:] ** 2)
            costs[t] = 0.5 * mse + lambda_ * gamma * l1cost + 0.5 * ridge * l2cost
        abstol = abs(costs[t] - costs[t - 1]) if t > 0 else _FIRST_ABSTOL
        last = t

        if (t + 1) % 100 == 0:
            logger.debug("%s iter %d: cost=%.8g |dcost|=%.3g", label, t + 1, costs[t], abstol)
        if abstol < tol:
            break

    logger.debug("%s stopped after %d iterations (cost=%.8g)", label, last + 1, costs[last])
    return beta, costs[: last + 1]


def lasso_combination_weights(
    tray_infl,
    tray_infl_param,
    lambda_: float,
    max_iterations: int = LASSO_MAX_ITER,
    alpha: float = LASSO_ALPHA,
    tol: float = LASSO_TOL,
    return_cost: bool = False,
    penalize_all: bool = True,
) -> WeightsResult:
    """LASSO weights by proximal gradient descent.

    Parameters
    ----------
    lambda_:
        L1 penalty. ``0`` returns :func:`combination_weights`.
    max_iterations, alpha, tol:
        Iteration cap, fixed step size and absolute change of the cost
        ``mse + lambda_ * ||beta||_1`` below which iteration stops.
    return_cost:
        Also return the cost history.
    penalize_all:
        ``False`` exempts the first weight from the penalty.
    """

    if lambda_ == 0:
        beta = combination_weights(tray_infl, tray_infl_param)
        return (beta, np.zeros(0)) if return_cost else beta
    beta, costs = _proximal_descent(
        tray_infl, tray_infl_param, lambda_, 1.0, alpha, tol, max_iterations, penalize_all, False
    )
    return (beta, costs) if return_cost else beta


def elastic_combination_weights(
    tray_infl,
    tray_infl_param,
    lambda_: float,
    gamma: float,
    max_iterations: int = LASSO_MAX_ITER,
    alpha: float = LASSO_ALPHA,
    tol: float = LASSO_TOL,
    return_cost: bool = False,
    penalize_all: bool = True,
) -> WeightsResult:
    """Elastic-net weights; ``gamma`` is the share of the L1 penalty.

    The cost is ``0.5 mse + lambda_ gamma ||b||_1 + 0.5 lambda_ (1 - gamma) ||b||^2``.
    """

    if not 0 <= gamma <= 1:
        raise ValueError("gamma must lie in [0, 1]")
    if lambda_ == 0:
        beta = combination_weights(tray_infl, tray_infl_param)
        return (beta, np.zeros(0)) if return_cost else beta
    beta, costs = _proximal_descent(
        tray_infl,
        tray_infl_param,
        lambda_,
        gamma,
        alpha,
        tol,
        max_iterations,
        penalize_all,
        True,
    )
    return (beta, costs) if return_cost else beta
