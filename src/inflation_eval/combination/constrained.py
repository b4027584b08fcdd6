"""Simplex-constrained combination weights.

All solvers return non-negative weights summing to one (optionally leaving
the first, intercept weight out of the sum). The quadratic, ABSME and RMSE
problems are convex and solved with CVXPy; the correlation objective is not
and is handled by SLSQP from SciPy.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

import cvxpy as cp
import numpy as np
from scipy.optimize import minimize

from inflation_eval.evaluation.metrics import trajectory_correlations

from .least_squares import average_mats, population_vector
from .solver_utils import require_optimal, solve_problem

__all__ = [
    "absme_combination_weights",
    "share_combination_weights",
    "share_combination_weights_absme",
    "share_combination_weights_corr",
    "share_combination_weights_rmse",
]

logger = logging.getLogger(__name__)


def _simplex_constraints(beta: cp.Variable, restrict_all: bool) -> list:
    r = 0 if restrict_all else 1
    return [beta >= 0, cp.sum(beta[r:]) == 1]


def _solve(
    problem: cp.Problem,
    beta: cp.Variable,
    name: str,
    solver: Optional[str],
    solver_kwargs: Optional[Mapping[str, Any]],
) -> np.ndarray:
    summary = solve_problem(problem, solver=solver, solver_kwargs=solver_kwargs)
    require_optimal(summary, name)
    return np.asarray(beta.value, dtype=float).reshape(-1)


def share_combination_weights(
    tray_infl,
    tray_infl_param,
    restrict_all: bool = True,
    solver: Optional[str] = None,
    solver_kwargs: Optional[Mapping[str, Any]] = None,
) -> np.ndarray:
    """MSE-optimal shares: ``beta >= 0`` and ``sum(beta) == 1``.

    With ``restrict_all=False`` the sum constraint starts at the second
    weight so an intercept in the first column stays free in level.
    """

    xtx, xtpi = average_mats(tray_infl, tray_infl_param)
    pipi = float(np.mean(np.asarray(tray_infl_param, dtype=float) ** 2))
    beta = cp.Variable(xtx.shape[0])
    objective = cp.Minimize(cp.quad_form(beta, cp.psd_wrap(xtx)) - 2 * xtpi @ beta + pipi)
    problem = cp.Problem(objective, _simplex_constraints(beta, restrict_all))
    return _solve(problem, beta, "Share combination", solver, solver_kwargs)


def absme_combination_weights(
    tray_infl,
    tray_infl_param,
    restrict_all: bool = True,
    solver: Optional[str] = None,
    solver_kwargs: Optional[Mapping[str, Any]] = None,
) -> np.ndarray:
    """Shares minimising the absolute mean error of the combination.

    The mean error of the combination is the combination of the mean errors
    ``e_bar`` of each measure, so the problem is the LP ``min |e_bar . beta|``.
    """

    X = np.asarray(tray_infl, dtype=float)
    pi = population_vector(tray_infl_param, X.shape[0])
    e_bar = (X - pi[:, None, None]).mean(axis=(0, 2))
    beta = cp.Variable(X.shape[1])
    problem = cp.Problem(cp.Minimize(cp.abs(e_bar @ beta)), _simplex_constraints(beta, restrict_all))
    return _solve(problem, beta, "ABSME combination", solver, solver_kwargs)


def share_combination_weights_rmse(
    tray_infl,
    tray_infl_param,
    solver: Optional[str] = None,
    solver_kwargs: Optional[Mapping[str, Any]] = None,
) -> np.ndarray:
    """Shares minimising the average RMSE over replications.

    ``tray_infl_param`` may be ``(T,)`` or a ``(T, 1, F)`` batch of fold
    population trajectories, in which case replication block ``f`` (of
    ``K/F`` replications) is scored against fold ``f``.
    """

    X = np.asarray(tray_infl, dtype=float)
    T, n, K = X.shape
    pob = np.asarray(tray_infl_param, dtype=float)
    if pob.ndim == 3:
        if pob.shape[0] != T:
            raise ValueError("The trajectories and the parameter must have the same number of periods")
        F = pob.shape[2]
        if K % F != 0:
            raise ValueError(
                f"The number of trajectories ({K}) must be a multiple of the number of batches ({F})"
            )
        targets = np.repeat(pob[:, 0, :], K // F, axis=1)
    else:
        targets = np.repeat(population_vector(pob, T)[:, None], K, axis=1)

    # Row k * T + t holds period t of replication k.
    design = X.transpose(2, 0, 1).reshape(K * T, n)
    target = targets.T.reshape(-1)

    beta = cp.Variable(n)
    residuals = cp.reshape(design @ beta - target, (T, K), order="F")
    loss = cp.sum(cp.norm(residuals, 2, axis=0)) / (K * np.sqrt(T))
    problem = cp.Problem(cp.Minimize(loss), _simplex_constraints(beta, True))
    return _solve(problem, beta, "RMSE share combination", solver, solver_kwargs)


def share_combination_weights_absme(
    tray_infl,
    tray_infl_param,
    solver: Optional[str] = None,
    solver_kwargs: Optional[Mapping[str, Any]] = None,
) -> np.ndarray:
    """Shares minimising ``mean_k |mean_t(X_k beta - pi)|``."""

    X = np.asarray(tray_infl, dtype=float)
    pi = population_vector(tray_infl_param, X.shape[0])
    means = X.mean(axis=0).T
    beta = cp.Variable(X.shape[1])
    loss = cp.sum(cp.abs(means @ beta - pi.mean())) / X.shape[2]
    problem = cp.Problem(cp.Minimize(loss), _simplex_constraints(beta, True))
    return _solve(problem, beta, "ABSME share combination", solver, solver_kwargs)


def share_combination_weights_corr(
    tray_infl,
    tray_infl_param,
    w_start: Optional[np.ndarray] = None,
    tol: float = 1e-8,
    max_iterations: int = 500,
) -> np.ndarray:
    """Shares maximising the average correlation with the population trajectory."""

    X = np.asarray(tray_infl, dtype=float)
    n = X.shape[1]
    pi = population_vector(tray_infl_param, X.shape[0])

    def negative_corr(beta: np.ndarray) -> float:
        combined = np.einsum("tnk,n->tk", X, beta)[:, None, :]
        return -float(np.nanmean(trajectory_correlations(combined, pi)))

    w0 = np.full(n, 1.0 / n) if w_start is None else np.asarray(w_start, dtype=float)
    result = minimize(
        negative_corr,
        w0,
        method="SLSQP",
        bounds=[(0.0, 1.0)] * n,
        constraints=({"type": "eq", "fun": lambda b: np.sum(b) - 1.0},),
        options={"ftol": tol, "maxiter": max_iterations},
    )
    if not result.success:
        logger.warning("Correlation share optimisation did not converge: %s", result.message)
    logger.debug("Correlation share optimisation: corr=%.6f after %d iterations", -result.fun, result.nit)
    return np.asarray(result.x, dtype=float)
