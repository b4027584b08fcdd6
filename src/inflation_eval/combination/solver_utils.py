"""Utility helpers for CVXPy-based combination solvers."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Mapping

import cvxpy as cp

from inflation_eval.exceptions import CombinationSolverError

__all__ = [
    "SOLVER_PRIORITY",
    "SolverSummary",
    "require_optimal",
    "select_solver",
    "solve_problem",
]

logger = logging.getLogger(__name__)

SOLVER_PRIORITY = ("CLARABEL", "ECOS", "SCS", "OSQP")


@dataclass(frozen=True)
class SolverSummary:
    status: str
    solver: str
    value: float
    runtime: float
    primal_residual: float | None
    dual_residual: float | None

    def is_optimal(self) -> bool:
        return self.status in {cp.OPTIMAL, cp.OPTIMAL_INACCURATE}


def select_solver(preferred: str | None = None) -> str:
    """Return an installed solver name following :data:`SOLVER_PRIORITY`."""

    installed = {solver.upper() for solver in cp.installed_solvers()}
    if preferred:
        candidate = preferred.upper()
        if candidate in installed:
            return candidate
        logger.warning("Solver %s not installed; falling back to the default priority", candidate)
    for solver in SOLVER_PRIORITY:
        if solver in installed:
            return solver
    if installed:
        return sorted(installed)[0]
    raise RuntimeError("No CVXPy solver available. Install CLARABEL, ECOS or SCS.")


def solve_problem(
    problem: cp.Problem,
    *,
    solver: str | None = None,
    solver_kwargs: Mapping[str, Any] | None = None,
) -> SolverSummary:
    """Solve ``problem`` and return a structured summary."""

    chosen_solver = select_solver(solver)
    kwargs = dict(solver_kwargs or {})

    start = time.perf_counter()
    problem.solve(solver=chosen_solver, **kwargs)
    runtime = time.perf_counter() - start

    status = problem.status or cp.UNKNOWN
    primal = getattr(problem, "primal_residual", None)
    dual = getattr(problem, "dual_residual", None)

    summary = SolverSummary(
        status=status,
        solver=chosen_solver,
        value=float(problem.value) if problem.value is not None else float("nan"),
        runtime=float(runtime),
        primal_residual=float(primal) if primal is not None else None,
        dual_residual=float(dual) if dual is not None else None,
    )
    logger.debug(
        "Solver %s finished with status %s in %.3fs (value=%.6g)",
        summary.solver,
        summary.status,
        summary.runtime,
        summary.value,
    )
    return summary


def require_optimal(summary: SolverSummary, problem_name: str) -> None:
    """Raise :class:`CombinationSolverError` unless ``summary`` is optimal."""

    if not summary.is_optimal():
        raise CombinationSolverError(
            f"{problem_name} did not converge: solver {summary.solver} returned {summary.status}",
            summary=summary,
        )
    if summary.status == cp.OPTIMAL_INACCURATE:
        logger.warning("%s solved inaccurately by %s", problem_name, summary.solver)
