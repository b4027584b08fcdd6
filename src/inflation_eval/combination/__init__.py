"""Optimal linear combinations of inflation estimators."""

from .constrained import (
    absme_combination_weights,
    share_combination_weights,
    share_combination_weights_absme,
    share_combination_weights_corr,
    share_combination_weights_rmse,
)
from .cross_validation import add_ones, crossvalidate, cv_key
from .least_squares import (
    average_mats,
    combination_weights,
    elastic_combination_weights,
    lasso_combination_weights,
    proxl1norm,
    ridge_combination_weights,
)
from .metric import eval_combination, metric_combination_weights
from .solver_utils import SolverSummary, require_optimal, select_solver, solve_problem

__all__ = [
    "absme_combination_weights",
    "share_combination_weights",
    "share_combination_weights_absme",
    "share_combination_weights_corr",
    "share_combination_weights_rmse",
    "add_ones",
    "crossvalidate",
    "cv_key",
    "average_mats",
    "combination_weights",
    "elastic_combination_weights",
    "lasso_combination_weights",
    "proxl1norm",
    "ridge_combination_weights",
    "eval_combination",
    "metric_combination_weights",
    "SolverSummary",
    "require_optimal",
    "select_solver",
    "solve_problem",
]
