"""Scoring of simulated trajectories against the population trajectory."""

from .metrics import (
    SHORT_METRICS,
    combination_metrics,
    eval_metrics,
    huber_loss,
    trajectory_correlations,
)

__all__ = [
    "SHORT_METRICS",
    "combination_metrics",
    "eval_metrics",
    "huber_loss",
    "trajectory_correlations",
]
