"""Error taxonomy shared by the resampling, trend and combination layers."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from inflation_eval.combination.solver_utils import SolverSummary

__all__ = [
    "CombinationSolverError",
    "MatchingArrayError",
    "ResamplingConfigError",
    "TrendConfigError",
    "UnsupportedInputError",
]


class ResamplingConfigError(ValueError):
    """Raised when a resampling strategy is configured inconsistently with its data."""


class MatchingArrayError(ResamplingConfigError):
    """Raised when a variety matching array cannot be aligned with a panel."""


class TrendConfigError(ValueError):
    """Raised for invalid trend parameters or exhausted rejection sampling."""


class UnsupportedInputError(TypeError):
    """Raised when a strategy is applied to an input shape it does not support."""


class CombinationSolverError(RuntimeError):
    """Raised when a convex combination subproblem does not reach optimality."""

    def __init__(self, message: str, summary: "SolverSummary | None" = None) -> None:
        super().__init__(message)
        self.summary = summary
