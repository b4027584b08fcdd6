"""Block bootstrap strategies.

Both strategies resample whole blocks of consecutive rows so that short-term
dependence inside a block survives. :class:`ResampleSBB` draws blocks of
geometric length from anywhere in the sample (Politis & Romano), while
:class:`ResampleGSBB` only lets a block starting at row ``t`` be replaced by a
block starting ``d * j`` rows away, which keeps the seasonal position of
every observation (Dudek, Leśkow, Paparoditis & Politis, 2013).
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from inflation_eval.config.constants import MONTHS_IN_YEAR
from inflation_eval.data import Panel
from inflation_eval.exceptions import ResamplingConfigError

from .base import ResamplingStrategy
from .seasonal import monthavg

__all__ = ["ResampleGSBB", "ResampleSBB", "gsbb_candidates", "stationary_indices"]


def stationary_indices(
    n_obs: int,
    expected_l: int,
    rng: np.random.Generator,
    size: int | None = None,
) -> np.ndarray:
    """Row indices of one stationary bootstrap draw.

    A new block starts with probability ``1 / expected_l``; otherwise the next
    row of the current block is taken, wrapping around the end of the sample.
    ``expected_l <= 1`` reduces to the IID bootstrap.
    """

    size = n_obs if size is None else int(size)
    if expected_l <= 1:
        return rng.integers(0, n_obs, size=size)

    p = 1.0 / expected_l
    indices = np.empty(size, dtype=int)
    for n in range(size):
        if n == 0 or rng.random() < p:
            indices[n] = rng.integers(0, n_obs)
        else:
            indices[n] = (indices[n - 1] + 1) % n_obs
    return indices


@dataclass(frozen=True)
class ResampleSBB(ResamplingStrategy):
    """Stationary block bootstrap on the residuals around each item's mean."""

    expected_l: int

    def __post_init__(self) -> None:
        if int(self.expected_l) <= 0:
            raise ResamplingConfigError("expected_l must be positive")

    @property
    def name(self) -> str:
        return f"Stationary block bootstrap with expected block {self.expected_l}"

    @property
    def tag(self) -> str:
        return f"SBB-{self.expected_l}"

    def resample_matrix(self, v: np.ndarray, rng: np.random.Generator) -> np.ndarray:
        avg = v.mean(axis=0, keepdims=True)
        inds = stationary_indices(v.shape[0], int(self.expected_l), rng)
        return avg + (v - avg)[inds, :]

    def population_panel(self, panel: Panel) -> Panel:
        return panel.with_values(monthavg(panel.v))


def gsbb_candidates(
    n_obs: int, blocklength: int, seasonality: int
) -> list[tuple[int, int, np.ndarray]]:
    """Admissible block starts for every block of a GSBB draw.

    Returns one ``(t, length, starts)`` triple per block: the block covers
    rows ``t:t + length`` of the output and may be copied from any
    ``s:s + length`` with ``s`` in ``starts``.
    """

    blocks = []
    for t in range(0, n_obs, blocklength):
        length = min(blocklength, n_obs - t)
        lower = t - seasonality * (t // seasonality)
        starts = np.arange(lower, n_obs - length + 1, seasonality)
        blocks.append((t, length, starts))
    return blocks


@dataclass(frozen=True)
class ResampleGSBB(ResamplingStrategy):
    """Generalized seasonal block bootstrap, preserving the row count."""

    blocklength: int = 25
    seasonality: int = MONTHS_IN_YEAR

    def __post_init__(self) -> None:
        if self.blocklength <= 0:
            raise ResamplingConfigError("blocklength must be positive")
        if self.seasonality <= 0:
            raise ResamplingConfigError("seasonality must be positive")

    @property
    def name(self) -> str:
        return f"Seasonal block bootstrap with block size {self.blocklength}"

    @property
    def tag(self) -> str:
        return f"GSBB-{self.blocklength}"

    def resample_matrix(self, v: np.ndarray, rng: np.random.Generator) -> np.ndarray:
        out = np.empty_like(v, dtype=float)
        for t, length, starts in gsbb_candidates(v.shape[0], self.blocklength, self.seasonality):
            s = int(starts[rng.integers(0, starts.size)])
            out[t : t + length] = v[s : s + length]
        return out

    def population_panel(self, panel: Panel) -> Panel:
        v = panel.v
        out = np.empty_like(v, dtype=float)
        for t, length, starts in gsbb_candidates(v.shape[0], self.blocklength, self.seasonality):
            out[t : t + length] = np.mean([v[s : s + length] for s in starts], axis=0)
        return panel.with_values(out)
