"""Dynamic random-walk trend generated by rejection sampling.

:class:`TrendDynamicRW` draws an AR(1) path ``y_t = phi * y_{t-1} + sigma * e_t``
(``y_1 = sigma * e_1``) until a caller supplied predicate accepts it; the
factors are ``exp(y)``. Generation happens once, at construction, with the
generator passed in, so a family of folds is reproducible from one seed.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

import numpy as np

from inflation_eval.config.constants import (
    DEFAULT_SEED,
    DYNAMIC_RW_ATOL,
    DYNAMIC_RW_LENGTH,
    DYNAMIC_RW_NFOLDS,
    DYNAMIC_RW_PHI,
    DYNAMIC_RW_SIGMA,
)
from inflation_eval.exceptions import TrendConfigError
from inflation_eval.utils.seed import rng_factory

from .base import ArrayTrend

__all__ = ["TrendDynamicRW", "create_dynamic_rw_folds", "generate_ar1", "zeromean_validation"]

logger = logging.getLogger(__name__)

Predicate = Callable[[np.ndarray], bool]


def zeromean_validation(y: np.ndarray, atol: float = DYNAMIC_RW_ATOL) -> bool:
    """Accept paths whose mean is within ``atol`` of zero."""

    return bool(abs(np.mean(y)) <= atol)


def generate_ar1(L: int, phi: float, sigma: float, rng: np.random.Generator) -> np.ndarray:
    shocks = rng.standard_normal(L) * sigma
    y = np.empty(L, dtype=float)
    y[0] = shocks[0]
    for t in range(1, L):
        y[t] = phi * y[t - 1] + shocks[t]
    return y


class TrendDynamicRW(ArrayTrend):
    """AR(1) trend accepted by ``predicate``.

    Parameters
    ----------
    L, phi, sigma:
        Path length, autocorrelation and shock scale.
    predicate:
        Boolean test over the raw (log) path.
    rng:
        Generator consumed by the rejection loop.
    max_tries:
        Maximum number of draws. ``None`` keeps drawing until the predicate
        holds, which never ends if it has zero acceptance probability.

    Raises
    ------
    TrendConfigError
        For ``L <= 0``, ``sigma < 0`` or when ``max_tries`` draws are rejected.
    """

    def __init__(
        self,
        L: int = DYNAMIC_RW_LENGTH,
        phi: float = DYNAMIC_RW_PHI,
        sigma: float = DYNAMIC_RW_SIGMA,
        predicate: Predicate = zeromean_validation,
        rng: Optional[np.random.Generator] = None,
        max_tries: Optional[int] = None,
    ) -> None:
        if L <= 0:
            raise TrendConfigError("L must be positive")
        if sigma < 0:
            raise TrendConfigError("sigma must be non-negative")
        if max_tries is not None and max_tries <= 0:
            raise TrendConfigError("max_tries must be positive")
        self.L = int(L)
        self.phi = float(phi)
        self.sigma = float(sigma)
        self.predicate = predicate
        rng = rng_factory() if rng is None else rng

        tries = 0
        while max_tries is None or tries < max_tries:
            tries += 1
            y = generate_ar1(self.L, self.phi, self.sigma, rng)
            if predicate(y):
                break
        else:
            raise TrendConfigError(
                f"No AR(1) path satisfied the predicate after {max_tries} tries"
            )
        logger.debug("Dynamic RW trend accepted after %d tries", tries)
        self.tries = tries
        self._set_trend(np.exp(y))

    @property
    def name(self) -> str:
        return f"Dynamic Random Walk Trend (phi={self.phi}, sigma={self.sigma})"

    @property
    def tag(self) -> str:
        return "DRW"


def create_dynamic_rw_folds(
    nfolds: int = DYNAMIC_RW_NFOLDS,
    L: int = DYNAMIC_RW_LENGTH,
    phi: float = DYNAMIC_RW_PHI,
    sigma: float = DYNAMIC_RW_SIGMA,
    predicate: Predicate = zeromean_validation,
    seed: int = DEFAULT_SEED,
    max_tries: Optional[int] = None,
) -> list[TrendDynamicRW]:
    """Build ``nfolds`` trends, fold ``i`` (1-based) generated from ``seed + i``."""

    if nfolds <= 0:
        raise TrendConfigError("nfolds must be positive")
    return [
        TrendDynamicRW(L, phi, sigma, predicate, rng=rng_factory(seed + i), max_tries=max_tries)
        for i in range(1, nfolds + 1)
    ]
