"""Synthetic base-change bootstrap.

When a CPI base is revised, items of the new basket have few observations.
A :class:`VarietyMatchDistribution` matches one item of the new (``actual``)
vintage with an item of the ``prior`` vintage for one calendar month and
builds a weighted empirical distribution over the pooled observations.
:class:`ResampleSynthetic` fills a panel with independent draws from an array
of such distributions indexed ``[row, item]``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence, Union

import numpy as np
from scipy import stats

from inflation_eval.config.constants import MONTHS_IN_YEAR, SYNTHETIC_A, SYNTHETIC_EPS
from inflation_eval.data import Panel, PanelSeries
from inflation_eval.exceptions import MatchingArrayError, UnsupportedInputError

from .base import ResamplingStrategy

__all__ = [
    "ActualWeighing",
    "PriorWeighing",
    "ResampleSynthetic",
    "SyntheticWeighing",
    "VarietyMatchDistribution",
    "WEIGHINGS",
    "make_match_array",
]

logger = logging.getLogger(__name__)

WeighingFunction = Callable[[np.ndarray, np.ndarray], np.ndarray]


# Weighing regimes ------------------------------------------------------------


@dataclass(frozen=True)
class SyntheticWeighing:
    """Normal density of the distance to the mean of the ``actual`` values.

    The scale is ``a * std(all values) + eps``, so values close to the new
    vintage's mean are favoured while prior values still carry weight.
    """

    a: float = SYNTHETIC_A
    eps: float = SYNTHETIC_EPS

    def __call__(self, values: np.ndarray, actual_mask: np.ndarray) -> np.ndarray:
        spread = np.std(values, ddof=1) if values.size > 1 else 0.0
        scale = self.a * spread + self.eps
        center = values[actual_mask].mean()
        return stats.norm.pdf(np.abs(values - center), loc=0.0, scale=scale)


@dataclass(frozen=True)
class PriorWeighing:
    """Sample from the prior vintage only."""

    def __call__(self, values: np.ndarray, actual_mask: np.ndarray) -> np.ndarray:
        return (~actual_mask).astype(float)


@dataclass(frozen=True)
class ActualWeighing:
    """Sample from the actual vintage only."""

    def __call__(self, values: np.ndarray, actual_mask: np.ndarray) -> np.ndarray:
        return actual_mask.astype(float)


WEIGHINGS: dict[str, WeighingFunction] = {
    "synthetic": SyntheticWeighing(),
    "prior": PriorWeighing(),
    "actual": ActualWeighing(),
}


def _resolve_weighing(weighing: Union[str, WeighingFunction]) -> WeighingFunction:
    if callable(weighing):
        return weighing
    try:
        return WEIGHINGS[str(weighing).lower()]
    except KeyError as exc:
        raise ValueError(
            f"Unknown weighing regime '{weighing}'. Use one of: {', '.join(WEIGHINGS)}"
        ) from exc


# Distribution ----------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class VarietyMatchDistribution:
    """Weighted empirical distribution of one (item, calendar month) pair.

    Build it with :meth:`from_observations`. ``vk`` holds the pooled values
    sorted ascending, ``actual_mask`` flags those coming from the actual
    vintage and ``weights`` are probabilities summing to one.
    """

    vk: np.ndarray
    actual_mask: np.ndarray
    weights: np.ndarray
    expected_value: float
    month: int
    prior_id: Optional[str] = None
    prior_name: Optional[str] = None
    actual_id: Optional[str] = None
    actual_name: Optional[str] = None
    _cdf: np.ndarray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_cdf", np.cumsum(self.weights))

    @classmethod
    def from_observations(
        cls,
        prior: Sequence[float],
        actual: Sequence[float],
        month: int,
        weighing: Union[str, WeighingFunction] = "synthetic",
        *,
        prior_id: Optional[str] = None,
        prior_name: Optional[str] = None,
        actual_id: Optional[str] = None,
        actual_name: Optional[str] = None,
    ) -> "VarietyMatchDistribution":
        prior = np.asarray(prior, dtype=float).reshape(-1)
        actual = np.asarray(actual, dtype=float).reshape(-1)
        if prior.size == 0 or actual.size == 0:
            raise ValueError("Prior or actual distributions are empty")
        if not 1 <= int(month) <= MONTHS_IN_YEAR:
            raise ValueError(f"Incorrect month specified: {month}")

        pooled = np.concatenate([prior, actual])
        provenance = np.concatenate([np.zeros(prior.size, bool), np.ones(actual.size, bool)])
        order = np.argsort(pooled, kind="stable")
        vk = pooled[order]
        mask = provenance[order]

        raw = np.asarray(_resolve_weighing(weighing)(vk, mask), dtype=float)
        if raw.shape != vk.shape:
            raise ValueError("Weighing function must return one weight per observation")
        total = raw.sum()
        if not np.isfinite(total) or total <= 0:
            logger.warning(
                "Degenerate weights for month %d (sum=%s); falling back to uniform weights",
                month,
                total,
            )
            raw = np.ones_like(vk)
            total = raw.sum()
        weights = raw / total
        expected = float(np.dot(weights, vk))

        for array in (vk, mask, weights):
            array.setflags(write=False)
        return cls(
            vk=vk,
            actual_mask=mask,
            weights=weights,
            expected_value=expected,
            month=int(month),
            prior_id=prior_id,
            prior_name=prior_name,
            actual_id=actual_id,
            actual_name=actual_name,
        )

    # Statistics --------------------------------------------------------- #
    def __len__(self) -> int:
        return int(self.vk.size)

    @property
    def prior_values(self) -> np.ndarray:
        return self.vk[~self.actual_mask]

    @property
    def actual_values(self) -> np.ndarray:
        return self.vk[self.actual_mask]

    def mean(self) -> float:
        return self.expected_value

    def std(self) -> float:
        """Weighted standard deviation with the reliability-weights correction."""

        denom = 1.0 - float(np.sum(self.weights**2))
        if denom <= 0:
            return 0.0
        var = float(np.dot(self.weights, (self.vk - self.expected_value) ** 2)) / denom
        return float(np.sqrt(var))

    # Sampling ----------------------------------------------------------- #
    def _draw(self, rng: np.random.Generator, size) -> np.ndarray:
        u = rng.random(size)
        idx = np.searchsorted(self._cdf, u, side="right")
        return self.vk[np.minimum(idx, self.vk.size - 1)]

    def sample(
        self,
        rng: Optional[np.random.Generator] = None,
        size: Optional[int] = None,
    ) -> Union[float, np.ndarray]:
        """Draw one value (``size=None``) or ``size`` values with replacement."""

        rng = np.random.default_rng() if rng is None else rng
        if size is None:
            return float(self._draw(rng, 1)[0])
        return self._draw(rng, int(size))

    def sample_into(self, out: np.ndarray, rng: Optional[np.random.Generator] = None) -> np.ndarray:
        """Fill ``out`` in place with independent draws."""

        rng = np.random.default_rng() if rng is None else rng
        out[...] = self._draw(rng, out.shape)
        return out

    def __repr__(self) -> str:
        n_prior = int((~self.actual_mask).sum())
        return (
            f"VarietyMatchDistribution(month={self.month}, prior={n_prior}, "
            f"actual={len(self) - n_prior}, mean={self.expected_value:.4g})"
        )


def make_match_array(
    prior: Panel,
    actual: Panel,
    item_map: Optional[Sequence[int]] = None,
    weighing: Union[str, WeighingFunction] = "synthetic",
) -> np.ndarray:
    """Build a ``(12, items)`` matching array from two adjacent vintages.

    Row ``r`` corresponds to the calendar month of ``actual``'s row ``r``;
    item ``j`` of ``actual`` is matched with item ``item_map[j]`` of ``prior``
    (the same position when ``item_map`` is omitted).
    """

    if item_map is None:
        if prior.items < actual.items:
            raise MatchingArrayError(
                "item_map is required when the prior vintage has fewer items"
            )
        item_map = range(actual.items)
    item_map = list(item_map)
    if len(item_map) != actual.items:
        raise MatchingArrayError("item_map needs one prior item per actual item")

    first_month = actual.start.month
    matching = np.empty((MONTHS_IN_YEAR, actual.items), dtype=object)
    for r in range(MONTHS_IN_YEAR):
        month = (first_month - 1 + r) % MONTHS_IN_YEAR + 1
        prior_rows = prior.month_rows(month)
        actual_rows = actual.month_rows(month)
        for j, i in enumerate(item_map):
            matching[r, j] = VarietyMatchDistribution.from_observations(
                prior.v[prior_rows, i], actual.v[actual_rows, j], month, weighing
            )
    return matching


# Strategy --------------------------------------------------------------------


class ResampleSynthetic(ResamplingStrategy):
    """Fill a panel with draws from its matching distributions.

    Output row ``t`` and item ``j`` is an independent draw from
    ``matching[t % R, j]`` where ``R`` is the number of matching rows. Only
    single panels are supported; the matching array is specific to one base.

    Parameters
    ----------
    panel:
        Panel the matching array was built for; used for validation.
    matching:
        ``(R, items)`` array of :class:`VarietyMatchDistribution` whose rows
        follow consecutive calendar months, starting at the month of the
        panel's first date. ``R`` must be at least 12 or at least the panel
        length.
    extended_periods:
        Output length; the panel length when omitted.
    """

    def __init__(
        self,
        panel: Panel,
        matching: np.ndarray,
        extended_periods: Optional[int] = None,
    ) -> None:
        matching = np.asarray(matching, dtype=object)
        if matching.ndim != 2:
            raise MatchingArrayError("Matching array must be 2-D (months x items)")
        rows, items = matching.shape
        if rows < MONTHS_IN_YEAR and rows < panel.periods:
            raise MatchingArrayError(
                f"Matching array has {rows} rows; need at least {MONTHS_IN_YEAR} "
                f"or the panel length ({panel.periods})"
            )
        if items != panel.items:
            raise MatchingArrayError(
                f"Matching array has {items} items but the panel has {panel.items}"
            )
        for r in range(rows):
            months = {dist.month for dist in matching[r]}
            if len(months) != 1:
                raise MatchingArrayError(f"Row {r} of the matching array mixes months {sorted(months)}")
        start_month = matching[0, 0].month
        for r in range(rows):
            expected = (start_month - 1 + r) % MONTHS_IN_YEAR + 1
            if matching[r, 0].month != expected:
                raise MatchingArrayError(
                    f"Matching array rows do not follow consecutive months at row {r}"
                )
        if start_month != panel.start.month:
            raise MatchingArrayError(
                f"Matching array starts in month {start_month} but the panel starts "
                f"in month {panel.start.month}"
            )

        periods = panel.periods if extended_periods is None else int(extended_periods)
        if periods <= 0:
            raise MatchingArrayError("extended_periods must be positive")
        if periods > rows and rows % MONTHS_IN_YEAR != 0:
            raise MatchingArrayError(
                f"Cannot extend to {periods} periods with {rows} matching rows "
                "without breaking the month alignment"
            )

        self.matching = matching
        self.extended_periods = periods
        self.items = items
        self.start_month = start_month
        self._expected = np.vectorize(lambda d: d.expected_value, otypes=[float])(matching)

    @property
    def name(self) -> str:
        return "Synthetic base-change bootstrap by variety matching"

    @property
    def tag(self) -> str:
        return "SYNTH"

    def _check_panel(self, panel: Panel) -> None:
        if panel.items != self.items:
            raise UnsupportedInputError(
                f"Panel has {panel.items} items but the matching array has {self.items}"
            )
        if panel.start.month != self.start_month:
            raise UnsupportedInputError(
                f"Panel starts in month {panel.start.month} but the matching array "
                f"starts in month {self.start_month}"
            )

    def resample_matrix(self, v: np.ndarray, rng: np.random.Generator) -> np.ndarray:
        rows = self.matching.shape[0]
        out = np.empty((self.extended_periods, self.items), dtype=float)
        for r in range(min(rows, self.extended_periods)):
            target = np.arange(r, self.extended_periods, rows)
            for j in range(self.items):
                out[target, j] = self.matching[r, j].sample(rng, target.size)
        return out

    def resample_panel(self, panel: Panel, rng: np.random.Generator) -> Panel:
        self._check_panel(panel)
        return panel.with_values(self.resample_matrix(panel.v, rng))

    def resample_series(self, series: PanelSeries, rng: np.random.Generator) -> PanelSeries:
        raise UnsupportedInputError(
            "ResampleSynthetic applies to single panels only; wrap it in a ResampleMixture"
        )

    def population_panel(self, panel: Panel) -> Panel:
        self._check_panel(panel)
        rows = self.matching.shape[0]
        index = np.arange(self.extended_periods) % rows
        return panel.with_values(self._expected[index])

    def population_series(self, series: PanelSeries) -> PanelSeries:
        raise UnsupportedInputError(
            "ResampleSynthetic applies to single panels only; wrap it in a ResampleMixture"
        )
