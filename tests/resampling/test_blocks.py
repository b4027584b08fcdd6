from __future__ import annotations

import numpy as np
import pytest

from inflation_eval.data import Panel
from inflation_eval.exceptions import ResamplingConfigError
from inflation_eval.resampling import (
    ResampleGSBB,
    ResampleSBB,
    ResampleSeasonalIID,
    ResampleTrended,
    gsbb_candidates,
    stationary_indices,
    trended_probabilities,
)


def test_stationary_indices_stay_in_range(rng):
    idx = stationary_indices(30, 5, rng, size=200)
    assert idx.shape == (200,)
    assert idx.min() >= 0 and idx.max() < 30


def test_sbb_keeps_shape_and_column_mean(panel, rng):
    strategy = ResampleSBB(6)
    out = strategy(panel, rng)
    assert out.v.shape == panel.v.shape
    assert strategy.tag == "SBB-6"
    with pytest.raises(ResamplingConfigError):
        ResampleSBB(0)


def test_gsbb_blocks_respect_seasonality():
    for t, length, starts in gsbb_candidates(60, 25, 12):
        assert np.all((starts - t) % 12 == 0)
        assert np.all(starts + length <= 60)


def test_gsbb_keeps_seasonal_position(rng):
    months = np.tile(np.arange(12.0), 6)
    panel = Panel(months, [1.0], "2000-01")
    out = ResampleGSBB(blocklength=25)(panel, rng)
    np.testing.assert_array_equal(out.v[:, 0], months)
    assert ResampleGSBB(36).tag == "GSBB-36"


def test_gsbb_population_of_constant_panel_is_constant(make_panel):
    panel = make_panel(periods=48, items=2)
    flat = panel.with_values(np.ones_like(panel.v))
    pop = ResampleGSBB().population(flat)
    np.testing.assert_allclose(pop.v, 1.0)


def test_trended_probabilities_are_row_stochastic():
    probs = trended_probabilities(5, 0.5)
    np.testing.assert_allclose(probs.sum(axis=1), 1.0)
    assert probs[0, 0] > probs[0, 4]
    np.testing.assert_allclose(trended_probabilities(4, 1.0), 0.25)


def test_trended_with_p_one_matches_seasonal_population(series):
    trended = ResampleTrended([1.0, 1.0]).population(series)
    seasonal = ResampleSeasonalIID().population(series)
    for a, b in zip(trended, seasonal):
        np.testing.assert_allclose(a.v, b.v)


def test_trended_validation(series, rng):
    with pytest.raises(ResamplingConfigError):
        ResampleTrended([0.0])
    with pytest.raises(ResamplingConfigError, match="must match number of bases"):
        ResampleTrended([0.5])(series, rng)
    out = ResampleTrended([0.5, 0.8])(series, rng)
    assert out.panel_periods == series.panel_periods
