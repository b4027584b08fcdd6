from __future__ import annotations

import numpy as np
import pytest

from inflation_eval.data import Panel, PanelSeries
from inflation_eval.exceptions import ResamplingConfigError, UnsupportedInputError
from inflation_eval.resampling import (
    ResampleExtendedSVM,
    ResampleIdentity,
    ResampleSeasonalIID,
    monthavg,
    scramble_by_month,
)


def test_single_observation_per_slot_is_deterministic(rng):
    panel = Panel(np.arange(1.0, 13.0), [1.0], "2000-01")
    out = ResampleSeasonalIID()(panel, rng)
    np.testing.assert_array_equal(out.v[:, 0], np.arange(1.0, 13.0))


def test_resampled_values_stay_in_their_slot(panel, rng):
    out = ResampleSeasonalIID()(panel, rng)
    for slot in range(12):
        for j in range(panel.items):
            assert set(out.v[slot::12, j]) <= set(panel.v[slot::12, j])


def test_series_resampling_keeps_panel_layout(series, rng):
    out = ResampleSeasonalIID()(series, rng)
    assert out.panel_periods == series.panel_periods
    assert out.dates.equals(series.dates)


def test_same_seed_same_draw(series):
    strategy = ResampleSeasonalIID()
    a = strategy(series, np.random.default_rng(7))
    b = strategy(series, np.random.default_rng(7))
    for pa, pb in zip(a, b):
        np.testing.assert_array_equal(pa.v, pb.v)


def test_population_is_month_average():
    v = np.arange(24.0).reshape(24, 1)
    avg = monthavg(v)
    np.testing.assert_allclose(avg[:12, 0], np.arange(12.0) + 6.0)
    np.testing.assert_allclose(avg[12:, 0], avg[:12, 0])


def test_scramble_needs_every_slot(rng):
    with pytest.raises(ResamplingConfigError):
        scramble_by_month(np.zeros((5, 1)), rng, sample_periods=12)


def test_extended_lengths_per_panel(make_panel, rng):
    series = PanelSeries.of(
        make_panel(periods=120, start="2000-01", seed=1),
        make_panel(periods=96, start="2010-01", seed=2),
        make_panel(periods=36, start="2018-01", seed=3),
    )
    out = ResampleExtendedSVM([150, 180, 50])(series, rng)
    assert out.panel_periods == (150, 180, 50)

    scalar = ResampleExtendedSVM(150)(series, rng)
    assert scalar.panel_periods == (150, 150, 150)
    assert scalar[1].start == scalar[0].end + 1


def test_extended_resampling_preserves_seasonality(panel, rng):
    out = ResampleExtendedSVM(100)(panel, rng)
    assert out.periods == 100
    for slot in range(12):
        assert set(out.v[slot::12, 0]) <= set(panel.v[slot::12, 0])


def test_extended_rejects_length_mismatch(series, rng):
    with pytest.raises(ResamplingConfigError, match="same number of panels"):
        ResampleExtendedSVM([100, 100, 100])(series, rng)


def test_extended_rejects_non_positive_length():
    with pytest.raises(ResamplingConfigError):
        ResampleExtendedSVM([120, 0])


def test_identity_returns_input(series, rng):
    strategy = ResampleIdentity()
    assert strategy(series, rng) is series
    assert strategy.population(series) is series
    assert strategy.tag == "IDTY"


def test_unsupported_input(rng):
    with pytest.raises(UnsupportedInputError):
        ResampleSeasonalIID()(np.zeros((12, 2)), rng)


def test_population_function_is_a_value(series):
    transform = ResampleSeasonalIID().population_function()
    out = transform(series)
    np.testing.assert_allclose(out[0].v, monthavg(series[0].v))
