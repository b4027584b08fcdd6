from __future__ import annotations

import logging

import numpy as np
import pytest

from inflation_eval.data import Panel, PanelSeries
from inflation_eval.exceptions import MatchingArrayError, UnsupportedInputError
from inflation_eval.resampling import (
    ResampleMixture,
    ResampleSeasonalIID,
    ResampleSynthetic,
    SyntheticWeighing,
    VarietyMatchDistribution,
    make_match_array,
)

PRIOR = [0.01, 0.02, 0.03, 0.015]
ACTUAL = [0.10, 0.12]


@pytest.mark.parametrize("weighing", ["synthetic", "prior", "actual"])
def test_weights_are_normalised(weighing):
    dist = VarietyMatchDistribution.from_observations(PRIOR, ACTUAL, 3, weighing)
    assert dist.weights.sum() == pytest.approx(1.0, abs=1e-6)
    assert len(dist) == 6
    assert np.all(np.diff(dist.vk) >= 0)


def test_regime_isolation(rng):
    prior = VarietyMatchDistribution.from_observations(PRIOR, ACTUAL, 1, "prior")
    actual = VarietyMatchDistribution.from_observations(PRIOR, ACTUAL, 1, "actual")
    mixed = VarietyMatchDistribution.from_observations(PRIOR, ACTUAL, 1, "synthetic")

    assert set(prior.sample(rng, 500)) <= set(PRIOR)
    assert set(actual.sample(rng, 500)) <= set(ACTUAL)
    assert set(mixed.sample(rng, 500)) <= set(PRIOR) | set(ACTUAL)


def test_expected_value_and_std():
    dist = VarietyMatchDistribution.from_observations([1.0, 3.0], [5.0], 6, "prior")
    assert dist.mean() == pytest.approx(2.0)
    # reliability weights (1/2, 1/2): var = 1 / (1 - 1/2)
    assert dist.std() == pytest.approx(np.sqrt(2.0))
    np.testing.assert_array_equal(dist.prior_values, [1.0, 3.0])
    np.testing.assert_array_equal(dist.actual_values, [5.0])


def test_synthetic_weighing_favours_actual_mean():
    values = np.array([0.0, 1.0, 10.0])
    weights = SyntheticWeighing()(values, np.array([False, False, True]))
    assert weights[2] > weights[1] > weights[0]


def test_degenerate_weights_fall_back_to_uniform(caplog):
    caplog.set_level(logging.WARNING)
    dist = VarietyMatchDistribution.from_observations(
        PRIOR, ACTUAL, 2, lambda values, mask: np.zeros_like(values)
    )
    np.testing.assert_allclose(dist.weights, 1 / 6)
    assert "uniform" in caplog.text


@pytest.mark.parametrize(
    "prior, actual, month",
    [([], ACTUAL, 1), (PRIOR, [], 1), (PRIOR, ACTUAL, 0), (PRIOR, ACTUAL, 13)],
)
def test_invalid_observations(prior, actual, month):
    with pytest.raises(ValueError):
        VarietyMatchDistribution.from_observations(prior, actual, month)


def test_sample_into_fills_buffer(rng):
    dist = VarietyMatchDistribution.from_observations(PRIOR, ACTUAL, 1, "actual")
    out = np.zeros((3, 4))
    dist.sample_into(out, rng)
    assert set(out.ravel()) <= set(ACTUAL)
    assert isinstance(dist.sample(rng), float)


@pytest.fixture
def vintages(make_panel):
    prior = make_panel(periods=48, items=2, start="1998-01", seed=5)
    actual = make_panel(periods=24, items=2, start="2002-01", seed=6)
    return prior, actual


def test_match_array_rows_follow_months(vintages):
    prior, actual = vintages
    matching = make_match_array(prior, actual, weighing="actual")
    assert matching.shape == (12, 2)
    assert [d.month for d in matching[:, 0]] == list(range(1, 13))


def test_synthetic_resample_draws_from_matching(vintages, rng):
    prior, actual = vintages
    matching = make_match_array(prior, actual, weighing="actual")
    strategy = ResampleSynthetic(actual, matching)
    out = strategy(actual, rng)
    assert out.periods == actual.periods
    for t in range(out.periods):
        for j in range(out.items):
            assert out.v[t, j] in set(matching[t % 12, j].vk)
            assert out.v[t, j] in set(actual.v[t % 12 :: 12, j])
    assert strategy.tag == "SYNTH"


def test_synthetic_extension_and_population(vintages, rng):
    prior, actual = vintages
    matching = make_match_array(prior, actual)
    strategy = ResampleSynthetic(actual, matching, extended_periods=36)
    assert strategy(actual, rng).periods == 36
    pop = strategy.population(actual)
    assert pop.periods == 36
    np.testing.assert_allclose(pop.v[0], [d.expected_value for d in matching[0]])
    np.testing.assert_allclose(pop.v[12], pop.v[0])


def test_synthetic_validation(vintages, make_panel, rng):
    prior, actual = vintages
    matching = make_match_array(prior, actual)

    with pytest.raises(MatchingArrayError, match="items"):
        ResampleSynthetic(make_panel(periods=24, items=3, start="2002-01"), matching)
    with pytest.raises(MatchingArrayError, match="month"):
        ResampleSynthetic(make_panel(periods=24, items=2, start="2002-03"), matching)
    with pytest.raises(MatchingArrayError):
        ResampleSynthetic(actual, matching[:6])

    strategy = ResampleSynthetic(actual, matching)
    with pytest.raises(UnsupportedInputError):
        strategy(PanelSeries.of(actual), rng)
    with pytest.raises(UnsupportedInputError):
        strategy(make_panel(periods=24, items=2, start="2005-06"), rng)


def test_synthetic_inside_mixture(vintages, make_panel, rng):
    prior, actual = vintages
    matching = make_match_array(prior, actual)
    first = make_panel(periods=24, items=3, start="2000-01", seed=9)
    series = PanelSeries.of(first, actual)

    mixture = ResampleMixture([ResampleSeasonalIID(), ResampleSynthetic(actual, matching)])
    out = mixture(series, rng)
    assert out.panel_periods == (24, 24)
    assert isinstance(out[1], Panel)
