from __future__ import annotations

from types import SimpleNamespace

import numpy as np
import pandas as pd
import pytest

from inflation_eval.combination import (
    add_ones,
    combination_weights,
    crossvalidate,
    cv_key,
)
from inflation_eval.simulation import EvalPeriod


@pytest.fixture
def crossvaldata(rng):
    dates = pd.period_range("2001-01", "2006-12", freq="M")
    T, K = len(dates), 10
    pi = 2 + np.cos(np.arange(T) / 5)
    exact = np.repeat(pi[:, None], K, axis=1)
    noisy = pi[:, None] + rng.normal(0.5, 0.5, (T, K))
    X = np.stack([exact, noisy], axis=1)

    config = SimpleNamespace(
        evalperiods=(
            EvalPeriod("2005-01", "2005-12", "y05"),
            EvalPeriod("2006-01", "2006-12", "y06"),
        )
    )
    data = {"config": config}
    for cutoff in ("2004-12", "2005-12", "2006-12"):
        n = int(np.sum(dates <= pd.Period(cutoff, freq="M")))
        data[cv_key("infl", cutoff)] = X[:n]
        data[cv_key("param", cutoff)] = pi[:n]
        data[cv_key("dates", cutoff)] = dates[:n]
    return data


def test_cv_key_uses_two_digit_year():
    assert cv_key("infl", "2019-12") == "infl_19"
    assert cv_key("param", pd.Period("2005-01", freq="M")) == "param_05"


def test_add_ones_prepends_intercept():
    X = np.zeros((4, 2, 3))
    Xc = add_ones(X)
    assert Xc.shape == (4, 3, 3)
    np.testing.assert_array_equal(Xc[:, 0, :], 1.0)


def test_crossvalidate_scores_each_fold(crossvaldata):
    results = crossvalidate(
        lambda X, pi: np.array([1.0, 0.0]),
        crossvaldata,
        metrics=("mse", "corr", "unknown"),
        log_weights=False,
    )
    assert results.shape == (2, 3)
    np.testing.assert_allclose(results[:, 0], 0.0, atol=1e-12)
    np.testing.assert_allclose(results[:, 1], 1.0)
    np.testing.assert_array_equal(results[:, 2], 0.0)


def test_crossvalidate_trains_from_start_date(crossvaldata):
    seen = []

    def weights(X, pi):
        seen.append(X.shape)
        return combination_weights(X, pi)

    results, w = crossvalidate(
        weights,
        crossvaldata,
        train_start_date="2002-01",
        add_intercept=True,
        return_weights=True,
    )
    assert seen == [(36, 3, 10), (48, 3, 10)]
    assert w.shape == (3,)
    assert results[:, 0] == pytest.approx([0.0, 0.0], abs=1e-8)


def test_crossvalidate_component_mask(crossvaldata):
    results = crossvalidate(
        lambda X, pi: np.ones(X.shape[1]),
        crossvaldata,
        components_mask=[1],
        log_weights=False,
    )
    assert np.all(results[:, 0] > 0)
