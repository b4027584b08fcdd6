from __future__ import annotations

import numpy as np
import pytest

from inflation_eval.exceptions import TrendConfigError
from inflation_eval.trends import (
    TrendDynamicRW,
    create_dynamic_rw_folds,
    generate_ar1,
    zeromean_validation,
)
from inflation_eval.utils.seed import rng_factory


def test_generate_ar1_recursion():
    y = generate_ar1(5, 0.5, 1.0, np.random.default_rng(3))
    e = np.random.default_rng(3).standard_normal(5)
    expected = [e[0]]
    for t in range(1, 5):
        expected.append(0.5 * expected[-1] + e[t])
    np.testing.assert_allclose(y, expected)


def test_accepted_path_satisfies_predicate():
    trend = TrendDynamicRW(L=120, rng=rng_factory(1))
    assert zeromean_validation(np.log(trend.trend))
    assert len(trend) == 120
    assert trend.tries >= 1
    assert trend.tag == "DRW"


def test_same_generator_seed_same_trend():
    a = TrendDynamicRW(L=60, rng=rng_factory(42))
    b = TrendDynamicRW(L=60, rng=rng_factory(42))
    np.testing.assert_array_equal(a.trend, b.trend)


def test_capped_rejection_raises():
    with pytest.raises(TrendConfigError, match="after 3 tries"):
        TrendDynamicRW(L=12, predicate=lambda y: False, rng=rng_factory(0), max_tries=3)


def test_invalid_parameters():
    with pytest.raises(TrendConfigError):
        TrendDynamicRW(L=0)
    with pytest.raises(TrendConfigError):
        TrendDynamicRW(L=12, sigma=-1.0)


def test_folds_are_seeded_individually():
    folds = create_dynamic_rw_folds(nfolds=3, L=48, seed=10)
    assert len(folds) == 3
    second = TrendDynamicRW(L=48, rng=rng_factory(12))
    np.testing.assert_array_equal(folds[1].trend, second.trend)
    assert not np.array_equal(folds[0].trend, folds[1].trend)
