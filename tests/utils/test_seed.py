from __future__ import annotations

import logging

import numpy as np

from inflation_eval.utils.seed import (
    MAX_SEED_VALUE,
    fold_seed,
    hash_seed_from_config,
    normalize_seed,
    register_seed_logging,
    replication_rng,
    rng_factory,
)


def test_normalize_seed():
    assert normalize_seed(5) == 5
    assert normalize_seed(-5) == 5
    assert normalize_seed(MAX_SEED_VALUE + 3) == 3


def test_replication_rng_uses_offset_seed():
    a = replication_rng(100, 3).standard_normal(4)
    b = rng_factory(103).standard_normal(4)
    np.testing.assert_array_equal(a, b)


def test_fold_seed_clears_trend_seeds():
    seeds = [fold_seed(10, i, 4) for i in range(1, 5)]
    assert seeds == [15, 16, 17, 18]
    assert not set(seeds) & {10 + i for i in range(1, 5)}


def test_hash_seed_is_stable_and_order_free():
    a = hash_seed_from_config({"nsim": 10, "trend": "RW"})
    b = hash_seed_from_config({"trend": "RW", "nsim": 10})
    assert a == b
    assert 0 <= a < MAX_SEED_VALUE
    assert a != hash_seed_from_config({"nsim": 11, "trend": "RW"})


def test_register_seed_logging(caplog_info):
    register_seed_logging(logging.getLogger("inflation_eval.test"), 42)
    assert caplog_info.records[0].seed == 42
