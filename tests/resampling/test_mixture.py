from __future__ import annotations

import numpy as np
import pytest

from inflation_eval.exceptions import ResamplingConfigError
from inflation_eval.resampling import (
    ResampleIdentity,
    ResampleMixture,
    ResampleSeasonalIID,
)


def test_identity_then_seasonal(series, rng):
    mixture = ResampleMixture([ResampleIdentity(), ResampleSeasonalIID()])
    out = mixture(series, rng)
    assert out[0] is series[0]
    assert not np.array_equal(out[1].v, series[1].v)
    assert mixture.tag == "MIX"


def test_cardinality_mismatch_names_the_invariant(series, rng):
    mixture = ResampleMixture([ResampleIdentity()])
    with pytest.raises(ResamplingConfigError, match="must match number of bases"):
        mixture(series, rng)


def test_single_panel_uses_first_strategy(series, rng):
    mixture = ResampleMixture([ResampleIdentity(), ResampleSeasonalIID()])
    assert mixture(series[1], rng) is series[1]


def test_population_applies_each_member(series):
    mixture = ResampleMixture([ResampleIdentity(), ResampleSeasonalIID()])
    pop = mixture.population(series)
    np.testing.assert_array_equal(pop[0].v, series[0].v)
    np.testing.assert_allclose(pop[1].v, ResampleSeasonalIID().population(series[1]).v)


def test_rejects_empty_or_foreign_members():
    with pytest.raises(ResamplingConfigError):
        ResampleMixture([])
    with pytest.raises(ResamplingConfigError):
        ResampleMixture([object()])
