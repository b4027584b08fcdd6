from __future__ import annotations

import numpy as np
import pytest

from inflation_eval.data import Panel, PanelSeries
from inflation_eval.estimators import (
    EnsembleEstimator,
    InflationConstant,
    InflationPercentileEq,
    InflationTotalCPI,
    yoy_from_monthly,
)


def test_yoy_from_constant_monthly_change():
    monthly = np.full(24, 0.01)
    yoy = yoy_from_monthly(monthly)
    assert yoy.shape == (13,)
    np.testing.assert_allclose(yoy, 100 * (1.01**12 - 1))


def test_total_cpi_shape(series):
    out = InflationTotalCPI()(series)
    assert out.shape == (series.infl_periods, 1)


def test_total_cpi_uses_weights():
    v = np.tile([0.0, 0.02], (24, 1))
    series = PanelSeries.of(Panel(v, [1.0, 3.0], "2000-01"))
    out = InflationTotalCPI()(series)
    np.testing.assert_allclose(out, 100 * (1.015**12 - 1))


def test_percentile_tag_and_range():
    assert InflationPercentileEq(70).measure_tag == "PerEq-70"
    with pytest.raises(ValueError):
        InflationPercentileEq(120)


def test_ensemble_stacks_measures(series):
    ensemble = EnsembleEstimator([InflationConstant(), InflationTotalCPI(), InflationPercentileEq(50)])
    out = ensemble(series)
    assert out.shape == (series.infl_periods, 3)
    assert ensemble.num_measures == 3
    assert len(ensemble) == 3
    np.testing.assert_array_equal(out[:, 0], 1.0)
