from __future__ import annotations

import pytest

from inflation_eval.config.schemas import BatchSpec, ComponentSpec
from inflation_eval.estimators import EnsembleEstimator, InflationPercentileEq
from inflation_eval.resampling import (
    ResampleExtendedSVM,
    ResampleGSBB,
    ResampleMixture,
    ResampleSeasonalIID,
)
from inflation_eval.simulation import (
    DEFAULT_EVALPERIODS,
    CompletePeriod,
    build_estimator,
    build_resampler,
    build_trend,
    configs_from_batch,
)
from inflation_eval.simulation.registry import evalperiods_from_spec
from inflation_eval.trends import TrendExponential, TrendIdentity, TrendRandomWalk


@pytest.mark.parametrize("kind", ["svm", "seasonal_iid", "Scramble-Var-Months"])
def test_resampler_aliases(kind):
    assert isinstance(build_resampler(kind), ResampleSeasonalIID)


def test_resampler_params():
    assert isinstance(build_resampler({"kind": "esvm", "params": {"extension_periods": [12, 24]}}), ResampleExtendedSVM)
    gsbb = build_resampler(ComponentSpec(kind="gsbb", params={"blocklength": 36}))
    assert isinstance(gsbb, ResampleGSBB)
    assert gsbb.tag == "GSBB-36"


def test_mixture_of_specs():
    mix = build_resampler({"kind": "mix", "params": {"strategies": ["idty", {"kind": "svm"}]}})
    assert isinstance(mix, ResampleMixture)
    with pytest.raises(ValueError):
        build_resampler({"kind": "mixture"})


def test_unknown_and_incomplete_specs():
    with pytest.raises(ValueError, match="Unsupported resampler"):
        build_resampler("bootstrap")
    with pytest.raises(ValueError, match="missing parameter"):
        build_resampler("rsti")
    with pytest.raises(ValueError, match="missing parameter"):
        build_estimator("pereq")


def test_trends(series):
    assert isinstance(build_trend("none"), TrendIdentity)
    assert isinstance(build_trend("rw"), TrendRandomWalk)
    exp = build_trend({"kind": "exp", "params": {"rate": 0.03}}, series)
    assert isinstance(exp, TrendExponential)
    assert len(exp) == series.periods
    assert len(build_trend({"kind": "exp", "params": {"periods": 24}})) == 24
    with pytest.raises(ValueError):
        build_trend("exponential")


def test_estimators():
    assert build_estimator({"kind": "pereq", "params": {"q": 72}}).measure_tag == "PerEq-72"
    ensemble = build_estimator(
        {"kind": "ensemble", "params": {"estimators": ["total", {"kind": "percentile_eq", "params": {"q": 50}}]}}
    )
    assert isinstance(ensemble, EnsembleEstimator)
    assert isinstance(ensemble.estimators[1], InflationPercentileEq)
    assert ensemble.num_measures == 2


def _batch(**extra):
    payload = {
        "estimators": [{"kind": "total_cpi"}, {"kind": "percentile_eq", "params": {"q": 70}}],
        "resampler": {"kind": "svm"},
        "trend": {"kind": "exponential"},
        "nsim": 10,
        "traindate": "2010-11",
    }
    payload.update(extra)
    return BatchSpec.model_validate(payload)


def test_configs_from_batch_sizes_trend_to_training_data(series):
    configs = configs_from_batch(_batch(), series)
    assert len(configs) == 2
    assert configs[1].inflfn.measure_tag == "PerEq-70"
    assert configs[0].resamplefn is configs[1].resamplefn
    assert len(configs[0].trendfn) == series.up_to("2010-11").periods
    assert configs[0].evalperiods == DEFAULT_EVALPERIODS


def test_evalperiods_from_spec():
    spec = _batch(evalperiods=[{"start": "2005-01", "final": "2005-12", "tag": "y05"}])
    periods = evalperiods_from_spec(spec)
    assert isinstance(periods[0], CompletePeriod)
    assert periods[1].tag == "y05"

    spec = _batch(evalperiods=[{"start": "2005-01", "final": "2005-12", "tag": "y05"}], include_complete_period=False)
    assert len(evalperiods_from_spec(spec)) == 1
