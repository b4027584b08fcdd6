from __future__ import annotations

import pandas as pd
import pytest

from inflation_eval.estimators import EnsembleEstimator, InflationPercentileEq, InflationTotalCPI
from inflation_eval.resampling import ResampleSeasonalIID
from inflation_eval.simulation import (
    DEFAULT_EVALPERIODS,
    CompletePeriod,
    CrossEvalConfig,
    EvalPeriod,
    SimConfig,
    SimDynamicConfig,
    dict_config,
    dict_list,
    nsim_label,
)
from inflation_eval.trends import TrendIdentity, TrendRandomWalk, create_dynamic_rw_folds


@pytest.fixture
def base_params():
    return {
        "inflfn": InflationTotalCPI(),
        "resamplefn": ResampleSeasonalIID(),
        "trendfn": TrendRandomWalk(),
        "paramfn": InflationTotalCPI(),
        "nsim": 1000,
        "traindate": "2019-12",
    }


@pytest.mark.parametrize(("nsim", "label"), [(1, "1"), (999, "999"), (1000, "1k"), (10_000, "10k"), (125_000, "125k")])
def test_nsim_label(nsim, label):
    assert nsim_label(nsim) == label


def test_simconfig_defaults_and_savename(base_params):
    config = SimConfig(**base_params)
    assert config.traindate == pd.Period("2019-12", freq="M")
    assert config.evalperiods == DEFAULT_EVALPERIODS
    assert config.savename() == "Total, SVM, RW, Total, 1k, Dec19.joblib"
    assert config.savename(suffix="", prefix="res") == "res_Total, SVM, RW, Total, 1k, Dec19"


def test_simconfig_accepts_single_period(base_params):
    period = EvalPeriod("2015-01", "2015-12", "y15")
    config = SimConfig(**base_params, evalperiods=period)
    assert config.evalperiods == (period,)


def test_simconfig_to_dict_is_flat(base_params):
    record = SimConfig(**base_params).to_dict()
    assert record["inflfn"] == "Total"
    assert record["nsim"] == 1000
    assert record["traindate"] == "2019-12"
    assert len(record["evalperiods"]) == len(DEFAULT_EVALPERIODS)


def test_simconfig_rejects_bad_nsim(base_params):
    base_params["nsim"] = 0
    with pytest.raises(ValueError):
        SimConfig(**base_params)


def test_dict_list_expands_only_lists():
    periods = (CompletePeriod(),)
    combos = dict_list({"nsim": [10, 100], "q": [50, 70, 90], "evalperiods": periods})
    assert len(combos) == 6
    assert all(c["evalperiods"] is periods for c in combos)
    assert combos[0] == {"nsim": 10, "q": 50, "evalperiods": periods}


def test_dict_config_builds_simconfigs(base_params):
    base_params["inflfn"] = [InflationTotalCPI(), InflationPercentileEq(70)]
    configs = dict_config(dict_list(base_params))
    assert [type(c) for c in configs] == [SimConfig, SimConfig]
    assert configs[1].inflfn.measure_tag == "PerEq-70"


def test_dict_config_without_traindate_is_crossval(base_params):
    del base_params["traindate"]
    base_params["inflfn"] = EnsembleEstimator([InflationTotalCPI(), InflationPercentileEq(50)])
    base_params["evalperiods"] = (
        EvalPeriod("2016-01", "2016-12", "y16"),
        EvalPeriod("2017-01", "2017-12", "y17"),
    )
    config = dict_config(base_params)
    assert isinstance(config, CrossEvalConfig)
    assert config.savename() == "CrossEvalConfig(2, 2), SVM, RW, Total, 1k, Jan16-Dec17.joblib"


def test_crossval_needs_eval_periods(base_params):
    with pytest.raises(TypeError):
        CrossEvalConfig(
            EnsembleEstimator([InflationTotalCPI()]),
            base_params["resamplefn"],
            base_params["trendfn"],
            base_params["paramfn"],
            10,
            (CompletePeriod(),),
        )


def test_dynamic_config_from_dict(base_params):
    params = dict(base_params, trendfns=create_dynamic_rw_folds(nfolds=2, L=60, seed=1), evalperiod=CompletePeriod())
    config = SimDynamicConfig.from_dict(params)
    assert config.nfolds == 2
    assert config.savename() == "Total, SVM, DynamicRW, Total, 1k, 2, Dec19, CompletePeriod.joblib"
    assert config.to_dict()["trendfns"] == ["DRW", "DRW"]


def test_dynamic_config_reports_missing_keys(base_params):
    with pytest.raises(ValueError, match="trendfns, evalperiod"):
        SimDynamicConfig.from_dict(base_params)


def test_dynamic_config_needs_trends(base_params):
    with pytest.raises(ValueError):
        SimDynamicConfig(
            base_params["inflfn"],
            base_params["resamplefn"],
            (),
            base_params["paramfn"],
            10,
            "2019-12",
        )


def test_str_lists_components(base_params):
    base_params["trendfn"] = TrendIdentity()
    text = str(SimConfig(**base_params))
    assert text.startswith("SimConfig")
    assert "Identity trend" in text
    assert "Dec-19" in text
