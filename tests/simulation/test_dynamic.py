from __future__ import annotations

import numpy as np
import pytest

from inflation_eval.estimators import InflationTotalCPI
from inflation_eval.evaluation import eval_metrics
from inflation_eval.resampling import ResampleExtendedSVM, ResampleSeasonalIID
from inflation_eval.simulation import (
    GT_EVAL_B00,
    CompletePeriod,
    SimDynamicConfig,
    compute_assessment_sim,
    compute_lowlevel_sim,
    merge_metrics,
    pargentrajinfl,
)
from inflation_eval.trends import create_dynamic_rw_folds
from inflation_eval.utils.seed import fold_seed


@pytest.fixture
def config():
    return SimDynamicConfig(
        InflationTotalCPI(),
        ResampleSeasonalIID(),
        create_dynamic_rw_folds(nfolds=3, L=120, seed=5),
        InflationTotalCPI(),
        4,
        "2010-11",
        CompletePeriod(),
    )


def test_merge_metrics():
    assert merge_metrics([]) == {}
    merged = merge_metrics([{"mse": 1.0, "T": 5}, {"mse": 3.0, "T": 5}])
    assert merged == {"mse": [1.0, 3.0], "T": [5, 5]}


def test_lowlevel_sim_runs_each_fold_with_its_seed(series, config):
    results = compute_lowlevel_sim(series, config, rndseed=100, showprogress=False)
    assert len(results["metrics_list"]) == 3
    assert results["trendfns"] == list(config.trendfns)

    data_eval = series.up_to("2010-11")
    second = pargentrajinfl(
        config.inflfn,
        config.resamplefn,
        config.trendfns[1],
        data_eval,
        4,
        rndseed=fold_seed(100, 2, 3),
        showprogress=False,
    )
    np.testing.assert_array_equal(results["traj_list"][1], second)
    assert results["traj_pob_list"][1].shape == (data_eval.infl_periods,)


def test_assessment_record_and_trajectories(series, config, caplog_info):
    record = compute_assessment_sim(series, config, rndseed=100, savetrajectories=True, showprogress=False)

    assert record["nfolds"] == 3
    assert record["measure"] == config.inflfn.measure_name
    assert len(record["mse"]) == 3
    assert len(record["trendfns"]) == 3

    traj, pob = record["trajinfl"], record["trajinfl_pob"]
    T = series.up_to("2010-11").infl_periods
    assert traj.shape == (T, 1, 12)
    assert pob.shape == (T, 1, 3)
    assert eval_metrics(traj, pob, short=True)["mse"] == pytest.approx(np.mean(record["mse"]))
    assert "Assessment metrics" in caplog_info.text


def test_assessment_with_tagged_period(series, config, caplog_info):
    tagged = SimDynamicConfig(
        config.inflfn,
        config.resamplefn,
        config.trendfns,
        config.paramfn,
        config.nsim,
        config.traindate,
        GT_EVAL_B00,
    )
    record = compute_assessment_sim(series, tagged, showprogress=False)
    assert "gt_b00_rmse" in record
    assert "trajinfl" not in record
    assert "gt_b00_corr" in caplog_info.text


def test_lowlevel_sim_with_length_changing_resampler(series):
    config = SimDynamicConfig(
        InflationTotalCPI(),
        ResampleExtendedSVM(100),
        create_dynamic_rw_folds(nfolds=2, L=120, seed=5),
        InflationTotalCPI(),
        3,
        "2010-11",
        CompletePeriod(),
    )
    results = compute_lowlevel_sim(series, config, showprogress=False)
    assert [traj.shape for traj in results["traj_list"]] == [(89, 1, 3)] * 2
    assert [pob.shape for pob in results["traj_pob_list"]] == [(89,)] * 2
    assert all("mse" in m for m in results["metrics_list"])
