from __future__ import annotations

import json

import joblib
import pandas as pd
import pytest

from inflation_eval.cli import build_parser, load_data, main

BATCH_YAML = """
estimators:
  - kind: total_cpi
  - kind: percentile_eq
    params: {q: 60}
resampler: {kind: svm}
trend: {kind: identity}
nsim: 3
traindate: "2012-11"
savetrajectories: false
"""

pytestmark = pytest.mark.usefixtures("restore_root_logger")


@pytest.fixture
def data_file(tmp_path, series):
    path = tmp_path / "data.joblib"
    joblib.dump(series, path)
    return path


@pytest.fixture
def batch_file(tmp_path):
    path = tmp_path / "batch.yaml"
    path.write_text(BATCH_YAML, encoding="utf-8")
    return path


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_show_settings_json(capsys):
    assert main(["show-settings", "--json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["parallel_backend"] == "sequential"
    assert payload["show_progress"] is False


def test_load_data(tmp_path, panel, data_file):
    assert len(load_data(data_file)) == 2
    single = tmp_path / "panel.joblib"
    joblib.dump(panel, single)
    assert len(load_data(single)) == 1

    wrong = tmp_path / "wrong.joblib"
    joblib.dump([1, 2], wrong)
    with pytest.raises(TypeError):
        load_data(wrong)


def test_run_batch_then_collect(tmp_path, batch_file, data_file, capsys):
    savepath = tmp_path / "results"
    argv = ["--plain-logs", "run-batch", "--config", str(batch_file), "--data", str(data_file), "--savepath", str(savepath), "--seed", "9"]
    assert main(argv) == 0
    assert "2 result file(s)" in capsys.readouterr().out
    assert not (savepath / "tray_infl").exists()

    assert main(argv) == 0
    assert "0 result file(s)" in capsys.readouterr().out

    output = tmp_path / "summary.csv"
    assert main(["collect-results", "--savepath", str(savepath), "--output", str(output)]) == 0
    frame = pd.read_csv(output)
    assert sorted(frame["inflfn"]) == ["PerEq-60", "Total"]


def test_missing_inputs_exit_with_code_2(tmp_path, batch_file, capsys):
    assert main(["run-batch", "--config", str(tmp_path / "absent.yaml"), "--data", "x"]) == 2
    assert main(["run-batch", "--config", str(batch_file), "--data", str(tmp_path / "absent.joblib")]) == 2
    assert "not found" in capsys.readouterr().err


@pytest.mark.parametrize(
    ("original", "replacement", "message"),
    [
        ("resampler: {kind: svm}", "resampler: {kind: bogus}", "Unsupported resampler kind"),
        ("params: {q: 60}", "params: {}", "missing parameter"),
    ],
)
def test_unbuildable_batch_exits_with_code_2(tmp_path, data_file, capsys, original, replacement, message):
    path = tmp_path / "bad.yaml"
    path.write_text(BATCH_YAML.replace(original, replacement), encoding="utf-8")
    savepath = tmp_path / "results"

    assert main(["run-batch", "--config", str(path), "--data", str(data_file), "--savepath", str(savepath)]) == 2
    err = capsys.readouterr().err
    assert "Invalid batch configuration" in err
    assert message in err
    assert not savepath.exists()


def test_wrong_data_object_exits_with_code_2(tmp_path, batch_file, capsys):
    wrong = tmp_path / "wrong.joblib"
    joblib.dump([1, 2], wrong)
    assert main(["run-batch", "--config", str(batch_file), "--data", str(wrong)]) == 2
    assert "Invalid data file" in capsys.readouterr().err
