from __future__ import annotations

import pytest
from pydantic import BaseModel, ValidationError

from inflation_eval.config.loader import ConfigError, load_config, save_config
from inflation_eval.config.schemas import BatchSpec, ComponentSpec, EvalPeriodSpec

BATCH_YAML = """
estimators:
  - kind: total_cpi
  - kind: percentile_eq
    params: {q: 70}
resampler: {kind: SVM}
nsim: 500
traindate: "2019-12"
evalperiods:
  - {start: "2011-12", final: "2019-12", tag: gt_b10}
"""


def test_load_batch_spec(tmp_path):
    path = tmp_path / "batch.yaml"
    path.write_text(BATCH_YAML, encoding="utf-8")

    spec = load_config(path, BatchSpec)
    assert spec.nsim == 500
    assert spec.resampler.kind == "svm"
    assert spec.trend.kind == "identity"
    assert spec.param_estimator.kind == "total_cpi"
    assert spec.estimators[1].params == {"q": 70}
    assert spec.evalperiods[0].tag == "gt_b10"
    assert spec.savetrajectories is True


def test_relative_path_resolved_from_project_root(tmp_path):
    (tmp_path / "configs").mkdir()
    (tmp_path / "configs" / "batch.yaml").write_text(BATCH_YAML, encoding="utf-8")
    spec = load_config("configs/batch.yaml", BatchSpec, project_root=tmp_path)
    assert spec.traindate == "2019-12"


def test_missing_and_empty_files(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "absent.yaml", BatchSpec, project_root=tmp_path)

    empty = tmp_path / "empty.yaml"
    empty.write_text("", encoding="utf-8")
    with pytest.raises(ConfigError, match="Empty"):
        load_config(empty, BatchSpec)


def test_invalid_yaml_and_schema(tmp_path):
    broken = tmp_path / "broken.yaml"
    broken.write_text("estimators: [\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="Invalid YAML"):
        load_config(broken, BatchSpec)

    invalid = tmp_path / "invalid.yaml"
    invalid.write_text(BATCH_YAML.replace("nsim: 500", "nsim: 0"), encoding="utf-8")
    with pytest.raises(ConfigError, match="validation failed"):
        load_config(invalid, BatchSpec)


class _Defaults(BaseModel):
    nsim: int = 100
    label: str = "default"


def test_non_strict_returns_defaults(tmp_path, caplog):
    assert load_config(tmp_path / "absent.yaml", _Defaults, strict=False) == _Defaults()

    wrong = tmp_path / "wrong.yaml"
    wrong.write_text("nsim: many\n", encoding="utf-8")
    assert load_config(wrong, _Defaults, strict=False).nsim == 100
    assert "validation failed" in caplog.text


def test_save_and_reload(tmp_path):
    path = tmp_path / "batch.yaml"
    path.write_text(BATCH_YAML, encoding="utf-8")
    spec = load_config(path, BatchSpec)

    saved = save_config(spec, tmp_path / "out" / "copy.yaml")
    assert saved.exists()
    assert load_config(saved, BatchSpec) == spec


def test_schema_validation():
    with pytest.raises(ValidationError):
        EvalPeriodSpec(start="2020-01", final="2019-12", tag="x")
    with pytest.raises(ValidationError):
        EvalPeriodSpec(start="not-a-month", final="2019-12", tag="x")
    with pytest.raises(ValidationError):
        BatchSpec.model_validate({"estimators": [], "resampler": {"kind": "svm"}, "nsim": 1, "traindate": "2019-12"})
    assert ComponentSpec(kind="  GSBB ").kind == "gsbb"
