"""Reading and writing the YAML files that describe simulation batches.

Files are parsed with :func:`yaml.safe_load` and validated by the Pydantic
models of :mod:`inflation_eval.config.schemas`::

    >>> from inflation_eval.config.loader import load_config
    >>> from inflation_eval.config.schemas import BatchSpec
    >>> load_config("configs/batch_percentiles.yaml", BatchSpec).nsim
    1000
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, Optional, Type, TypeVar, Union

import yaml
from pydantic import BaseModel, ValidationError

__all__ = ["ConfigError", "load_config", "save_config"]

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class ConfigError(Exception):
    """A batch file is missing, empty, not YAML or rejected by its schema."""


def _candidates(file_path: Union[str, Path], project_root: Optional[Path]) -> Iterator[Path]:
    path = Path(file_path)
    if path.is_absolute():
        yield path
        return
    yield (project_root or Path(__file__).resolve().parents[3]) / path
    yield path.resolve()


def _locate(file_path: Union[str, Path], project_root: Optional[Path]) -> Path:
    for candidate in _candidates(file_path, project_root):
        if candidate.is_file():
            return candidate
    raise FileNotFoundError(f"Config file not found: {file_path}")


def _read_yaml(file_path: Union[str, Path], project_root: Optional[Path]) -> object:
    path = _locate(file_path, project_root)
    logger.debug("Reading %s", path)
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if data is None:
        raise ConfigError(f"Empty configuration file: {file_path}")
    return data


def load_config(
    file_path: Union[str, Path],
    schema: Type[ModelT],
    *,
    project_root: Optional[Path] = None,
    strict: bool = True,
) -> ModelT:
    """Parse ``file_path`` and validate it as ``schema``.

    Relative paths are tried against ``project_root`` (the repository root by
    default) and then against the working directory.

    With ``strict=False`` a missing file, a YAML syntax error or a validation
    failure is logged as a warning and ``schema()`` is returned instead, which
    only works for models whose fields all have defaults. An empty file is
    always an error.

    Raises
    ------
    ConfigError
        In strict mode, for any of the failures above.
    """

    try:
        data = _read_yaml(file_path, project_root)
        config = schema.model_validate(data)
    except FileNotFoundError as exc:
        problem, cause = f"Configuration file not found: {file_path}", exc
    except yaml.YAMLError as exc:
        problem, cause = f"Invalid YAML syntax in {file_path}: {exc}", exc
    except ValidationError as exc:
        problem, cause = f"Configuration validation failed for {file_path}:\n{exc}", exc
    else:
        logger.info("Loaded %s from %s", schema.__name__, file_path)
        return config

    if strict:
        raise ConfigError(problem) from cause
    logger.warning("%s; falling back to %s defaults", problem, schema.__name__)
    return schema()


def save_config(config: BaseModel, file_path: Union[str, Path]) -> Path:
    """Write ``config`` as block-style YAML, keeping the model's field order."""

    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    text = yaml.safe_dump(
        config.model_dump(mode="python", exclude_none=True),
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )
    path.write_text(text, encoding="utf-8")
    logger.info("Saved %s to %s", type(config).__name__, path)
    return path
