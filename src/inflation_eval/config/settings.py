"""Runtime settings of the package.

Each setting is resolved in layers, from the weakest to the strongest:

1. built-in defaults declared in :data:`_FIELDS`;
2. a ``.env`` file (``env_file`` or ``<project_root>/.env``);
3. process environment variables prefixed with :data:`ENV_PREFIX`;
4. explicit ``overrides`` keyed by the upper-case setting name.

The resolved :class:`Settings` object is cached by :func:`get_settings` so the
trajectory generator and the batch runner read the same values.
"""

from __future__ import annotations

import os
from collections import ChainMap
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Callable, Mapping, NamedTuple

from .constants import DEFAULT_SEED

__all__ = [
    "ENV_PREFIX",
    "Settings",
    "get_settings",
    "load_env_file",
    "reset_settings_cache",
]


ENV_PREFIX = "INFLATION_EVAL_"
"""Prefix of the environment variables read by :meth:`Settings.from_env`."""

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off"})


def _as_flag(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    text = str(raw).strip().lower()
    if text in _TRUTHY:
        return True
    if text in _FALSY:
        return False
    raise ValueError(f"Cannot interpret '{raw}' as boolean")


class _Field(NamedTuple):
    attr: str
    convert: Callable[[Any], Any]
    default: Any


# Path defaults are relative to the project root, or to another folder when the
# default names it (``results_dir`` lives under ``data_dir``).
_FIELDS: tuple[_Field, ...] = (
    _Field("data_dir", Path, "data"),
    _Field("results_dir", Path, ("data_dir", "results")),
    _Field("logs_dir", Path, "logs"),
    _Field("environment", str, "development"),
    _Field("random_seed", int, DEFAULT_SEED),
    _Field("n_jobs", int, -1),
    _Field("parallel_backend", str, "joblib"),
    _Field("structured_logging", _as_flag, False),
    _Field("show_progress", _as_flag, True),
)


def load_env_file(path: Path) -> dict[str, str]:
    """Read ``KEY=value`` pairs from a dotenv file.

    Missing files yield an empty mapping; comments and lines without ``=``
    are skipped.
    """

    if not path.exists():
        return {}
    pairs = (
        line.split("=", 1)
        for line in map(str.strip, path.read_text(encoding="utf-8").splitlines())
        if line and not line.startswith("#") and "=" in line
    )
    return {key.strip(): value.strip() for key, value in pairs}


def _default_root() -> Path:
    return Path(__file__).resolve().parents[3]


def _under(root: Path, value: Any) -> Path:
    path = Path(str(value)).expanduser()
    return path if path.is_absolute() else root / path


@dataclass(slots=True, frozen=True)
class Settings:
    """Global runtime values.

    Folders for results and logs, the base seed of the simulation exercise and
    the knobs of the trajectory generator (backend, workers, progress bars).
    """

    project_root: Path
    data_dir: Path
    results_dir: Path
    logs_dir: Path
    environment: str
    random_seed: int
    n_jobs: int
    parallel_backend: str
    structured_logging: bool
    show_progress: bool

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    def to_dict(self) -> dict[str, Any]:
        payload = {}
        for item in fields(self):
            value = getattr(self, item.name)
            payload[item.name] = str(value) if isinstance(value, Path) else value
        return payload

    @classmethod
    def from_env(
        cls,
        *,
        overrides: Mapping[str, Any] | None = None,
        env_file: str | Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> "Settings":
        """Resolve every field through the layers described in the module docstring."""

        explicit = dict(overrides or {})
        process_env = os.environ if environ is None else environ
        file_env = load_env_file(Path(env_file).expanduser()) if env_file is not None else {}

        root_value = explicit.pop("project_root", None)
        if root_value is None:
            root_value = process_env.get(f"{ENV_PREFIX}PROJECT_ROOT", file_env.get(f"{ENV_PREFIX}PROJECT_ROOT"))
        root = _default_root() if root_value is None else Path(str(root_value)).expanduser().resolve()

        if env_file is None:
            file_env = load_env_file(root / ".env")

        unknown = set(explicit) - {item.attr.upper() for item in _FIELDS}
        if unknown:
            raise KeyError(f"Unknown override(s): {', '.join(sorted(unknown))}")

        layered = ChainMap(
            explicit,
            {key[len(ENV_PREFIX):]: value for key, value in process_env.items() if key.startswith(ENV_PREFIX)},
            {key[len(ENV_PREFIX):]: value for key, value in file_env.items() if key.startswith(ENV_PREFIX)},
        )

        resolved: dict[str, Any] = {"project_root": root}
        for item in _FIELDS:
            raw = layered.get(item.attr.upper())
            if item.convert is Path:
                if raw is None and isinstance(item.default, tuple):
                    parent, child = item.default
                    resolved[item.attr] = resolved[parent] / child
                else:
                    resolved[item.attr] = _under(root, item.default if raw is None else raw)
            else:
                resolved[item.attr] = item.convert(item.default if raw is None else raw)
        return cls(**resolved)


_cached: Settings | None = None


def get_settings(**kwargs: Any) -> Settings:
    """Return the process-wide :class:`Settings`.

    Keyword arguments are forwarded to :meth:`Settings.from_env` and bypass the
    cache. Use :func:`reset_settings_cache` after changing the environment.
    """

    global _cached
    if kwargs:
        return Settings.from_env(**kwargs)
    if _cached is None:
        _cached = Settings.from_env()
    return _cached


def reset_settings_cache() -> None:
    """Drop the cached :func:`get_settings` result."""

    global _cached
    _cached = None
