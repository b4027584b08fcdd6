"""Package logging: plain text for terminals or one JSON object per line for collectors."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import IO, Any, Mapping

import numpy as np

from .settings import Settings, get_settings

__all__ = ["JSONFormatter", "configure_logging", "log_metrics"]

PLAIN_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
PLAIN_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))) | {
    "message",
    "asctime",
    "taskName",
}


def _to_builtin(value: Any) -> Any:
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, np.generic):
        return value.item()
    return value


class JSONFormatter(logging.Formatter):
    """One JSON object per record.

    ``default_context`` is merged into every payload; fields passed through
    ``extra=`` come after it and never replace the base keys.
    """

    def __init__(self, *, default_context: Mapping[str, Any] | None = None) -> None:
        super().__init__()
        self._default_context = dict(default_context or {})

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: dict[str, Any] = {
            "timestamp": created.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(self._default_context)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = record.stack_info

        extras = {key: value for key, value in vars(record).items() if key not in _STANDARD_ATTRS}
        for key, value in extras.items():
            payload.setdefault(key, _to_builtin(value))
        return json.dumps(payload, ensure_ascii=False, default=str)


def _handler(handler: logging.Handler, level: int | str, formatter: logging.Formatter) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def configure_logging(
    *,
    settings: Settings | None = None,
    level: int | str = logging.INFO,
    structured: bool | None = None,
    module_levels: Mapping[str, int | str] | None = None,
    stream: IO[str] | None = None,
    context: Mapping[str, Any] | None = None,
    log_file: Path | None = None,
) -> None:
    """Replace the root handlers with the package's terminal (and file) output.

    Parameters
    ----------
    settings:
        Source of the ``structured_logging`` default; :func:`get_settings`
        when omitted.
    level:
        Threshold of the installed handlers. The root logger itself stays at
        ``DEBUG`` so ``module_levels`` can open individual loggers up.
    structured:
        Force JSON (``True``) or text (``False``) output.
    module_levels:
        Per-logger levels, e.g. ``{"cvxpy": "WARNING"}``.
    stream:
        Destination of the console handler (``sys.stderr`` when ``None``).
    context:
        Fields added to every JSON record, such as the CLI command.
    log_file:
        Also append records to this file, creating its folder.
    """

    settings = settings or get_settings()
    use_json = settings.structured_logging if structured is None else structured
    formatter = (
        JSONFormatter(default_context=context)
        if use_json
        else logging.Formatter(fmt=PLAIN_FORMAT, datefmt=PLAIN_DATEFMT)
    )

    handlers = [_handler(logging.StreamHandler(stream), level, formatter)]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(_handler(logging.FileHandler(log_file, encoding="utf-8"), level, formatter))

    root = logging.getLogger()
    root.handlers[:] = handlers
    root.setLevel(logging.DEBUG)

    for name, name_level in (module_levels or {}).items():
        logging.getLogger(name).setLevel(name_level)


def _fmt(value: Any) -> str:
    return f"{float(value):.6g}" if isinstance(value, (float, np.floating)) else str(value)


def log_metrics(
    logger: logging.Logger,
    title: str,
    metrics: Mapping[str, Any],
    *,
    level: int = logging.INFO,
) -> None:
    """Emit ``metrics`` as a single record: the title, then ``key = value`` lines sorted by key.

    The raw mapping travels in ``record.metrics`` for the JSON formatter.
    """

    if not logger.isEnabledFor(level):
        return
    body = "\n".join(f"  {key} = {_fmt(metrics[key])}" for key in sorted(metrics))
    logger.log(level, f"{title}\n{body}" if body else title, extra={"metrics": dict(metrics)})
