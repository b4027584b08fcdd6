"""Command line interface of ``inflation_eval``.

Subcommands
-----------
``show-settings``
    Print the resolved :class:`~inflation_eval.config.Settings`.
``run-batch``
    Simulate every configuration expanded from a batch YAML file.
``collect-results``
    Gather the saved evaluation records into one table (CSV or stdout).

The evaluation data for ``run-batch`` is a joblib file holding a
:class:`~inflation_eval.data.PanelSeries` or a single
:class:`~inflation_eval.data.Panel`.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Iterable

import joblib

from inflation_eval.config import (
    BatchSpec,
    ConfigError,
    Settings,
    configure_logging,
    get_settings,
    load_config,
)
from inflation_eval.data import Panel, PanelSeries
from inflation_eval.simulation import collect_results, configs_from_batch, run_batch
from inflation_eval.utils.seed import register_seed_logging

__all__ = ["build_parser", "load_data", "main"]

logger = logging.getLogger(__name__)

# Exit status for missing files and rejected batch configurations.
EXIT_BAD_INPUT = 2


def load_data(path: str | Path) -> PanelSeries:
    """Read the evaluation data, wrapping a lone :class:`Panel` in a series."""

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")
    data = joblib.load(path)
    if isinstance(data, Panel):
        return PanelSeries.of(data)
    if not isinstance(data, PanelSeries):
        raise TypeError(f"{path} holds a {type(data).__name__}, expected a PanelSeries")
    return data


def _results_dir(args: argparse.Namespace, settings: Settings) -> Path:
    return Path(args.savepath) if args.savepath else settings.results_dir


def _show_settings(args: argparse.Namespace, settings: Settings) -> int:
    payload: dict[str, Any] = settings.to_dict()
    if args.json:
        print(json.dumps(payload, indent=2, sort_keys=True))
        return 0
    for name in payload:
        print(f"{name}: {payload[name]}")
    return 0


def _run_batch(args: argparse.Namespace, settings: Settings) -> int:
    spec = load_config(args.config, BatchSpec)
    try:
        data = load_data(args.data)
    except TypeError as exc:
        raise ConfigError(f"Invalid data file: {exc}") from exc
    try:
        configs = configs_from_batch(spec, data)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid batch configuration {args.config}: {exc}") from exc
    seed = spec.seed if args.seed is None else args.seed
    register_seed_logging(logger, seed)

    savepath = _results_dir(args, settings)
    written = run_batch(
        data,
        configs,
        savepath,
        savetrajectories=spec.savetrajectories,
        rndseed=seed,
        skip_existing=args.skip_existing,
    )
    print(f"{len(written)} result file(s) written to {savepath}")
    return 0


def _collect_results(args: argparse.Namespace, settings: Settings) -> int:
    frame = collect_results(_results_dir(args, settings))
    if not args.output:
        print(frame.to_string())
        return 0
    frame.to_csv(args.output, index=False)
    print(f"{len(frame)} row(s) saved to {args.output}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="inflation-eval",
        description="Simulation-based evaluation of inflation estimators",
    )
    log_format = parser.add_mutually_exclusive_group()
    log_format.add_argument("--structured-logs", dest="structured_logs", action="store_true", help="emit JSON log records")
    log_format.add_argument("--plain-logs", dest="structured_logs", action="store_false", help="emit plain text logs")
    parser.set_defaults(structured_logs=None)

    commands = parser.add_subparsers(dest="command", required=True)
    results_help = "results folder (default: settings.results_dir)"

    show = commands.add_parser("show-settings", help="print the resolved settings")
    show.add_argument("--json", action="store_true", help="print as JSON")
    show.set_defaults(handler=_show_settings)

    batch = commands.add_parser("run-batch", help="simulate a batch of configurations")
    batch.add_argument("--config", required=True, help="batch YAML file (BatchSpec)")
    batch.add_argument("--data", required=True, help="joblib file with the evaluation data")
    batch.add_argument("--savepath", help=results_help)
    batch.add_argument("--seed", type=int, help="base seed (default: the one in the YAML file)")
    batch.add_argument(
        "--no-skip-existing",
        dest="skip_existing",
        action="store_false",
        help="recompute configurations already on disk",
    )
    batch.set_defaults(handler=_run_batch, skip_existing=True)

    collect = commands.add_parser("collect-results", help="gather the saved results")
    collect.add_argument("--savepath", help=results_help)
    collect.add_argument("--output", help="output CSV (default: print the table)")
    collect.set_defaults(handler=_collect_results)

    return parser


def main(argv: Iterable[str] | None = None) -> int:
    args = build_parser().parse_args(None if argv is None else list(argv))
    settings = get_settings()
    configure_logging(settings=settings, structured=args.structured_logs, context={"command": args.command})

    try:
        return args.handler(args, settings)
    except (FileNotFoundError, ConfigError) as exc:
        logger.error("%s failed: %s", args.command, exc)
        print(exc, file=sys.stderr)
        return EXIT_BAD_INPUT


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
