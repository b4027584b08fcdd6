"""Evaluation runs: one configuration, a cross-validation input or a batch.

Result records are plain dictionaries merging the flattened configuration,
the metrics of every evaluation period, the measure name (``"measure"``) and
its parameters (``"params"``). :func:`run_batch` writes one
``<savename>.joblib`` record per configuration and, optionally, the
trajectories under ``tray_infl/``. Because file names are deterministic, a
batch interrupted half way can be relaunched and only the missing
configurations are simulated.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

import joblib
import numpy as np
import pandas as pd

from inflation_eval.combination.cross_validation import cv_key
from inflation_eval.config.constants import DEFAULT_SEED
from inflation_eval.config.logging_conf import log_metrics
from inflation_eval.config.settings import get_settings
from inflation_eval.data import Panel, PanelSeries
from inflation_eval.evaluation.metrics import eval_metrics

from .config import CrossEvalConfig, SimConfig, dict_config
from .parameter import InflationParameter
from .periods import CompletePeriod, eval_mask, period_tag
from .trajectories import pargentrajinfl

__all__ = [
    "RESULT_SUFFIX",
    "TRAJECTORIES_DIR",
    "as_series",
    "collect_results",
    "evalsim",
    "makesim",
    "makesim_crossval",
    "run_batch",
]

logger = logging.getLogger(__name__)

RESULT_SUFFIX = "joblib"
TRAJECTORIES_DIR = "tray_infl"

Metrics = Dict[str, Any]


def as_series(data: Union[Panel, PanelSeries]) -> PanelSeries:
    if isinstance(data, PanelSeries):
        return data
    if isinstance(data, Panel):
        return PanelSeries.of(data)
    raise TypeError(f"Expected a Panel or PanelSeries, got {type(data).__name__}")


def _showprogress(showprogress: Optional[bool]) -> bool:
    return get_settings().show_progress if showprogress is None else showprogress


def evalsim(
    data: Union[Panel, PanelSeries],
    config: SimConfig,
    rndseed: int = DEFAULT_SEED,
    short: bool = False,
    showprogress: Optional[bool] = None,
) -> Tuple[Metrics, np.ndarray]:
    """Simulate ``config`` on the data up to its training date and score it.

    Returns
    -------
    tuple
        ``(metrics, tray_infl)``. Metrics of every evaluation period are
        merged into one dictionary, keys prefixed with the period tag (no
        prefix for the complete period). ``tray_infl`` is the ``(T, M, K)``
        trajectory array.
    """

    data_eval = as_series(data).up_to(config.traindate)

    param = InflationParameter(config.paramfn, config.resamplefn, config.trendfn)
    tray_infl_pob = param(data_eval)

    logger.info("Inflation measure evaluation\n%s", config)

    tray_infl = pargentrajinfl(
        config.inflfn,
        config.resamplefn,
        config.trendfn,
        data_eval,
        numreplications=config.nsim,
        rndseed=rndseed,
        showprogress=_showprogress(showprogress),
    )

    # Masks follow the population dates, which match the trajectories even when
    # the strategy changes the sample length.
    population = config.resamplefn.population_function()(data_eval)

    metrics: Metrics = {}
    summary: Metrics = {}
    pob = np.asarray(tray_infl_pob, dtype=float).reshape(-1)
    for period in config.evalperiods:
        mask = eval_mask(population, period)
        if not mask.any():
            logger.warning("Evaluation period %s has no data up to %s; skipped", period, config.traindate)
            continue
        period_metrics = eval_metrics(tray_infl[mask], pob[mask], short=short, prefix=period_tag(period))
        if isinstance(period, CompletePeriod) or not summary:
            summary = period_metrics
        metrics.update(period_metrics)

    log_metrics(logger, "Evaluation metrics:", summary)
    return metrics, tray_infl


def makesim(
    data: Union[Panel, PanelSeries],
    config: Union[SimConfig, CrossEvalConfig],
    rndseed: int = DEFAULT_SEED,
    short: bool = False,
    showprogress: Optional[bool] = None,
):
    """Run ``config`` and build its result record.

    For a :class:`SimConfig` returns ``(results, tray_infl)``; for a
    :class:`CrossEvalConfig` returns the cross-validation input dictionary of
    :func:`makesim_crossval`.
    """

    if isinstance(config, CrossEvalConfig):
        return makesim_crossval(data, config, rndseed=rndseed, showprogress=showprogress)

    metrics, tray_infl = evalsim(data, config, rndseed=rndseed, short=short, showprogress=showprogress)
    results = {**config.to_dict(), **metrics}
    results["measure"] = config.inflfn.measure_name
    results["params"] = config.inflfn.params
    return results, tray_infl


def makesim_crossval(
    data: Union[Panel, PanelSeries],
    config: CrossEvalConfig,
    rndseed: int = DEFAULT_SEED,
    showprogress: Optional[bool] = None,
) -> Dict[str, Any]:
    """Trajectories and population trajectories for every CV cutoff.

    Each validation window ``[start, final]`` contributes two cutoffs: the
    training cutoff ``start - 1`` and the validation cutoff ``final``. For
    each cutoff the dictionary holds ``infl_<yy>`` (trajectories of the data
    up to it), ``param_<yy>`` (population trajectory) and ``dates_<yy>``
    (inflation dates); ``"config"`` holds ``config``.
    """

    series = as_series(data)
    param = InflationParameter(config.paramfn, config.resamplefn, config.trendfn)
    cvinputs: Dict[str, Any] = {"config": config}

    for i, evalperiod in enumerate(config.evalperiods, start=1):
        traindate = evalperiod.start - 1
        cvdate = evalperiod.final
        logger.info(
            "Cross-validation iteration %d: %s (train up to %s, validate up to %s)",
            i,
            evalperiod,
            traindate,
            cvdate,
        )

        for finaldate in (traindate, cvdate):
            tray_key = cv_key("infl", finaldate)
            param_key = cv_key("param", finaldate)
            sliced = series.up_to(finaldate)

            if tray_key not in cvinputs:
                logger.info("Generating inflation trajectories up to %s", finaldate)
                cvinputs[tray_key] = pargentrajinfl(
                    config.inflfn,
                    config.resamplefn,
                    config.trendfn,
                    sliced,
                    numreplications=config.nsim,
                    rndseed=rndseed,
                    showprogress=_showprogress(showprogress),
                )
                cvinputs[cv_key("dates", finaldate)] = sliced.infl_dates

            if param_key not in cvinputs:
                logger.info("Generating population trajectory up to %s", finaldate)
                cvinputs[param_key] = param(sliced)

    return cvinputs


def run_batch(
    data: Union[Panel, PanelSeries],
    configs: Iterable[Union[SimConfig, CrossEvalConfig, Mapping[str, Any]]],
    savepath: Union[str, Path],
    savetrajectories: bool = True,
    rndseed: int = DEFAULT_SEED,
    skip_existing: bool = True,
    showprogress: Optional[bool] = None,
) -> list[Path]:
    """Evaluate every configuration and persist the result records.

    ``configs`` holds :class:`SimConfig` objects or parameter dictionaries
    (typically the output of :func:`~inflation_eval.simulation.config.dict_list`)
    turned into configurations with
    :func:`~inflation_eval.simulation.config.dict_config`. The record of a
    :class:`CrossEvalConfig` is its cross-validation input dictionary. When
    ``skip_existing`` is set, configurations whose record already exists in
    ``savepath`` are not simulated again.

    Returns
    -------
    list of Path
        Paths of the records written by this call.
    """

    savepath = Path(savepath)
    savepath.mkdir(parents=True, exist_ok=True)
    configs = [c if isinstance(c, (SimConfig, CrossEvalConfig)) else dict_config(c) for c in configs]
    written: list[Path] = []

    for i, config in enumerate(configs, start=1):
        filename = config.savename(suffix=RESULT_SUFFIX)
        target = savepath / filename
        if skip_existing and target.exists():
            logger.info("Simulation %d of %d already on disk, skipping: %s", i, len(configs), filename)
            continue

        logger.info("Running simulation %d of %d...", i, len(configs))
        if isinstance(config, CrossEvalConfig):
            joblib.dump(makesim_crossval(data, config, rndseed=rndseed, showprogress=showprogress), target)
            written.append(target)
            logger.info("Saved cross-validation inputs to %s", target)
            continue

        results, tray_infl = makesim(data, config, rndseed=rndseed, showprogress=showprogress)

        joblib.dump(results, target)
        written.append(target)
        logger.info("Saved results to %s", target)

        if savetrajectories:
            tray_path = savepath / TRAJECTORIES_DIR / filename
            tray_path.parent.mkdir(parents=True, exist_ok=True)
            joblib.dump({"tray_infl": tray_infl}, tray_path)

    return written


def collect_results(savepath: Union[str, Path]) -> pd.DataFrame:
    """Gather the records written by :func:`run_batch` into a DataFrame.

    One row per ``*.joblib`` file directly under ``savepath``, with an extra
    ``path`` column; trajectories under ``tray_infl/`` are ignored.
    """

    savepath = Path(savepath)
    logger.info("Scanning folder %s for result files.", savepath)
    rows = []
    for path in sorted(savepath.glob(f"*.{RESULT_SUFFIX}")):
        record = dict(joblib.load(path))
        record["path"] = str(path)
        rows.append(record)
    logger.info("Added %d entries.", len(rows))
    return pd.DataFrame(rows)
