"""Generation of simulated inflation trajectories.

Replication ``k`` (1-based) draws one resample of the data with a generator
seeded from ``rndseed + k``, applies the trend and evaluates the estimator.
Its output only depends on that seed, the data and the configuration, so the
sequential and the parallel generators return identical arrays and a run of
``K`` replications is a prefix of a run of ``K' > K``.

Any exception raised by a replication aborts the whole generation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import Optional, Sequence

import numpy as np
from joblib import cpu_count
from tqdm import tqdm

from inflation_eval.config.constants import DEFAULT_SEED
from inflation_eval.config.settings import get_settings
from inflation_eval.estimators import Estimator
from inflation_eval.resampling import ResamplingStrategy
from inflation_eval.resampling.base import PanelData
from inflation_eval.trends import TrendInjector
from inflation_eval.utils.parallel import batched, parallel_imap
from inflation_eval.utils.seed import replication_rng

__all__ = ["ReplicationTask", "gentrajinfl", "pargentrajinfl"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReplicationTask:
    """Everything a worker needs to compute replications of one configuration."""

    inflfn: Estimator
    resamplefn: ResamplingStrategy
    trendfn: TrendInjector
    data: PanelData
    rndseed: int

    def __call__(self, k: int) -> np.ndarray:
        rng = replication_rng(self.rndseed, k)
        bootsample = self.resamplefn(self.data, rng)
        trended = self.trendfn(bootsample)
        traj = np.asarray(self.inflfn(trended), dtype=float)
        if traj.ndim == 1:
            traj = traj.reshape(-1, 1)
        return traj


def _run_batch(task: ReplicationTask, ks: Sequence[int]) -> tuple[Sequence[int], np.ndarray]:
    return ks, np.stack([task(k) for k in ks], axis=2)


def _check_replications(numreplications: int) -> None:
    if numreplications <= 0:
        raise ValueError("numreplications must be positive")


def _store(out: Optional[np.ndarray], ks: Sequence[int], block: np.ndarray, total: int) -> np.ndarray:
    if out is None:
        out = np.empty(block.shape[:2] + (total,), dtype=float)
    elif block.shape[:2] != out.shape[:2]:
        raise ValueError(
            f"Replication {ks[0]} returned shape {block.shape[:2]}, expected {out.shape[:2]}"
        )
    out[:, :, ks[0] - 1 : ks[-1]] = block
    return out


def gentrajinfl(
    inflfn: Estimator,
    resamplefn: ResamplingStrategy,
    trendfn: TrendInjector,
    data: PanelData,
    numreplications: int = 100,
    rndseed: int = DEFAULT_SEED,
    showprogress: bool = True,
) -> np.ndarray:
    """Compute ``numreplications`` trajectories sequentially.

    Returns
    -------
    numpy.ndarray
        ``(T, M, K)`` array: periods x measures x replications.
    """

    _check_replications(numreplications)
    task = ReplicationTask(inflfn, resamplefn, trendfn, data, rndseed)
    out = None
    for k in tqdm(
        range(1, numreplications + 1),
        total=numreplications,
        desc="Trajectories",
        unit="sim",
        disable=not showprogress,
    ):
        traj = task(k)
        out = _store(out, [k], traj[:, :, None], numreplications)
    return out


def pargentrajinfl(
    inflfn: Estimator,
    resamplefn: ResamplingStrategy,
    trendfn: TrendInjector,
    data: PanelData,
    numreplications: int = 100,
    rndseed: int = DEFAULT_SEED,
    showprogress: bool = True,
    backend: Optional[str] = None,
    n_jobs: Optional[int] = None,
    batch_size: Optional[int] = None,
) -> np.ndarray:
    """Compute ``numreplications`` trajectories in parallel.

    Replications are grouped in contiguous batches and dispatched through
    :func:`~inflation_eval.utils.parallel.parallel_imap`; each batch writes
    its own slice of the output. ``backend`` and ``n_jobs`` default to the
    project settings.

    Returns
    -------
    numpy.ndarray
        ``(T, M, K)`` array identical to :func:`gentrajinfl` for the same seed.
    """

    _check_replications(numreplications)
    settings = get_settings()
    backend = settings.parallel_backend if backend is None else backend
    n_jobs = settings.n_jobs if n_jobs is None else n_jobs
    workers = None if n_jobs is None or n_jobs < 1 else n_jobs
    if batch_size is None:
        batch_size = max(1, numreplications // (4 * (workers or cpu_count())))

    task = ReplicationTask(inflfn, resamplefn, trendfn, data, rndseed)
    batches = list(batched(range(1, numreplications + 1), batch_size))
    logger.debug(
        "Generating %d trajectories in %d batches (backend=%s, n_jobs=%s)",
        numreplications,
        len(batches),
        backend,
        n_jobs,
    )

    out = None
    with tqdm(total=numreplications, desc="Trajectories", unit="sim", disable=not showprogress) as pbar:
        for ks, block in parallel_imap(partial(_run_batch, task), batches, backend, workers):
            out = _store(out, ks, block, numreplications)
            pbar.update(len(ks))
    return out
