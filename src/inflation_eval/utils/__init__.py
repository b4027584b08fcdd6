"""Seed and parallel execution helpers."""

from .parallel import BACKENDS, batched, parallel_imap, parallel_map
from .seed import (
    MAX_SEED_VALUE,
    fold_seed,
    hash_seed_from_config,
    normalize_seed,
    register_seed_logging,
    replication_rng,
    rng_factory,
)

__all__ = [
    "BACKENDS",
    "batched",
    "parallel_imap",
    "parallel_map",
    "MAX_SEED_VALUE",
    "fold_seed",
    "hash_seed_from_config",
    "normalize_seed",
    "register_seed_logging",
    "replication_rng",
    "rng_factory",
]
