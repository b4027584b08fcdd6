"""Convenience exports for the configuration package."""

from .constants import *  # noqa: F401,F403
from .loader import ConfigError, load_config, save_config
from .logging_conf import JSONFormatter, configure_logging, log_metrics
from .schemas import BatchSpec, ComponentSpec, EvalPeriodSpec, SimulationSpec
from .settings import ENV_PREFIX, Settings, get_settings, reset_settings_cache

__all__ = [
    "JSONFormatter",
    "configure_logging",
    "log_metrics",
    "ENV_PREFIX",
    "Settings",
    "get_settings",
    "reset_settings_cache",
    # Schema classes
    "BatchSpec",
    "ComponentSpec",
    "EvalPeriodSpec",
    "SimulationSpec",
    # Loader functions
    "load_config",
    "save_config",
    "ConfigError",
]
