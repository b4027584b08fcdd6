"""Monte Carlo evaluation toolkit for inflation estimators.

The code lives in ``src/inflation_eval/`` and is organised in layers:

- ``data``: monthly price-change panels and multi-vintage series;
- ``resampling`` and ``trends``: stochastic perturbations of the panels;
- ``simulation`` and ``evaluation``: trajectory generation and error metrics;
- ``combination``: optimal linear combinations of estimators.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:  # pragma: no cover - depends on the package being installed
    __version__ = version("inflation-eval")
except PackageNotFoundError:  # pragma: no cover - source checkout without install
    __version__ = "0.0.0"

__all__ = ["__version__"]
