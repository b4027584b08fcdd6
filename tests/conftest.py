from __future__ import annotations

import logging

import numpy as np
import pytest

from inflation_eval.config.settings import reset_settings_cache
from inflation_eval.data import Panel, PanelSeries
from inflation_eval.estimators import InflationTotalCPI


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    """Run every test with sequential execution and no progress bars."""

    monkeypatch.setenv("INFLATION_EVAL_PARALLEL_BACKEND", "sequential")
    monkeypatch.setenv("INFLATION_EVAL_SHOW_PROGRESS", "false")
    reset_settings_cache()
    yield
    reset_settings_cache()


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(2024)


@pytest.fixture
def make_panel():
    """Factory of random panels: ``make_panel(periods, items, start, seed)``."""

    def _make(periods: int = 48, items: int = 4, start: str = "2001-01", seed: int = 0) -> Panel:
        gen = np.random.default_rng(seed)
        v = gen.normal(0.004, 0.01, size=(periods, items))
        w = gen.uniform(1.0, 3.0, size=items)
        return Panel(v, w, start)

    return _make


@pytest.fixture
def panel(make_panel) -> Panel:
    return make_panel()


@pytest.fixture
def series(make_panel) -> PanelSeries:
    """Two contiguous bases: Dec-2000..Nov-2010 and Dec-2010..Nov-2015."""

    first = make_panel(periods=120, items=5, start="2000-12", seed=1)
    second = make_panel(periods=60, items=4, start="2010-12", seed=2)
    return PanelSeries.of(first, second)


@pytest.fixture
def zero_series() -> PanelSeries:
    first = Panel(np.zeros((36, 3)), np.ones(3), "2000-12")
    second = Panel(np.zeros((24, 2)), np.ones(2), "2003-12")
    return PanelSeries.of(first, second)


@pytest.fixture
def total_cpi() -> InflationTotalCPI:
    return InflationTotalCPI()


@pytest.fixture
def caplog_info(caplog):
    caplog.set_level(logging.INFO)
    return caplog


@pytest.fixture
def restore_root_logger():
    """Undo handler changes made by ``configure_logging``."""

    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
