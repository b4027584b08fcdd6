"""Panel data model."""

from .panel import MonthLike, Panel, PanelSeries, contiguous_dates, to_month

__all__ = ["MonthLike", "Panel", "PanelSeries", "contiguous_dates", "to_month"]
