"""
Visualization package for the enforcement dashboard charts.

- plotly_generator: One figure builder per chart kind
- pipeline: ChartPipeline, the load -> filter -> aggregate -> draw driver
- catalogue: Every chart on the dashboard as a ChartConfig
"""

from visualization.plotly_generator import (
    FIGURE_BUILDERS,
    empty_figure,
    error_figure,
    save_figure_html,
    open_figure_in_browser,
)
from visualization.pipeline import ChartPipeline, ChartState
from visualization.catalogue import PAGES, get_chart_config

__all__ = [
    "FIGURE_BUILDERS",
    "empty_figure",
    "error_figure",
    "save_figure_html",
    "open_figure_in_browser",
    "ChartPipeline",
    "ChartState",
    "PAGES",
    "get_chart_config",
]
