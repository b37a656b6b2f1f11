"""
Core module for the Road Safety Enforcement Dashboard.

Contains path configuration, filter and chart models, and logging setup.
"""

from core.config import PathConfig
from core.models import ALL_YEARS, ChartConfig, ChartKind, FilterState, SortOrder
from core.logging_config import setup_logging, get_logger

__all__ = [
    "PathConfig",
    "ALL_YEARS",
    "ChartConfig",
    "ChartKind",
    "FilterState",
    "SortOrder",
    "setup_logging",
    "get_logger",
]
