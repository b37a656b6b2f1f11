"""
Chart pipelines shared by every Dash callback.

One DashboardContext is created per process, on first use. Each chart's
pipeline is built and loaded lazily, then reused; callbacks only call the
pipeline's pure build() so concurrent browser sessions never share a
FilterState.
"""

import threading
from typing import Optional

from core.context import DashboardContext
from core.logging_config import get_logger
from data_processing.loader import LoadError
from visualization.catalogue import PAGES, get_chart_config
from visualization.pipeline import ChartPipeline

logger = get_logger(__name__)

_lock = threading.Lock()
_context: Optional[DashboardContext] = None
_pipelines: dict[str, ChartPipeline] = {}


def configure(context: DashboardContext) -> None:
    """Use an explicit context (tests, custom data directories)."""
    global _context
    with _lock:
        _close_locked()
        _context = context


def get_context() -> DashboardContext:
    global _context
    with _lock:
        if _context is None:
            _context = DashboardContext()
        return _context


def get_pipeline(chart_id: str) -> ChartPipeline:
    """Loaded pipeline for a chart id.

    Raises:
        KeyError: Unknown chart id
    """
    with _lock:
        pipeline = _pipelines.get(chart_id)
    if pipeline is not None:
        return pipeline

    pipeline = ChartPipeline(get_chart_config(chart_id), get_context())
    pipeline.load()
    with _lock:
        return _pipelines.setdefault(chart_id, pipeline)


def dataset_summary() -> dict:
    """Rows loaded per dataset used by the catalogue, plus the names that failed."""
    context = get_context()
    datasets = sorted({chart.dataset for page in PAGES for chart in page.charts})
    rows = {}
    failed = []
    for dataset in datasets:
        try:
            rows[dataset] = context.load_dataset(dataset).row_count
        except LoadError as e:
            logger.warning(f"Dataset '{dataset}' unavailable: {e}")
            failed.append(dataset)
    return {"rows": rows, "total_rows": sum(rows.values()), "failed": failed}


def _close_locked() -> None:
    global _context
    for pipeline in _pipelines.values():
        pipeline.close()
    _pipelines.clear()
    if _context is not None:
        _context.close()
    _context = None


def reset() -> None:
    """Drop all pipelines and close the context."""
    with _lock:
        _close_locked()
