"""
Dashboard context: the services every chart shares for one app lifetime.

Created once when the app (or export run) starts and passed explicitly to
each ChartPipeline. close() drops cached datasets and boundaries.
"""

from pathlib import Path
from typing import Optional

from config import DashboardConfig, get_dashboard_config
from core.config import PathConfig
from core.logging_config import get_logger
from data_processing.cache import DatasetCache
from data_processing.geography import GeographyProvider
from data_processing.loader import LoadResult

logger = get_logger(__name__)


class DashboardContext:
    """
    Owns the configuration, dataset cache and geography provider.

    Args:
        config: Dashboard settings (defaults to config/dashboard.toml)
        paths: Dataset locations (defaults to the configured data directory)
        sources: Per-dataset override of path or URL, e.g. for tests
        cache: Dataset cache (a new one by default)
        geography: Boundaries provider (built from config by default)
    """

    def __init__(
        self,
        config: Optional[DashboardConfig] = None,
        paths: Optional[PathConfig] = None,
        sources: Optional[dict[str, str | Path]] = None,
        cache: Optional[DatasetCache] = None,
        geography: Optional[GeographyProvider] = None,
    ):
        self.config = config or get_dashboard_config()
        if paths is None:
            base_dir = Path.cwd()
            paths = PathConfig(base_dir=base_dir, _data_dir=base_dir / self.config.data.directory)
        self.paths = paths
        self._sources = dict(sources or {})
        self.cache = cache or DatasetCache(enabled=self.config.cache.enabled)
        self.geography = geography or GeographyProvider(
            url=self.config.geography.url,
            timeout=self.config.geography.timeout_seconds,
            enabled=self.config.geography.enabled,
        )
        self.closed = False

    def dataset_source(self, dataset: str) -> str | Path:
        """Path or URL for a dataset name.

        Raises:
            KeyError: Unknown dataset name
        """
        if dataset in self._sources:
            return self._sources[dataset]
        return self.paths.dataset_paths()[dataset]

    def load_dataset(self, dataset: str) -> LoadResult:
        """Load a dataset through the cache.

        Raises:
            LoadError: If the source cannot be read or fails validation
        """
        if self.closed:
            raise RuntimeError("DashboardContext has been closed")
        source = self.dataset_source(dataset)
        return self.cache.get_or_load(source, dataset, timeout=self.config.data.timeout_seconds)

    def close(self) -> None:
        """Release cached data. The context cannot be used afterwards."""
        if self.closed:
            return
        self.cache.clear()
        self.geography.reset()
        self.closed = True
        logger.debug("Dashboard context closed")

    def __enter__(self) -> "DashboardContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
