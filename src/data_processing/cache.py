"""
In-memory dataset cache for the Road Safety Enforcement Dashboard.

Several charts read the same extract, so loaded results are kept per
(source, sheet). The cache is an ordinary object owned by the
DashboardContext; nothing is stored at module level.

Usage:
    from data_processing.cache import DatasetCache

    cache = DatasetCache()
    result = cache.get_or_load(paths.fines_xlsx, "fines")
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from core.logging_config import get_logger
from data_processing.loader import DataLoader, LoadResult, SheetName, get_loader

logger = get_logger(__name__)

CacheKey = tuple[str, SheetName]


@dataclass
class CacheStats:
    """Statistics about the cache."""
    enabled: bool
    total_entries: int
    hit_count: int
    miss_count: int


class DatasetCache:
    """
    Keeps LoadResults keyed by (source, sheet).

    Failed loads are never cached, so a later call retries the source.

    Attributes:
        enabled: When False every call goes to the loader
    """

    def __init__(
        self,
        enabled: bool = True,
        loader_factory: Callable[..., DataLoader] = get_loader,
    ):
        self.enabled = enabled
        self._loader_factory = loader_factory
        self._entries: dict[CacheKey, LoadResult] = {}
        self._hit_count = 0
        self._miss_count = 0

    @staticmethod
    def make_key(source: str | Path, sheet_name: SheetName = 0) -> CacheKey:
        return (str(source), sheet_name)

    def get(self, source: str | Path, sheet_name: SheetName = 0) -> Optional[LoadResult]:
        """Return the cached result, or None."""
        if not self.enabled:
            return None
        return self._entries.get(self.make_key(source, sheet_name))

    def get_or_load(
        self,
        source: str | Path,
        dataset: str,
        sheet_name: SheetName = 0,
        **loader_kwargs,
    ) -> LoadResult:
        """
        Return the cached result for a source, loading it on first use.

        Raises:
            LoadError: Propagated from the loader; nothing is cached.
        """
        key = self.make_key(source, sheet_name)
        if self.enabled and key in self._entries:
            self._hit_count += 1
            logger.debug(f"Cache hit: {key}")
            return self._entries[key]

        self._miss_count += 1
        loader = self._loader_factory(source, dataset, sheet_name=sheet_name, **loader_kwargs)
        result = loader.load()

        if self.enabled:
            self._entries[key] = result
        return result

    def invalidate(self, source: str | Path, sheet_name: SheetName = 0) -> bool:
        """Drop one entry. Returns True if it was cached."""
        return self._entries.pop(self.make_key(source, sheet_name), None) is not None

    def clear(self) -> int:
        """Drop every entry. Returns the number removed."""
        count = len(self._entries)
        self._entries.clear()
        if count:
            logger.info(f"Cleared {count} cached dataset(s)")
        return count

    def stats(self) -> CacheStats:
        return CacheStats(
            enabled=self.enabled,
            total_entries=len(self._entries),
            hit_count=self._hit_count,
            miss_count=self._miss_count,
        )

    def __len__(self) -> int:
        return len(self._entries)
