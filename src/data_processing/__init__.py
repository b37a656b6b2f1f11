"""
Data processing module for the Road Safety Enforcement Dashboard.

Submodules:
    schema: Header normalisation, required columns and typed records
    loader: File and HTTP loaders for the ETL extracts
    cache: In-memory dataset cache owned by the dashboard context
    aggregation: Filtering, grouping, sorting and share calculations
    geography: State boundaries and jurisdiction name matching
"""

from data_processing.schema import (
    ALL_AGES,
    JURISDICTION_CODES,
    JURISDICTION_NAMES,
    UNKNOWN,
    EnforcementRecord,
    records_from_frame,
    resolve_jurisdiction,
)
from data_processing.loader import (
    DataLoader,
    FileDataLoader,
    HttpDataLoader,
    LoadError,
    LoadResult,
    SchemaError,
    get_loader,
)
from data_processing.cache import CacheStats, DatasetCache
from data_processing.aggregation import (
    SeriesEntry,
    aggregate,
    apply_filters,
    rank_series,
    share,
)
from data_processing.geography import GeographyProvider, GeoLoadError

__all__ = [
    "ALL_AGES",
    "JURISDICTION_CODES",
    "JURISDICTION_NAMES",
    "UNKNOWN",
    "EnforcementRecord",
    "records_from_frame",
    "resolve_jurisdiction",
    "DataLoader",
    "FileDataLoader",
    "HttpDataLoader",
    "LoadError",
    "LoadResult",
    "SchemaError",
    "get_loader",
    "CacheStats",
    "DatasetCache",
    "SeriesEntry",
    "aggregate",
    "apply_filters",
    "rank_series",
    "share",
    "GeographyProvider",
    "GeoLoadError",
]
