"""
Data loader abstractions for the Road Safety Enforcement Dashboard.

Provides a unified interface for loading enforcement extracts from:
- Local CSV/Excel files
- HTTP(S) URLs (fetched with requests, parsed by pandas)

Every loader runs the same post-read steps: normalise headers, fail fast on
missing required columns, then coerce cells to the typed record schema.
"""

import io
import time
import zipfile
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

import pandas as pd
import requests
from openpyxl.utils.exceptions import InvalidFileException

from core.logging_config import get_logger
from data_processing.schema import (
    EnforcementRecord,
    coerce_frame,
    missing_columns,
    normalise_columns,
    records_from_frame,
)

logger = get_logger(__name__)

SUPPORTED_EXTENSIONS = (".csv", ".xlsx", ".xls")

SheetName = Union[int, str]


class LoadError(Exception):
    """A data file could not be fetched or parsed."""


class SchemaError(LoadError):
    """A data file parsed but lacks columns the dataset requires."""

    def __init__(self, source: str, missing: list[str]):
        self.source = source
        self.missing = missing
        super().__init__(f"{source} is missing required columns: {', '.join(missing)}")


@dataclass
class LoadResult:
    """Result of a data load operation.

    Attributes:
        df: Typed DataFrame (see data_processing.schema)
        source: Description of the data source (e.g., "file:data/fines.xlsx")
        row_count: Number of rows kept
        columns: Column names in the DataFrame
        load_time_seconds: Time taken to fetch, parse and coerce
        dropped_rows: Rows discarded because YEAR could not be parsed
    """
    df: pd.DataFrame
    source: str
    row_count: int
    columns: list[str] = field(default_factory=list)
    load_time_seconds: float = 0.0
    dropped_rows: int = 0

    def __post_init__(self):
        if not self.columns:
            self.columns = list(self.df.columns)

    def to_records(self) -> list[EnforcementRecord]:
        """Immutable typed records for the loaded rows."""
        return records_from_frame(self.df)


def _extension(name: str) -> str:
    return Path(name.split("?", 1)[0]).suffix.lower()


def _read_table(handle, ext: str, sheet_name: SheetName) -> pd.DataFrame:
    """Parse a CSV or Excel payload (path or file-like) into a raw DataFrame."""
    if ext == ".csv":
        return pd.read_csv(handle, low_memory=False)
    return pd.read_excel(handle, sheet_name=sheet_name)


class DataLoader(ABC):
    """Abstract base class for data loaders.

    Subclasses only fetch and parse; load() applies the shared schema steps.

    Args:
        dataset: Dataset name used to look up required columns
        sheet_name: Worksheet for Excel sources (index or name)
    """

    def __init__(self, dataset: str, sheet_name: SheetName = 0):
        self.dataset = dataset
        self.sheet_name = sheet_name

    @abstractmethod
    def read_raw(self) -> pd.DataFrame:
        """Fetch and parse the source into an untyped DataFrame.

        Raises:
            LoadError: If the source cannot be reached or parsed
        """
        pass

    @abstractmethod
    def validate_source(self) -> tuple[bool, str]:
        """Check if the data source is valid and accessible.

        Returns:
            Tuple of (is_valid, message).
            If is_valid is False, message explains the issue.
        """
        pass

    @property
    @abstractmethod
    def source_description(self) -> str:
        """Human-readable description of the data source."""
        pass

    def validate_dataframe(self, df: pd.DataFrame) -> tuple[bool, list[str]]:
        """Validate that a normalised DataFrame has all required columns.

        Returns:
            Tuple of (is_valid, missing_columns).
        """
        missing = missing_columns(df, self.dataset)
        return len(missing) == 0, missing

    def load(self) -> LoadResult:
        """Load, validate and coerce the source.

        Raises:
            LoadError: On fetch or parse failure
            SchemaError: If required columns are missing
        """
        start_time = time.time()

        df_raw = self.read_raw()
        logger.info(f"Read {len(df_raw)} rows from {self.source_description}")

        df = normalise_columns(df_raw)
        is_valid, missing = self.validate_dataframe(df)
        if not is_valid:
            raise SchemaError(self.source_description, missing)

        df, dropped = coerce_frame(df)

        load_time = time.time() - start_time
        logger.info(
            f"Loaded {self.dataset} dataset: {len(df)} rows in {load_time:.2f}s"
        )

        return LoadResult(
            df=df,
            source=self.source_description,
            row_count=len(df),
            load_time_seconds=load_time,
            dropped_rows=dropped,
        )


class FileDataLoader(DataLoader):
    """Loads an extract from a local CSV or Excel file.

    Args:
        file_path: Path to the .csv, .xlsx or .xls file
        dataset: Dataset name used to look up required columns
        sheet_name: Worksheet for Excel files
    """

    def __init__(self, file_path: Path | str, dataset: str, sheet_name: SheetName = 0):
        super().__init__(dataset, sheet_name)
        self.file_path = Path(file_path)

    def validate_source(self) -> tuple[bool, str]:
        """Check if the file exists and has a supported extension."""
        if not self.file_path.exists():
            return False, f"File not found: {self.file_path}"

        ext = self.file_path.suffix.lower()
        if ext not in SUPPORTED_EXTENSIONS:
            return False, f"Unsupported file type: {ext}. Must be one of {', '.join(SUPPORTED_EXTENSIONS)}"

        return True, "OK"

    @property
    def source_description(self) -> str:
        return f"file:{self.file_path}"

    def read_raw(self) -> pd.DataFrame:
        is_valid, msg = self.validate_source()
        if not is_valid:
            raise LoadError(msg)

        ext = self.file_path.suffix.lower()
        logger.debug(f"Reading {ext} file: {self.file_path}")
        try:
            return _read_table(self.file_path, ext, self.sheet_name)
        except (ValueError, OSError, zipfile.BadZipFile, InvalidFileException) as e:
            raise LoadError(f"Could not parse {self.file_path}: {e}") from e


class HttpDataLoader(DataLoader):
    """Loads an extract served over HTTP(S).

    Args:
        url: Address of the .csv or .xlsx file
        dataset: Dataset name used to look up required columns
        sheet_name: Worksheet for Excel files
        timeout: Request timeout in seconds
    """

    def __init__(self, url: str, dataset: str, sheet_name: SheetName = 0, timeout: int = 30):
        super().__init__(dataset, sheet_name)
        self.url = url
        self.timeout = timeout

    def validate_source(self) -> tuple[bool, str]:
        """Check the URL scheme and extension without fetching."""
        if not self.url.startswith(("http://", "https://")):
            return False, f"Not an HTTP(S) URL: {self.url}"

        ext = _extension(self.url)
        if ext not in SUPPORTED_EXTENSIONS:
            return False, f"Unsupported file type: {ext or '(none)'}"

        return True, "OK"

    @property
    def source_description(self) -> str:
        return f"url:{self.url}"

    def read_raw(self) -> pd.DataFrame:
        is_valid, msg = self.validate_source()
        if not is_valid:
            raise LoadError(msg)

        logger.debug(f"Fetching {self.url}")
        try:
            response = requests.get(self.url, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise LoadError(f"Failed to fetch {self.url}: {e}") from e

        try:
            return _read_table(io.BytesIO(response.content), _extension(self.url), self.sheet_name)
        except (ValueError, OSError, zipfile.BadZipFile, InvalidFileException) as e:
            raise LoadError(f"Could not parse {self.url}: {e}") from e


def get_loader(
    source: str | Path,
    dataset: str,
    sheet_name: SheetName = 0,
    **kwargs
) -> DataLoader:
    """Factory function to create the appropriate DataLoader.

    Args:
        source: Local file path or HTTP(S) URL
        dataset: Dataset name used to look up required columns
        sheet_name: Worksheet for Excel sources
        **kwargs: Additional arguments passed to the loader constructor

    Examples:
        >>> loader = get_loader("data/police_enforcement_2024_fines_TAMTONG.xlsx", "fines")
        >>> loader = get_loader("https://example.org/tests.csv", "tests", timeout=10)
    """
    if isinstance(source, str) and source.startswith(("http://", "https://")):
        return HttpDataLoader(source, dataset, sheet_name=sheet_name, **kwargs)
    return FileDataLoader(source, dataset, sheet_name=sheet_name)
