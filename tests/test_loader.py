"""
Tests for data_processing/loader.py and data_processing/cache.py.

Tests cover:
- FileDataLoader for CSV and Excel extracts
- SchemaError for missing required columns
- LoadError for missing, unsupported and corrupt files
- HttpDataLoader with requests.get patched
- get_loader() dispatch
- DatasetCache hits, misses and failed loads
"""

import io
from pathlib import Path

import pandas as pd
import pytest
import requests

from data_processing.cache import DatasetCache
from data_processing.loader import (
    FileDataLoader,
    HttpDataLoader,
    LoadError,
    SchemaError,
    get_loader,
)
from tests.conftest import TESTS_CSV


class _FakeResponse:
    def __init__(self, content: bytes = b"", status_code: int = 200):
        self.content = content
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")


class TestFileDataLoader:
    """Test loading local extracts."""

    def test_load_csv(self, dataset_files):
        result = FileDataLoader(dataset_files["tests"], "tests").load()
        assert result.row_count == 6
        assert result.dropped_rows == 0
        assert result.source.startswith("file:")
        assert "COUNT" in result.columns
        assert "SUBSTANCE" in result.columns

    def test_sum_header_is_normalised(self, dataset_files):
        """The 'Sum(COUNT)' header in the extract becomes COUNT."""
        df = FileDataLoader(dataset_files["tests"], "tests").load().df
        assert df["COUNT"].sum() == 285

    def test_load_xlsx(self, temp_dir: Path):
        path = temp_dir / "tests.xlsx"
        pd.read_csv(io.StringIO(TESTS_CSV)).to_excel(path, index=False)
        result = FileDataLoader(path, "tests").load()
        assert result.row_count == 6
        assert set(result.df["JURISDICTION"]) == {"NSW", "VIC", "QLD", "Unknown"}

    def test_to_records(self, dataset_files):
        records = FileDataLoader(dataset_files["tests"], "tests").load().to_records()
        assert len(records) == 6
        assert records[0].jurisdiction == "NSW"
        assert records[0].count == 100

    def test_missing_column_raises_schema_error(self, temp_dir: Path):
        path = temp_dir / "tests.csv"
        path.write_text("YEAR,JURISDICTION,METRIC\n2023,NSW,breath\n", encoding="utf-8")
        with pytest.raises(SchemaError) as exc_info:
            FileDataLoader(path, "tests").load()
        assert exc_info.value.missing == ["COUNT"]
        assert isinstance(exc_info.value, LoadError)

    def test_missing_file(self, temp_dir: Path):
        with pytest.raises(LoadError, match="File not found"):
            FileDataLoader(temp_dir / "absent.csv", "tests").load()

    def test_unsupported_extension(self, temp_dir: Path):
        path = temp_dir / "tests.json"
        path.write_text("{}", encoding="utf-8")
        loader = FileDataLoader(path, "tests")
        is_valid, msg = loader.validate_source()
        assert not is_valid
        assert "Unsupported" in msg
        with pytest.raises(LoadError):
            loader.load()

    def test_corrupt_xlsx(self, temp_dir: Path):
        path = temp_dir / "tests.xlsx"
        path.write_bytes(b"this is not a zip archive")
        with pytest.raises(LoadError, match="Could not parse"):
            FileDataLoader(path, "tests").load()


class TestHttpDataLoader:
    """Test loading extracts over HTTP with requests patched."""

    URL = "https://example.org/extracts/tests.csv"

    def test_load_csv_over_http(self, monkeypatch):
        calls = []

        def fake_get(url, timeout):
            calls.append((url, timeout))
            return _FakeResponse(TESTS_CSV.encode("utf-8"))

        monkeypatch.setattr(requests, "get", fake_get)
        result = HttpDataLoader(self.URL, "tests", timeout=5).load()

        assert result.row_count == 6
        assert result.source == f"url:{self.URL}"
        assert calls == [(self.URL, 5)]

    def test_network_failure_raises_load_error(self, monkeypatch):
        def fake_get(url, timeout):
            raise requests.exceptions.ConnectionError("unreachable")

        monkeypatch.setattr(requests, "get", fake_get)
        with pytest.raises(LoadError, match="Failed to fetch"):
            HttpDataLoader(self.URL, "tests").load()

    def test_http_error_status(self, monkeypatch):
        monkeypatch.setattr(requests, "get", lambda url, timeout: _FakeResponse(status_code=404))
        with pytest.raises(LoadError):
            HttpDataLoader(self.URL, "tests").load()

    def test_unsupported_url_extension(self):
        loader = HttpDataLoader("https://example.org/tests.json", "tests")
        assert loader.validate_source()[0] is False

    def test_query_string_is_ignored_for_extension(self):
        loader = HttpDataLoader("https://example.org/tests.csv?raw=true", "tests")
        assert loader.validate_source() == (True, "OK")


class TestGetLoader:
    """Test loader factory dispatch."""

    def test_url_gives_http_loader(self):
        loader = get_loader("https://example.org/tests.csv", "tests", timeout=3)
        assert isinstance(loader, HttpDataLoader)
        assert loader.timeout == 3

    def test_path_gives_file_loader(self, temp_dir: Path):
        assert isinstance(get_loader(temp_dir / "x.csv", "tests"), FileDataLoader)

    def test_file_loader_ignores_timeout(self, temp_dir: Path):
        """Loader kwargs meant for HTTP sources are accepted for files."""
        assert isinstance(get_loader(str(temp_dir / "x.csv"), "tests", timeout=3), FileDataLoader)


class TestDatasetCache:
    """Test DatasetCache behaviour."""

    def test_second_load_is_a_hit(self, dataset_files):
        cache = DatasetCache()
        first = cache.get_or_load(dataset_files["tests"], "tests")
        second = cache.get_or_load(dataset_files["tests"], "tests")

        assert first is second
        stats = cache.stats()
        assert stats.hit_count == 1
        assert stats.miss_count == 1
        assert stats.total_entries == 1

    def test_failed_load_is_not_cached(self, temp_dir: Path):
        cache = DatasetCache()
        missing = temp_dir / "absent.csv"
        for _ in range(2):
            with pytest.raises(LoadError):
                cache.get_or_load(missing, "tests")
        assert len(cache) == 0
        assert cache.stats().miss_count == 2

    def test_disabled_cache_always_loads(self, dataset_files):
        cache = DatasetCache(enabled=False)
        first = cache.get_or_load(dataset_files["tests"], "tests")
        second = cache.get_or_load(dataset_files["tests"], "tests")
        assert first is not second
        assert cache.get(dataset_files["tests"]) is None

    def test_invalidate_and_clear(self, dataset_files):
        cache = DatasetCache()
        cache.get_or_load(dataset_files["tests"], "tests")
        cache.get_or_load(dataset_files["fines"], "fines")

        assert cache.invalidate(dataset_files["tests"]) is True
        assert cache.invalidate(dataset_files["tests"]) is False
        assert cache.clear() == 1
        assert len(cache) == 0

    def test_custom_loader_factory(self, dataset_files):
        created = []

        def factory(source, dataset, sheet_name=0, **kwargs):
            created.append(dataset)
            return FileDataLoader(source, dataset, sheet_name=sheet_name)

        cache = DatasetCache(loader_factory=factory)
        cache.get_or_load(dataset_files["fines"], "fines")
        assert created == ["fines"]
