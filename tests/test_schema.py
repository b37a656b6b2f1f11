"""
Tests for data_processing/schema.py - header normalisation and coercion.

Tests cover:
- Header spelling variants ("Sum(COUNT)", "Age Group")
- Jurisdiction name matching (codes, full names, substrings)
- Substance classification
- coerce_frame(): invalid years, count defaults, Unknown buckets
- EnforcementRecord derived properties
"""

import pandas as pd
import pytest

from data_processing.schema import (
    UNKNOWN,
    EnforcementRecord,
    coerce_frame,
    derive_substance,
    frame_from_records,
    missing_columns,
    normalise_column_name,
    normalise_columns,
    records_from_frame,
    resolve_jurisdiction,
)


class TestNormaliseColumnName:
    """Test header normalisation."""

    @pytest.mark.parametrize("raw,expected", [
        ("COUNT", "COUNT"),
        ("Sum(COUNT)", "COUNT"),
        ("sum( fines )", "FINES"),
        ("Age Group", "AGE_GROUP"),
        ("  JURISDICTION ", "JURISDICTION"),
        ("detection method", "DETECTION_METHOD"),
    ])
    def test_variants(self, raw, expected):
        assert normalise_column_name(raw) == expected

    def test_duplicate_headers_keep_first(self):
        """Two headers that normalise to the same name keep the first column."""
        df = pd.DataFrame([[1, 2]], columns=["COUNT", "Sum(COUNT)"])
        out = normalise_columns(df)
        assert list(out.columns) == ["COUNT"]
        assert out["COUNT"].iloc[0] == 1

    def test_missing_columns_per_dataset(self):
        df = pd.DataFrame(columns=["YEAR", "JURISDICTION"])
        assert missing_columns(df, "tests") == ["METRIC", "COUNT"]
        assert missing_columns(df, "some_other_dataset") == []


class TestResolveJurisdiction:
    """Test jurisdiction name matching."""

    @pytest.mark.parametrize("name,code", [
        ("NSW", "NSW"),
        ("nsw", "NSW"),
        ("New South Wales", "NSW"),
        ("NEW SOUTH WALES", "NSW"),
        ("State of Victoria", "VIC"),
        ("Australian Capital Territory", "ACT"),
        ("Western Australia", "WA"),
        ("South Australia", "SA"),
        ("NT Police", "NT"),
    ])
    def test_matches(self, name, code):
        assert resolve_jurisdiction(name) == code

    @pytest.mark.parametrize("name", [None, "", "Australia", "Unknown", "Other Territories"])
    def test_no_match(self, name):
        assert resolve_jurisdiction(name) is None

    def test_full_name_and_code_agree(self):
        """Both spellings of a state resolve to the same key."""
        assert resolve_jurisdiction("New South Wales") == resolve_jurisdiction("NSW")


class TestDeriveSubstance:
    @pytest.mark.parametrize("metric,substance", [
        ("breath_tests_conducted", "alcohol"),
        ("Alcohol related", "alcohol"),
        ("drink_driving", "alcohol"),
        ("drug_tests_conducted", "drug"),
        ("positive_drug_tests", "drug"),
        ("speeding", "other"),
    ])
    def test_classification(self, metric, substance):
        assert derive_substance(metric) == substance


class TestCoerceFrame:
    """Test coerce_frame() typing rules."""

    def _raw(self, rows):
        return pd.DataFrame(rows, columns=["YEAR", "JURISDICTION", "METRIC", "COUNT"])

    def test_invalid_years_are_dropped(self):
        df, dropped = coerce_frame(self._raw([
            [2023, "NSW", "breath_tests_conducted", 1],
            ["n/a", "NSW", "breath_tests_conducted", 2],
            [None, "VIC", "breath_tests_conducted", 3],
        ]))
        assert dropped == 2
        assert df["YEAR"].tolist() == [2023]
        assert df["YEAR"].dtype == "int64"

    def test_float_year_strings_are_parsed(self):
        df, _ = coerce_frame(self._raw([["2023.0", "NSW", "x", 1]]))
        assert df["YEAR"].tolist() == [2023]

    def test_bad_counts_become_zero(self):
        df, _ = coerce_frame(self._raw([
            [2023, "NSW", "x", "not a number"],
            [2023, "NSW", "x", None],
            [2023, "NSW", "x", "12"],
        ]))
        assert df["COUNT"].tolist() == [0, 0, 12]

    def test_absent_count_columns_are_zero(self):
        df, _ = coerce_frame(self._raw([[2023, "NSW", "x", 5]]))
        assert df["FINES"].tolist() == [0]
        assert df["OUTCOME_TOTAL"].tolist() == [0]

    def test_blank_categories_become_unknown(self):
        df, _ = coerce_frame(self._raw([[2023, None, "  ", 5]]))
        assert df["JURISDICTION"].iloc[0] == UNKNOWN
        assert df["METRIC"].iloc[0] == UNKNOWN
        assert df["AGE_GROUP"].iloc[0] == UNKNOWN
        assert df["LOCATION"].iloc[0] == UNKNOWN

    def test_jurisdiction_names_become_codes(self):
        df, _ = coerce_frame(self._raw([
            [2023, "Queensland", "x", 1],
            [2023, "Christmas Island", "x", 1],
        ]))
        assert df["JURISDICTION"].tolist() == ["QLD", "Christmas Island"]

    def test_derived_columns(self):
        raw = pd.DataFrame(
            [[2023, "NSW", "drug_driving", 4, 1, 2]],
            columns=["YEAR", "JURISDICTION", "METRIC", "FINES", "ARRESTS", "CHARGES"],
        )
        df, _ = coerce_frame(raw)
        assert df["SUBSTANCE"].iloc[0] == "drug"
        assert df["OUTCOME_TOTAL"].iloc[0] == 7

    def test_dates_are_optional_text(self):
        raw = self._raw([[2023, "NSW", "x", 1]]).assign(START_DATE=["2023-01-01"])
        df, _ = coerce_frame(raw)
        assert df["START_DATE"].iloc[0] == "2023-01-01"
        assert df["END_DATE"].iloc[0] is None


class TestEnforcementRecord:
    """Test typed records."""

    def test_derived_properties(self):
        record = EnforcementRecord(
            year=2024, jurisdiction="WA", metric="drink_driving", fines=3, arrests=1, charges=2
        )
        assert record.substance == "alcohol"
        assert record.outcome_total == 6

    def test_records_are_immutable(self):
        record = EnforcementRecord(year=2024, jurisdiction="WA")
        with pytest.raises(AttributeError):
            record.year = 2023

    def test_frame_records_frame(self, scenario_records):
        """Records survive a trip through a typed frame."""
        df = frame_from_records(scenario_records)
        assert records_from_frame(df) == scenario_records
