"""
Aggregation of enforcement records into chart-ready series.

All charts reduce the same way: filter the typed frame by the chart's
FilterState, group by one or more categorical columns, reduce a numeric
column, then order the groups. Records may be passed as a DataFrame from the
loader or as an iterable of EnforcementRecord.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Union

import numpy as np
import pandas as pd

from core.models import ALL_YEARS, FilterState, SortOrder
from data_processing.schema import EnforcementRecord, frame_from_records

Records = Union[pd.DataFrame, Iterable[EnforcementRecord]]


@dataclass(frozen=True)
class SeriesEntry:
    """One aggregated group: its key tuple and reduced value."""
    key: tuple
    value: float
    rank: Optional[int] = None

    @property
    def label(self) -> str:
        return " / ".join(str(part) for part in self.key)


def _as_frame(records: Records) -> pd.DataFrame:
    if isinstance(records, pd.DataFrame):
        return records
    return frame_from_records(list(records))


def _to_python(value):
    # numpy scalars from groupby keys -> plain ints/strings for stable equality and JSON
    if isinstance(value, np.generic):
        return value.item()
    return value


def _key_sort_value(part) -> tuple:
    if isinstance(part, (int, float)) and not isinstance(part, bool):
        return (0, part, "")
    return (1, 0, str(part))


def sort_series(entries: list[SeriesEntry], order: SortOrder) -> list[SeriesEntry]:
    """
    Order series entries.

    VALUE_DESC is a stable sort, so equal values keep their first-appearance
    order. KEY_ASC sorts numbers before text.
    """
    if order == SortOrder.VALUE_DESC:
        return sorted(entries, key=lambda e: -e.value)
    if order == SortOrder.KEY_ASC:
        return sorted(entries, key=lambda e: tuple(_key_sort_value(p) for p in e.key))
    return list(entries)


def aggregate(
    records: Records,
    group_keys: Union[str, Sequence[str]],
    value_field: str,
    reducer: str = "sum",
    *,
    exclude: Optional[Iterable[str]] = None,
    sort: SortOrder = SortOrder.INSERTION,
) -> list[SeriesEntry]:
    """
    Group records and reduce one numeric column.

    Args:
        records: Typed frame or EnforcementRecords
        group_keys: Column name or names forming the group key
        value_field: Numeric column to reduce
        reducer: "sum", "count" (rows per group) or "mean"
        exclude: Category values to drop from any group key column
        sort: Output ordering

    Returns:
        List of SeriesEntry. Missing categories appear as their own group.

    Raises:
        ValueError: Unknown reducer or column
    """
    keys = [group_keys] if isinstance(group_keys, str) else list(group_keys)
    df = _as_frame(records)

    missing = [col for col in [*keys, value_field] if col not in df.columns]
    if missing:
        raise ValueError(f"Cannot aggregate, columns not found: {missing}")

    if exclude:
        excluded = set(exclude)
        mask = pd.Series(False, index=df.index)
        for key in keys:
            mask |= df[key].isin(excluded)
        df = df.loc[~mask]

    if df.empty:
        return []

    grouped = df.groupby(keys, sort=False, dropna=False)[value_field]
    if reducer == "sum":
        reduced = grouped.sum()
    elif reducer == "count":
        reduced = grouped.size()
    elif reducer == "mean":
        reduced = grouped.mean()
    else:
        raise ValueError(f"Unknown reducer: {reducer!r}")

    entries = []
    for key, value in reduced.items():
        key_tuple = key if isinstance(key, tuple) else (key,)
        entries.append(
            SeriesEntry(
                key=tuple(_to_python(part) for part in key_tuple),
                value=float(value) if pd.notna(value) else 0.0,
            )
        )

    return sort_series(entries, sort)


def rank_series(entries: list[SeriesEntry]) -> list[SeriesEntry]:
    """Assign ranks 1..n in the current order."""
    return [
        SeriesEntry(key=entry.key, value=entry.value, rank=position)
        for position, entry in enumerate(entries, start=1)
    ]


def series_total(entries: Iterable[SeriesEntry]) -> float:
    return float(sum(entry.value for entry in entries))


def share(part: float, total: float) -> float:
    """Percentage of total, 0.0 when the total is zero or not finite."""
    if not total or not np.isfinite(total):
        return 0.0
    result = part / total * 100
    return float(result) if np.isfinite(result) else 0.0


def apply_filters(
    df: pd.DataFrame,
    filters: FilterState,
    *,
    min_year: Optional[int] = None,
) -> pd.DataFrame:
    """Rows of a typed frame matching a FilterState."""
    mask = pd.Series(True, index=df.index)

    if min_year is not None:
        mask &= df["YEAR"] >= min_year
    if filters.year != ALL_YEARS:
        mask &= df["YEAR"] == filters.year
    if filters.jurisdictions is not None:
        mask &= df["JURISDICTION"].isin(filters.jurisdictions)
    if filters.substance != "both":
        mask &= df["SUBSTANCE"] == filters.substance
    if filters.age_groups is not None:
        mask &= df["AGE_GROUP"].isin(filters.age_groups)

    return df.loc[mask]


def available_values(
    df: pd.DataFrame,
    field: str,
    exclude: Iterable[str] = (),
) -> list:
    """Distinct values of a column, numbers ascending then text ascending."""
    excluded = set(exclude)
    values = [_to_python(v) for v in df[field].dropna().unique() if v not in excluded]
    return sorted(values, key=_key_sort_value)


def top_categories(
    df: pd.DataFrame,
    field: str,
    value_fields: Sequence[str],
    n: int,
) -> list:
    """The n categories of `field` with the largest combined value."""
    if df.empty:
        return []
    totals = df[list(value_fields)].sum(axis=1).groupby(df[field], sort=False).sum()
    entries = [SeriesEntry(key=(_to_python(k),), value=float(v)) for k, v in totals.items()]
    return [entry.key[0] for entry in sort_series(entries, SortOrder.VALUE_DESC)[:n]]


def pivot_series(
    records: Records,
    x_field: str,
    series_field: str,
    value_field: str,
    reducer: str = "sum",
    *,
    exclude: Optional[Iterable[str]] = None,
    sort: SortOrder = SortOrder.INSERTION,
    series_sort: SortOrder = SortOrder.KEY_ASC,
) -> tuple[list, dict]:
    """
    Aggregate into an x-by-series matrix.

    The x categories are ordered by `sort` applied to their totals across all
    series. Cells with no records are 0.

    Returns:
        (x_categories, {series_value: [value per x category]})
    """
    df = _as_frame(records)
    totals = aggregate(df, x_field, value_field, reducer, exclude=exclude, sort=sort)
    x_categories = [entry.key[0] for entry in totals]

    cells = aggregate(df, [x_field, series_field], value_field, reducer, exclude=exclude)
    series_keys = [
        entry.key[0]
        for entry in sort_series(
            aggregate(df, series_field, value_field, reducer, exclude=exclude), series_sort
        )
    ]

    lookup = {entry.key: entry.value for entry in cells}
    matrix = {
        series: [lookup.get((x, series), 0.0) for x in x_categories]
        for series in series_keys
    }
    return x_categories, matrix


def normalise_to_percent(matrix: dict) -> dict:
    """Convert each x column of a pivot matrix to percentages of its column total."""
    if not matrix:
        return {}
    columns = list(zip(*matrix.values()))
    totals = [sum(column) for column in columns]
    return {
        series: [share(value, totals[i]) for i, value in enumerate(values)]
        for series, values in matrix.items()
    }
