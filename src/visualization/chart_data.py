"""
Filter-and-aggregate step shared by every chart kind.

prepare_chart_data() turns a typed frame, a ChartConfig and a FilterState
into a ChartData: ordered categories plus one or more aligned value traces.
Figure builders only ever see ChartData.
"""

from dataclasses import dataclass, field
from typing import Optional

import pandas as pd

from core.models import ChartConfig, FilterState, SortOrder
from data_processing.aggregation import (
    aggregate,
    apply_filters,
    normalise_to_percent,
    pivot_series,
    rank_series,
)

_TOTAL_COLUMN = "_TOTAL"


@dataclass
class TraceData:
    """One drawable series aligned with ChartData.categories."""
    name: str
    values: list[float]
    color: Optional[str] = None


@dataclass
class ChartData:
    """
    Aggregated, ordered values ready to draw.

    Attributes:
        categories: Category axis values in display order
        traces: Value series, each aligned with categories
        totals: Per-category sum across traces (before any percent scaling)
        value_label: Axis/tooltip label for the values
        ranks: 1-based rank per category for value-sorted single-series charts
        category_colors: Fixed colour per category, when the chart defines them
        breakdown: Tooltip split per category, e.g. {"alcohol": [...], "drug": [...]}
        percent: Values are percentages of each category total
        subtitle: Human-readable description of the active filters
    """
    categories: list = field(default_factory=list)
    traces: list[TraceData] = field(default_factory=list)
    totals: list[float] = field(default_factory=list)
    value_label: str = ""
    ranks: Optional[list[int]] = None
    category_colors: Optional[list[Optional[str]]] = None
    breakdown: dict[str, list[float]] = field(default_factory=dict)
    percent: bool = False
    subtitle: str = ""

    @property
    def is_empty(self) -> bool:
        return len(self.categories) == 0

    @property
    def grand_total(self) -> float:
        return float(sum(self.totals))

    @property
    def max_value(self) -> float:
        """Largest value the numeric axis must fit."""
        if self.is_empty:
            return 0.0
        if self.percent:
            return 100.0
        return float(max(max(trace.values, default=0.0) for trace in self.traces))

    @property
    def max_total(self) -> float:
        return float(max(self.totals, default=0.0))


def describe_filters(config: ChartConfig, filters: FilterState) -> str:
    """Subtitle text for the active selection."""
    parts = []
    if config.has_facet("year"):
        parts.append("All Years Combined" if not filters.has_year_filter else str(filters.year))
    elif config.min_year is not None:
        parts.append(f"{config.min_year} onwards")
    if config.has_facet("jurisdiction"):
        if filters.jurisdictions is None:
            parts.append("All jurisdictions")
        else:
            parts.append(f"{len(filters.jurisdictions)} jurisdiction(s)")
    if config.has_facet("substance") and filters.has_substance_filter:
        parts.append(filters.substance.title())
    if config.metric_options:
        parts.append(config.label_for(config.active_value_fields(filters)[0]))
    return " | ".join(parts)


def prepare_chart_data(
    config: ChartConfig,
    df: pd.DataFrame,
    filters: FilterState,
) -> ChartData:
    """
    Filter and aggregate a typed frame for one chart.

    Returns:
        ChartData. ``is_empty`` is True when the selection matches no records.
    """
    filtered = apply_filters(df, filters, min_year=config.min_year)
    value_fields = config.active_value_fields(filters)
    exclude = config.excluded_categories or None
    subtitle = describe_filters(config, filters)

    if config.series_field:
        data = _series_chart_data(config, filtered, value_fields[0], exclude)
    elif len(value_fields) > 1:
        data = _multi_field_chart_data(config, filtered, value_fields, exclude)
    else:
        data = _single_field_chart_data(config, filtered, value_fields[0], exclude)

    data.subtitle = subtitle
    if data.is_empty:
        return data

    if config.breakdown_field:
        breakdown_categories, matrix = pivot_series(
            filtered, config.x_field, config.breakdown_field, value_fields[0],
            config.reducer, exclude=exclude,
        )
        index = {category: i for i, category in enumerate(breakdown_categories)}
        data.breakdown = {
            str(name): [values[index[c]] if c in index else 0.0 for c in data.categories]
            for name, values in matrix.items()
        }

    if config.percent_stack:
        # A 100% bar of nothing is meaningless
        _reorder(data, [i for i, total in enumerate(data.totals) if total > 0])
        if data.is_empty:
            return data
        matrix = {trace.name: trace.values for trace in data.traces}
        percents = normalise_to_percent(matrix)
        for trace in data.traces:
            trace.values = percents[trace.name]
        data.percent = True
        if config.sort == SortOrder.VALUE_DESC and data.traces:
            _reorder(data, sorted(
                range(len(data.categories)), key=lambda i: -data.traces[0].values[i]
            ))

    return data


def _reorder(data: ChartData, order: list[int]) -> None:
    data.categories = [data.categories[i] for i in order]
    data.totals = [data.totals[i] for i in order]
    for trace in data.traces:
        trace.values = [trace.values[i] for i in order]
    if data.category_colors is not None:
        data.category_colors = [data.category_colors[i] for i in order]
    if data.ranks is not None:
        data.ranks = list(range(1, len(order) + 1))
    data.breakdown = {k: [v[i] for i in order] for k, v in data.breakdown.items()}


def _single_field_chart_data(config, filtered, value_field, exclude) -> ChartData:
    entries = aggregate(
        filtered, config.x_field, value_field, config.reducer,
        exclude=exclude, sort=config.sort,
    )
    ranks = None
    if config.sort == SortOrder.VALUE_DESC:
        entries = rank_series(entries)
        ranks = [entry.rank for entry in entries]

    categories = [entry.key[0] for entry in entries]
    values = [entry.value for entry in entries]
    category_colors = None
    if config.colors:
        category_colors = [config.colors.get(str(c)) for c in categories]

    return ChartData(
        categories=categories,
        traces=[TraceData(name=config.label_for(value_field), values=values)],
        totals=list(values),
        value_label=config.y_label or config.label_for(value_field),
        ranks=ranks,
        category_colors=category_colors,
    )


def _multi_field_chart_data(config, filtered, value_fields, exclude) -> ChartData:
    with_total = filtered.assign(**{_TOTAL_COLUMN: filtered[list(value_fields)].sum(axis=1)})
    order = aggregate(
        with_total, config.x_field, _TOTAL_COLUMN, config.reducer,
        exclude=exclude, sort=config.sort,
    )
    categories = [entry.key[0] for entry in order]

    traces = []
    for value_field in value_fields:
        lookup = {
            entry.key[0]: entry.value
            for entry in aggregate(with_total, config.x_field, value_field, config.reducer, exclude=exclude)
        }
        traces.append(TraceData(
            name=config.label_for(value_field),
            values=[lookup.get(c, 0.0) for c in categories],
            color=config.colors.get(value_field),
        ))

    return ChartData(
        categories=categories,
        traces=traces,
        totals=[entry.value for entry in order],
        value_label=config.y_label or "Count",
    )


def _series_chart_data(config, filtered, value_field, exclude) -> ChartData:
    categories, matrix = pivot_series(
        filtered, config.x_field, config.series_field, value_field, config.reducer,
        exclude=exclude, sort=config.sort,
    )
    traces = [
        TraceData(name=str(series), values=values, color=config.colors.get(str(series)))
        for series, values in matrix.items()
    ]
    totals = [sum(column) for column in zip(*matrix.values())] if matrix else []

    return ChartData(
        categories=categories,
        traces=traces,
        totals=[float(t) for t in totals],
        value_label=config.y_label or config.label_for(value_field),
    )
