"""
Hover content and legend entries for chart figures.

Plotly renders the tooltip itself; this module decides what it says. Every
point carries customdata of the form::

    [share_percent, rank, breakdown_1_value, breakdown_1_share, ...]

so templates can show a percentage of total that is 0 instead of NaN when
the total is zero.
"""

from typing import Optional

from core.models import ChartConfig, ChartKind
from data_processing.aggregation import share
from data_processing.schema import JURISDICTION_NAMES
from visualization.chart_data import ChartData


def point_customdata(data: ChartData, trace_index: int) -> list[list]:
    """customdata rows for one trace, aligned with data.categories."""
    trace = data.traces[trace_index]
    single = len(data.traces) == 1
    rows = []
    for i, value in enumerate(trace.values):
        if data.percent:
            value_share = value
        elif single:
            value_share = share(value, data.grand_total)
        else:
            value_share = share(value, data.totals[i])

        row = [round(value_share, 1), data.ranks[i] if data.ranks else ""]
        for parts in data.breakdown.values():
            row.append(parts[i])
            row.append(round(share(parts[i], data.totals[i]), 1))
        rows.append(row)
    return rows


def _category_ref(config: ChartConfig) -> tuple[str, str]:
    """Template references for (category, value) by chart kind."""
    if config.kind == ChartKind.PIE:
        return "%{label}", "%{value}"
    if config.kind == ChartKind.CHOROPLETH:
        return "%{location}", "%{z}"
    if config.orientation == "h" and config.kind in (ChartKind.BAR, ChartKind.STACKED):
        return "%{y}", "%{x}"
    return "%{x}", "%{y}"


def _formatted(ref: str, fmt: str) -> str:
    """'%{y}' + ',.0f' -> '%{y:,.0f}'"""
    return f"{ref[:-1]}:{fmt}}}"


def hover_template(config: ChartConfig, data: ChartData, trace_index: int = 0) -> str:
    """Hover template for one trace."""
    category_ref, value_ref = _category_ref(config)
    trace = data.traces[trace_index]
    single = len(data.traces) == 1

    lines = [f"<b>{category_ref}</b>"]
    if not single:
        lines.append(trace.name)

    if data.percent:
        lines.append(_formatted(value_ref, ".1f") + "%")
    else:
        lines.append(f"{data.value_label}: {_formatted(value_ref, ',.0f')}")
        share_label = "Share of total" if single else "Share of category"
        lines.append(f"{share_label}: %{{customdata[0]:.1f}}%")

    if data.ranks:
        lines.append("Rank: #%{customdata[1]}")

    for n, name in enumerate(data.breakdown):
        value_idx = 2 + n * 2
        lines.append(
            f"{name.title()}: %{{customdata[{value_idx}]:,.0f}} "
            f"(%{{customdata[{value_idx + 1}]:.1f}}%)"
        )

    return "<br>".join(lines) + "<extra></extra>"


def category_display_name(category) -> str:
    """Full state name for jurisdiction codes, the value itself otherwise."""
    return JURISDICTION_NAMES.get(str(category), str(category))


def legend_field(config: ChartConfig, data: ChartData) -> Optional[str]:
    """Column the legend swatches are labelled with: the series field when
    swatches are traces, the x field when they are categories."""
    if _legend_by_trace(config, data):
        return config.series_field
    return config.x_field


def _legend_by_trace(config: ChartConfig, data: ChartData) -> bool:
    return len(data.traces) > 1 or config.kind == ChartKind.LINE


def legend_entries(
    config: ChartConfig,
    data: ChartData,
    palette: list[str],
) -> list[tuple[str, str]]:
    """(label, colour) swatches, matching the colours the figure uses."""
    if data.is_empty:
        return []

    if _legend_by_trace(config, data):
        return [
            (trace.name, trace.color or palette[i % len(palette)])
            for i, trace in enumerate(data.traces)
        ]

    entries = []
    for i, category in enumerate(data.categories):
        color: Optional[str] = None
        if data.category_colors:
            color = data.category_colors[i]
        entries.append((str(category), color or palette[i % len(palette)]))
    return entries
