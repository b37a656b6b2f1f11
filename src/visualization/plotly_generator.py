"""
Plotly figure generation for the enforcement dashboard.

Each chart kind has one builder taking a ChartConfig and prepared ChartData.
Builders always return a brand-new figure, so redrawing never accumulates
stale traces. FIGURE_BUILDERS maps ChartKind to its builder.
"""

import webbrowser
from typing import Callable, Optional

import numpy as np
import plotly.graph_objects as go

from core.logging_config import get_logger
from core.models import ChartConfig, ChartKind
from data_processing.geography import FEATURE_ID_PROPERTY, OUTLINE_ID_PROPERTY
from visualization.chart_data import ChartData
from visualization.responsive import ChartDimensions
from visualization.tooltips import (
    category_display_name,
    hover_template,
    point_customdata,
)

logger = get_logger(__name__)

# ---------------------------------------------------------------------------
# Shared styling constants
# ---------------------------------------------------------------------------

CHART_FONT_FAMILY = "Inter, system-ui, sans-serif"
CHART_TITLE_SIZE = 18
CHART_TITLE_COLOR = "#1E293B"
GRID_COLOR = "#E2E8F0"
ANNOTATION_COLOR = "#64748B"
NO_DATA_COLOR = "#E2E8F0"
DEFAULT_BAR_COLOR = "#3B82F6"

EMPTY_MESSAGE = "No data for selection"

JURISDICTION_COLORS = {
    "ACT": "#E74C3C",
    "NSW": "#3498DB",
    "NT": "#F39C12",
    "QLD": "#9B59B6",
    "SA": "#1ABC9C",
    "TAS": "#E67E22",
    "VIC": "#2ECC71",
    "WA": "#34495E",
}

DRUG_TYPE_COLORS = {
    "AMPHETAMINE": "#EF4444",
    "CANNABIS": "#10B981",
    "COCAINE": "#3B82F6",
    "ECSTASY": "#F59E0B",
    "METHYLAMPHETAMINE": "#8B5CF6",
    "OTHER": "#6B7280",
}

SUBSTANCE_COLORS = {
    "alcohol": "#3B82F6",
    "drug": "#EF4444",
    "other": "#94A3B8",
}

# Gold, silver, bronze, then neutral
RANK_COLORS = ["#F59E0B", "#9CA3AF", "#D97706"]
RANK_DEFAULT_COLOR = "#64748B"

SERIES_PALETTE = [
    "#2563EB", "#DC2626", "#059669", "#EA580C", "#7C3AED",
    "#0891B2", "#DB2777", "#CA8A04", "#4B5563", "#65A30D",
]

# Choropleth opacity keeps low non-zero values visibly distinct from no-data
OPACITY_MIN = 0.3
OPACITY_MAX = 0.85


def _smart_legend(n_items: int, legend_title: str = "") -> dict:
    """Return a legend dict that adapts to the number of items.

    - >10 items: vertical legend to the right of the chart
    - <=10 items: horizontal legend below the chart
    """
    base = dict(
        font=dict(family=CHART_FONT_FAMILY, size=11),
    )
    if legend_title:
        base["title"] = legend_title

    if n_items > 10:
        base.update(orientation="v", x=1.02, y=1, xanchor="left", yanchor="top")
    else:
        base.update(orientation="h", yanchor="top", y=-0.18, xanchor="center", x=0.5)
    return base


def _smart_legend_margin(n_items: int) -> dict:
    """Bottom/right margin that leaves room for the legend from _smart_legend()."""
    if n_items > 10:
        return dict(r=140, b=60)
    rows = max(1, (n_items + 5) // 6)
    return dict(b=max(80, rows * 28 + 60), r=24)


def _base_layout(title: str, subtitle: str = "", **overrides) -> dict:
    """Return a dict of shared Plotly layout properties.

    Args:
        title: Display title for the chart.
        subtitle: Optional second line, rendered smaller.
        **overrides: Any key accepted by ``fig.update_layout()``.

    Returns:
        Dict ready to be unpacked into ``fig.update_layout(**layout)``.
    """
    text = title
    if subtitle:
        text = f"{title}<br><sup>{subtitle}</sup>"
    layout = dict(
        title=dict(
            text=text,
            font=dict(family=CHART_FONT_FAMILY, size=CHART_TITLE_SIZE, color=CHART_TITLE_COLOR),
            x=0.5,
            xanchor="center",
        ),
        hoverlabel=dict(
            bgcolor="#FFFFFF",
            bordercolor="#CBD5E1",
            font=dict(family=CHART_FONT_FAMILY, size=13, color=CHART_TITLE_COLOR),
        ),
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        autosize=True,
        font=dict(family=CHART_FONT_FAMILY),
        transition=dict(duration=500, easing="cubic-in-out"),
    )
    layout.update(overrides)
    return layout


def value_axis_range(max_value: float, headroom: float) -> list[float]:
    """Linear axis domain [0, max * headroom]; [0, 1] when there is nothing to show."""
    if not np.isfinite(max_value) or max_value <= 0:
        return [0, 1]
    return [0, max_value * headroom]


def opacity_for(values: list[float], max_value: float) -> list[float]:
    """Map [0, max] linearly onto [OPACITY_MIN, OPACITY_MAX]."""
    if max_value <= 0:
        return [OPACITY_MIN for _ in values]
    return [
        OPACITY_MIN + (OPACITY_MAX - OPACITY_MIN) * min(max(v / max_value, 0.0), 1.0)
        for v in values
    ]


def rank_color(rank: Optional[int]) -> str:
    if rank is not None and 1 <= rank <= len(RANK_COLORS):
        return RANK_COLORS[rank - 1]
    return RANK_DEFAULT_COLOR


def _message_figure(title: str, message: str, color: str = ANNOTATION_COLOR) -> go.Figure:
    fig = go.Figure()
    fig.add_annotation(
        text=message,
        xref="paper", yref="paper", x=0.5, y=0.5,
        showarrow=False,
        font=dict(size=16, color=color, family=CHART_FONT_FAMILY),
    )
    fig.update_layout(**_base_layout(
        title,
        xaxis=dict(visible=False),
        yaxis=dict(visible=False),
        height=400,
    ))
    return fig


def empty_figure(title: str = "", message: str = EMPTY_MESSAGE) -> go.Figure:
    """Placeholder drawn when the current selection matches no records."""
    return _message_figure(title, message)


def error_figure(title: str, message: str) -> go.Figure:
    """Visible error state drawn in place of a chart that failed to load."""
    return _message_figure(title, f"Unable to load chart data.<br>{message}", color="#DC2626")


def _trace_color(data: ChartData, index: int) -> str:
    trace = data.traces[index]
    return trace.color or SERIES_PALETTE[index % len(SERIES_PALETTE)]


def _category_axis(config: ChartConfig, data: ChartData, title: str) -> dict:
    categories = [str(c) for c in data.categories]
    return dict(
        title=title,
        type="category",
        categoryorder="array",
        categoryarray=categories,
        gridcolor=GRID_COLOR,
        automargin=True,
    )


def _value_axis(config: ChartConfig, data: ChartData, max_value: float) -> dict:
    axis = dict(
        title=data.value_label if not data.percent else "Percentage",
        range=value_axis_range(max_value, config.headroom) if not data.percent else [0, 100],
        gridcolor=GRID_COLOR,
        zeroline=True,
        zerolinecolor=GRID_COLOR,
    )
    if data.percent:
        axis["ticksuffix"] = "%"
    return axis


def _apply_axes(fig: go.Figure, config: ChartConfig, data: ChartData, max_value: float) -> None:
    category_axis = _category_axis(config, data, config.x_label)
    value_axis = _value_axis(config, data, max_value)
    if config.orientation == "h":
        # Largest value at the top of a horizontal ranking
        category_axis["autorange"] = "reversed"
        fig.update_layout(xaxis=value_axis, yaxis=category_axis)
    else:
        fig.update_layout(xaxis=category_axis, yaxis=value_axis)


def create_bar_figure(config: ChartConfig, data: ChartData, **_) -> go.Figure:
    """
    Vertical or horizontal bars; grouped when there are several traces.

    Single-trace ranking charts colour bars by rank (gold, silver, bronze).
    """
    if data.is_empty:
        return empty_figure(config.title)

    fig = go.Figure()
    categories = [str(c) for c in data.categories]
    horizontal = config.orientation == "h"

    for i, trace in enumerate(data.traces):
        if len(data.traces) == 1:
            if data.ranks and not data.category_colors:
                colors = [rank_color(r) for r in data.ranks]
            elif data.category_colors:
                colors = [c or DEFAULT_BAR_COLOR for c in data.category_colors]
            else:
                colors = trace.color or DEFAULT_BAR_COLOR
        else:
            colors = _trace_color(data, i)

        text = None
        if data.ranks:
            text = [f"#{r}" for r in data.ranks]

        fig.add_trace(go.Bar(
            name=trace.name,
            x=trace.values if horizontal else categories,
            y=categories if horizontal else trace.values,
            orientation=config.orientation,
            marker=dict(color=colors, line=dict(width=0)),
            text=text,
            textposition="outside" if text else None,
            customdata=point_customdata(data, i),
            hovertemplate=hover_template(config, data, i),
        ))

    n_traces = len(data.traces)
    layout = _base_layout(
        config.title,
        data.subtitle,
        barmode="group",
        showlegend=n_traces > 1,
        margin=dict(t=80, l=8, **_smart_legend_margin(n_traces)),
    )
    if n_traces > 1:
        layout["legend"] = _smart_legend(n_traces)
    fig.update_layout(**layout)
    _apply_axes(fig, config, data, data.max_value)
    return fig


def create_line_figure(config: ChartConfig, data: ChartData, **_) -> go.Figure:
    """One line with markers per trace over an ordered category axis (usually YEAR)."""
    if data.is_empty:
        return empty_figure(config.title)

    fig = go.Figure()
    categories = [str(c) for c in data.categories]
    for i, trace in enumerate(data.traces):
        color = _trace_color(data, i)
        fig.add_trace(go.Scatter(
            x=categories,
            y=trace.values,
            mode="lines+markers",
            name=trace.name,
            line=dict(color=color, width=3),
            marker=dict(color=color, size=8),
            customdata=point_customdata(data, i),
            hovertemplate=hover_template(config, data, i),
        ))

    n_traces = len(data.traces)
    layout = _base_layout(
        config.title,
        data.subtitle,
        showlegend=n_traces > 1,
        legend=_smart_legend(n_traces),
        margin=dict(t=80, l=8, **_smart_legend_margin(n_traces)),
        hovermode="closest",
    )
    fig.update_layout(**layout)
    _apply_axes(fig, config, data, data.max_value)
    return fig


def create_pie_figure(config: ChartConfig, data: ChartData, **_) -> go.Figure:
    """Donut chart of category shares."""
    if data.is_empty or data.grand_total <= 0:
        return empty_figure(config.title)

    trace = data.traces[0]
    colors = [
        (data.category_colors[i] if data.category_colors and data.category_colors[i] else None)
        or SERIES_PALETTE[i % len(SERIES_PALETTE)]
        for i in range(len(data.categories))
    ]
    fig = go.Figure(go.Pie(
        labels=[str(c) for c in data.categories],
        values=trace.values,
        hole=0.45,
        sort=False,
        direction="clockwise",
        marker=dict(colors=colors, line=dict(color="#FFFFFF", width=2)),
        textinfo="percent",
        customdata=point_customdata(data, 0),
        hovertemplate=hover_template(config, data, 0),
    ))

    n_items = len(data.categories)
    fig.update_layout(**_base_layout(
        config.title,
        data.subtitle,
        legend=_smart_legend(n_items),
        margin=dict(t=80, l=8, **_smart_legend_margin(n_items)),
    ))
    return fig


def create_stacked_figure(config: ChartConfig, data: ChartData, **_) -> go.Figure:
    """Stacked bars, absolute or normalised to 100%."""
    if data.is_empty:
        return empty_figure(config.title)

    fig = go.Figure()
    categories = [str(c) for c in data.categories]
    horizontal = config.orientation == "h"
    for i, trace in enumerate(data.traces):
        fig.add_trace(go.Bar(
            name=trace.name,
            x=trace.values if horizontal else categories,
            y=categories if horizontal else trace.values,
            orientation=config.orientation,
            marker=dict(color=_trace_color(data, i)),
            customdata=point_customdata(data, i),
            hovertemplate=hover_template(config, data, i),
        ))

    n_traces = len(data.traces)
    fig.update_layout(**_base_layout(
        config.title,
        data.subtitle,
        barmode="stack",
        legend=_smart_legend(n_traces),
        margin=dict(t=80, l=8, **_smart_legend_margin(n_traces)),
    ))
    _apply_axes(fig, config, data, data.max_total)
    return fig


def create_choropleth_figure(
    config: ChartConfig,
    data: ChartData,
    geojson: Optional[dict] = None,
    outline_ids: Optional[list[str]] = None,
    centroids: Optional[dict] = None,
    color_scale: Optional[str] = None,
    **_,
) -> go.Figure:
    """
    Filled state map joined on ``properties.jurisdiction``.

    Colour runs sequentially over [0, max]; marker opacity follows a separate
    linear map so low counts stay distinguishable from regions with no data,
    which are drawn underneath in a flat grey.
    """
    if data.is_empty or geojson is None:
        return empty_figure(config.title)

    fig = go.Figure()

    if outline_ids:
        fig.add_trace(go.Choropleth(
            geojson=geojson,
            featureidkey=f"properties.{OUTLINE_ID_PROPERTY}",
            locations=outline_ids,
            z=[0] * len(outline_ids),
            colorscale=[[0, NO_DATA_COLOR], [1, NO_DATA_COLOR]],
            showscale=False,
            marker=dict(line=dict(color="#FFFFFF", width=1)),
            hoverinfo="skip",
            name="No data",
        ))

    values = data.traces[0].values
    max_value = max(values, default=0.0)
    locations = [str(c) for c in data.categories]

    fig.add_trace(go.Choropleth(
        geojson=geojson,
        featureidkey=f"properties.{FEATURE_ID_PROPERTY}",
        locations=locations,
        z=values,
        zmin=0,
        zmax=max_value if max_value > 0 else 1,
        colorscale=color_scale or config.color_scale,
        marker=dict(
            opacity=opacity_for(values, max_value),
            line=dict(color="#FFFFFF", width=1.5),
        ),
        colorbar=dict(title=dict(text=data.value_label), thickness=14, len=0.7),
        customdata=point_customdata(data, 0),
        hovertemplate=hover_template(config, data, 0),
        name=data.value_label,
    ))

    if centroids:
        labelled = [(loc, v) for loc, v in zip(locations, values) if loc in centroids]
        if labelled:
            fig.add_trace(go.Scattergeo(
                lon=[centroids[loc][0] for loc, _ in labelled],
                lat=[centroids[loc][1] for loc, _ in labelled],
                text=[f"<b>{loc}</b><br>{v:,.0f}" for loc, v in labelled],
                mode="text",
                textfont=dict(family=CHART_FONT_FAMILY, size=11, color=CHART_TITLE_COLOR),
                hoverinfo="skip",
                showlegend=False,
            ))

    fig.update_geos(
        fitbounds="locations",
        visible=False,
        projection_type="mercator",
        center=dict(lon=133, lat=-28),
    )
    fig.update_layout(**_base_layout(
        config.title,
        data.subtitle,
        margin=dict(t=80, l=8, r=8, b=8),
        showlegend=False,
    ))
    return fig


FigureBuilder = Callable[..., go.Figure]

FIGURE_BUILDERS: dict[ChartKind, FigureBuilder] = {
    ChartKind.BAR: create_bar_figure,
    ChartKind.LINE: create_line_figure,
    ChartKind.PIE: create_pie_figure,
    ChartKind.STACKED: create_stacked_figure,
    ChartKind.CHOROPLETH: create_choropleth_figure,
}


def apply_dimensions(fig: go.Figure, dimensions: Optional[ChartDimensions]) -> go.Figure:
    """Size a figure for a container; font sizes shrink on small screens."""
    if dimensions is None:
        return fig
    margin = {**fig.layout.margin.to_plotly_json(), **dimensions.margin}
    fig.update_layout(
        width=dimensions.width,
        height=dimensions.height,
        margin=margin,
        font=dict(size=round(12 * dimensions.font_scale)),
    )
    fig.update_layout(title_font_size=round(CHART_TITLE_SIZE * dimensions.font_scale))
    return fig


def ranking_entries(data: ChartData) -> list[dict]:
    """Rows for a ranking panel: jurisdictions ordered by value, highest first."""
    if data.is_empty:
        return []
    values = data.traces[0].values
    order = sorted(range(len(values)), key=lambda i: -values[i])
    return [
        dict(
            rank=position,
            category=str(data.categories[i]),
            name=category_display_name(data.categories[i]),
            value=values[i],
            color=rank_color(position),
        )
        for position, i in enumerate(order, start=1)
    ]


def save_figure_html(
    fig: go.Figure, save_dir: str, title: str, open_browser: bool = False
) -> str:
    """
    Save Plotly figure to HTML file.

    Args:
        fig: Plotly Figure object
        save_dir: Directory to save the HTML file
        title: Title used for filename
        open_browser: If True, open the file in the default browser

    Returns:
        Path to the saved HTML file
    """
    filepath = f"{save_dir}/{title}.html"
    fig.write_html(filepath, include_plotlyjs="cdn")
    logger.info(f"Saved {filepath}")

    if open_browser:
        open_figure_in_browser(filepath)

    return filepath


def open_figure_in_browser(filepath: str) -> None:
    """Open an HTML file in the default browser."""
    webbrowser.open_new_tab("file:///" + filepath)
