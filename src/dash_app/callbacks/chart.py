"""Callbacks rendering each chart card from its facet controls."""
import logging
from typing import Optional

from dash import Input, Output, State, MATCH, html

from core.models import ALL_YEARS, ChartConfig, ChartKind, FilterState
from dash_app.components.chart_card import control_id, shows_ranking
from dash_app.data.pipelines import get_pipeline
from visualization.chart_data import ChartData
from visualization.pipeline import ChartPipeline
from visualization.plotly_generator import SERIES_PALETTE, error_figure, ranking_entries
from visualization.tooltips import category_display_name, legend_entries, legend_field

log = logging.getLogger(__name__)


def filters_from_controls(
    pipeline: ChartPipeline,
    year=None,
    metric=None,
    substance=None,
    jurisdictions=None,
    age_groups=None,
) -> FilterState:
    """FilterState for a card's control values; facets the chart lacks keep their defaults."""
    config = pipeline.config
    filters = pipeline.filters.copy()

    if config.has_facet("year"):
        filters.set_year(year or ALL_YEARS)
    if config.metric_options and metric in config.metric_options:
        filters.set_metric(metric)
    if config.has_facet("substance"):
        filters.set_substance(substance or "both")
    if config.has_facet("jurisdiction"):
        filters.jurisdictions = set(jurisdictions or [])
    if config.has_facet("age_group"):
        filters.age_groups = set(age_groups or [])
    return filters


def legend_is_interactive(config: ChartConfig, data: ChartData) -> bool:
    """Legend swatches toggle jurisdictions when they are labelled with jurisdictions."""
    return config.has_facet("jurisdiction") and legend_field(config, data) == "JURISDICTION"


def make_legend(config: ChartConfig, data: Optional[ChartData]) -> list:
    """Swatch list for the card. Pie and map charts carry their own legend or colour bar."""
    if data is None or config.kind in (ChartKind.PIE, ChartKind.CHOROPLETH):
        return []

    interactive = legend_is_interactive(config, data)
    items = []
    for label, color in legend_entries(config, data, SERIES_PALETTE):
        children = [
            html.Span(className="legend-item__swatch", style={"backgroundColor": color}),
            html.Span(label, className="legend-item__label"),
        ]
        if interactive:
            items.append(html.Button(
                children,
                id={"type": "chart-legend-item", "index": config.chart_id, "category": label},
                className="legend-item legend-item--button",
                title=f"Toggle {category_display_name(label)}",
                n_clicks=0,
            ))
        else:
            items.append(html.Span(children, className="legend-item"))
    return items


def make_ranking(data: Optional[ChartData]) -> list:
    if data is None:
        return []
    return [
        html.Div(
            className="ranking-row",
            children=[
                html.Span(
                    f"#{entry['rank']}",
                    className="ranking-row__rank",
                    style={"backgroundColor": entry["color"]},
                ),
                html.Span(entry["name"], className="ranking-row__name"),
                html.Span(f"{entry['value']:,.0f}", className="ranking-row__value"),
            ],
        )
        for entry in ranking_entries(data)
    ]


def register_chart_callbacks(app):
    """Register the per-card render callback."""

    @app.callback(
        Output(control_id("graph", MATCH), "figure"),
        Output(control_id("legend", MATCH), "children"),
        Output(control_id("ranking", MATCH), "children"),
        Input(control_id("year", MATCH), "value"),
        Input(control_id("metric", MATCH), "value"),
        Input(control_id("substance", MATCH), "value"),
        Input(control_id("jurisdictions", MATCH), "value"),
        Input(control_id("age-groups", MATCH), "value"),
        State(control_id("graph", MATCH), "id"),
    )
    def update_chart(year, metric, substance, jurisdictions, age_groups, graph_id):
        """Redraw one chart whenever any of its controls change."""
        chart_id = graph_id["index"]
        pipeline = get_pipeline(chart_id)

        try:
            filters = filters_from_controls(
                pipeline, year, metric, substance, jurisdictions, age_groups
            )
            fig, data = pipeline.build(filters)
        except Exception:
            log.exception(f"Failed to render chart '{chart_id}'")
            return (
                error_figure(pipeline.config.title, "Chart could not be drawn. Check logs for details."),
                [],
                [],
            )

        ranking = make_ranking(data) if shows_ranking(pipeline) else []
        return fig, make_legend(pipeline.config, data), ranking
