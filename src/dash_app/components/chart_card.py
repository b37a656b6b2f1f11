"""Chart card component: facet controls, dcc.Graph, legend and ranking panel.

Every card carries the full set of controls so the MATCH callbacks see the
same inputs for each chart; controls for facets a chart does not use are
hidden.
"""
from dash import html, dcc
import dash_mantine_components as dmc

from core.models import ALL_YEARS, ChartKind, SortOrder
from visualization.pipeline import ChartPipeline, ChartState

HIDDEN = {"display": "none"}

SUBSTANCE_DATA = [
    {"value": "both", "label": "Both"},
    {"value": "alcohol", "label": "Alcohol"},
    {"value": "drug", "label": "Drug"},
]


def control_id(control: str, chart_id: str) -> dict:
    """Pattern-matching id for one of a card's components."""
    return {"type": f"chart-{control}", "index": chart_id}


def shows_ranking(pipeline: ChartPipeline) -> bool:
    config = pipeline.config
    return (
        config.sort == SortOrder.VALUE_DESC
        and config.series_field is None
        and len(config.value_fields) == 1
        and config.kind in (ChartKind.BAR, ChartKind.CHOROPLETH)
    )


def _year_data(pipeline: ChartPipeline) -> list[dict]:
    years = pipeline.available_years() if pipeline.state == ChartState.READY else []
    return [{"value": ALL_YEARS, "label": "All years"}] + [
        {"value": str(year), "label": str(year)} for year in years
    ]


def _chip_group(control: str, chart_id: str, values: list[str], selected: list[str]):
    return dmc.ChipGroup(
        id=control_id(control, chart_id),
        multiple=True,
        value=selected,
        children=[
            dmc.Group(
                gap="xs",
                children=[dmc.Chip(value, value=value, size="xs") for value in values],
            ),
        ],
    )


def _select_buttons(chart_id: str, prefix: str):
    return dmc.Group(
        gap="xs",
        children=[
            dmc.Button(
                "Select All",
                id=control_id(f"{prefix}-all", chart_id),
                variant="subtle",
                size="xs",
                n_clicks=0,
            ),
            dmc.Button(
                "Clear All",
                id=control_id(f"{prefix}-clear", chart_id),
                variant="subtle",
                color="gray",
                size="xs",
                n_clicks=0,
            ),
        ],
    )


def _facet(label: str, visible: bool, *children):
    return html.Div(
        className="chart-card__facet",
        style=None if visible else HIDDEN,
        children=[html.Span(label, className="chart-card__facet-label"), *children],
    )


def make_chart_card(pipeline: ChartPipeline):
    """Return a chart card for a loaded (or failed) pipeline.

    Contains:
    - Header with title and description
    - Facet controls (year, metric, substance, jurisdictions, age groups)
    - dcc.Loading wrapper around dcc.Graph
    - Legend swatches and, for ranking charts, the ranking panel
    """
    config = pipeline.config
    chart_id = config.chart_id
    ready = pipeline.state == ChartState.READY
    filters = pipeline.filters

    jurisdictions = pipeline.available_jurisdictions() if ready else []
    age_groups = pipeline.available_age_groups() if ready else []
    selected_jurisdictions = sorted(
        jurisdictions if filters.jurisdictions is None else filters.jurisdictions
    )
    selected_ages = sorted(age_groups if filters.age_groups is None else filters.age_groups)

    controls = html.Div(
        className="chart-card__controls",
        style=None if ready and config.facets else HIDDEN,
        children=[
            _facet(
                "Year",
                config.has_facet("year"),
                dmc.Select(
                    id=control_id("year", chart_id),
                    data=_year_data(pipeline),
                    value=str(filters.year),
                    allowDeselect=False,
                    size="xs",
                    w=120,
                ),
            ),
            _facet(
                "Metric",
                config.has_facet("metric"),
                dmc.SegmentedControl(
                    id=control_id("metric", chart_id),
                    data=[
                        {"value": metric, "label": config.label_for(metric)}
                        for metric in config.metric_options
                    ] or [{"value": "", "label": ""}],
                    value=filters.metric or "",
                    size="xs",
                ),
            ),
            _facet(
                "Substance",
                config.has_facet("substance"),
                dmc.SegmentedControl(
                    id=control_id("substance", chart_id),
                    data=SUBSTANCE_DATA,
                    value=filters.substance,
                    size="xs",
                ),
            ),
            _facet(
                "Jurisdictions",
                config.has_facet("jurisdiction"),
                _chip_group("jurisdictions", chart_id, jurisdictions, selected_jurisdictions),
                _select_buttons(chart_id, "jurisdictions"),
            ),
            _facet(
                "Age groups",
                config.has_facet("age_group"),
                _chip_group("age-groups", chart_id, age_groups, selected_ages),
                _select_buttons(chart_id, "age-groups"),
            ),
        ],
    )

    return html.Section(
        className="chart-card",
        **{"aria-label": config.title},
        children=[
            html.Div(
                className="chart-card__header",
                children=[
                    html.Div(config.title, className="chart-card__title"),
                    html.Div(
                        config.description,
                        className="chart-card__subtitle",
                        style=None if config.description else HIDDEN,
                    ),
                ],
            ),
            controls,
            dcc.Loading(
                type="circle",
                color="#1E40AF",
                children=[
                    dcc.Graph(
                        id=control_id("graph", chart_id),
                        figure=pipeline.figure if pipeline.state == ChartState.ERROR else None,
                        style={"minHeight": "420px"},
                        responsive=True,
                        config={
                            "displayModeBar": True,
                            "displaylogo": False,
                            "modeBarButtonsToRemove": ["lasso2d", "select2d"],
                        },
                    ),
                ],
            ),
            html.Div(id=control_id("legend", chart_id), className="chart-card__legend"),
            html.Div(
                id=control_id("ranking", chart_id),
                className="chart-card__ranking",
                style=None if shows_ranking(pipeline) else HIDDEN,
            ),
        ],
    )
