"""
Every chart on the dashboard, declared as data.

Pages group charts for navigation. Adding a chart means adding a
ChartConfig here; the pipeline, figure builders and Dash card are generic.
"""

from dataclasses import dataclass

from core.models import ChartConfig, ChartKind, SortOrder
from data_processing.schema import ALL_AGES, UNKNOWN
from visualization.plotly_generator import (
    DRUG_TYPE_COLORS,
    JURISDICTION_COLORS,
    SUBSTANCE_COLORS,
)

OUTCOME_LABELS = {"FINES": "Fines", "ARRESTS": "Arrests", "CHARGES": "Charges"}
OUTCOME_METRICS = ("FINES", "ARRESTS", "CHARGES")


@dataclass(frozen=True)
class DashboardPage:
    page_id: str
    title: str
    description: str
    charts: tuple[ChartConfig, ...]


TESTING_CHARTS = (
    ChartConfig(
        chart_id="testing-total",
        title="Total Tests Conducted by Jurisdiction",
        kind=ChartKind.BAR,
        dataset="tests",
        x_field="JURISDICTION",
        sort=SortOrder.KEY_ASC,
        facets=("year", "substance"),
        colors=JURISDICTION_COLORS,
        value_labels={"COUNT": "Tests conducted"},
        x_label="Jurisdiction",
        y_label="Tests conducted",
        description="Breath and drug tests combined, or one substance at a time.",
    ),
    ChartConfig(
        chart_id="testing-state-ranking",
        title="State Testing Rankings",
        kind=ChartKind.BAR,
        dataset="tests",
        x_field="JURISDICTION",
        sort=SortOrder.VALUE_DESC,
        orientation="h",
        facets=("year",),
        breakdown_field="SUBSTANCE",
        value_labels={"COUNT": "Total tests"},
        y_label="Total tests",
        description="Jurisdictions ranked by tests conducted, with the alcohol/drug split on hover.",
    ),
    ChartConfig(
        chart_id="testing-alcohol-vs-drug",
        title="Alcohol vs Drug Testing Trends",
        kind=ChartKind.LINE,
        dataset="tests",
        x_field="YEAR",
        series_field="SUBSTANCE",
        sort=SortOrder.KEY_ASC,
        facets=("jurisdiction", "substance"),
        excluded_categories=("other",),
        colors=SUBSTANCE_COLORS,
        x_label="Year",
        y_label="Tests conducted",
    ),
    ChartConfig(
        chart_id="testing-stacked-percentage",
        title="Testing Mix by Jurisdiction",
        kind=ChartKind.STACKED,
        dataset="tests",
        x_field="JURISDICTION",
        series_field="SUBSTANCE",
        sort=SortOrder.VALUE_DESC,
        percent_stack=True,
        facets=("year",),
        excluded_categories=("other",),
        colors=SUBSTANCE_COLORS,
        x_label="Jurisdiction",
        description="Share of alcohol and drug tests within each jurisdiction.",
    ),
)

RESULTS_CHARTS = (
    ChartConfig(
        chart_id="results-breath-map",
        title="Positive Breath Tests by Jurisdiction",
        kind=ChartKind.CHOROPLETH,
        dataset="positive_breath",
        x_field="JURISDICTION",
        sort=SortOrder.VALUE_DESC,
        facets=("year",),
        default_year=None,
        color_scale="YlOrRd",
        value_labels={"COUNT": "Positive tests"},
    ),
    ChartConfig(
        chart_id="results-breath-age",
        title="Positive Breath Tests by Age Group",
        kind=ChartKind.BAR,
        dataset="positive_breath",
        x_field="AGE_GROUP",
        sort=SortOrder.VALUE_DESC,
        facets=("year", "age_group"),
        default_year=None,
        excluded_categories=(ALL_AGES, UNKNOWN),
        value_labels={"COUNT": "Positive tests"},
        x_label="Age group",
    ),
    ChartConfig(
        chart_id="results-drug-trend",
        title="Positive Drug Tests Over Time",
        kind=ChartKind.LINE,
        dataset="positive_drug",
        x_field="YEAR",
        sort=SortOrder.KEY_ASC,
        value_labels={"COUNT": "Positive tests"},
        x_label="Year",
    ),
    ChartConfig(
        chart_id="results-drug-jurisdiction",
        title="Positive Drug Tests by Jurisdiction",
        kind=ChartKind.LINE,
        dataset="positive_drug",
        x_field="YEAR",
        series_field="JURISDICTION",
        sort=SortOrder.KEY_ASC,
        facets=("jurisdiction",),
        default_top_jurisdictions=5,
        colors=JURISDICTION_COLORS,
        value_labels={"COUNT": "Positive tests"},
        x_label="Year",
    ),
    ChartConfig(
        chart_id="results-drug-type",
        title="Drug Type Composition",
        kind=ChartKind.BAR,
        dataset="positive_drug",
        x_field="DRUG_TYPE",
        sort=SortOrder.VALUE_DESC,
        headroom=1.15,
        facets=("year",),
        colors=DRUG_TYPE_COLORS,
        value_labels={"COUNT": "Positive tests"},
        x_label="Drug type",
    ),
    ChartConfig(
        chart_id="results-drug-age",
        title="Drug Cases by Age Group",
        kind=ChartKind.BAR,
        dataset="positive_drug",
        x_field="AGE_GROUP",
        series_field="YEAR",
        sort=SortOrder.VALUE_DESC,
        min_year=2023,
        excluded_categories=(ALL_AGES, UNKNOWN),
        value_labels={"COUNT": "Positive tests"},
        x_label="Age group",
    ),
    ChartConfig(
        chart_id="results-drug-enforcement",
        title="Drug Tests and Resulting Charges",
        kind=ChartKind.STACKED,
        dataset="positive_drug",
        x_field="JURISDICTION",
        value_fields=("COUNT", "CHARGES"),
        sort=SortOrder.VALUE_DESC,
        facets=("year",),
        colors={"COUNT": "#8B5CF6", "CHARGES": "#EF4444"},
        value_labels={"COUNT": "Positive tests", "CHARGES": "Charges"},
        x_label="Jurisdiction",
        y_label="Count",
    ),
    ChartConfig(
        chart_id="results-enforcement-outcomes",
        title="Enforcement Outcomes by Jurisdiction",
        kind=ChartKind.BAR,
        dataset="fines",
        x_field="JURISDICTION",
        series_field="YEAR",
        sort=SortOrder.VALUE_DESC,
        facets=("metric", "jurisdiction"),
        metric_options=OUTCOME_METRICS,
        value_labels=OUTCOME_LABELS,
        default_top_jurisdictions=3,
        min_year=2023,
        x_label="Jurisdiction",
    ),
)

FINES_CHARTS = (
    ChartConfig(
        chart_id="fines-offence-distribution",
        title="Offence Distribution",
        kind=ChartKind.PIE,
        dataset="fines",
        x_field="METRIC",
        value_fields=("FINES",),
        sort=SortOrder.VALUE_DESC,
        facets=("jurisdiction",),
        value_labels=OUTCOME_LABELS,
    ),
    ChartConfig(
        chart_id="fines-trend",
        title="Fines Over Time",
        kind=ChartKind.LINE,
        dataset="fines",
        x_field="YEAR",
        value_fields=("FINES",),
        sort=SortOrder.KEY_ASC,
        value_labels=OUTCOME_LABELS,
        x_label="Year",
    ),
    ChartConfig(
        chart_id="fines-outcomes-by-jurisdiction",
        title="Fines, Arrests and Charges by Jurisdiction",
        kind=ChartKind.BAR,
        dataset="fines",
        x_field="JURISDICTION",
        value_fields=OUTCOME_METRICS,
        sort=SortOrder.VALUE_DESC,
        facets=("year",),
        colors={"FINES": "#2563EB", "ARRESTS": "#DC2626", "CHARGES": "#EA580C"},
        value_labels=OUTCOME_LABELS,
        x_label="Jurisdiction",
        y_label="Count",
    ),
    ChartConfig(
        chart_id="fines-detection-method",
        title="Detection Method Impact",
        kind=ChartKind.BAR,
        dataset="fines",
        x_field="DETECTION_METHOD",
        value_fields=("OUTCOME_TOTAL",),
        sort=SortOrder.VALUE_DESC,
        orientation="h",
        facets=("year", "jurisdiction"),
        value_labels={"OUTCOME_TOTAL": "Fines + arrests + charges"},
    ),
    ChartConfig(
        chart_id="fines-age-group",
        title="Fines by Age Group",
        kind=ChartKind.BAR,
        dataset="fines",
        x_field="AGE_GROUP",
        value_fields=("FINES",),
        sort=SortOrder.KEY_ASC,
        facets=("year", "jurisdiction"),
        excluded_categories=(ALL_AGES,),
        value_labels=OUTCOME_LABELS,
        x_label="Age group",
    ),
    ChartConfig(
        chart_id="fines-enforcement-map",
        title="Enforcement Outcomes Map",
        kind=ChartKind.CHOROPLETH,
        dataset="fines",
        x_field="JURISDICTION",
        sort=SortOrder.VALUE_DESC,
        facets=("year", "metric"),
        default_year=None,
        metric_options=OUTCOME_METRICS,
        metric_color_scales={"FINES": "Blues", "ARRESTS": "Reds", "CHARGES": "Oranges"},
        value_labels=OUTCOME_LABELS,
    ),
)

PAGES = (
    DashboardPage(
        page_id="testing",
        title="Testing",
        description="Breath and drug tests conducted by police across Australia.",
        charts=TESTING_CHARTS,
    ),
    DashboardPage(
        page_id="results",
        title="Results",
        description="Positive breath and drug test results, and what followed.",
        charts=RESULTS_CHARTS,
    ),
    DashboardPage(
        page_id="fines",
        title="Fines",
        description="Fines, arrests and charges by offence, detection method and age.",
        charts=FINES_CHARTS,
    ),
)

CHARTS_BY_ID = {chart.chart_id: chart for page in PAGES for chart in page.charts}


def get_chart_config(chart_id: str) -> ChartConfig:
    """
    Raises:
        KeyError: Unknown chart id
    """
    return CHARTS_BY_ID[chart_id]


def validate_catalogue() -> list[str]:
    """All configuration errors across the catalogue, plus duplicate ids."""
    errors = []
    seen = set()
    for page in PAGES:
        for chart in page.charts:
            if chart.chart_id in seen:
                errors.append(f"Duplicate chart id: {chart.chart_id}")
            seen.add(chart.chart_id)
            errors.extend(chart.validate())
    return errors
