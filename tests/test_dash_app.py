"""
Tests for the Dash layer: layout components and callback helpers.

Callbacks are thin wrappers around plain functions; those functions are
tested directly so no browser or Dash server is needed.

Tests cover:
- filters_from_controls() mapping control values onto a FilterState
- toggle_value() for legend clicks
- view_styles() for navigation
- header_status() and dataset_summary()
- make_legend() / make_ranking()
- make_chart_card() and the full layout
"""

import pytest
from dash import html

from core.context import DashboardContext
from core.models import ALL_YEARS, FilterState
from dash_app.callbacks.chart import (
    filters_from_controls,
    legend_is_interactive,
    make_legend,
    make_ranking,
)
from dash_app.callbacks.filters import toggle_value
from dash_app.callbacks.header import header_status
from dash_app.callbacks.navigation import view_styles
from dash_app.components.chart_card import HIDDEN, control_id, make_chart_card, shows_ranking
from dash_app.data import pipelines
from visualization.catalogue import get_chart_config
from visualization.pipeline import ChartState


def find_component(component, component_id):
    """Depth-first search of a Dash component tree by id."""
    if getattr(component, "id", None) == component_id:
        return component
    children = getattr(component, "children", None)
    if children is None or isinstance(children, str):
        return None
    if not isinstance(children, (list, tuple)):
        children = [children]
    for child in children:
        found = find_component(child, component_id)
        if found is not None:
            return found
    return None


@pytest.fixture
def dash_context(context):
    """Point the shared pipeline registry at the fixture context."""
    pipelines.configure(context)
    yield context
    pipelines.reset()


class TestFiltersFromControls:
    """Control values become a FilterState for the chart's own facets only."""

    def test_year_and_substance(self, dash_context):
        pipeline = pipelines.get_pipeline("testing-total")
        filters = filters_from_controls(pipeline, year="2023", substance="drug", jurisdictions=["NSW"])
        assert filters.year == 2023
        assert filters.substance == "drug"
        # No jurisdiction facet on this chart
        assert filters.jurisdictions is None

    def test_metric_and_jurisdictions(self, dash_context):
        pipeline = pipelines.get_pipeline("results-enforcement-outcomes")
        filters = filters_from_controls(pipeline, year="2023", metric="ARRESTS", jurisdictions=["NSW"])
        assert filters.metric == "ARRESTS"
        assert filters.jurisdictions == {"NSW"}
        assert filters.year == ALL_YEARS

    def test_unknown_metric_keeps_default(self, dash_context):
        pipeline = pipelines.get_pipeline("fines-enforcement-map")
        filters = filters_from_controls(pipeline, year="2024", metric="")
        assert filters.metric == "FINES"

    def test_nothing_selected_is_an_empty_set(self, dash_context):
        pipeline = pipelines.get_pipeline("results-breath-age")
        filters = filters_from_controls(pipeline, year=ALL_YEARS, age_groups=None)
        assert filters.age_groups == set()

    def test_pipeline_filters_are_not_modified(self, dash_context):
        pipeline = pipelines.get_pipeline("testing-total")
        filters_from_controls(pipeline, year="2022", substance="alcohol")
        assert pipeline.filters == FilterState()


class TestToggleValue:
    def test_add_and_remove(self):
        assert toggle_value(["VIC"], "NSW") == ["NSW", "VIC"]
        assert toggle_value(["NSW", "VIC"], "NSW") == ["VIC"]

    def test_none_selection(self):
        assert toggle_value(None, "QLD") == ["QLD"]


class TestNavigation:
    def test_active_view(self):
        styles, classes = view_styles("results")
        assert styles == [{"display": "none"}, {}, {"display": "none"}]
        assert classes[1] == "sidebar__item sidebar__item--active"
        assert classes[0] == "sidebar__item"

    def test_unknown_view_falls_back_to_default(self):
        styles, _ = view_styles("nowhere")
        assert styles[0] == {}


class TestHeader:
    """Test the record count indicator."""

    def test_all_loaded(self):
        assert header_status({"total_rows": 1234, "failed": []}) == (
            "1,234 records", "status-dot", ""
        )

    def test_with_failures(self):
        text, dot, warning = header_status({"total_rows": 0, "failed": ["fines"]})
        assert text == "No data loaded"
        assert dot == "status-dot status-dot--error"
        assert warning == "Unavailable: fines"

    def test_dataset_summary(self, dash_context):
        summary = pipelines.dataset_summary()
        assert summary["rows"] == {
            "fines": 5, "positive_breath": 6, "positive_drug": 8, "tests": 6,
        }
        assert summary["total_rows"] == 25
        assert summary["failed"] == []

    def test_dataset_summary_reports_failures(self, temp_dir, dataset_files, offline_config):
        sources = dict(dataset_files, fines=temp_dir / "absent.csv")
        pipelines.configure(DashboardContext(config=offline_config, sources=sources))
        try:
            summary = pipelines.dataset_summary()
        finally:
            pipelines.reset()
        assert summary["failed"] == ["fines"]
        assert summary["total_rows"] == 20


class TestLegendAndRanking:
    def test_static_legend(self, dash_context):
        pipeline = pipelines.get_pipeline("testing-total")
        _, data = pipeline.build()
        items = make_legend(pipeline.config, data)
        assert len(items) == len(data.categories)
        assert all(isinstance(item, html.Span) for item in items)

    def test_interactive_legend(self, dash_context):
        pipeline = pipelines.get_pipeline("results-drug-jurisdiction")
        _, data = pipeline.build()
        assert legend_is_interactive(pipeline.config, data)
        items = make_legend(pipeline.config, data)
        assert all(isinstance(item, html.Button) for item in items)
        assert items[0].id == {
            "type": "chart-legend-item",
            "index": "results-drug-jurisdiction",
            "category": data.traces[0].name,
        }

    def test_year_series_legend_is_static(self, dash_context):
        """Swatches labelled with years must not toggle jurisdiction chips."""
        pipeline = pipelines.get_pipeline("results-enforcement-outcomes")
        _, data = pipeline.build()
        assert [trace.name for trace in data.traces] == ["2023", "2024"]
        assert not legend_is_interactive(pipeline.config, data)
        items = make_legend(pipeline.config, data)
        assert len(items) == 2
        assert not any(isinstance(item, html.Button) for item in items)

    @pytest.mark.parametrize("chart_id", ["fines-offence-distribution", "results-breath-map"])
    def test_no_card_legend_for_pie_and_map(self, dash_context, chart_id):
        pipeline = pipelines.get_pipeline(chart_id)
        _, data = pipeline.build()
        assert make_legend(pipeline.config, data) == []

    def test_ranking_rows(self, dash_context):
        pipeline = pipelines.get_pipeline("testing-state-ranking")
        assert shows_ranking(pipeline)
        _, data = pipeline.build(FilterState(year=2023))
        rows = make_ranking(data)
        assert len(rows) == 2
        assert rows[0].children[0].children == "#1"
        assert rows[0].children[1].children == "New South Wales"
        assert rows[0].children[2].children == "120"

    def test_no_ranking_without_data(self):
        assert make_ranking(None) == []


class TestChartCard:
    """Test make_chart_card()."""

    def test_year_select(self, dash_context):
        card = make_chart_card(pipelines.get_pipeline("testing-total"))
        select = find_component(card, control_id("year", "testing-total"))
        assert select.value == ALL_YEARS
        assert [item["value"] for item in select.data] == [ALL_YEARS, "2022", "2023"]

    def test_every_card_has_all_controls(self, dash_context):
        card = make_chart_card(pipelines.get_pipeline("results-drug-trend"))
        for control in ("year", "metric", "substance", "jurisdictions", "age-groups", "graph"):
            assert find_component(card, control_id(control, "results-drug-trend")) is not None

    def test_ranking_panel_visibility(self, dash_context):
        ranked = make_chart_card(pipelines.get_pipeline("testing-state-ranking"))
        unranked = make_chart_card(pipelines.get_pipeline("testing-total"))
        assert find_component(ranked, control_id("ranking", "testing-state-ranking")).style is None
        assert find_component(unranked, control_id("ranking", "testing-total")).style == HIDDEN

    def test_preselected_jurisdictions(self, dash_context):
        card = make_chart_card(pipelines.get_pipeline("results-enforcement-outcomes"))
        chips = find_component(card, control_id("jurisdictions", "results-enforcement-outcomes"))
        assert chips.value == ["NSW", "VIC", "WA"]

    def test_error_card_shows_error_figure(self, temp_dir, offline_config):
        pipelines.configure(DashboardContext(
            config=offline_config, sources={"tests": temp_dir / "absent.csv"}
        ))
        try:
            pipeline = pipelines.get_pipeline("testing-total")
            assert pipeline.state == ChartState.ERROR
            card = make_chart_card(pipeline)
        finally:
            pipelines.reset()
        graph = find_component(card, control_id("graph", "testing-total"))
        assert graph.figure is pipeline.figure


class TestLayout:
    def test_layout_tree(self, dash_context):
        from dash_app.app import make_layout

        layout = make_layout()
        store = find_component(layout, "app-state")
        assert store.data == {"active_view": "testing"}
        assert find_component(layout, "testing-view").style is None
        assert find_component(layout, "results-view").style == {"display": "none"}
        assert find_component(layout, "nav-fines") is not None
        assert find_component(layout, "header-record-count") is not None
