"""Callbacks for Select All / Clear All buttons and legend toggles."""
from dash import Input, Output, State, ctx, no_update, ALL, MATCH

from dash_app.components.chart_card import control_id
from dash_app.data.pipelines import get_pipeline


def toggle_value(selected: list[str] | None, value: str) -> list[str]:
    """Add or remove one value, keeping the list sorted."""
    current = set(selected or [])
    if value in current:
        current.discard(value)
    else:
        current.add(value)
    return sorted(current)


def register_filter_callbacks(app):
    """Register jurisdiction and age group selection callbacks."""

    @app.callback(
        Output(control_id("jurisdictions", MATCH), "value"),
        Input(control_id("jurisdictions-all", MATCH), "n_clicks"),
        Input(control_id("jurisdictions-clear", MATCH), "n_clicks"),
        Input({"type": "chart-legend-item", "index": MATCH, "category": ALL}, "n_clicks"),
        State(control_id("jurisdictions", MATCH), "value"),
        prevent_initial_call=True,
    )
    def update_jurisdictions(_all_clicks, _clear_clicks, legend_clicks, current):
        """Select all, clear, or toggle one jurisdiction from its legend swatch."""
        triggered = ctx.triggered_id
        if not isinstance(triggered, dict):
            return no_update

        if triggered["type"] == "chart-jurisdictions-all":
            return get_pipeline(triggered["index"]).available_jurisdictions()
        if triggered["type"] == "chart-jurisdictions-clear":
            return []

        # Legend swatches are recreated on every render with n_clicks=0
        if not any(n for n in (legend_clicks or []) if n):
            return no_update
        return toggle_value(current, triggered["category"])

    @app.callback(
        Output(control_id("age-groups", MATCH), "value"),
        Input(control_id("age-groups-all", MATCH), "n_clicks"),
        Input(control_id("age-groups-clear", MATCH), "n_clicks"),
        prevent_initial_call=True,
    )
    def update_age_groups(_all_clicks, _clear_clicks):
        triggered = ctx.triggered_id
        if not isinstance(triggered, dict):
            return no_update
        if triggered["type"] == "chart-age-groups-all":
            return get_pipeline(triggered["index"]).available_age_groups()
        return []
