"""Callback registration: imports all callback modules and wires them to the app."""


def register_callbacks(app):
    """Register all Dash callbacks with the app instance."""
    from dash_app.callbacks.navigation import register_navigation_callbacks
    from dash_app.callbacks.header import register_header_callbacks
    from dash_app.callbacks.chart import register_chart_callbacks
    from dash_app.callbacks.filters import register_filter_callbacks

    register_navigation_callbacks(app)
    register_header_callbacks(app)
    register_chart_callbacks(app)
    register_filter_callbacks(app)
