"""Top header bar with the dashboard title and data freshness."""
from dash import html


def make_header():
    """Return the fixed top header with branding and the loaded-record indicator."""
    return html.Header(
        className="top-header",
        children=[
            html.Div(
                className="top-header__brand",
                children=[
                    html.Div("AU", className="top-header__logo"),
                    html.Div(
                        children=[
                            html.Div("Road Safety Enforcement", className="top-header__title"),
                            html.Div(
                                "Police alcohol and drug testing across Australia",
                                className="top-header__subtitle",
                            ),
                        ],
                    ),
                ],
            ),
            html.Div(
                className="top-header__right",
                children=[
                    html.Span(
                        children=[
                            html.Span(id="header-status-dot", className="status-dot"),
                            html.Span("...", id="header-record-count"),
                        ],
                    ),
                    html.Span("", id="header-dataset-warning", className="top-header__warning"),
                ],
            ),
        ],
    )
