"""One dashboard view: page heading and a grid of chart cards."""
from dash import html

from dash_app.components.chart_card import make_chart_card
from dash_app.data.pipelines import get_pipeline
from visualization.catalogue import DashboardPage


def view_id(page_id: str) -> str:
    return f"{page_id}-view"


def make_page(page: DashboardPage, visible: bool = False):
    """Return the view container for a page, hidden unless it is the active view."""
    return html.Div(
        id=view_id(page.page_id),
        className="view",
        style=None if visible else {"display": "none"},
        children=[
            html.Div(
                className="view__header",
                children=[
                    html.H2(page.title, className="view__title"),
                    html.P(page.description, className="view__description"),
                ],
            ),
            html.Div(
                className="chart-grid",
                children=[make_chart_card(get_pipeline(chart.chart_id)) for chart in page.charts],
            ),
        ],
    )
