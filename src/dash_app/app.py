"""Dash application entry point with layout root and state stores."""
from dash import Dash, html, dcc
import dash_mantine_components as dmc

from dash_app.components.header import make_header
from dash_app.components.page import make_page
from dash_app.components.sidebar import DEFAULT_VIEW, make_sidebar
from visualization.catalogue import PAGES

app = Dash(
    __name__,
    title="Road Safety Enforcement",
    suppress_callback_exceptions=True,
)


def make_layout():
    """Build the page tree. Called per page load so charts pick up refreshed data."""
    return dmc.MantineProvider(
        children=[
            dcc.Store(id="app-state", storage_type="session", data={
                "active_view": DEFAULT_VIEW,
            }),
            dcc.Location(id="url", refresh=False),

            make_header(),
            make_sidebar(),
            html.Main(
                className="main",
                children=[
                    html.Div(
                        id="view-container",
                        children=[
                            make_page(page, visible=page.page_id == DEFAULT_VIEW)
                            for page in PAGES
                        ],
                    ),
                ],
            ),
        ],
    )


app.layout = make_layout

from dash_app.callbacks import register_callbacks

register_callbacks(app)

server = app.server
