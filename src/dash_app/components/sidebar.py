"""Left sidebar navigation, one item per dashboard page."""
from urllib.parse import quote as url_quote

from dash import html

from visualization.catalogue import PAGES


def _svg_icon(svg_body):
    """Wrap an SVG body string into an html.Img using a data URI."""
    svg = (
        f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24" '
        f'fill="none" stroke="currentColor" stroke-width="2">{svg_body}</svg>'
    )
    return html.Img(
        src=f"data:image/svg+xml,{url_quote(svg)}",
        className="sidebar__icon",
    )


_ICONS = {
    "testing": '<circle cx="12" cy="12" r="9"/><polyline points="12,7 12,12 15,14"/>',
    "results": '<line x1="18" y1="20" x2="18" y2="10"/><line x1="12" y1="20" x2="12" y2="4"/><line x1="6" y1="20" x2="6" y2="14"/>',
    "fines": '<rect x="3" y="5" width="18" height="14" rx="2"/><line x1="3" y1="10" x2="21" y2="10"/>',
}

DEFAULT_VIEW = PAGES[0].page_id


def nav_id(page_id: str) -> str:
    return f"nav-{page_id}"


def make_sidebar():
    """Return the fixed left sidebar navigation."""
    return html.Nav(
        className="sidebar",
        **{"aria-label": "Main navigation"},
        children=[
            html.Div(
                className="sidebar__section",
                children=[
                    html.Div("Dashboards", className="sidebar__label"),
                    *[
                        _sidebar_item(page.title, page.page_id, active=page.page_id == DEFAULT_VIEW)
                        for page in PAGES
                    ],
                ],
            ),
            html.Div(
                className="sidebar__footer",
                children=[
                    "Source: BITRE police enforcement data",
                    html.Br(),
                    "Alcohol and drug testing",
                ],
            ),
        ],
    )


def _sidebar_item(label, page_id, active=False):
    class_name = "sidebar__item"
    if active:
        class_name += " sidebar__item--active"

    return html.A(
        id=nav_id(page_id),
        className=class_name,
        n_clicks=0,
        children=[
            _svg_icon(_ICONS.get(page_id, _ICONS["results"])),
            label,
        ],
    )
