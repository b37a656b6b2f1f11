"""Callbacks for switching between the Testing, Results and Fines views."""
from dash import Input, Output, State, ctx, no_update

from dash_app.components.page import view_id
from dash_app.components.sidebar import DEFAULT_VIEW, nav_id
from visualization.catalogue import PAGES

_PAGE_IDS = [page.page_id for page in PAGES]


def view_styles(active_view: str) -> tuple[list, list]:
    """Display styles and sidebar classes for every page, in PAGES order."""
    if active_view not in _PAGE_IDS:
        active_view = DEFAULT_VIEW
    show = {}
    hide = {"display": "none"}
    active_cls = "sidebar__item sidebar__item--active"
    inactive_cls = "sidebar__item"
    styles = [show if page_id == active_view else hide for page_id in _PAGE_IDS]
    classes = [active_cls if page_id == active_view else inactive_cls for page_id in _PAGE_IDS]
    return styles, classes


def register_navigation_callbacks(app):
    """Register view switching callbacks."""

    @app.callback(
        Output("app-state", "data"),
        *[Input(nav_id(page_id), "n_clicks") for page_id in _PAGE_IDS],
        State("app-state", "data"),
        prevent_initial_call=True,
    )
    def select_view(*args):
        """Store the view whose sidebar item was clicked."""
        current_state = args[-1] or {}
        triggered_id = ctx.triggered_id
        for page_id in _PAGE_IDS:
            if triggered_id == nav_id(page_id):
                return {**current_state, "active_view": page_id}
        return no_update

    @app.callback(
        *[Output(view_id(page_id), "style") for page_id in _PAGE_IDS],
        *[Output(nav_id(page_id), "className") for page_id in _PAGE_IDS],
        Input("app-state", "data"),
    )
    def switch_view(app_state):
        """Show/hide views and update sidebar active state based on active_view."""
        styles, classes = view_styles((app_state or {}).get("active_view", DEFAULT_VIEW))
        return (*styles, *classes)
