"""Callback filling the header's record count once per page load."""
from dash import Input, Output

from dash_app.data.pipelines import dataset_summary


def header_status(summary: dict) -> tuple[str, str, str]:
    """(record text, status dot class, warning text) for a dataset summary."""
    total = summary.get("total_rows", 0)
    failed = summary.get("failed") or []
    record_text = f"{total:,} records" if total else "No data loaded"
    if failed:
        return record_text, "status-dot status-dot--error", f"Unavailable: {', '.join(failed)}"
    return record_text, "status-dot", ""


def register_header_callbacks(app):
    @app.callback(
        Output("header-record-count", "children"),
        Output("header-status-dot", "className"),
        Output("header-dataset-warning", "children"),
        Input("url", "pathname"),  # fires once on page load
    )
    def load_header_status(_pathname):
        return header_status(dataset_summary())
