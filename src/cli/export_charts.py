"""
CLI command for exporting dashboard charts as standalone HTML files.

Each chart in the catalogue is loaded through the same ChartPipeline the Dash
app uses, rendered with its default selection, and written with
save_figure_html(). Charts whose dataset fails to load are written as their
error figure and reported as failures.

Usage:
    python -m cli.export_charts
    python -m cli.export_charts --output-dir exports --page results
    python -m cli.export_charts --chart testing-state-ranking --open
    python -m cli.export_charts --list

Run `python -m cli.export_charts --help` for full options.
"""

import argparse
import sys
import time
from pathlib import Path
from typing import Optional

# Ensure src/ is on sys.path when run as `python -m cli.export_charts`
_src_dir = str(Path(__file__).resolve().parent.parent)
if _src_dir not in sys.path:
    sys.path.insert(0, _src_dir)

from config import load_dashboard_config
from core.config import PathConfig
from core.context import DashboardContext
from core.logging_config import get_logger, setup_logging_from_config
from core.models import ChartConfig
from visualization.catalogue import PAGES
from visualization.pipeline import ChartPipeline, ChartState
from visualization.plotly_generator import save_figure_html
from visualization.responsive import responsive_dimensions

logger = get_logger(__name__)


def select_charts(page_ids: Optional[list[str]] = None, chart_ids: Optional[list[str]] = None) -> list[ChartConfig]:
    """
    Charts to export, in catalogue order.

    Raises:
        ValueError: If a requested page or chart id does not exist
    """
    known_pages = {page.page_id for page in PAGES}
    unknown_pages = sorted(set(page_ids or []) - known_pages)
    if unknown_pages:
        raise ValueError(f"Unknown page(s): {', '.join(unknown_pages)}")

    charts = [
        chart
        for page in PAGES
        if not page_ids or page.page_id in page_ids
        for chart in page.charts
    ]
    if chart_ids:
        known = {chart.chart_id for chart in charts}
        unknown = sorted(set(chart_ids) - known)
        if unknown:
            raise ValueError(f"Unknown chart(s): {', '.join(unknown)}")
        charts = [chart for chart in charts if chart.chart_id in chart_ids]
    return charts


def export_charts(
    charts: list[ChartConfig],
    output_dir: Path,
    context: DashboardContext,
    width: int = 1200,
    open_browser: bool = False,
) -> tuple[bool, str]:
    """
    Render and save each chart.

    Returns:
        (success, message). success is False if any chart ended in ERROR.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    dimensions = responsive_dimensions(
        width,
        default_width=context.config.render.default_width,
        default_height=context.config.render.default_height,
    )

    start = time.time()
    failed = []
    for chart in charts:
        pipeline = ChartPipeline(chart, context, dimensions=dimensions)
        try:
            if pipeline.load() == ChartState.ERROR:
                failed.append(chart.chart_id)
                fig = pipeline.figure
            else:
                fig = pipeline.render()
            save_figure_html(fig, str(output_dir), chart.chart_id, open_browser=open_browser)
        finally:
            pipeline.close()

    elapsed = time.time() - start
    written = len(charts)
    if failed:
        return False, f"{len(failed)} of {written} charts failed to load: {', '.join(failed)}"
    return True, f"Exported {written} charts to {output_dir} in {elapsed:.1f}s"


def main() -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Export road safety enforcement charts as HTML",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Every chart into ./exports
    python -m cli.export_charts

    # One page, custom data directory
    python -m cli.export_charts --page fines --data-dir /path/to/extracts

    # Single chart, opened in the browser
    python -m cli.export_charts --chart results-breath-map --open
        """,
    )

    parser.add_argument(
        "--output-dir",
        type=str,
        default="exports",
        help="Directory for the HTML files (default: exports)",
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help="Directory holding the extracts (default: [data] directory in dashboard.toml)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a dashboard TOML file (default: config/dashboard.toml)",
    )
    parser.add_argument(
        "--page",
        action="append",
        default=None,
        help="Only export charts on this page (repeatable)",
    )
    parser.add_argument(
        "--chart",
        action="append",
        default=None,
        help="Only export this chart id (repeatable)",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=1200,
        help="Target screen width in pixels (default: 1200)",
    )
    parser.add_argument(
        "--open",
        action="store_true",
        help="Open each exported file in the browser",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List chart ids and exit",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    if args.list:
        for page in PAGES:
            print(f"{page.page_id}:")
            for chart in page.charts:
                print(f"  {chart.chart_id:<34} {chart.title}")
        return 0

    config = load_dashboard_config(Path(args.config) if args.config else None)
    errors = config.validate()
    if errors:
        for error in errors:
            print(f"[FAILED] {error}", file=sys.stderr)
        return 1

    setup_logging_from_config(config.logging, verbose=args.verbose)

    paths = None
    if args.data_dir:
        data_dir = Path(args.data_dir).resolve()
        paths = PathConfig(base_dir=data_dir.parent, _data_dir=data_dir)

    try:
        charts = select_charts(args.page, args.chart)
    except ValueError as e:
        print(f"\n[FAILED] {e}", file=sys.stderr)
        return 1

    with DashboardContext(config=config, paths=paths) as context:
        success, message = export_charts(
            charts,
            Path(args.output_dir),
            context,
            width=args.width,
            open_browser=args.open,
        )

    if success:
        print(f"\n[OK] {message}")
        return 0
    else:
        print(f"\n[FAILED] {message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
