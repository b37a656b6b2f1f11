"""
Generic chart pipeline: load -> filter -> aggregate -> scale -> draw.

One ChartPipeline exists per chart instance. It owns that chart's
FilterState and last figure; the dataset cache and boundaries come from the
shared DashboardContext. The chart kind only changes which builder in
FIGURE_BUILDERS draws the shapes.

Lifecycle::

    UNINITIALIZED -> LOADING -> READY -> RENDERING -> READY ...
                        |
                        +-> ERROR (terminal)
"""

import threading
from enum import Enum
from typing import Optional

import pandas as pd
import plotly.graph_objects as go

from core.context import DashboardContext
from core.logging_config import get_logger
from core.models import ALL_YEARS, ChartConfig, ChartKind, FilterState, YearSelection
from data_processing.aggregation import apply_filters, available_values, top_categories
from data_processing.loader import LoadError
from data_processing.schema import ALL_AGES, UNKNOWN
from visualization.chart_data import ChartData, prepare_chart_data
from visualization.plotly_generator import (
    FIGURE_BUILDERS,
    apply_dimensions,
    empty_figure,
    error_figure,
)
from visualization.responsive import (
    ChartDimensions,
    Debouncer,
    font_scale,
    responsive_margin,
)

logger = get_logger(__name__)


class ChartState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    RENDERING = "rendering"
    ERROR = "error"


class ChartPipeline:
    """
    Drives one chart from its dataset to a Plotly figure.

    Every FilterState mutation goes through a method here that applies the
    change and renders exactly once. A render started before a newer one
    never replaces the newer figure.

    Args:
        config: Chart definition
        context: Shared dataset cache, paths and boundaries
        dimensions: Initial size; None leaves sizing to the container
    """

    def __init__(
        self,
        config: ChartConfig,
        context: DashboardContext,
        dimensions: Optional[ChartDimensions] = None,
    ):
        errors = config.validate()
        if errors:
            raise ValueError(f"Invalid chart config: {'; '.join(errors)}")

        self.config = config
        self.context = context
        self.dimensions = dimensions
        self.state = ChartState.UNINITIALIZED
        self.filters = FilterState()
        self.frame: Optional[pd.DataFrame] = None
        self.error: Optional[str] = None
        self.figure: Optional[go.Figure] = None
        self.last_data: Optional[ChartData] = None
        self.render_count = 0

        self._lock = threading.Lock()
        self._generation = 0
        self._resize = Debouncer(self._apply_resize, context.config.render.resize_debounce_ms)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> ChartState:
        """Fetch the dataset (and boundaries for maps) once.

        A LoadError moves the chart to the terminal ERROR state, with an
        error figure in place of the chart.
        """
        if self.state != ChartState.UNINITIALIZED:
            return self.state

        self.state = ChartState.LOADING
        try:
            result = self.context.load_dataset(self.config.dataset)
        except LoadError as e:
            logger.error(f"{self.config.chart_id}: {e}")
            self.error = str(e)
            self.figure = error_figure(self.config.title, str(e))
            self.state = ChartState.ERROR
            return self.state

        self.frame = result.df
        if self.config.kind == ChartKind.CHOROPLETH:
            self.context.geography.get()

        self.filters = self.default_filters()
        self.state = ChartState.READY
        logger.debug(f"{self.config.chart_id}: ready with {result.row_count} rows")
        return self.state

    def _scoped_frame(self) -> pd.DataFrame:
        """Frame restricted by the chart's fixed year floor only."""
        if self.frame is None:
            raise RuntimeError(f"{self.config.chart_id}: load() has not completed")
        if self.config.min_year is None:
            return self.frame
        return self.frame.loc[self.frame["YEAR"] >= self.config.min_year]

    def available_years(self) -> list[int]:
        return available_values(self._scoped_frame(), "YEAR")

    def available_jurisdictions(self) -> list[str]:
        return available_values(self._scoped_frame(), "JURISDICTION")

    def available_age_groups(self) -> list[str]:
        return available_values(
            self._scoped_frame(), "AGE_GROUP",
            exclude=set(self.config.excluded_categories) | {ALL_AGES, UNKNOWN},
        )

    def default_filters(self) -> FilterState:
        """Initial selection derived from the config and the loaded data."""
        filters = FilterState()
        config = self.config

        if config.has_facet("year"):
            if config.default_year is None:
                years = self.available_years()
                filters.set_year(years[-1] if years else ALL_YEARS)
            else:
                filters.set_year(config.default_year)

        if config.metric_options:
            filters.set_metric(config.metric_options[0])

        if config.has_facet("jurisdiction") and config.default_top_jurisdictions:
            scoped = apply_filters(self._scoped_frame(), FilterState(year=filters.year))
            filters.jurisdictions = set(top_categories(
                scoped, "JURISDICTION",
                config.active_value_fields(filters),
                config.default_top_jurisdictions,
            ))

        return filters

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def chart_data(self, filters: Optional[FilterState] = None) -> ChartData:
        """Aggregated data for a selection (the current one by default)."""
        return prepare_chart_data(self.config, self._scoped_frame(), filters or self.filters)

    def build(
        self, filters: Optional[FilterState] = None
    ) -> tuple[go.Figure, Optional[ChartData]]:
        """
        Build a figure for a selection without touching pipeline state.

        Used directly by stateless web callbacks. Returns the figure and the
        data it was drawn from; the data is None for a chart in ERROR state.
        """
        if self.state == ChartState.ERROR:
            return error_figure(self.config.title, self.error or ""), None
        return self._draw(filters or self.filters)

    def build_figure(self, filters: Optional[FilterState] = None) -> go.Figure:
        return self.build(filters)[0]

    def _draw(self, filters: FilterState) -> tuple[go.Figure, ChartData]:
        data = self.chart_data(filters)
        if data.is_empty:
            return apply_dimensions(empty_figure(self.config.title), self.dimensions), data

        builder = FIGURE_BUILDERS[self.config.kind]
        kwargs = {}
        if self.config.kind == ChartKind.CHOROPLETH:
            kwargs = dict(
                geojson=self.context.geography.get(),
                outline_ids=self.context.geography.outline_ids(),
                centroids=self.context.geography.centroids(),
                color_scale=self.config.scale_for(filters),
            )
        fig = builder(self.config, data, **kwargs)
        return apply_dimensions(fig, self.dimensions), data

    def render(self) -> go.Figure:
        """
        Redraw from the current FilterState.

        Always builds a new figure; the stored figure is replaced only if no
        newer render has started meanwhile.
        """
        if self.state == ChartState.ERROR:
            return self.figure
        if self.state in (ChartState.UNINITIALIZED, ChartState.LOADING):
            raise RuntimeError(f"{self.config.chart_id}: render() before load() completed")

        with self._lock:
            self._generation += 1
            generation = self._generation
            self.state = ChartState.RENDERING
            filters = self.filters.copy()

        try:
            fig, data = self._draw(filters)
        except Exception:
            with self._lock:
                if generation == self._generation:
                    self.state = ChartState.READY
            raise

        with self._lock:
            if generation == self._generation:
                self.figure = fig
                self.last_data = data
                self.state = ChartState.READY
            self.render_count += 1
        return fig

    # ------------------------------------------------------------------
    # Filter mutations (one render each)
    # ------------------------------------------------------------------

    def set_year(self, year: YearSelection) -> go.Figure:
        self.filters.set_year(year)
        return self.render()

    def set_metric(self, metric: str) -> go.Figure:
        if metric not in self.config.metric_options:
            raise ValueError(f"{self.config.chart_id}: unknown metric {metric!r}")
        self.filters.set_metric(metric)
        return self.render()

    def set_substance(self, substance: str) -> go.Figure:
        self.filters.set_substance(substance)
        return self.render()

    def toggle_jurisdiction(self, code: str) -> go.Figure:
        self.filters.toggle_jurisdiction(code, self.available_jurisdictions())
        return self.render()

    def select_all_jurisdictions(self) -> go.Figure:
        self.filters.select_all_jurisdictions(self.available_jurisdictions())
        return self.render()

    def clear_jurisdictions(self) -> go.Figure:
        self.filters.clear_jurisdictions()
        return self.render()

    def toggle_age_group(self, group: str) -> go.Figure:
        self.filters.toggle_age_group(group, self.available_age_groups())
        return self.render()

    def select_all_age_groups(self) -> go.Figure:
        self.filters.select_all_age_groups(self.available_age_groups())
        return self.render()

    def clear_age_groups(self) -> go.Figure:
        self.filters.clear_age_groups()
        return self.render()

    def apply_filters(self, filters: FilterState) -> go.Figure:
        """Replace the whole selection at once."""
        self.filters = filters.copy()
        return self.render()

    def reset(self) -> go.Figure:
        """Back to the initial selection."""
        self.filters = self.default_filters()
        return self.render()

    # ------------------------------------------------------------------
    # Resize
    # ------------------------------------------------------------------

    def resize(self, width: int, height: int) -> None:
        """Request a redraw at a new size; bursts collapse into one render."""
        self._resize(width, height)

    def _apply_resize(self, width: int, height: int) -> None:
        self.dimensions = ChartDimensions(
            width=width,
            height=height,
            margin=responsive_margin(width),
            font_scale=font_scale(width),
        )
        if self.state in (ChartState.READY, ChartState.RENDERING):
            self.render()

    def flush_resize(self) -> bool:
        return self._resize.flush()

    def close(self) -> None:
        self._resize.cancel()

