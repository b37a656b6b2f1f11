"""
Data models for the Road Safety Enforcement Dashboard.

Contains the per-chart FilterState and the declarative ChartConfig that
drives the generic chart pipeline.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, Optional, Union


ALL_YEARS = "all"
SUBSTANCE_OPTIONS = ("both", "alcohol", "drug")
REDUCERS = ("sum", "count", "mean")
FACETS = ("year", "jurisdiction", "metric", "substance", "age_group")

YearSelection = Union[int, str]


class ChartKind(str, Enum):
    """Shape family a chart is drawn with."""
    BAR = "bar"
    LINE = "line"
    PIE = "pie"
    STACKED = "stacked"
    CHOROPLETH = "choropleth"


class SortOrder(str, Enum):
    """Ordering applied to aggregated series."""
    INSERTION = "insertion"
    VALUE_DESC = "value_desc"
    KEY_ASC = "key_asc"


@dataclass
class FilterState:
    """
    Facet selections for one chart instance.

    A facet set to None is not applied. An empty set is an explicit
    "nothing selected" and filters every record out.

    Attributes:
        year: Selected year, or "all"
        jurisdictions: Selected jurisdiction codes (None = no jurisdiction facet)
        metric: Selected value column for charts with a metric selector
        substance: "both", "alcohol" or "drug"
        age_groups: Selected age groups (None = no age facet)
    """

    year: YearSelection = ALL_YEARS
    jurisdictions: Optional[set[str]] = None
    metric: Optional[str] = None
    substance: str = "both"
    age_groups: Optional[set[str]] = None

    def validate(self) -> list[str]:
        """
        Validate the selection.

        Returns:
            List of error messages. Empty list means all validations passed.
        """
        errors = []

        if self.year != ALL_YEARS and not isinstance(self.year, int):
            errors.append(f"Year must be an integer or '{ALL_YEARS}', got {self.year!r}")

        if self.substance not in SUBSTANCE_OPTIONS:
            errors.append(
                f"Substance must be one of {', '.join(SUBSTANCE_OPTIONS)}, got {self.substance!r}"
            )

        return errors

    @property
    def has_year_filter(self) -> bool:
        return self.year != ALL_YEARS

    @property
    def has_jurisdiction_filter(self) -> bool:
        return self.jurisdictions is not None

    @property
    def has_age_filter(self) -> bool:
        return self.age_groups is not None

    @property
    def has_substance_filter(self) -> bool:
        return self.substance != "both"

    # Mutations. Each one is a single, synchronous state change.

    def set_year(self, year: YearSelection) -> None:
        if year is None or year == ALL_YEARS:
            self.year = ALL_YEARS
        else:
            self.year = int(year)

    def set_metric(self, metric: Optional[str]) -> None:
        self.metric = metric

    def set_substance(self, substance: str) -> None:
        if substance not in SUBSTANCE_OPTIONS:
            raise ValueError(f"Unknown substance: {substance!r}")
        self.substance = substance

    def toggle_jurisdiction(self, code: str, available: Iterable[str] = ()) -> None:
        """Add or remove one jurisdiction. An unfaceted state starts from `available`."""
        self.jurisdictions = _toggle(self.jurisdictions, code, available)

    def select_all_jurisdictions(self, available: Iterable[str]) -> None:
        self.jurisdictions = set(available)

    def clear_jurisdictions(self) -> None:
        self.jurisdictions = set()

    def toggle_age_group(self, group: str, available: Iterable[str] = ()) -> None:
        self.age_groups = _toggle(self.age_groups, group, available)

    def select_all_age_groups(self, available: Iterable[str]) -> None:
        self.age_groups = set(available)

    def clear_age_groups(self) -> None:
        self.age_groups = set()

    def copy(self) -> "FilterState":
        return replace(
            self,
            jurisdictions=None if self.jurisdictions is None else set(self.jurisdictions),
            age_groups=None if self.age_groups is None else set(self.age_groups),
        )

    def summary(self) -> str:
        """
        Return a human-readable summary of the selection.

        Useful for logging and chart subtitles.
        """
        parts = [f"Year: {'All' if self.year == ALL_YEARS else self.year}"]

        if self.jurisdictions is None:
            parts.append("Jurisdictions: All")
        else:
            parts.append(f"Jurisdictions: {', '.join(sorted(self.jurisdictions)) or 'None'}")

        if self.metric:
            parts.append(f"Metric: {self.metric}")
        if self.has_substance_filter:
            parts.append(f"Substance: {self.substance}")
        if self.age_groups is not None:
            parts.append(f"Age groups: {len(self.age_groups)} selected")

        return " | ".join(parts)


def _toggle(current: Optional[set[str]], value: str, available: Iterable[str]) -> set[str]:
    selected = set(available) if current is None else set(current)
    if value in selected:
        selected.discard(value)
    else:
        selected.add(value)
    return selected


@dataclass(frozen=True)
class ChartConfig:
    """
    Declarative description of one chart.

    Every chart on the dashboard is an instance of this class handed to the
    generic pipeline; nothing chart-specific lives in code.

    Attributes:
        chart_id: Stable identifier, used for component ids and file names
        title: Display title
        kind: Shape family (bar, line, pie, stacked, choropleth)
        dataset: Name of the dataset the chart reads (see PathConfig.dataset_paths)
        x_field: Column whose values form the categorical axis (or pie slices / map regions)
        value_fields: Columns reduced per category. Several fields give grouped or stacked traces
        series_field: Optional column splitting the data into one trace per value
        reducer: "sum", "count" or "mean"
        sort: Ordering of the categorical axis
        headroom: Numeric axis spans [0, max * headroom]
        orientation: "v" or "h" for bar-like charts
        excluded_categories: x_field values dropped before aggregation
        facets: Controls shown for this chart (subset of FACETS)
        metric_options: Value columns the metric selector switches between
        metric_color_scales: Choropleth colour scale per metric
        color_scale: Sequential colour scale for choropleths
        colors: Fixed colour per category or series
        value_labels: Display label per value column
        breakdown_field: Column whose per-category split is shown in the tooltip
        percent_stack: Normalise stacked bars to 100%
        default_year: Initial year. None selects the latest year in the data
        default_top_jurisdictions: Preselect the top-N jurisdictions by value
        min_year: Records before this year are ignored
        x_label: Category axis title
        y_label: Value axis title
        description: Short explanatory text shown under the title
    """

    chart_id: str
    title: str
    kind: ChartKind
    dataset: str
    x_field: str
    value_fields: tuple[str, ...] = ("COUNT",)
    series_field: Optional[str] = None
    reducer: str = "sum"
    sort: SortOrder = SortOrder.INSERTION
    headroom: float = 1.1
    orientation: str = "v"
    excluded_categories: tuple[str, ...] = ()
    facets: tuple[str, ...] = ()
    metric_options: tuple[str, ...] = ()
    metric_color_scales: dict[str, str] = field(default_factory=dict)
    color_scale: str = "YlOrRd"
    colors: dict[str, str] = field(default_factory=dict)
    value_labels: dict[str, str] = field(default_factory=dict)
    breakdown_field: Optional[str] = None
    percent_stack: bool = False
    default_year: Optional[YearSelection] = ALL_YEARS
    default_top_jurisdictions: Optional[int] = None
    min_year: Optional[int] = None
    x_label: str = ""
    y_label: str = ""
    description: str = ""

    def validate(self) -> list[str]:
        """
        Validate the configuration.

        Returns:
            List of error messages. Empty list means all validations passed.
        """
        errors = []

        if not self.chart_id:
            errors.append("chart_id is required")
        if not self.value_fields and not self.metric_options:
            errors.append(f"{self.chart_id}: at least one value field is required")
        if self.reducer not in REDUCERS:
            errors.append(f"{self.chart_id}: unknown reducer {self.reducer!r}")
        if self.headroom < 1.0:
            errors.append(f"{self.chart_id}: headroom must be at least 1.0")
        if self.orientation not in ("v", "h"):
            errors.append(f"{self.chart_id}: orientation must be 'v' or 'h'")

        unknown = [f for f in self.facets if f not in FACETS]
        if unknown:
            errors.append(f"{self.chart_id}: unknown facets {unknown}")
        if "metric" in self.facets and not self.metric_options:
            errors.append(f"{self.chart_id}: metric facet needs metric_options")
        if self.kind == ChartKind.PIE and self.series_field:
            errors.append(f"{self.chart_id}: pie charts cannot have a series field")
        if self.percent_stack and self.kind != ChartKind.STACKED:
            errors.append(f"{self.chart_id}: percent_stack only applies to stacked charts")

        return errors

    def has_facet(self, facet: str) -> bool:
        return facet in self.facets

    def active_value_fields(self, filters: FilterState) -> tuple[str, ...]:
        """Value columns in play for a selection; the metric selector overrides value_fields."""
        if self.metric_options:
            metric = filters.metric if filters.metric in self.metric_options else self.metric_options[0]
            return (metric,)
        return self.value_fields

    def label_for(self, value_field: str) -> str:
        return self.value_labels.get(value_field, value_field.replace("_", " ").title())

    def scale_for(self, filters: FilterState) -> str:
        if self.metric_color_scales and filters.metric in self.metric_color_scales:
            return self.metric_color_scales[filters.metric]
        return self.color_scale
