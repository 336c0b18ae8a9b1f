"""Request adaptation for the treemap visualization.

`TreemapVisualization` is created once per request. Before report data is
loaded it picks the metric to graph and, when evolution coloring is enabled,
widens the requested date so the loader fetches the previous period as well.
After loading it checks whether the most recent period has rows and shapes the
data into a treemap tree.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace
from datetime import date

from .config import TreemapConfig
from .errors import NoMetricAvailableError
from .generator import TreemapDataGenerator, TreemapNode
from .periods import is_multi_period_date, parse_date, parse_period, previous_period_date
from .request import ReportRequest
from .tables import ReportData, current_table

logger = logging.getLogger(__name__)

LABEL_COLUMN = "label"


def metric_to_graph(columns: Sequence[str]) -> str:
    """Return the metric column to visualize.

    The first displayed column is used unless it is the label column, in which
    case the second one is.

    Args:
        columns: Ordered displayed columns.

    Returns:
        The selected metric column.

    Raises:
        NoMetricAvailableError: When no column other than the label exists.
    """

    columns = tuple(columns)
    if not columns:
        raise NoMetricAvailableError(columns=columns)
    first = columns[0]
    if first != LABEL_COLUMN:
        return first
    if len(columns) < 2:
        raise NoMetricAvailableError(columns=columns)
    return columns[1]


def metric_translation(config: TreemapConfig, metric: str) -> str:
    """Return the human-readable name of `metric`, falling back to the column."""

    return config.translations.get(metric) or metric


def handle_evolution_values(
    request: ReportRequest,
    config: TreemapConfig,
    *,
    today: date | None = None,
) -> ReportRequest:
    """Widen `request` to cover the previous period when evolution is enabled.

    Evolution values cannot be computed for an arbitrary range, nor for date
    values that already name several periods; those requests are returned
    unchanged.

    Args:
        request: Incoming report request.
        config: Visualization configuration.
        today: Reference date for date keywords.

    Returns:
        The unchanged request, or a copy whose `date` is `"{previous},{current}"`
        and whose `evolution` flag is set.

    Raises:
        InvalidRequestParametersError: When `period`, or `date` while evolution
            applies, is missing or unparseable.
    """

    period = parse_period(request.period)
    if period == "range":
        return request
    if not config.show_evolution_values:
        return request
    if is_multi_period_date(request.date):
        logger.debug("Skipping evolution values for multi-period date %r", request.date)
        return request

    current = parse_date(request.date, today=today)
    previous = previous_period_date(current, period=period)
    return replace(
        request,
        date=f"{previous.isoformat()},{current.isoformat()}",
        evolution=True,
    )


def is_there_data_to_display(data: ReportData) -> bool:
    """Return True when the most recent period of `data` has rows."""

    return current_table(data).row_count != 0


class TreemapVisualization:
    """Per-request treemap visualization hooks.

    Args:
        config: View configuration produced by `configure_visualization`.
        today: Optional reference date for date keywords.
    """

    def __init__(self, config: TreemapConfig, *, today: date | None = None) -> None:
        self.config = config
        self.today = today
        self.metric = metric_to_graph(config.columns_to_display)
        self.generator: TreemapDataGenerator | None = None

    def before_load_data_table(self, request: ReportRequest) -> ReportRequest:
        """Prepare the generator and adapt the request before data is loaded.

        Args:
            request: Incoming report request.

        Returns:
            The request to hand to the report loader.
        """

        generator = TreemapDataGenerator(self.metric, metric_translation(self.config, self.metric))
        generator.set_initial_row_offset(request.filter_offset or 0)
        generator.set_available_dimensions(request.available_width, request.available_height)
        if not isinstance(self.config.max_graph_elements, bool):
            generator.set_max_elements(self.config.max_graph_elements)
        self.generator = generator

        adapted = handle_evolution_values(request, self.config, today=self.today)
        if adapted.evolution:
            generator.show_evolution_values()
            logger.info(
                "Treemap for %s widened date %r to %r for evolution values",
                request.report,
                request.date,
                adapted.date,
            )
        return adapted

    def before_generic_filters(self, request: ReportRequest) -> ReportRequest:
        """Restrict downstream columns to the graphed metric."""

        return request.with_custom_parameter("columns", self.metric)

    def is_there_data_to_display(self, data: ReportData) -> bool:
        return is_there_data_to_display(data)

    def generate(self, data: ReportData) -> TreemapNode:
        """Build the treemap tree for loaded data.

        Raises:
            RuntimeError: When called before `before_load_data_table`.
        """

        if self.generator is None:
            raise RuntimeError("before_load_data_table must run before generate.")
        return self.generator.generate(data)
