"""Shape report tables into the node tree consumed by the treemap widget.

The client-side widget expects a JSON tree where each node carries an `id`, a
`name`, a `data` payload (`$area` sizes the rectangle) and `children`. This
module builds that tree from a loaded `ReportData`, truncating rows so that
every rectangle stays large enough to be readable.
"""

from __future__ import annotations

import logging
from math import floor
from typing import Any, Final, TypedDict

from .deltas import evolution_percent
from .tables import PeriodTableMap, ReportData, ReportRow, ReportTable

logger = logging.getLogger(__name__)

ROOT_NODE_ID: Final[str] = "treemap-root"
OTHERS_LABEL: Final[str] = "Others"
DEFAULT_MAX_ELEMENTS: Final[int] = 10
# 20px * 20px
MIN_NODE_AREA: Final[int] = 400


class TreemapNode(TypedDict):
    """A node of the treemap tree."""

    id: str
    name: str
    data: dict[str, Any]
    children: list["TreemapNode"]


class TreemapDataGenerator:
    """Build a TreemapNode tree for one metric of a report.

    Args:
        metric: Column used to size (and color) nodes.
        metric_translation: Human-readable metric name shown in tooltips.
    """

    def __init__(self, metric: str, metric_translation: str) -> None:
        self.metric = metric
        self.metric_translation = metric_translation
        self.first_row_offset = 0
        self.available_width: int | None = None
        self.available_height: int | None = None
        self.max_elements: int | None = None
        self.evolution_enabled = False

    def set_initial_row_offset(self, offset: int) -> None:
        self.first_row_offset = max(0, int(offset))

    def set_available_dimensions(self, width: int | None, height: int | None) -> None:
        """Record the client's drawing area used to derive the element budget."""

        self.available_width = width
        self.available_height = height

    def set_max_elements(self, max_elements: int | None) -> None:
        self.max_elements = max_elements

    def show_evolution_values(self) -> None:
        """Color nodes by percent change against the previous period."""

        self.evolution_enabled = True

    def element_budget(self) -> int:
        """Return how many nodes (including `Others`) the tree may contain."""

        if self.max_elements is not None:
            return max(1, self.max_elements)
        if self.available_width and self.available_height:
            available_area = self.available_width * self.available_height
            return max(1, floor(available_area / MIN_NODE_AREA))
        return DEFAULT_MAX_ELEMENTS

    def generate(self, data: ReportData) -> TreemapNode:
        """Build the treemap tree for `data`.

        Args:
            data: Loaded report. For a PeriodTableMap the first table is the
                past period and the last table the current one.

        Returns:
            The root TreemapNode.
        """

        past_table: ReportTable | None = None
        root_data: dict[str, Any] = {}
        if isinstance(data, PeriodTableMap):
            current = data.last_table or ReportTable()
            if len(data.tables) > 1:
                past_table = data.first_table
                root_data["past_period"] = data.period_labels[0]
                root_data["current_period"] = data.period_labels[-1]
        else:
            current = data

        root = _make_node(ROOT_NODE_ID, "", root_data)
        kept, others = self._truncate(current)
        for index, row in enumerate(kept):
            past_row = past_table.get_row_from_label(row.label) if past_table is not None else None
            node = self._make_node_from_row(
                node_id=f"_{self.first_row_offset + index}",
                label=row.label,
                value=row.value(self.metric),
                past_value=(past_row.value(self.metric) if past_row is not None else None),
            )
            if node is None:
                continue
            if row.subtable_id is not None:
                node["data"]["idSubtable"] = row.subtable_id
            root["children"].append(node)

        if others:
            past_total: float | None = None
            if past_table is not None:
                past_rows = [past_table.get_row_from_label(row.label) for row in others]
                matched = [past_row.value(self.metric) for past_row in past_rows if past_row is not None]
                past_total = sum(matched) if matched else None
            node = self._make_node_from_row(
                node_id=f"_{self.first_row_offset}_others",
                label=OTHERS_LABEL,
                value=sum(row.value(self.metric) for row in others),
                past_value=past_total,
            )
            if node is not None:
                node["data"]["aggregate_offset"] = self.first_row_offset + len(kept)
                root["children"].append(node)

        logger.debug(
            "Generated treemap for %s: %d nodes (%d aggregated into %s)",
            self.metric,
            len(root["children"]),
            len(others),
            OTHERS_LABEL,
        )
        return root

    def _truncate(self, table: ReportTable) -> tuple[list[ReportRow], list[ReportRow]]:
        """Sort rows by metric and split off the rows aggregated into `Others`."""

        rows = sorted(table.rows, key=lambda row: row.value(self.metric), reverse=True)
        budget = self.element_budget()
        if len(rows) <= budget:
            return rows, []
        keep = budget - 1
        return rows[:keep], rows[keep:]

    def _make_node_from_row(
        self,
        *,
        node_id: str,
        label: str,
        value: float,
        past_value: float | None,
    ) -> TreemapNode | None:
        # zero-area rectangles break the layout
        if not value:
            return None
        data: dict[str, Any] = {
            "$area": value,
            "metric": self.metric_translation,
            "val": value,
        }
        if self.evolution_enabled:
            data["evolution"] = evolution_percent(value, past_value)
        return _make_node(node_id, label, data)


def _make_node(node_id: str, name: str, data: dict[str, Any] | None = None) -> TreemapNode:
    return {"id": node_id, "name": name, "data": dict(data or {}), "children": []}
