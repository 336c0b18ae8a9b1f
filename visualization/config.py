"""Static configuration for the treemap visualization.

Every option the treemap view recognizes is an explicit field on
`TreemapConfig` with its default. The config is assembled once per request by
`configure_visualization` and is read-only afterwards.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Final

VISUALIZATION_ID: Final[str] = "infoviz-treemap"
FOOTER_ICON_TITLE: Final[str] = "Treemap"
TEMPLATE_NAME: Final[str] = "reports/treemap.html"
DATATABLE_JS_TYPE: Final[str] = "TreemapDataTable"

# Properties serialized for the client-side treemap widget.
CLIENT_SIDE_PROPERTIES: Final[tuple[str, ...]] = (
    "filter_offset",
    "max_graph_elements",
    "show_evolution_values",
    "subtable_controller_action",
)


@dataclass(frozen=True, slots=True)
class TreemapConfig:
    """View properties for a treemap visualization.

    Args:
        columns_to_display: Ordered report columns; the first non-label column is graphed.
        translations: Human-readable metric names keyed by column.
        show_evolution_values: Color nodes by percent change against the previous period.
        max_graph_elements: Explicit element budget, or False to size from the
            available width/height.
        allow_multi_select_series_picker: Whether several metrics may be picked at once.
        show_pagination_control: Whether pagination controls are shown.
        show_offset_information: Whether "rows X-Y of Z" information is shown.
        show_flatten_table: Whether the flatten toggle is shown.
        datatable_js_type: Client-side data table class driving the widget.
        filter_offset: Offset of the first displayed row.
        subtable_controller_action: Endpoint action used to expand a node's subtable.
    """

    columns_to_display: tuple[str, ...] = ("label",)
    translations: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    show_evolution_values: bool = True
    max_graph_elements: bool | int = False
    allow_multi_select_series_picker: bool = False
    show_pagination_control: bool = False
    show_offset_information: bool = False
    show_flatten_table: bool = False
    datatable_js_type: str = DATATABLE_JS_TYPE
    filter_offset: int = 0
    subtable_controller_action: str | None = None

    def client_side_properties(self) -> dict[str, Any]:
        """Return the whitelisted properties exposed to the client renderer."""

        return {name: getattr(self, name) for name in CLIENT_SIDE_PROPERTIES}


def configure_visualization(
    *,
    columns_to_display: Sequence[str],
    translations: Mapping[str, str] | None = None,
    show_evolution_values: bool = True,
    filter_offset: int = 0,
    subtable_controller_action: str | None = None,
) -> TreemapConfig:
    """Build the TreemapConfig for a report.

    The element count is always computed from the available width/height, and
    pagination, offset information and flattening are disabled since they make
    no sense for a space-filling layout.

    Args:
        columns_to_display: Ordered report columns.
        translations: Optional metric translations.
        show_evolution_values: Whether evolution coloring is requested.
        filter_offset: Offset of the first displayed row.
        subtable_controller_action: Optional subtable endpoint action.

    Returns:
        A frozen TreemapConfig.
    """

    return TreemapConfig(
        columns_to_display=tuple(columns_to_display),
        translations=MappingProxyType(dict(translations or {})),
        show_evolution_values=bool(show_evolution_values),
        max_graph_elements=False,
        allow_multi_select_series_picker=False,
        show_pagination_control=False,
        show_offset_information=False,
        show_flatten_table=False,
        datatable_js_type=DATATABLE_JS_TYPE,
        filter_offset=filter_offset,
        subtable_controller_action=subtable_controller_action,
    )
