"""Request DTO passed between the HTTP layer, the adapter and the report loader."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType


@dataclass(frozen=True, slots=True)
class ReportRequest:
    """Parameters describing which report data to load.

    The visualization never mutates a request; adapters return modified
    copies built with `dataclasses.replace`.

    Args:
        report: Report identifier understood by the report loader.
        period: Raw `period` parameter (validated by the adapter).
        date: Raw `date` parameter; a single date or a `start,end` pair.
        filter_offset: Offset of the first displayed row.
        available_width: Optional client width in pixels.
        available_height: Optional client height in pixels.
        evolution: True once the date range was widened to include the previous period.
        custom_parameters: Extra parameters forwarded to the client renderer.
    """

    report: str
    period: str | None
    date: str | None
    filter_offset: int = 0
    available_width: int | None = None
    available_height: int | None = None
    evolution: bool = False
    custom_parameters: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def with_custom_parameter(self, key: str, value: str) -> "ReportRequest":
        """Return a copy with one custom parameter added or replaced."""

        merged = dict(self.custom_parameters)
        merged[key] = value
        return replace(self, custom_parameters=MappingProxyType(merged))
