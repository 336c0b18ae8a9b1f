"""Report data containers consumed by the treemap visualization.

A loaded report is either a single `ReportTable` or, when evolution values
widen the requested date range, a `PeriodTableMap` holding one table per
period in chronological order. `ReportData` is the union of both shapes.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TypeAlias


@dataclass(frozen=True, slots=True)
class ReportRow:
    """A single labelled report row.

    Attributes:
        label: Row label (e.g. a referrer or page title).
        columns: Metric values keyed by column name.
        subtable_id: Optional identifier of the row's child report.
    """

    label: str
    columns: Mapping[str, float] = field(default_factory=dict)
    subtable_id: int | None = None

    def value(self, column: str) -> float:
        """Return a numeric column value, treating missing values as 0."""

        raw = self.columns.get(column)
        if raw is None:
            return 0
        return raw


@dataclass(frozen=True, slots=True)
class ReportTable:
    """An ordered collection of report rows for one period."""

    rows: tuple[ReportRow, ...] = ()

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def get_row_from_label(self, label: str) -> ReportRow | None:
        """Return the first row with the given label, if any."""

        for row in self.rows:
            if row.label == label:
                return row
        return None


@dataclass(frozen=True, slots=True)
class PeriodTableMap:
    """Report tables keyed by period label, in chronological order.

    Attributes:
        tables: `(period_label, table)` pairs; the last pair is the most recent period.
    """

    tables: tuple[tuple[str, ReportTable], ...] = ()

    @property
    def first_table(self) -> ReportTable | None:
        if not self.tables:
            return None
        return self.tables[0][1]

    @property
    def last_table(self) -> ReportTable | None:
        if not self.tables:
            return None
        return self.tables[-1][1]

    @property
    def period_labels(self) -> tuple[str, ...]:
        return tuple(label for label, _ in self.tables)


ReportData: TypeAlias = ReportTable | PeriodTableMap


def current_table(data: ReportData) -> ReportTable:
    """Return the table for the most recent period in `data`.

    An empty PeriodTableMap yields an empty table.
    """

    if isinstance(data, PeriodTableMap):
        return data.last_table or ReportTable()
    return data
