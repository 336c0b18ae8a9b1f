"""Report loading for the treemap views.

Report data is owned by the reporting backend; the views only depend on the
`ReportLoader` protocol. `YamlReportLoader` is the bundled implementation and
reads report definitions plus per-period rows from a YAML document:

    reports:
      referrers:
        title: Referrers
        columns: [label, nb_visits]
        translations: {nb_visits: Visits}
        data:
          day:
            "2024-03-10":
              - {label: example.org, nb_visits: 12, subtable_id: 3}
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, timedelta
from functools import lru_cache
from pathlib import Path
from typing import Any, Protocol

import yaml
from django.conf import settings

from visualization.errors import InvalidRequestParametersError
from visualization.periods import (
    PeriodName,
    iterate_periods,
    parse_date,
    parse_date_pair,
    parse_period,
    period_start,
    previous_period_date,
    subtract_periods,
)
from visualization.request import ReportRequest
from visualization.tables import PeriodTableMap, ReportData, ReportRow, ReportTable

logger = logging.getLogger(__name__)

_LAST_N_RE = re.compile(r"^(last|previous)([0-9]+)$")


class UnknownReportError(LookupError):
    """Raised when a report identifier is not known to the loader."""

    def __init__(self, *, report: str) -> None:
        super().__init__(f"Unknown report {report!r}.")
        self.report = report


class ReportFixtureError(ValueError):
    """Raised when a YAML report document is malformed."""


@dataclass(frozen=True, slots=True)
class ReportDefinition:
    """Static description of a report.

    Args:
        id: Report identifier.
        title: Display title.
        columns: Ordered columns displayed by the report.
        translations: Human-readable column names.
        subtable_controller_action: Optional action used to load row subtables.
    """

    id: str
    title: str
    columns: tuple[str, ...]
    translations: Mapping[str, str] = field(default_factory=dict)
    subtable_controller_action: str | None = None


class ReportLoader(Protocol):
    """Loads report definitions and data."""

    def definition(self, report: str) -> ReportDefinition:
        ...

    def load(self, request: ReportRequest, *, today: date | None = None) -> ReportData:
        ...


class YamlReportLoader:
    """ReportLoader backed by a YAML document.

    Args:
        document: Parsed YAML mapping (see module docstring).
        today: Optional reference date for `today`/`lastN` dates.
    """

    def __init__(self, document: Mapping[str, Any], *, today: date | None = None) -> None:
        reports = document.get("reports") if isinstance(document, Mapping) else None
        if not isinstance(reports, Mapping):
            raise ReportFixtureError("Report document must contain a `reports` mapping.")
        self.today = today
        self._definitions: dict[str, ReportDefinition] = {}
        self._data: dict[str, dict[str, dict[str, ReportTable]]] = {}
        for report_id, raw in reports.items():
            report_key = str(report_id)
            self._definitions[report_key] = _parse_definition(report_key, raw)
            self._data[report_key] = _parse_data(report_key, raw.get("data") or {})

    @classmethod
    def from_path(cls, path: str | Path, *, today: date | None = None) -> "YamlReportLoader":
        """Load a YAML report document from disk."""

        with Path(path).open(encoding="utf-8") as handle:
            document = yaml.safe_load(handle) or {}
        return cls(document, today=today)

    def report_ids(self) -> tuple[str, ...]:
        return tuple(self._definitions)

    def definition(self, report: str) -> ReportDefinition:
        try:
            return self._definitions[report]
        except KeyError as exc:
            raise UnknownReportError(report=report) from exc

    def load(self, request: ReportRequest, *, today: date | None = None) -> ReportData:
        """Load report data for the request's period and date.

        A single date yields one ReportTable. A `start,end` pair (or `lastN` /
        `previousN`) yields a PeriodTableMap with one table per period; for the
        `range` period the daily rows are summed into one table instead.

        Args:
            request: Report request, possibly widened for evolution values.
            today: Reference date for keywords; defaults to the loader's own.

        Raises:
            UnknownReportError: When the report is unknown.
            InvalidRequestParametersError: When period/date are invalid.
        """

        self.definition(request.report)
        reference = today or self.today
        period = parse_period(request.period)
        raw_date = (request.date or "").strip()
        bounds = self._date_bounds(raw_date, period=period, today=reference)

        if period == "range":
            if bounds is None:
                single = parse_date(raw_date, today=reference)
                bounds = (single, single)
            return self._sum_days(request.report, *bounds)

        if bounds is None:
            target = period_start(parse_date(raw_date, today=reference), period=period)
            return self._table(request.report, period, target)

        start, end = bounds
        tables = tuple(
            (start_date.isoformat(), self._table(request.report, period, start_date))
            for start_date in iterate_periods(start, end, period=period)
        )
        logger.debug("Loaded %d %s tables for %s", len(tables), period, request.report)
        return PeriodTableMap(tables=tables)

    def _date_bounds(self, raw_date: str, *, period: PeriodName, today: date | None) -> tuple[date, date] | None:
        if "," in raw_date:
            return parse_date_pair(raw_date, today=today)
        match = _LAST_N_RE.match(raw_date.lower())
        if match is None:
            return None
        count = int(match.group(2))
        if count < 1:
            raise InvalidRequestParametersError(parameter="date", value=raw_date)
        step: PeriodName = "day" if period == "range" else period
        end = parse_date("today", today=today)
        if match.group(1) == "previous":
            end = previous_period_date(end, period=step)
        start = subtract_periods(end, period=step, count=count - 1)
        return start, end

    def _table(self, report: str, period: str, start: date) -> ReportTable:
        return self._data[report].get(period, {}).get(start.isoformat(), ReportTable())

    def _sum_days(self, report: str, start: date, end: date) -> ReportTable:
        days = self._data[report].get("day", {})
        totals: dict[str, dict[str, float]] = {}
        subtables: dict[str, int | None] = {}
        current = start
        while current <= end:
            for row in days.get(current.isoformat(), ReportTable()).rows:
                columns = totals.setdefault(row.label, {})
                for name, value in row.columns.items():
                    columns[name] = columns.get(name, 0) + value
                subtables.setdefault(row.label, row.subtable_id)
            current += timedelta(days=1)
        return ReportTable(
            rows=tuple(
                ReportRow(label=label, columns=columns, subtable_id=subtables.get(label))
                for label, columns in totals.items()
            )
        )


def _parse_definition(report: str, raw: Any) -> ReportDefinition:
    if not isinstance(raw, Mapping):
        raise ReportFixtureError(f"Report {report!r} must be a mapping.")
    columns = raw.get("columns")
    if not isinstance(columns, list) or not all(isinstance(column, str) for column in columns):
        raise ReportFixtureError(f"Report {report!r} must declare a list of string `columns`.")
    translations = raw.get("translations") or {}
    if not isinstance(translations, Mapping):
        raise ReportFixtureError(f"Report {report!r} `translations` must be a mapping.")
    return ReportDefinition(
        id=report,
        title=str(raw.get("title") or report),
        columns=tuple(columns),
        translations={str(key): str(value) for key, value in translations.items()},
        subtable_controller_action=raw.get("subtable_controller_action"),
    )


def _parse_data(report: str, raw: Any) -> dict[str, dict[str, ReportTable]]:
    if not isinstance(raw, Mapping):
        raise ReportFixtureError(f"Report {report!r} `data` must be a mapping of periods.")
    parsed: dict[str, dict[str, ReportTable]] = {}
    for period_name, by_date in raw.items():
        try:
            period = parse_period(str(period_name))
        except InvalidRequestParametersError as exc:
            raise ReportFixtureError(f"Report {report!r} has unknown period {period_name!r}.") from exc
        if not isinstance(by_date, Mapping):
            raise ReportFixtureError(f"Report {report!r} period {period!r} must map dates to rows.")
        tables: dict[str, ReportTable] = {}
        for raw_date, rows in by_date.items():
            # PyYAML turns unquoted ISO dates into `date` objects.
            key = raw_date.isoformat() if isinstance(raw_date, date) else str(raw_date)
            tables[key] = ReportTable(rows=tuple(_parse_row(report, row) for row in rows or ()))
        parsed[period] = tables
    return parsed


def _parse_row(report: str, raw: Any) -> ReportRow:
    if not isinstance(raw, Mapping) or "label" not in raw:
        raise ReportFixtureError(f"Report {report!r} rows must be mappings with a `label`.")
    columns: dict[str, float] = {}
    for name, value in raw.items():
        if name in ("label", "subtable_id"):
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ReportFixtureError(f"Report {report!r} column {name!r} must be numeric, got {value!r}.")
        columns[str(name)] = value
    subtable_id = raw.get("subtable_id")
    return ReportRow(
        label=str(raw["label"]),
        columns=columns,
        subtable_id=(int(subtable_id) if subtable_id is not None else None),
    )


@lru_cache(maxsize=8)
def _loader_for_path(path: str) -> YamlReportLoader:
    logger.info("Loading treemap reports from %s", path)
    return YamlReportLoader.from_path(path)


def get_report_loader() -> ReportLoader:
    """Return the ReportLoader configured by `TREEMAP_REPORT_FIXTURE`."""

    return _loader_for_path(str(settings.TREEMAP_REPORT_FIXTURE))
