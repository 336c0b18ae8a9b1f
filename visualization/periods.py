"""Reporting period helpers.

Reports are requested for a `period` granularity (day, week, month, year or
an arbitrary range) and a `date` parameter. This module provides pure helpers
(no Django imports) to parse those parameters and step between periods of the
same granularity.
"""

from __future__ import annotations

import calendar
import re
from collections.abc import Iterator
from datetime import date, timedelta
from typing import Final, Literal, cast

from .errors import InvalidRequestParametersError

PeriodName = Literal["day", "week", "month", "year", "range"]

PERIODS: Final[tuple[PeriodName, ...]] = ("day", "week", "month", "year", "range")

_LAST_N_RE = re.compile(r"^(last|previous)([0-9]*)$")


def parse_period(raw: str | None) -> PeriodName:
    """Parse a `period` request parameter.

    Args:
        raw: Raw parameter value.

    Returns:
        The validated PeriodName.

    Raises:
        InvalidRequestParametersError: When the period is missing or unknown.
    """

    value = (raw or "").strip().lower()
    if not value:
        raise InvalidRequestParametersError(parameter="period", value=raw)
    if value not in PERIODS:
        raise InvalidRequestParametersError(
            parameter="period",
            value=raw,
            reason=f"Expected one of {', '.join(PERIODS)}.",
        )
    return cast(PeriodName, value)


def parse_date(raw: str | None, *, today: date | None = None) -> date:
    """Parse a single-date `date` request parameter.

    Args:
        raw: ISO date (`2024-03-10`) or one of the keywords today/yesterday/now.
        today: Reference date for keywords (defaults to `date.today()`).

    Returns:
        The parsed date.

    Raises:
        InvalidRequestParametersError: When the value is missing or unparseable.
    """

    value = (raw or "").strip().lower()
    if not value:
        raise InvalidRequestParametersError(parameter="date", value=raw)

    reference = today or date.today()
    if value in ("today", "now"):
        return reference
    if value == "yesterday":
        return reference - timedelta(days=1)
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise InvalidRequestParametersError(parameter="date", value=raw) from exc


def parse_date_pair(raw: str | None, *, today: date | None = None) -> tuple[date, date]:
    """Parse a `start,end` date pair.

    Raises:
        InvalidRequestParametersError: When either side is invalid or the pair is reversed.
    """

    parts = [part.strip() for part in (raw or "").split(",")]
    if len(parts) != 2:
        raise InvalidRequestParametersError(parameter="date", value=raw, reason="Expected a start,end pair.")
    start = parse_date(parts[0], today=today)
    end = parse_date(parts[1], today=today)
    if end < start:
        raise InvalidRequestParametersError(parameter="date", value=raw, reason="End date precedes start date.")
    return start, end


def is_multi_period_date(raw: str | None) -> bool:
    """Return True when a `date` value names more than one period.

    Both explicit pairs (`2024-03-01,2024-03-10`) and relative forms
    (`last7`, `previous30`) qualify.
    """

    value = (raw or "").strip().lower()
    return "," in value or _LAST_N_RE.match(value) is not None


def subtract_periods(value: date, *, period: PeriodName, count: int) -> date:
    """Step a date back by `count` periods of the given granularity.

    Month and year steps clamp the day of month (31 March minus one month is
    29 February in a leap year).

    Args:
        value: Date to step back from.
        period: Granularity; `range` has no fixed length and is rejected.
        count: Number of periods; negative values step forward.

    Returns:
        The shifted date.
    """

    if period == "day":
        return value - timedelta(days=count)
    if period == "week":
        return value - timedelta(days=7 * count)
    if period == "month":
        return _subtract_months(value, count)
    if period == "year":
        return _subtract_months(value, 12 * count)
    raise InvalidRequestParametersError(
        parameter="period",
        value=period,
        reason="A range period cannot be shifted.",
    )


def previous_period_date(value: date, *, period: PeriodName) -> date:
    """Return the date one period before `value` (same granularity)."""

    return subtract_periods(value, period=period, count=1)


def period_start(value: date, *, period: PeriodName) -> date:
    """Return the first day of the period containing `value`."""

    if period == "week":
        return value - timedelta(days=value.weekday())
    if period == "month":
        return value.replace(day=1)
    if period == "year":
        return value.replace(month=1, day=1)
    return value


def iterate_periods(start: date, end: date, *, period: PeriodName) -> Iterator[date]:
    """Yield the start date of every period overlapping `[start, end]`.

    Args:
        start: Inclusive lower bound.
        end: Inclusive upper bound.
        period: Granularity to step by (not `range`).

    Yields:
        Period start dates in ascending order.
    """

    current = period_start(start, period=period)
    while current <= end:
        yield current
        current = subtract_periods(current, period=period, count=-1)


def _subtract_months(value: date, months: int) -> date:
    """Shift a date by whole months, clamping the day of month."""

    index = value.year * 12 + (value.month - 1) - months
    year, month0 = divmod(index, 12)
    month = month0 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)
