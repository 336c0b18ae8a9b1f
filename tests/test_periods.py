"""Unit tests for reporting period helpers."""

from __future__ import annotations

from datetime import date

import pytest

from visualization.errors import InvalidRequestParametersError
from visualization.periods import (
    is_multi_period_date,
    iterate_periods,
    parse_date,
    parse_date_pair,
    parse_period,
    period_start,
    previous_period_date,
)

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    ("period", "value", "expected"),
    [
        ("day", date(2024, 3, 10), date(2024, 3, 9)),
        ("day", date(2024, 3, 1), date(2024, 2, 29)),
        ("week", date(2024, 3, 10), date(2024, 3, 3)),
        ("month", date(2024, 3, 10), date(2024, 2, 10)),
        ("month", date(2024, 3, 31), date(2024, 2, 29)),
        ("month", date(2024, 1, 15), date(2023, 12, 15)),
        ("year", date(2024, 2, 29), date(2023, 2, 28)),
        ("year", date(2024, 3, 10), date(2023, 3, 10)),
    ],
)
def test_previous_period_date_steps_back_one_period(period, value, expected) -> None:
    """Step back exactly one period of the same granularity."""

    assert previous_period_date(value, period=period) == expected


def test_previous_period_date_rejects_range() -> None:
    """A range has no fixed length to step back by."""

    with pytest.raises(InvalidRequestParametersError):
        previous_period_date(date(2024, 3, 10), period="range")


def test_parse_period_normalizes_case() -> None:
    """Period names are case-insensitive."""

    assert parse_period(" Month ") == "month"


@pytest.mark.parametrize("raw", [None, "", "hour"])
def test_parse_period_rejects_missing_or_unknown(raw) -> None:
    """Missing and unknown periods raise an invalid-parameters error."""

    with pytest.raises(InvalidRequestParametersError) as excinfo:
        parse_period(raw)
    assert excinfo.value.parameter == "period"


def test_parse_date_resolves_keywords_against_reference_day() -> None:
    """Keywords resolve relative to the supplied reference date."""

    today = date(2024, 3, 10)
    assert parse_date("today", today=today) == today
    assert parse_date("now", today=today) == today
    assert parse_date("yesterday", today=today) == date(2024, 3, 9)
    assert parse_date("2024-01-05", today=today) == date(2024, 1, 5)


@pytest.mark.parametrize("raw", [None, "", "10/03/2024", "2024-13-01"])
def test_parse_date_rejects_missing_or_unparseable(raw) -> None:
    """Missing or malformed dates raise an invalid-parameters error."""

    with pytest.raises(InvalidRequestParametersError) as excinfo:
        parse_date(raw)
    assert excinfo.value.parameter == "date"


def test_parse_date_pair_rejects_reversed_bounds() -> None:
    """A pair whose end precedes its start is invalid."""

    assert parse_date_pair("2024-03-01,2024-03-10") == (date(2024, 3, 1), date(2024, 3, 10))
    with pytest.raises(InvalidRequestParametersError):
        parse_date_pair("2024-03-10,2024-03-01")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("2024-03-10", False),
        ("today", False),
        ("2024-03-01,2024-03-10", True),
        ("last7", True),
        ("previous30", True),
    ],
)
def test_is_multi_period_date(raw, expected) -> None:
    """Pairs and relative lastN/previousN dates name several periods."""

    assert is_multi_period_date(raw) is expected


def test_period_start_and_iteration() -> None:
    """Periods are keyed by their first day and iterate in ascending order."""

    assert period_start(date(2024, 3, 10), period="week") == date(2024, 3, 4)
    assert period_start(date(2024, 3, 10), period="month") == date(2024, 3, 1)
    assert period_start(date(2024, 3, 10), period="year") == date(2024, 1, 1)
    assert list(iterate_periods(date(2024, 1, 31), date(2024, 3, 2), period="month")) == [
        date(2024, 1, 1),
        date(2024, 2, 1),
        date(2024, 3, 1),
    ]
