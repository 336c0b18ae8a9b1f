"""Unit tests for widening report requests to include the previous period."""

from __future__ import annotations

from datetime import date

import pytest

from visualization.adapter import TreemapVisualization, handle_evolution_values
from visualization.config import configure_visualization
from visualization.errors import InvalidRequestParametersError
from visualization.request import ReportRequest

pytestmark = pytest.mark.unit


def _config(*, show_evolution_values: bool = True):
    return configure_visualization(
        columns_to_display=["label", "nb_visits"],
        translations={"nb_visits": "Visits"},
        show_evolution_values=show_evolution_values,
    )


def test_day_period_requests_previous_and_current_day() -> None:
    """A single day is widened to the previous day plus the current day."""

    request = ReportRequest(report="referrers", period="day", date="2024-03-10")
    adapted = handle_evolution_values(request, _config())
    assert adapted.date == "2024-03-09,2024-03-10"
    assert adapted.evolution is True


def test_month_period_requests_previous_calendar_month() -> None:
    """A month is widened to the previous calendar month."""

    request = ReportRequest(report="referrers", period="month", date="2024-03-31")
    adapted = handle_evolution_values(request, _config())
    assert adapted.date == "2024-02-29,2024-03-31"


def test_range_period_is_left_unchanged() -> None:
    """Evolution cannot be computed for an arbitrary range."""

    request = ReportRequest(report="referrers", period="range", date="2024-03-01,2024-03-10")
    assert handle_evolution_values(request, _config()) is request


def test_disabled_evolution_leaves_request_unchanged() -> None:
    """Nothing changes when evolution values are turned off."""

    request = ReportRequest(report="referrers", period="day", date="2024-03-10")
    adapted = handle_evolution_values(request, _config(show_evolution_values=False))
    assert adapted is request
    assert adapted.evolution is False


@pytest.mark.parametrize("raw_date", ["2024-03-01,2024-03-10", "last7", "previous30"])
def test_multi_period_dates_are_left_unchanged(raw_date) -> None:
    """Dates already naming several periods cannot be shifted by one period."""

    request = ReportRequest(report="referrers", period="day", date=raw_date)
    assert handle_evolution_values(request, _config()) is request


def test_keyword_dates_are_rewritten_as_iso_dates() -> None:
    """Keyword dates resolve against the reference day before rewriting."""

    request = ReportRequest(report="referrers", period="day", date="yesterday")
    adapted = handle_evolution_values(request, _config(), today=date(2024, 3, 11))
    assert adapted.date == "2024-03-09,2024-03-10"


@pytest.mark.parametrize(
    ("period", "raw_date", "parameter"),
    [
        (None, "2024-03-10", "period"),
        ("fortnight", "2024-03-10", "period"),
        ("day", None, "date"),
        ("day", "not-a-date", "date"),
    ],
)
def test_missing_or_invalid_parameters_fail(period, raw_date, parameter) -> None:
    """Missing or unparseable period/date fail instead of silently defaulting."""

    request = ReportRequest(report="referrers", period=period, date=raw_date)
    with pytest.raises(InvalidRequestParametersError) as excinfo:
        handle_evolution_values(request, _config())
    assert excinfo.value.parameter == parameter


def test_input_request_is_not_mutated() -> None:
    """The adapter returns a modified copy and leaves its input intact."""

    request = ReportRequest(report="referrers", period="week", date="2024-03-10")
    handle_evolution_values(request, _config())
    assert request.date == "2024-03-10"
    assert request.evolution is False


def test_before_load_data_table_prepares_generator() -> None:
    """The pre-load hook configures the generator and enables evolution coloring."""

    visualization = TreemapVisualization(_config())
    request = ReportRequest(
        report="referrers",
        period="day",
        date="2024-03-10",
        filter_offset=5,
        available_width=800,
        available_height=600,
    )
    adapted = visualization.before_load_data_table(request)

    generator = visualization.generator
    assert generator is not None
    assert generator.metric == "nb_visits"
    assert generator.metric_translation == "Visits"
    assert generator.first_row_offset == 5
    assert (generator.available_width, generator.available_height) == (800, 600)
    assert generator.evolution_enabled is True
    assert adapted.date == "2024-03-09,2024-03-10"


def test_before_load_data_table_range_keeps_evolution_off() -> None:
    """A range request leaves the generator in category coloring mode."""

    visualization = TreemapVisualization(_config())
    request = ReportRequest(report="referrers", period="range", date="2024-03-01,2024-03-10")
    adapted = visualization.before_load_data_table(request)
    assert adapted == request
    assert visualization.generator is not None
    assert visualization.generator.evolution_enabled is False


def test_before_generic_filters_restricts_columns_to_metric() -> None:
    """The selected metric is forwarded as the `columns` custom parameter."""

    visualization = TreemapVisualization(_config())
    request = ReportRequest(report="referrers", period="day", date="2024-03-10")
    adapted = visualization.before_generic_filters(request)
    assert dict(adapted.custom_parameters) == {"columns": "nb_visits"}
    assert dict(request.custom_parameters) == {}
