"""Pytest fixtures shared across treemap tests."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pytest
import yaml


@pytest.fixture
def report_document() -> dict[str, Any]:
    """Return a small YAML-shaped report document used by loader and view tests."""

    return {
        "reports": {
            "referrers": {
                "title": "Referrers",
                "columns": ["label", "nb_visits", "nb_actions"],
                "translations": {"nb_visits": "Visits", "nb_actions": "Actions"},
                "subtable_controller_action": "getReferrerUrls",
                "data": {
                    "day": {
                        "2024-03-09": [
                            {"label": "search.example", "nb_visits": 80, "nb_actions": 210, "subtable_id": 1},
                            {"label": "news.example", "nb_visits": 25, "nb_actions": 40},
                            {"label": "social.example", "nb_visits": 12, "nb_actions": 15},
                        ],
                        "2024-03-10": [
                            {"label": "search.example", "nb_visits": 100, "nb_actions": 260, "subtable_id": 1},
                            {"label": "news.example", "nb_visits": 20, "nb_actions": 33},
                            {"label": "social.example", "nb_visits": 18, "nb_actions": 20},
                            {"label": "forum.example", "nb_visits": 6, "nb_actions": 9},
                        ],
                    },
                    "month": {
                        "2024-02-01": [{"label": "search.example", "nb_visits": 2100, "nb_actions": 5600}],
                        "2024-03-01": [{"label": "search.example", "nb_visits": 2500, "nb_actions": 6100}],
                    },
                },
            },
            "labels_only": {
                "title": "Labels only",
                "columns": ["label"],
                "data": {},
            },
        }
    }


@pytest.fixture
def report_fixture_path(tmp_path: Path, report_document: dict[str, Any]) -> Path:
    """Write `report_document` to a YAML file and return its path."""

    path = tmp_path / "reports.yaml"
    path.write_text(yaml.safe_dump(report_document), encoding="utf-8")
    return path


@pytest.fixture
def treemap_settings(settings, report_fixture_path: Path):
    """Point the report loader at the test document with evolution values enabled."""

    settings.TREEMAP_REPORT_FIXTURE = report_fixture_path
    settings.TREEMAP_SHOW_EVOLUTION_VALUES = True
    return settings


def pytest_collection_modifyitems(items: Sequence[pytest.Item]) -> None:
    """Enforce that every test has exactly one speed marker.

    - `unit`: pure, fast tests with no Django request cycle.
    - `integration`: tests touching Django views, settings, or IO.
    """

    invalid: list[str] = []
    for item in items:
        has_unit = item.get_closest_marker("unit") is not None
        has_integration = item.get_closest_marker("integration") is not None
        if has_unit == has_integration:
            markers = []
            if has_unit:
                markers.append("unit")
            if has_integration:
                markers.append("integration")
            invalid.append(f"{item.nodeid} (markers={markers or 'none'})")

    if invalid:
        joined = "\n".join(f"- {nodeid}" for nodeid in invalid)
        raise pytest.UsageError(
            "Each test must have exactly one speed marker: `@pytest.mark.unit` or "
            "`@pytest.mark.integration`.\n"
            f"Offending tests:\n{joined}"
        )
