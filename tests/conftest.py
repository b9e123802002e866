"""Shared fixtures for GHCM tests."""

from __future__ import annotations

import copy
import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest

from ghcm.config import Config
from ghcm.models.metrics import UsageMetrics
from ghcm.services.aggregator import MetricsAggregator

SAMPLE_METRICS_PATH = Path(__file__).parent / "data" / "org_metrics.json"

FIXED_NOW = datetime(2024, 6, 3, 12, 0, tzinfo=UTC)


def vscode_python_day(day: str, engaged: int) -> dict[str, Any]:
    """One day with a single VS Code / Python completion breakdown."""
    return {
        "date": day,
        "copilot_ide_code_completions": {
            "editors": [
                {
                    "name": "VS Code",
                    "total_engaged_users": engaged,
                    "models": [
                        {
                            "languages": [
                                {
                                    "name": "Python",
                                    "total_code_suggestions": 100,
                                    "total_code_acceptances": 60,
                                    "total_code_lines_accepted": 300,
                                }
                            ]
                        }
                    ],
                }
            ]
        },
    }


@pytest.fixture
def sample_metrics_path() -> Path:
    """Path to the sample org metrics API response."""
    return SAMPLE_METRICS_PATH


@pytest.fixture
def sample_snapshots() -> list[Any]:
    """Two days of org metrics followed by a null day."""
    return json.loads(SAMPLE_METRICS_PATH.read_text())


@pytest.fixture
def two_day_snapshots() -> list[dict[str, Any]]:
    return [vscode_python_day("2024-06-01", 10), vscode_python_day("2024-06-02", 15)]


@pytest.fixture
def aggregator() -> MetricsAggregator:
    """Aggregator with a pinned clock so results compare field-for-field."""
    return MetricsAggregator(clock=lambda: FIXED_NOW)


@pytest.fixture
def sample_metrics(aggregator: MetricsAggregator, sample_snapshots: list[Any]) -> UsageMetrics:
    return aggregator.process(copy.deepcopy(sample_snapshots))


@pytest.fixture
def test_config() -> Config:
    """Config pointing at a fake organization."""
    return Config(organization="octo-org", teams=("alpha", "beta"), token="ghp_test")
