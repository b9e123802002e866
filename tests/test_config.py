"""Tests for environment-driven configuration."""

from __future__ import annotations

import logging

import pytest

from ghcm.config import Config
from ghcm.data.github_client import DEFAULT_API_BASE_URL
from ghcm.models.roi import ROIConfig


def test_defaults() -> None:
    config = Config.from_env({})
    assert config.organization == ""
    assert config.teams == ()
    assert config.default_team is None
    assert config.api_base_url == DEFAULT_API_BASE_URL
    assert config.roi == ROIConfig()
    assert config.log_level == "INFO"
    assert config.report_date_range("roi").days == 28


def test_from_env_values() -> None:
    config = Config.from_env(
        {
            "GHCM_ORGANIZATION": "octo-org",
            "GHCM_TEAMS": " alpha, ,beta ",
            "GITHUB_TOKEN": "ghp_secret",
            "GHCM_API_BASE_URL": "https://ghe.example/api/v3",
            "GHCM_DATE_RANGE": "14 days",
            "GHCM_AVG_LINES_PER_HOUR": "40",
            "GHCM_AVG_HOURLY_RATE": "90.5",
            "GHCM_LICENSE_COST_PER_MONTH": "39",
            "GHCM_LOG_LEVEL": "debug",
        }
    )
    assert config.organization == "octo-org"
    assert config.teams == ("alpha", "beta")
    assert config.default_team == "alpha"
    assert config.api_base_url == "https://ghe.example/api/v3"
    assert config.roi == ROIConfig(
        avg_lines_per_hour=40, avg_hourly_rate=90.5, license_cost_per_month=39
    )
    assert config.log_level == "DEBUG"
    assert config.report_date_range("productivity").days == 14


def test_token_is_not_in_repr() -> None:
    assert "ghp_secret" not in repr(Config(token="ghp_secret"))


def test_non_numeric_roi_value_is_ignored(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="ghcm.config"):
        config = Config.from_env({"GHCM_AVG_HOURLY_RATE": "lots"})
    assert config.roi.avg_hourly_rate == 75
    assert "GHCM_AVG_HOURLY_RATE" in caplog.text


def test_log_level_is_normalized() -> None:
    assert Config.from_env({"GHCM_LOG_LEVEL": " warning "}).log_level == "WARNING"
    assert Config.from_env({"GHCM_LOG_LEVEL": ""}).log_level == "INFO"


def test_unknown_log_level_falls_back_to_info(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="ghcm.config"):
        config = Config.from_env({"GHCM_LOG_LEVEL": "verbose"})
    assert config.log_level == "INFO"
    assert "GHCM_LOG_LEVEL" in caplog.text
    assert "verbose" in caplog.text


def test_per_report_date_range() -> None:
    config = Config().with_report_date_range("user_engagement", "1 day")
    assert config.report_date_range("user_engagement").days == 1
    assert config.report_date_range("roi").days == 28
    assert Config().report_date_ranges == {}
