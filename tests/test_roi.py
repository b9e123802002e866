"""Tests for ROI estimation."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from ghcm.models.metrics import UsageMetrics
from ghcm.models.roi import ROIConfig, ROIResult
from ghcm.services.roi import calculate_metrics_roi, calculate_roi, license_cost_for

FIXED_NOW = datetime(2024, 6, 3, 12, 0, tzinfo=UTC)


class TestCalculateRoi:
    def test_reference_figures(self) -> None:
        figures = calculate_roi(3000, avg_lines_per_hour=30, avg_hourly_rate=75, license_cost=1000)
        assert figures == {"hours_saved": 100, "money_saved": 7500, "roi": 6.5}

    def test_defaults(self) -> None:
        figures = calculate_roi(300)
        assert figures["hours_saved"] == 10
        assert figures["money_saved"] == 750

    def test_zero_license_cost_yields_zero_roi(self) -> None:
        figures = calculate_roi(3000, license_cost=0)
        assert figures["roi"] == 0
        assert figures["money_saved"] == 7500

    @pytest.mark.parametrize("lines_per_hour", [0, -5])
    def test_non_positive_lines_per_hour(self, lines_per_hour: float) -> None:
        figures = calculate_roi(3000, avg_lines_per_hour=lines_per_hour, license_cost=10)
        assert figures["hours_saved"] == 0
        assert figures["money_saved"] == 0
        assert figures["roi"] == -1

    def test_no_lines(self) -> None:
        assert calculate_roi(0, license_cost=100)["roi"] == -1


class TestMetricsRoi:
    def test_sample_metrics(self, sample_metrics: UsageMetrics) -> None:
        result = calculate_metrics_roi(sample_metrics, clock=lambda: FIXED_NOW)
        assert result.hours_saved == pytest.approx(490 / 30)
        assert result.money_saved == pytest.approx(1225)
        assert result.license_cost == 22 * 19
        assert result.roi == pytest.approx(1225 / 418 - 1)
        assert result.roi_percentage == pytest.approx(result.roi * 100)
        assert result.calculated_at == FIXED_NOW.isoformat()
        assert result.net_savings == pytest.approx(1225 - 418)

    def test_license_cost_uses_daily_average(self) -> None:
        metrics = UsageMetrics(active_users=10, processed_days=3)
        assert license_cost_for(metrics, ROIConfig(license_cost_per_month=20)) == 200
        assert license_cost_for(UsageMetrics(active_users=10), ROIConfig()) == 0

    def test_empty_metrics(self) -> None:
        result = calculate_metrics_roi(UsageMetrics())
        assert result.hours_saved == 0
        assert result.license_cost == 0
        assert result.roi == 0

    def test_custom_config_is_recorded(self, sample_metrics: UsageMetrics) -> None:
        config = ROIConfig(avg_lines_per_hour=49, avg_hourly_rate=100)
        result = calculate_metrics_roi(sample_metrics, config)
        assert result.hours_saved == pytest.approx(10)
        assert result.money_saved == pytest.approx(1000)
        assert result.config == config


class TestROIConfig:
    def test_merged_applies_known_non_none_keys(self) -> None:
        config = ROIConfig().merged(
            {"avg_hourly_rate": 100, "avg_lines_per_hour": None, "bogus": 3.0}
        )
        assert config.avg_hourly_rate == 100.0
        assert config.avg_lines_per_hour == 30.0
        assert not hasattr(config, "bogus")

    def test_merged_without_overrides_is_identity(self) -> None:
        config = ROIConfig()
        assert config.merged(None) is config
        assert config.merged({}) is config

    def test_result_defaults(self) -> None:
        assert ROIResult().net_savings == 0
