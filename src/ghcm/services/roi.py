"""ROI estimation from accepted lines of code."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from ghcm.models.metrics import UsageMetrics
from ghcm.models.roi import (
    DEFAULT_AVG_HOURLY_RATE,
    DEFAULT_AVG_LINES_PER_HOUR,
    ROIConfig,
    ROIResult,
)


def calculate_roi(
    accepted_lines: float,
    avg_lines_per_hour: float = DEFAULT_AVG_LINES_PER_HOUR,
    avg_hourly_rate: float = DEFAULT_AVG_HOURLY_RATE,
    license_cost: float = 0.0,
) -> dict[str, float]:
    """Estimate time and money saved by accepted suggestions.

    Returns:
        Dict with hours_saved, money_saved, roi (ratio; 0 when license_cost is 0).
    """
    hours_saved = accepted_lines / avg_lines_per_hour if avg_lines_per_hour > 0 else 0.0
    money_saved = hours_saved * avg_hourly_rate
    roi = (money_saved / license_cost) - 1 if license_cost > 0 else 0.0

    return {
        "hours_saved": hours_saved,
        "money_saved": money_saved,
        "roi": roi,
    }


def license_cost_for(metrics: UsageMetrics, config: ROIConfig) -> float:
    """License spend for the period: average daily active users times seat price."""
    return metrics.avg_daily_active_users * config.license_cost_per_month


def calculate_metrics_roi(
    metrics: UsageMetrics,
    config: ROIConfig | None = None,
    clock: Callable[[], datetime] | None = None,
) -> ROIResult:
    """Compute a full ROIResult for aggregated metrics."""
    config = config or ROIConfig()
    license_cost = license_cost_for(metrics, config)
    figures = calculate_roi(
        accepted_lines=metrics.accepted_lines,
        avg_lines_per_hour=config.avg_lines_per_hour,
        avg_hourly_rate=config.avg_hourly_rate,
        license_cost=license_cost,
    )
    now = clock() if clock else datetime.now(UTC)
    return ROIResult(
        hours_saved=figures["hours_saved"],
        money_saved=figures["money_saved"],
        license_cost=license_cost,
        roi=figures["roi"],
        roi_percentage=figures["roi"] * 100,
        calculated_at=now.isoformat(),
        config=config,
    )
