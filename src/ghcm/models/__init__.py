"""Pydantic models for GHCM."""

from ghcm.models.date_range import (
    DEFAULT_RANGE_IDENTIFIER,
    RANGE_IDENTIFIERS,
    DateRange,
    InvalidDateRangeError,
)
from ghcm.models.metrics import BreakdownSummary, MetricsMetadata, UsageMetrics
from ghcm.models.reports import (
    BreakdownRow,
    ChartPoint,
    DailyProductivityPoint,
    Insight,
    InsightRule,
    REPORT_IDS,
    ReportBundle,
    ReportId,
    TeamComparisonRow,
    TrendPoint,
)
from ghcm.models.roi import ROIConfig, ROIResult

__all__ = [
    "BreakdownRow",
    "BreakdownSummary",
    "ChartPoint",
    "DailyProductivityPoint",
    "DateRange",
    "Insight",
    "InsightRule",
    "InvalidDateRangeError",
    "MetricsMetadata",
    "ROIConfig",
    "ROIResult",
    "ReportBundle",
    "ReportId",
    "TeamComparisonRow",
    "TrendPoint",
    "UsageMetrics",
    "DEFAULT_RANGE_IDENTIFIER",
    "RANGE_IDENTIFIERS",
    "REPORT_IDS",
]
