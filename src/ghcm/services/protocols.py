"""Protocol definitions for services."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from result import Result

from ghcm.models.date_range import DateRange
from ghcm.models.metrics import UsageMetrics
from ghcm.models.reports import ReportBundle, ReportId
from ghcm.models.roi import ROIResult


class AggregatorProtocol(Protocol):
    """Interface for snapshot aggregation."""

    def process(self, snapshots: Any) -> UsageMetrics: ...


class ReportingServiceProtocol(Protocol):
    """Interface for report bundle generation."""

    def generate(
        self, report_id: ReportId, metrics: UsageMetrics | None, roi: ROIResult | None = None
    ) -> ReportBundle: ...

    def generate_team_comparison_report(
        self, team_metrics: Sequence[UsageMetrics] | None
    ) -> ReportBundle: ...


class AnalyticsServiceProtocol(Protocol):
    """Interface for analytics operations."""

    async def get_report_metrics(
        self, report_id: str, organization: str, team: str | None = None
    ) -> Result[UsageMetrics, str]: ...

    async def get_team_comparison_metrics(
        self, organization: str, teams: Sequence[str], date_range: DateRange
    ) -> Result[list[UsageMetrics], str]: ...

    async def calculate_roi(
        self,
        organization: str,
        team: str | None,
        date_range: DateRange,
        overrides: Mapping[str, float | None] | None = None,
    ) -> Result[ROIResult, str]: ...

    async def build_report(
        self,
        report_id: ReportId,
        organization: str,
        team: str | None = None,
        teams: Sequence[str] | None = None,
    ) -> Result[ReportBundle, str]: ...

    def clear_report_cache(self, report_id: str | None = None) -> int: ...
