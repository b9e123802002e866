"""Analytics service: report metrics, team comparison and ROI."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING

from result import Err, Ok, Result

from ghcm.data.cache import InMemoryCache, cache_key
from ghcm.data.metrics_repository import FETCH_ERRORS
from ghcm.models.reports import ReportBundle, ReportId
from ghcm.services.reporting_service import ReportingService
from ghcm.services.roi import calculate_metrics_roi

if TYPE_CHECKING:
    from ghcm.config import Config
    from ghcm.data.metrics_repository import MetricsRepository
    from ghcm.data.protocols import MetricsCacheProtocol
    from ghcm.models.date_range import DateRange
    from ghcm.models.metrics import UsageMetrics
    from ghcm.models.roi import ROIResult

logger = logging.getLogger(__name__)


class AnalyticsService:
    """Service for report-level analytics queries."""

    def __init__(
        self,
        repository: MetricsRepository,
        config: Config,
        reporting: ReportingService | None = None,
        report_cache: MetricsCacheProtocol | None = None,
    ) -> None:
        self._repository = repository
        self._config = config
        self._reporting = reporting or ReportingService()
        self._report_cache: MetricsCacheProtocol = (
            report_cache if report_cache is not None else InMemoryCache()
        )

    async def get_report_metrics(
        self, report_id: str, organization: str, team: str | None = None
    ) -> Result[UsageMetrics, str]:
        """Metrics for a report over its configured date range.

        Falls back to organization-wide metrics when no team is given.
        """
        date_range = self._config.report_date_range(report_id)
        key = cache_key(
            report_id, organization, team, date_range.formatted_start, date_range.formatted_end
        )
        cached = self._report_cache.get(key)
        if cached is not None:
            return Ok(cached)

        result = await self._fetch(organization, team, date_range)
        if isinstance(result, Ok):
            self._report_cache.set(key, result.ok_value)
        return result

    async def get_team_comparison_metrics(
        self, organization: str, teams: Sequence[str], date_range: DateRange
    ) -> Result[list[UsageMetrics], str]:
        if not teams:
            return Err("No teams selected for comparison")
        metrics = await self._repository.get_multiple_teams_metrics(
            organization, teams, date_range
        )
        return Ok(metrics)

    async def calculate_roi(
        self,
        organization: str,
        team: str | None,
        date_range: DateRange,
        overrides: Mapping[str, float | None] | None = None,
    ) -> Result[ROIResult, str]:
        """ROI for a team or the organization with config defaults plus overrides."""
        fetched = await self._fetch(organization, team, date_range)
        if isinstance(fetched, Err):
            return fetched
        config = self._config.roi.merged(overrides)
        return Ok(calculate_metrics_roi(fetched.ok_value, config))

    async def build_report(
        self,
        report_id: ReportId,
        organization: str,
        team: str | None = None,
        teams: Sequence[str] | None = None,
    ) -> Result[ReportBundle, str]:
        """Fetch whatever a report needs and render its bundle."""
        if not organization:
            return Err("An organization is required")

        if report_id == "team_comparison":
            selected = list(teams or self._config.teams)
            date_range = self._config.report_date_range(report_id)
            compared = await self.get_team_comparison_metrics(organization, selected, date_range)
            if isinstance(compared, Err):
                return compared
            return Ok(self._reporting.generate_team_comparison_report(compared.ok_value))

        metrics_result = await self.get_report_metrics(report_id, organization, team)
        if isinstance(metrics_result, Err):
            return metrics_result
        metrics = metrics_result.ok_value

        roi = None
        if report_id == "roi":
            roi = calculate_metrics_roi(metrics, self._config.roi)
        return Ok(self._reporting.generate(report_id, metrics, roi))

    def clear_report_cache(self, report_id: str | None = None) -> int:
        """Drop cached report metrics for one report id, or all of them."""
        if not report_id:
            return self._report_cache.invalidate()
        return self._report_cache.invalidate(f"{report_id}-", prefix=True)

    async def _fetch(
        self, organization: str, team: str | None, date_range: DateRange
    ) -> Result[UsageMetrics, str]:
        try:
            if team:
                metrics = await self._repository.get_team_metrics(organization, team, date_range)
            else:
                metrics = await self._repository.get_org_metrics(organization, date_range)
        except FETCH_ERRORS as exc:
            logger.error("Error fetching metrics for %s/%s: %s", organization, team or "*", exc)
            return Err(f"Failed to fetch metrics: {exc}")
        return Ok(metrics)
