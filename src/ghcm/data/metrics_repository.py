"""Repository: fetch raw snapshots, aggregate them, memoize the result."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TYPE_CHECKING, Any

import httpx

from ghcm.data.cache import InMemoryCache, cache_key
from ghcm.data.github_client import GitHubAPIError
from ghcm.models.metrics import DataSource, MetricsMetadata, UsageMetrics
from ghcm.services.aggregator import MetricsAggregator

if TYPE_CHECKING:
    from ghcm.data.protocols import MetricsCacheProtocol, SnapshotSourceProtocol
    from ghcm.models.date_range import DateRange

logger = logging.getLogger(__name__)

FETCH_ERRORS = (GitHubAPIError, httpx.HTTPError)


class MetricsRepository:
    """Org/team metrics access with caching and in-flight de-duplication."""

    def __init__(
        self,
        source: SnapshotSourceProtocol,
        aggregator: MetricsAggregator | None = None,
        cache: MetricsCacheProtocol | None = None,
    ) -> None:
        self._source = source
        self._aggregator = aggregator or MetricsAggregator()
        self._cache: MetricsCacheProtocol = cache if cache is not None else InMemoryCache()
        self._in_flight: dict[str, asyncio.Task[UsageMetrics]] = {}

    async def get_team_metrics(
        self, organization: str, team: str, date_range: DateRange
    ) -> UsageMetrics:
        key = cache_key(
            "team", organization, team, date_range.formatted_start, date_range.formatted_end
        )

        async def load() -> Any:
            return await self._source.get_team_metrics(
                organization, team, date_range.formatted_start, date_range.formatted_end
            )

        return await self._fetch(key, load, data_source="team", team_slug=team)

    async def get_org_metrics(self, organization: str, date_range: DateRange) -> UsageMetrics:
        key = cache_key("org", organization, date_range.formatted_start, date_range.formatted_end)

        async def load() -> Any:
            return await self._source.get_org_metrics(
                organization, date_range.formatted_start, date_range.formatted_end
            )

        return await self._fetch(key, load, data_source="organization", team_slug=None)

    async def get_multiple_teams_metrics(
        self, organization: str, teams: Sequence[str], date_range: DateRange
    ) -> list[UsageMetrics]:
        """Fetch teams concurrently; a failed team yields an error-tagged placeholder."""

        async def one(team: str) -> UsageMetrics:
            try:
                return await self.get_team_metrics(organization, team, date_range)
            except FETCH_ERRORS as exc:
                logger.warning("Error fetching metrics for team %s: %s", team, exc)
                return UsageMetrics(
                    team_slug=team,
                    data_source="team",
                    metadata=MetricsMetadata(error=True, error_message=str(exc)),
                )

        return list(await asyncio.gather(*(one(team) for team in teams)))

    def clear_cache(self, pattern: str | None = None) -> int:
        return self._cache.invalidate(pattern)

    async def _fetch(
        self,
        key: str,
        load: Callable[[], Awaitable[Any]],
        *,
        data_source: DataSource,
        team_slug: str | None,
    ) -> UsageMetrics:
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._load_and_store(key, load, data_source, team_slug))
            self._in_flight[key] = task
            task.add_done_callback(lambda _t: self._in_flight.pop(key, None))
        return await task

    async def _load_and_store(
        self,
        key: str,
        load: Callable[[], Awaitable[Any]],
        data_source: DataSource,
        team_slug: str | None,
    ) -> UsageMetrics:
        raw = await load()
        metrics = self._aggregator.process(raw).model_copy(
            update={"data_source": data_source, "team_slug": team_slug}
        )
        self._cache.set(key, metrics)
        logger.info(
            "Aggregated %d day(s) of %s metrics for %s",
            metrics.processed_days,
            data_source,
            key,
        )
        return metrics
