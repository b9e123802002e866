"""Service container with DI wiring."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ghcm.data.cache import InMemoryCache
from ghcm.data.github_client import GitHubClient
from ghcm.data.metrics_repository import MetricsRepository
from ghcm.services.aggregator import MetricsAggregator
from ghcm.services.analytics_service import AnalyticsService
from ghcm.services.reporting_service import ReportingService

if TYPE_CHECKING:
    from ghcm.config import Config


@dataclass
class ServiceContainer:
    """Holds all application services. Built once at startup, immutable."""

    client: GitHubClient
    aggregator: MetricsAggregator
    repository: MetricsRepository
    reporting_service: ReportingService
    analytics_service: AnalyticsService

    @classmethod
    async def create(cls, config: Config) -> ServiceContainer:
        """Async factory that wires all dependencies."""
        client = GitHubClient(
            token=config.token,
            base_url=config.api_base_url,
            api_version=config.api_version,
            timeout=config.timeout,
        )
        aggregator = MetricsAggregator()
        repository = MetricsRepository(client, aggregator, InMemoryCache())
        reporting_service = ReportingService(aggregator)
        analytics_service = AnalyticsService(
            repository, config, reporting_service, InMemoryCache()
        )

        return cls(
            client=client,
            aggregator=aggregator,
            repository=repository,
            reporting_service=reporting_service,
            analytics_service=analytics_service,
        )

    async def close(self) -> None:
        """Shut down all services."""
        await self.client.close()
