"""Tests for the cache, snapshot loader, GitHub client and metrics repository."""

from __future__ import annotations

import asyncio
import json
from datetime import date
from pathlib import Path
from typing import Any

import httpx
import pytest

from ghcm.data.cache import InMemoryCache, NullCache, cache_key
from ghcm.data.github_client import GitHubAPIError, GitHubClient
from ghcm.data.metrics_repository import MetricsRepository
from ghcm.data.snapshots import SnapshotFileError, load_snapshots
from ghcm.models.date_range import DateRange
from ghcm.services.aggregator import MetricsAggregator

JUNE = DateRange(date(2024, 6, 1), date(2024, 6, 28))


class FakeSource:
    def __init__(self, days: list[Any]) -> None:
        self.days = days
        self.calls: list[tuple[str, ...]] = []
        self.failing_teams: set[str] = set()
        self.delay = 0.0

    async def get_org_metrics(self, organization: str, since: str, until: str) -> Any:
        self.calls.append(("org", organization, since, until))
        await asyncio.sleep(self.delay)
        return self.days

    async def get_team_metrics(
        self, organization: str, team: str, since: str, until: str
    ) -> Any:
        self.calls.append(("team", organization, team, since, until))
        await asyncio.sleep(self.delay)
        if team in self.failing_teams:
            raise GitHubAPIError(f"GitHub API 404 for {team}: Not Found", status_code=404)
        return self.days


class TestCache:
    def test_cache_key(self) -> None:
        assert cache_key("team", "octo", "alpha", "2024-06-01") == "team-octo-alpha-2024-06-01"
        assert cache_key("report", "roi", None) == "report-roi-"

    def test_get_set_and_invalidate(self) -> None:
        cache = InMemoryCache()
        cache.set("team-octo-alpha", 1)
        cache.set("team-octo-beta", 2)
        cache.set("org-octo", 3)
        assert cache.get("team-octo-alpha") == 1
        assert cache.get("missing") is None
        assert cache.invalidate("team-") == 2
        assert "org-octo" in cache
        assert len(cache) == 1
        assert cache.invalidate() == 1
        assert len(cache) == 0

    def test_invalidate_by_prefix(self) -> None:
        cache = InMemoryCache()
        cache.set("roi-octo-alpha", 1)
        cache.set("productivity-octo-roi-", 2)
        assert cache.invalidate("roi-", prefix=True) == 1
        assert "productivity-octo-roi-" in cache
        assert cache.invalidate("", prefix=True) == 1

    def test_null_cache(self) -> None:
        cache = NullCache()
        cache.set("k", 1)
        assert cache.get("k") is None
        assert cache.invalidate() == 0


class TestLoadSnapshots:
    def test_list_payload(self, sample_metrics_path: Path) -> None:
        days = load_snapshots(sample_metrics_path)
        assert len(days) == 3
        assert days[2] is None

    def test_wrapped_and_single_payloads(self, tmp_path: Path) -> None:
        wrapped = tmp_path / "wrapped.json"
        wrapped.write_text(json.dumps({"data": [{"date": "2024-06-01"}]}))
        assert load_snapshots(wrapped) == [{"date": "2024-06-01"}]

        single = tmp_path / "single.json"
        single.write_text(json.dumps({"date": "2024-06-02"}))
        assert load_snapshots(single) == [{"date": "2024-06-02"}]

    def test_scalar_payload_is_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "scalar.json"
        path.write_text("42")
        assert load_snapshots(path) == []

    def test_errors(self, tmp_path: Path) -> None:
        with pytest.raises(SnapshotFileError, match="Cannot read"):
            load_snapshots(tmp_path / "missing.json")
        broken = tmp_path / "broken.json"
        broken.write_text("{not json")
        with pytest.raises(SnapshotFileError, match="Invalid JSON"):
            load_snapshots(broken)


class TestGitHubClient:
    @pytest.mark.asyncio
    async def test_team_request_shape(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[{"date": "2024-06-01"}])

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            client = GitHubClient(token="ghp_x", base_url="https://ghe.example/api/", client=http)
            body = await client.get_team_metrics("octo", "alpha", "2024-06-01", "2024-06-28")
            assert client.has_token

        assert body == [{"date": "2024-06-01"}]
        (request,) = seen
        assert request.url.path == "/api/orgs/octo/team/alpha/copilot/metrics"
        assert request.url.params["since"] == "2024-06-01"
        assert request.url.params["until"] == "2024-06-28"
        assert request.url.params["per_page"] == "100"
        assert request.headers["Authorization"] == "Bearer ghp_x"
        assert request.headers["Accept"] == "application/vnd.github+json"
        assert request.headers["X-GitHub-Api-Version"] == "2022-11-28"

    @pytest.mark.asyncio
    async def test_org_request_without_token(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[])

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            client = GitHubClient(client=http)
            assert await client.get_org_metrics("octo", "2024-06-01", "2024-06-28") == []
            assert not client.has_token

        assert seen[0].url.path == "/orgs/octo/copilot/metrics"
        assert "Authorization" not in seen[0].headers

    @pytest.mark.asyncio
    async def test_error_status_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(403, json={"message": "Resource not accessible"})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            client = GitHubClient(client=http)
            with pytest.raises(GitHubAPIError) as excinfo:
                await client.get_org_metrics("octo", "2024-06-01", "2024-06-28")

        assert excinfo.value.status_code == 403
        assert "Resource not accessible" in str(excinfo.value)

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            client = GitHubClient(client=http)
            with pytest.raises(GitHubAPIError, match="Invalid JSON"):
                await client.get_json("/orgs/octo/copilot/metrics")

    @pytest.mark.asyncio
    async def test_close_leaves_injected_client_open(self) -> None:
        async with httpx.AsyncClient() as http:
            async with GitHubClient(client=http):
                pass
            assert not http.is_closed


class TestMetricsRepository:
    @pytest.mark.asyncio
    async def test_team_metrics_are_tagged_and_cached(
        self, aggregator: MetricsAggregator, sample_snapshots: list[Any]
    ) -> None:
        source = FakeSource(sample_snapshots)
        repo = MetricsRepository(source, aggregator)  # type: ignore[arg-type]

        first = await repo.get_team_metrics("octo", "alpha", JUNE)
        second = await repo.get_team_metrics("octo", "alpha", JUNE)

        assert first is second
        assert first.data_source == "team"
        assert first.team_slug == "alpha"
        assert first.accepted_lines == 490
        assert source.calls == [("team", "octo", "alpha", "2024-06-01", "2024-06-28")]

    @pytest.mark.asyncio
    async def test_org_metrics(
        self, aggregator: MetricsAggregator, sample_snapshots: list[Any]
    ) -> None:
        repo = MetricsRepository(FakeSource(sample_snapshots), aggregator)  # type: ignore[arg-type]
        metrics = await repo.get_org_metrics("octo", JUNE)
        assert metrics.data_source == "organization"
        assert metrics.team_slug is None
        assert metrics.processed_days == 2

    @pytest.mark.asyncio
    async def test_concurrent_requests_share_one_fetch(self, sample_snapshots: list[Any]) -> None:
        source = FakeSource(sample_snapshots)
        source.delay = 0.01
        repo = MetricsRepository(source)  # type: ignore[arg-type]

        results = await asyncio.gather(
            *(repo.get_team_metrics("octo", "alpha", JUNE) for _ in range(5))
        )

        assert len(source.calls) == 1
        assert all(result is results[0] for result in results)

    @pytest.mark.asyncio
    async def test_failed_fetch_is_not_cached(self, sample_snapshots: list[Any]) -> None:
        source = FakeSource(sample_snapshots)
        source.failing_teams.add("alpha")
        repo = MetricsRepository(source)  # type: ignore[arg-type]

        with pytest.raises(GitHubAPIError):
            await repo.get_team_metrics("octo", "alpha", JUNE)
        source.failing_teams.clear()
        metrics = await repo.get_team_metrics("octo", "alpha", JUNE)

        assert metrics.accepted_lines == 490
        assert len(source.calls) == 2

    @pytest.mark.asyncio
    async def test_multiple_teams_with_failure(self, sample_snapshots: list[Any]) -> None:
        source = FakeSource(sample_snapshots)
        source.failing_teams.add("beta")
        repo = MetricsRepository(source)  # type: ignore[arg-type]

        results = await repo.get_multiple_teams_metrics("octo", ["alpha", "beta", "gamma"], JUNE)

        assert [m.team_slug for m in results] == ["alpha", "beta", "gamma"]
        failed = results[1]
        assert failed.metadata.error is True
        assert "404" in failed.metadata.error_message
        assert failed.data_source == "team"
        assert failed.total_suggestions == 0
        assert results[2].accepted_lines == 490

    @pytest.mark.asyncio
    async def test_clear_cache_by_pattern(self, sample_snapshots: list[Any]) -> None:
        source = FakeSource(sample_snapshots)
        repo = MetricsRepository(source)  # type: ignore[arg-type]
        await repo.get_team_metrics("octo", "alpha", JUNE)
        await repo.get_team_metrics("octo", "beta", JUNE)
        await repo.get_org_metrics("octo", JUNE)

        assert repo.clear_cache("-alpha-") == 1
        await repo.get_team_metrics("octo", "alpha", JUNE)
        await repo.get_team_metrics("octo", "beta", JUNE)
        assert len(source.calls) == 4

        assert repo.clear_cache() == 3

    @pytest.mark.asyncio
    async def test_null_cache_always_fetches(self, sample_snapshots: list[Any]) -> None:
        source = FakeSource(sample_snapshots)
        repo = MetricsRepository(source, cache=NullCache())  # type: ignore[arg-type]
        await repo.get_org_metrics("octo", JUNE)
        await repo.get_org_metrics("octo", JUNE)
        assert len(source.calls) == 2
