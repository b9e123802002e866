"""Protocol definitions for data access."""

from __future__ import annotations

from typing import Any, Protocol


class SnapshotSourceProtocol(Protocol):
    """Async source of raw daily Copilot metrics snapshots."""

    async def get_org_metrics(self, organization: str, since: str, until: str) -> Any: ...

    async def get_team_metrics(
        self, organization: str, team: str, since: str, until: str
    ) -> Any: ...


class MetricsCacheProtocol(Protocol):
    """Key/value memoization with pattern invalidation."""

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...

    def invalidate(self, pattern: str | None = None, *, prefix: bool = False) -> int: ...

    def clear(self) -> None: ...
