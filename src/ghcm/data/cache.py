"""Injectable memoization caches for fetched metrics."""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)


def cache_key(*parts: object) -> str:
    """Join request parameters into a stable cache key."""
    return "-".join("" if part is None else str(part) for part in parts)


class InMemoryCache:
    """Unbounded dict-backed cache; entries live until invalidated."""

    def __init__(self) -> None:
        self._entries: dict[str, Any] = {}

    def get(self, key: str) -> Any | None:
        return self._entries.get(key)

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = value

    def invalidate(self, pattern: str | None = None, *, prefix: bool = False) -> int:
        """Drop keys containing ``pattern``, or everything when it is empty.

        With ``prefix=True`` only keys starting with ``pattern`` are dropped.

        Returns:
            Number of entries removed.
        """
        if not pattern:
            removed = len(self._entries)
            self._entries.clear()
        else:
            if prefix:
                doomed = [key for key in self._entries if key.startswith(pattern)]
            else:
                doomed = [key for key in self._entries if pattern in key]
            for key in doomed:
                del self._entries[key]
            removed = len(doomed)
        if removed:
            logger.debug("Invalidated %d cache entries (pattern=%r)", removed, pattern)
        return removed

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class NullCache:
    """Cache that never stores anything."""

    def get(self, key: str) -> Any | None:
        return None

    def set(self, key: str, value: Any) -> None:
        return

    def invalidate(self, pattern: str | None = None, *, prefix: bool = False) -> int:
        return 0

    def clear(self) -> None:
        return
