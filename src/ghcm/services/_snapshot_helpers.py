"""Null-safe accessors for loosely shaped snapshot JSON."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def snap_int(obj: object, key: str) -> int:
    """Extract an integer counter from a snapshot mapping, 0 when unusable."""
    if not isinstance(obj, Mapping):
        return 0
    v = obj.get(key, 0)
    if isinstance(v, bool):
        return int(v)
    if isinstance(v, int):
        return v
    if isinstance(v, float):
        return int(v)
    if isinstance(v, str):
        try:
            return int(v)
        except ValueError:
            return 0
    return 0


def snap_str(obj: object, key: str, default: str = "") -> str:
    if not isinstance(obj, Mapping):
        return default
    v = obj.get(key, default)
    return str(v) if v else default


def snap_dict(obj: object, key: str) -> Mapping[str, Any]:
    if not isinstance(obj, Mapping):
        return {}
    v = obj.get(key)
    return v if isinstance(v, Mapping) else {}


def snap_list(obj: object, key: str) -> list[Any]:
    if not isinstance(obj, Mapping):
        return []
    v = obj.get(key)
    return v if isinstance(v, list) else []


def safe_rate(numerator: float, denominator: float) -> float:
    """Percentage of ``numerator`` over ``denominator``, 0 on empty denominator."""
    if denominator <= 0:
        return 0.0
    return numerator / denominator * 100
