"""Load saved Copilot metrics API responses from disk."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class SnapshotFileError(ValueError):
    """The file could not be read as a metrics response."""


def load_snapshots(path: Path) -> list[Any]:
    """Read daily snapshots from a JSON file.

    Accepts the raw API list, a ``{"data": [...]}`` wrapper or a single day
    object. Non-object entries are kept as-is; the aggregator ignores them.
    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise SnapshotFileError(f"Cannot read {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise SnapshotFileError(f"Invalid JSON in {path}: line {exc.lineno}") from exc

    match raw:
        case list():
            return raw
        case {"data": list() as days}:
            return days
        case dict():
            return [raw]
        case _:
            logger.warning("Unexpected snapshot payload in %s: %s", path, type(raw).__name__)
            return []
