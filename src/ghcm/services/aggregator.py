"""Fold daily Copilot metrics snapshots into a single UsageMetrics."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from typing import Any

from ghcm.models.metrics import BreakdownSummary, MetricsMetadata, UsageMetrics, round_half_up
from ghcm.services._snapshot_helpers import snap_dict, snap_int, snap_list, snap_str

logger = logging.getLogger(__name__)

# Engaged users per language/editor take the max seen on any single day.
# Summing would count a user active on several days once per day.
ENGAGED_USERS_AGGREGATION = "max-per-period"

COMPLETIONS_KEY = "copilot_ide_code_completions"


@dataclass
class _Breakdown:
    name: str
    total_engaged_users: int = 0
    total_suggestions: int = 0
    total_acceptances: int = 0
    total_lines_suggested: int = 0
    total_lines_accepted: int = 0

    def observe_engaged(self, users: int) -> None:
        self.total_engaged_users = max(self.total_engaged_users, users)

    def add_counts(self, suggestions: int, acceptances: int, suggested: int, accepted: int) -> None:
        self.total_suggestions += suggestions
        self.total_acceptances += acceptances
        self.total_lines_suggested += suggested
        self.total_lines_accepted += accepted


@dataclass
class _Totals:
    processed_days: int = 0
    active_users: int = 0
    engaged_users: int = 0
    total_suggestions: int = 0
    accepted_suggestions: int = 0
    accepted_lines: int = 0


def _entry(table: dict[str, _Breakdown], name: str) -> _Breakdown:
    if name not in table:
        table[name] = _Breakdown(name=name)
    return table[name]


class MetricsAggregator:
    """Single canonical reducer from daily snapshots to UsageMetrics.

    Pure and stateless: every call builds fresh accumulators, so one instance
    can be shared freely. Pass ``clock`` to pin the processing timestamp.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or (lambda: datetime.now(UTC))

    def process(self, snapshots: Sequence[Any] | Mapping[str, Any] | None) -> UsageMetrics:
        """Aggregate snapshots; malformed or missing fields count as zero."""
        if snapshots is None:
            logger.warning("No metrics data provided to process")
            return UsageMetrics()

        days: list[Any] = [snapshots] if isinstance(snapshots, Mapping) else list(snapshots)
        if not days:
            logger.warning("Metrics data is an empty list")
            return UsageMetrics(raw_data=days)

        totals = _Totals()
        languages: dict[str, _Breakdown] = {}
        editors: dict[str, _Breakdown] = {}

        for day in days:
            if day is None:
                continue
            totals.processed_days += 1
            totals.active_users += snap_int(day, "total_active_users")
            totals.engaged_users += snap_int(day, "total_engaged_users")

            completions = snap_dict(day, COMPLETIONS_KEY)
            self._fold_languages(completions, languages)
            self._fold_editors(completions, editors, languages, totals)

        if totals.processed_days > 0:
            totals.active_users = round_half_up(totals.active_users / totals.processed_days)
            totals.engaged_users = round_half_up(totals.engaged_users / totals.processed_days)

        return UsageMetrics(
            active_users=totals.active_users,
            engaged_users=totals.engaged_users,
            total_suggestions=totals.total_suggestions,
            accepted_suggestions=totals.accepted_suggestions,
            accepted_lines=totals.accepted_lines,
            languages=[BreakdownSummary(**asdict(entry)) for entry in languages.values()],
            editors=[BreakdownSummary(**asdict(entry)) for entry in editors.values()],
            processed_days=totals.processed_days,
            data_source="github_api",
            raw_data=days,
            metadata=MetricsMetadata(
                processed_at=self._clock().isoformat(),
                raw_data_points=len(days),
            ),
        )

    def _fold_languages(
        self, completions: Mapping[str, Any], languages: dict[str, _Breakdown]
    ) -> None:
        for lang in snap_list(completions, "languages"):
            name = snap_str(lang, "name")
            if not name:
                continue
            _entry(languages, name).observe_engaged(snap_int(lang, "total_engaged_users"))

    def _fold_editors(
        self,
        completions: Mapping[str, Any],
        editors: dict[str, _Breakdown],
        languages: dict[str, _Breakdown],
        totals: _Totals,
    ) -> None:
        for editor in snap_list(completions, "editors"):
            editor_name = snap_str(editor, "name")
            if not editor_name:
                continue
            editor_entry = _entry(editors, editor_name)
            editor_entry.observe_engaged(snap_int(editor, "total_engaged_users"))

            for model in snap_list(editor, "models"):
                for lang in snap_list(model, "languages"):
                    lang_name = snap_str(lang, "name")
                    if not lang_name:
                        continue
                    suggestions = snap_int(lang, "total_code_suggestions")
                    acceptances = snap_int(lang, "total_code_acceptances")
                    lines_suggested = snap_int(lang, "total_code_lines_suggested")
                    lines_accepted = snap_int(lang, "total_code_lines_accepted")

                    # Global totals are sourced only from this nested breakdown.
                    totals.total_suggestions += suggestions
                    totals.accepted_suggestions += acceptances
                    totals.accepted_lines += lines_accepted

                    editor_entry.add_counts(
                        suggestions, acceptances, lines_suggested, lines_accepted
                    )
                    _entry(languages, lang_name).add_counts(
                        suggestions, acceptances, lines_suggested, lines_accepted
                    )
