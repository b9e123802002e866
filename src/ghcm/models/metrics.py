"""Usage metrics entity produced by the aggregator."""

from __future__ import annotations

import math
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

from ghcm.models.reports import ChartPoint

DataSource = Literal["", "github_api", "team", "organization"]


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return math.floor(value + 0.5)


class BreakdownSummary(BaseModel):
    """Per-language or per-editor totals over a period."""

    model_config = ConfigDict(frozen=True)

    name: str
    total_engaged_users: int = 0
    total_suggestions: int = 0
    total_acceptances: int = 0
    total_lines_suggested: int = 0
    total_lines_accepted: int = 0

    @property
    def acceptance_rate(self) -> float:
        if self.total_suggestions <= 0:
            return 0.0
        return self.total_acceptances / self.total_suggestions * 100


class MetricsMetadata(BaseModel):
    """Processing stamp attached to a UsageMetrics instance."""

    model_config = ConfigDict(frozen=True)

    processed_at: str = ""
    raw_data_points: int = 0
    normalized: bool = False
    normalization_factor: float | None = None
    original_days: int | None = None
    normalized_to_days: int | None = None
    error: bool = False
    error_message: str = ""


class UsageMetrics(BaseModel):
    """Summary of Copilot usage over a set of daily snapshots.

    ``active_users`` and ``engaged_users`` are already daily averages;
    suggestion and line counts are plain sums over the period.
    """

    model_config = ConfigDict(frozen=True)

    active_users: int = 0
    engaged_users: int = 0
    total_suggestions: int = 0
    accepted_suggestions: int = 0
    accepted_lines: int = 0
    languages: list[BreakdownSummary] = Field(default_factory=list)
    editors: list[BreakdownSummary] = Field(default_factory=list)
    processed_days: int = 0
    data_source: DataSource = ""
    team_slug: str | None = None
    raw_data: list[Any] = Field(default_factory=list)
    metadata: MetricsMetadata = Field(default_factory=MetricsMetadata)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def avg_daily_active_users(self) -> int:
        return self.active_users if self.processed_days > 0 else 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def avg_daily_engaged_users(self) -> int:
        return self.engaged_users if self.processed_days > 0 else 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def acceptance_rate(self) -> float:
        if self.total_suggestions <= 0:
            return 0.0
        return self.accepted_suggestions / self.total_suggestions * 100

    def normalize_for_time_range(self, standard_days: int = 28) -> UsageMetrics:
        """Rescale period sums to ``standard_days`` for cross-period comparison.

        User counts are left alone since they are daily averages.
        """
        if self.processed_days == 0 or standard_days == 0:
            return self

        factor = self.processed_days / standard_days
        return self.model_copy(
            update={
                "total_suggestions": round_half_up(self.total_suggestions / factor),
                "accepted_suggestions": round_half_up(self.accepted_suggestions / factor),
                "accepted_lines": round_half_up(self.accepted_lines / factor),
                "metadata": self.metadata.model_copy(
                    update={
                        "normalized": True,
                        "normalization_factor": factor,
                        "original_days": self.processed_days,
                        "normalized_to_days": standard_days,
                    }
                ),
            }
        )

    def to_user_engagement_data(self) -> list[ChartPoint]:
        return [
            ChartPoint(name="Avg Daily Active", value=self.avg_daily_active_users),
            ChartPoint(name="Avg Daily Engaged", value=self.avg_daily_engaged_users),
        ]

    def to_acceptance_rate_data(self) -> list[ChartPoint]:
        return [
            ChartPoint(name="Accepted", value=self.accepted_suggestions),
            ChartPoint(
                name="Not Accepted",
                value=self.total_suggestions - self.accepted_suggestions,
            ),
        ]
