"""Report bundle models: chart points, table rows, insights."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

Comparator = Literal[">", ">=", "<", "<=", "==", "!="]

ReportId = Literal[
    "user_engagement", "productivity", "roi", "language_editor", "team_comparison", "raw_data"
]

REPORT_IDS: tuple[ReportId, ...] = (
    "user_engagement",
    "productivity",
    "roi",
    "language_editor",
    "team_comparison",
    "raw_data",
)


class ChartPoint(BaseModel):
    """A named value for bar/pie charts."""

    name: str
    value: float = 0


class TrendPoint(BaseModel):
    """One day of the usage trend series."""

    date: str
    active_users: int = 0
    engaged_users: int = 0
    total_suggestions: int = 0
    accepted_suggestions: int = 0
    acceptance_rate: float = 0.0


class DailyProductivityPoint(BaseModel):
    """One day of the productivity series."""

    date: str
    accepted_suggestions: int = 0
    accepted_lines: int = 0
    suggestions_per_user: int = 0
    lines_per_user: int = 0


class BreakdownRow(BaseModel):
    """Table row for a language or editor."""

    name: str
    users: int = 0
    suggestions: int = 0
    acceptances: int = 0
    acceptance_rate: float = 0.0
    lines_accepted: int = 0


class TeamComparisonRow(BaseModel):
    """Headline metrics for one team in a comparison."""

    team_slug: str
    active_users: int = 0
    engaged_users: int = 0
    total_suggestions: int = 0
    accepted_suggestions: int = 0
    accepted_lines: int = 0
    acceptance_rate: float = 0.0
    error: bool = False


class InsightRule(BaseModel):
    """Declarative insight: fires when ``metric <comparator> threshold``.

    ``template`` is rendered with ``ghcm.services.formatting.InsightFormatter``
    against the same context the metric is read from.
    """

    title: str
    metric: str
    comparator: Comparator = ">"
    threshold: float = 0
    template: str


class Insight(BaseModel):
    """A rendered insight sentence."""

    title: str
    description: str


ChartSeries = list[ChartPoint | TrendPoint | DailyProductivityPoint]

SummaryValue = float | int | str | None


class ReportBundle(BaseModel):
    """Presentation-ready view of a report."""

    summary: dict[str, SummaryValue] | None = None
    charts: dict[str, ChartSeries] = Field(default_factory=dict)
    tables: dict[str, Any] = Field(default_factory=dict)
    insights: list[Insight] = Field(default_factory=list)

    @classmethod
    def empty(cls) -> ReportBundle:
        return cls()
