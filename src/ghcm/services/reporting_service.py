"""Reporting service: UsageMetrics -> chart, table and insight bundles."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from ghcm.models.metrics import BreakdownSummary, UsageMetrics, round_half_up
from ghcm.models.reports import (
    BreakdownRow,
    ChartPoint,
    DailyProductivityPoint,
    Insight,
    InsightRule,
    ReportBundle,
    ReportId,
    SummaryValue,
    TeamComparisonRow,
    TrendPoint,
)
from ghcm.models.roi import ROIResult
from ghcm.services._snapshot_helpers import safe_rate, snap_dict, snap_int, snap_list, snap_str
from ghcm.services.aggregator import MetricsAggregator
from ghcm.services.formatting import InsightFormatter
from ghcm.services.insights import (
    LANGUAGE_EDITOR_RULES,
    MINUTES_SAVED_PER_LINE,
    PRODUCTIVITY_RULES,
    ROI_RULES,
    TEAM_COMPARISON_RULES,
    USER_ENGAGEMENT_RULES,
    evaluate_rules,
)

DEFAULT_RULES: dict[ReportId, Sequence[InsightRule]] = {
    "user_engagement": USER_ENGAGEMENT_RULES,
    "productivity": PRODUCTIVITY_RULES,
    "roi": ROI_RULES,
    "language_editor": LANGUAGE_EDITOR_RULES,
    "team_comparison": TEAM_COMPARISON_RULES,
    "raw_data": (),
}

# (snapshot section, display name)
FEATURES: tuple[tuple[str, str], ...] = (
    ("copilot_ide_code_completions", "IDE Completions"),
    ("copilot_ide_chat", "IDE Chat"),
    ("copilot_dotcom_chat", "GitHub.com Chat"),
    ("copilot_dotcom_pull_requests", "Pull Request Summaries"),
)

DEV_ENVIRONMENTS = ("VS Code", "JetBrains", "Visual Studio", "Neovim", "Other")

_JETBRAINS_MARKERS = (
    "intellij",
    "pycharm",
    "webstorm",
    "rider",
    "goland",
    "phpstorm",
    "jetbrains",
)

TOP_LANGUAGES_LIMIT = 10


def editor_category(name: str) -> str:
    """Bucket a raw editor name into one of DEV_ENVIRONMENTS."""
    lowered = name.lower()
    if "vscode" in lowered or "vs code" in lowered:
        return "VS Code"
    if any(marker in lowered for marker in _JETBRAINS_MARKERS):
        return "JetBrains"
    if "visual studio" in lowered and "code" not in lowered:
        return "Visual Studio"
    if "vim" in lowered:
        return "Neovim"
    return "Other"


def _row(entry: BreakdownSummary) -> BreakdownRow:
    return BreakdownRow(
        name=entry.name,
        users=entry.total_engaged_users,
        suggestions=entry.total_suggestions,
        acceptances=entry.total_acceptances,
        acceptance_rate=entry.acceptance_rate,
        lines_accepted=entry.total_lines_accepted,
    )


class ReportingService:
    """Builds presentation-ready report bundles.

    Stateless apart from its collaborators: per-day series are derived with the
    same aggregator that produced the metrics, and insight rule tables can be
    replaced per report id.
    """

    def __init__(
        self,
        aggregator: MetricsAggregator | None = None,
        rules: Mapping[ReportId, Sequence[InsightRule]] | None = None,
        formatter: InsightFormatter | None = None,
    ) -> None:
        self._aggregator = aggregator or MetricsAggregator()
        self._rules: dict[ReportId, Sequence[InsightRule]] = {**DEFAULT_RULES, **(rules or {})}
        self._formatter = formatter or InsightFormatter()

    def generate(
        self, report_id: ReportId, metrics: UsageMetrics | None, roi: ROIResult | None = None
    ) -> ReportBundle:
        """Dispatch to the single-metrics report named by ``report_id``."""
        match report_id:
            case "user_engagement":
                return self.generate_user_engagement_report(metrics)
            case "productivity":
                return self.generate_productivity_report(metrics)
            case "roi":
                return self.generate_roi_report(metrics, roi)
            case "language_editor":
                return self.generate_language_editor_report(metrics)
            case "raw_data":
                return self.generate_raw_data_report(metrics)
            case _:
                return ReportBundle.empty()

    def generate_user_engagement_report(self, metrics: UsageMetrics | None) -> ReportBundle:
        if metrics is None:
            return ReportBundle.empty()

        raw_data = metrics.raw_data
        days = metrics.processed_days
        summary: dict[str, SummaryValue] = {
            "avg_daily_active_users": metrics.avg_daily_active_users,
            "avg_daily_engaged_users": metrics.avg_daily_engaged_users,
            "acceptance_rate": metrics.acceptance_rate,
            "total_suggestions": metrics.total_suggestions,
            "accepted_suggestions": metrics.accepted_suggestions,
        }
        feature_users = self._average_feature_users(raw_data, days)

        charts = {
            "user_engagement": metrics.to_user_engagement_data(),
            "acceptance_rate": metrics.to_acceptance_rate_data(),
            "feature_usage": [
                ChartPoint(name=name, value=users) for name, users in feature_users.items()
            ],
            "dev_environments": self._dev_environments(raw_data, days),
            "trends": self.trend_series(raw_data),
        }
        tables = {
            "feature_details": {name: {"users": users} for name, users in feature_users.items()},
            "language_details": self._sorted_rows(metrics.languages, "acceptances"),
            "editor_details": self._sorted_rows(metrics.editors, "acceptances"),
        }
        context = {
            **summary,
            "engagement_rate": safe_rate(
                metrics.avg_daily_engaged_users, metrics.avg_daily_active_users
            ),
        }
        return ReportBundle(
            summary=summary,
            charts=charts,
            tables=tables,
            insights=self._insights("user_engagement", context),
        )

    def generate_productivity_report(self, metrics: UsageMetrics | None) -> ReportBundle:
        if metrics is None:
            return ReportBundle.empty()

        summary: dict[str, SummaryValue] = {
            "accepted_lines": metrics.accepted_lines,
            "acceptance_rate": metrics.acceptance_rate,
            "total_suggestions": metrics.total_suggestions,
            "accepted_suggestions": metrics.accepted_suggestions,
        }
        language_productivity = sorted(
            (ChartPoint(name=e.name, value=e.total_acceptances) for e in metrics.languages),
            key=lambda point: point.value,
            reverse=True,
        )[:TOP_LANGUAGES_LIMIT]
        editor_productivity = sorted(
            (ChartPoint(name=e.name, value=e.total_acceptances) for e in metrics.editors),
            key=lambda point: point.value,
            reverse=True,
        )

        charts = {
            "code_suggestions": metrics.to_acceptance_rate_data(),
            "lines_of_code": [ChartPoint(name="Accepted Lines", value=metrics.accepted_lines)],
            "language_productivity": language_productivity,
            "editor_productivity": editor_productivity,
            "daily_productivity": self.daily_productivity_series(metrics.raw_data),
        }
        tables = {
            "language_details": self._sorted_rows(metrics.languages, "acceptances"),
            "editor_details": self._sorted_rows(metrics.editors, "acceptances"),
        }
        context: dict[str, Any] = {
            **summary,
            "estimated_hours_saved": metrics.accepted_lines * MINUTES_SAVED_PER_LINE / 60,
            "minutes_per_line": MINUTES_SAVED_PER_LINE,
        }
        if language_productivity:
            context["top_language"] = language_productivity[0].model_dump()
        return ReportBundle(
            summary=summary,
            charts=charts,
            tables=tables,
            insights=self._insights("productivity", context),
        )

    def generate_roi_report(
        self, metrics: UsageMetrics | None, roi: ROIResult | None
    ) -> ReportBundle:
        if metrics is None or roi is None:
            return ReportBundle.empty()

        summary: dict[str, SummaryValue] = {
            "hours_saved": roi.hours_saved,
            "money_saved": roi.money_saved,
            "license_cost": roi.license_cost,
            "roi_percentage": roi.roi_percentage,
        }
        charts = {
            "cost_benefit": [
                ChartPoint(name="License Cost", value=roi.license_cost),
                ChartPoint(name="Money Saved", value=roi.money_saved),
            ],
            "savings_breakdown": [ChartPoint(name="Hours Saved", value=roi.hours_saved)],
        }
        tables = {
            "roi_details": {
                "hours_saved": roi.hours_saved,
                "hourly_rate": roi.config.avg_hourly_rate,
                "money_saved": roi.money_saved,
                "license_cost": roi.license_cost,
                "net_savings": roi.net_savings,
                "roi": roi.roi_percentage,
            }
        }
        return ReportBundle(
            summary=summary,
            charts=charts,
            tables=tables,
            insights=self._insights("roi", summary),
        )

    def generate_language_editor_report(self, metrics: UsageMetrics | None) -> ReportBundle:
        if metrics is None:
            return ReportBundle.empty()

        language_rows = self._sorted_rows(metrics.languages, "lines_accepted")
        editor_rows = self._sorted_rows(metrics.editors, "lines_accepted")
        summary: dict[str, SummaryValue] = {
            "language_count": len(language_rows),
            "editor_count": len(editor_rows),
            "accepted_lines": metrics.accepted_lines,
            "acceptance_rate": metrics.acceptance_rate,
        }
        charts = {
            "languages_by_accepted_lines": [
                ChartPoint(name=row.name, value=row.lines_accepted)
                for row in language_rows[:TOP_LANGUAGES_LIMIT]
            ],
            "editors_by_accepted_lines": [
                ChartPoint(name=row.name, value=row.lines_accepted) for row in editor_rows
            ],
            "language_acceptance_rates": [
                ChartPoint(name=row.name, value=row.acceptance_rate)
                for row in language_rows[:TOP_LANGUAGES_LIMIT]
            ],
        }
        tables = {"languages": language_rows, "editors": editor_rows}
        context: dict[str, Any] = dict(summary)
        if language_rows:
            context["top_language"] = language_rows[0].model_dump()
        if editor_rows:
            context["top_editor"] = editor_rows[0].model_dump()
        return ReportBundle(
            summary=summary,
            charts=charts,
            tables=tables,
            insights=self._insights("language_editor", context),
        )

    def generate_raw_data_report(self, metrics: UsageMetrics | None) -> ReportBundle:
        """Validation summary next to the untouched API snapshots."""
        if metrics is None:
            return ReportBundle.empty()

        summary: dict[str, SummaryValue] = {
            "data_source": metrics.data_source,
            "team_slug": metrics.team_slug,
            "data_points": len(metrics.raw_data),
            "processed_days": metrics.processed_days,
            "avg_daily_active_users": metrics.avg_daily_active_users,
            "total_suggestions": metrics.total_suggestions,
            "accepted_suggestions": metrics.accepted_suggestions,
            "language_count": len(metrics.languages),
            "editor_count": len(metrics.editors),
        }
        return ReportBundle(
            summary=summary,
            tables={"raw_data": metrics.raw_data},
            insights=self._insights("raw_data", summary),
        )

    def generate_team_comparison_report(
        self, team_metrics: Sequence[UsageMetrics] | None
    ) -> ReportBundle:
        if not team_metrics:
            return ReportBundle.empty()

        rows = [
            TeamComparisonRow(
                team_slug=metrics.team_slug or "",
                active_users=metrics.avg_daily_active_users,
                engaged_users=metrics.avg_daily_engaged_users,
                total_suggestions=metrics.total_suggestions,
                accepted_suggestions=metrics.accepted_suggestions,
                accepted_lines=metrics.accepted_lines,
                acceptance_rate=metrics.acceptance_rate,
                error=metrics.metadata.error,
            )
            for metrics in team_metrics
        ]
        loaded = [row for row in rows if not row.error]
        summary: dict[str, SummaryValue] = {
            "team_count": len(rows),
            "failed_teams": len(rows) - len(loaded),
            "accepted_lines": sum(row.accepted_lines for row in loaded),
            "active_users": sum(row.active_users for row in loaded),
        }
        charts = {
            "acceptance_rate": [
                ChartPoint(name=row.team_slug, value=row.acceptance_rate) for row in loaded
            ],
            "accepted_lines": [
                ChartPoint(name=row.team_slug, value=row.accepted_lines) for row in loaded
            ],
            "active_users": [
                ChartPoint(name=row.team_slug, value=row.active_users) for row in loaded
            ],
        }
        context: dict[str, Any] = dict(summary)
        if loaded:
            leader = max(loaded, key=lambda row: row.acceptance_rate)
            context["leader"] = leader.model_dump()
        return ReportBundle(
            summary=summary,
            charts=charts,
            tables={"teams": rows},
            insights=self._insights("team_comparison", context),
        )

    def trend_series(self, raw_data: Sequence[Any]) -> list[TrendPoint]:
        """Per-day usage points, skipping days without a date."""
        points: list[TrendPoint] = []
        for day in raw_data:
            day_date = snap_str(day, "date")
            if not day_date:
                continue
            day_metrics = self._aggregator.process([day])
            points.append(
                TrendPoint(
                    date=day_date,
                    active_users=snap_int(day, "total_active_users"),
                    engaged_users=snap_int(day, "total_engaged_users"),
                    total_suggestions=day_metrics.total_suggestions,
                    accepted_suggestions=day_metrics.accepted_suggestions,
                    acceptance_rate=day_metrics.acceptance_rate,
                )
            )
        return points

    def daily_productivity_series(self, raw_data: Sequence[Any]) -> list[DailyProductivityPoint]:
        points: list[DailyProductivityPoint] = []
        for day in raw_data:
            day_date = snap_str(day, "date")
            if not day_date:
                continue
            day_metrics = self._aggregator.process([day])
            active = snap_int(day, "total_active_users")
            points.append(
                DailyProductivityPoint(
                    date=day_date,
                    accepted_suggestions=day_metrics.accepted_suggestions,
                    accepted_lines=day_metrics.accepted_lines,
                    suggestions_per_user=(
                        round_half_up(day_metrics.accepted_suggestions / active)
                        if active > 0
                        else 0
                    ),
                    lines_per_user=(
                        round_half_up(day_metrics.accepted_lines / active) if active > 0 else 0
                    ),
                )
            )
        return points

    def _insights(self, report_id: ReportId, context: Mapping[str, Any]) -> list[Insight]:
        return evaluate_rules(self._rules.get(report_id, ()), context, self._formatter)

    def _sorted_rows(self, entries: Sequence[BreakdownSummary], key: str) -> list[BreakdownRow]:
        rows = [_row(entry) for entry in entries]
        return sorted(rows, key=lambda row: getattr(row, key), reverse=True)

    def _average_feature_users(self, raw_data: Sequence[Any], days: int) -> dict[str, int]:
        totals = dict.fromkeys((name for _, name in FEATURES), 0)
        for day in raw_data:
            if day is None:
                continue
            for section, name in FEATURES:
                totals[name] += snap_int(snap_dict(day, section), "total_engaged_users")
        if days > 0:
            totals = {name: round_half_up(users / days) for name, users in totals.items()}
        return totals

    def _dev_environments(self, raw_data: Sequence[Any], days: int) -> list[ChartPoint]:
        users = dict.fromkeys(DEV_ENVIRONMENTS, 0)
        for day in raw_data:
            completions = snap_dict(day, "copilot_ide_code_completions")
            for editor in snap_list(completions, "editors"):
                name = snap_str(editor, "name")
                if not name:
                    continue
                users[editor_category(name)] += snap_int(editor, "total_engaged_users")
        if days > 0:
            users = {name: round_half_up(count / days) for name, count in users.items()}
        points = [ChartPoint(name=name, value=count) for name, count in users.items() if count > 0]
        return sorted(points, key=lambda point: point.value, reverse=True)
