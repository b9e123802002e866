"""Rule tables and evaluation for report insights."""

from __future__ import annotations

import logging
import operator
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from ghcm.models.reports import Comparator, Insight, InsightRule
from ghcm.services.formatting import InsightFormatter

logger = logging.getLogger(__name__)

COMPARATORS: dict[Comparator, Callable[[Any, Any], bool]] = {
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
    "==": operator.eq,
    "!=": operator.ne,
}

# Minutes a developer would have spent typing one accepted line.
MINUTES_SAVED_PER_LINE = 1.5

USER_ENGAGEMENT_RULES: tuple[InsightRule, ...] = (
    InsightRule(
        title="User Engagement",
        metric="avg_daily_active_users",
        comparator=">",
        threshold=0,
        template=(
            "{engagement_rate:pct} of active users are engaged with Copilot, "
            "meaning they're actively accepting suggestions."
        ),
    ),
    InsightRule(
        title="Suggestion Quality",
        metric="acceptance_rate",
        comparator=">",
        threshold=0,
        template=(
            "Users are accepting {acceptance_rate:pct} of Copilot's suggestions, "
            "indicating a good level of suggestion quality."
        ),
    ),
)

PRODUCTIVITY_RULES: tuple[InsightRule, ...] = (
    InsightRule(
        title="Code Generation",
        metric="accepted_suggestions",
        comparator=">",
        threshold=0,
        template=(
            "Copilot has generated {accepted_suggestions:num} accepted code suggestions, "
            "saving developers from typing {accepted_lines:num} lines of code."
        ),
    ),
    InsightRule(
        title="Most Productive Language",
        metric="top_language.value",
        comparator=">",
        threshold=0,
        template=(
            "{top_language[name]} is your team's most productive language with Copilot, "
            "with {top_language[value]:num} accepted suggestions."
        ),
    ),
    InsightRule(
        title="Time Savings",
        metric="estimated_hours_saved",
        comparator=">",
        threshold=0,
        template=(
            "Based on an average of {minutes_per_line} minutes saved per line of code, "
            "Copilot has potentially saved your team approximately "
            "{estimated_hours_saved:int} development hours."
        ),
    ),
)

ROI_RULES: tuple[InsightRule, ...] = (
    InsightRule(
        title="Positive ROI",
        metric="roi_percentage",
        comparator=">",
        threshold=0,
        template=(
            "GitHub Copilot is delivering a {roi_percentage:pct} return on investment, "
            "saving approximately {hours_saved:int} developer hours."
        ),
    ),
    InsightRule(
        title="ROI Opportunity",
        metric="roi_percentage",
        comparator="<=",
        threshold=0,
        template=(
            "Increase Copilot usage to improve ROI. Currently, the cost is "
            "{license_cost:usd} with {money_saved:usd} in estimated savings."
        ),
    ),
)

LANGUAGE_EDITOR_RULES: tuple[InsightRule, ...] = (
    InsightRule(
        title="Top Language",
        metric="top_language.lines_accepted",
        comparator=">",
        threshold=0,
        template=(
            "{top_language[name]} leads with {top_language[lines_accepted]:num} accepted "
            "lines at a {top_language[acceptance_rate]:pct} acceptance rate."
        ),
    ),
    InsightRule(
        title="Top Editor",
        metric="top_editor.lines_accepted",
        comparator=">",
        threshold=0,
        template=(
            "{top_editor[name]} is the most productive editor with "
            "{top_editor[lines_accepted]:num} accepted lines."
        ),
    ),
    InsightRule(
        title="Language Coverage",
        metric="language_count",
        comparator=">=",
        threshold=5,
        template="Copilot is in use across {language_count:num} languages.",
    ),
)

TEAM_COMPARISON_RULES: tuple[InsightRule, ...] = (
    InsightRule(
        title="Leading Team",
        metric="leader.acceptance_rate",
        comparator=">",
        threshold=0,
        template=(
            "{leader[team_slug]} has the highest acceptance rate at "
            "{leader[acceptance_rate]:pct}."
        ),
    ),
    InsightRule(
        title="Missing Team Data",
        metric="failed_teams",
        comparator=">",
        threshold=0,
        template="Metrics could not be loaded for {failed_teams:num} team(s).",
    ),
)


def resolve_metric(context: Mapping[str, Any], path: str) -> Any:
    """Look up a dotted path (``top_language.value``) in nested mappings."""
    current: Any = context
    for part in path.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return None
        current = current[part]
    return current


def rule_matches(rule: InsightRule, context: Mapping[str, Any]) -> bool:
    value = resolve_metric(context, rule.metric)
    if value is None or isinstance(value, bool) or not isinstance(value, int | float):
        return False
    return COMPARATORS[rule.comparator](value, rule.threshold)


def evaluate_rules(
    rules: Iterable[InsightRule],
    context: Mapping[str, Any],
    formatter: InsightFormatter | None = None,
) -> list[Insight]:
    """Render every rule whose condition holds against ``context``."""
    formatter = formatter or InsightFormatter()
    insights: list[Insight] = []
    for rule in rules:
        if not rule_matches(rule, context):
            continue
        try:
            description = formatter.vformat(rule.template, (), context)
        except (KeyError, IndexError, ValueError) as exc:
            logger.warning("Skipping insight %r: bad template (%s)", rule.title, exc)
            continue
        insights.append(Insight(title=rule.title, description=description))
    return insights
