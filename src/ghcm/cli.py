"""Typer CLI for GHCM: report, roi and compare commands."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Annotated, NoReturn

import typer
from result import Err, Ok, Result

from ghcm.config import Config
from ghcm.data.snapshots import SnapshotFileError, load_snapshots
from ghcm.models.date_range import DateRange
from ghcm.models.reports import ReportBundle, ReportId
from ghcm.models.roi import ROIResult
from ghcm.services.aggregator import MetricsAggregator
from ghcm.services.reporting_service import ReportingService
from ghcm.services.roi import calculate_metrics_roi, calculate_roi

app = typer.Typer(
    name="ghcm",
    help="GitHub Copilot Metrics: usage reports from the Copilot metrics API.",
    no_args_is_help=True,
)


class ReportName(str, Enum):
    engagement = "engagement"
    productivity = "productivity"
    roi = "roi"
    languages = "languages"
    raw = "raw"


REPORT_IDS: dict[ReportName, ReportId] = {
    ReportName.engagement: "user_engagement",
    ReportName.productivity: "productivity",
    ReportName.roi: "roi",
    ReportName.languages: "language_editor",
    ReportName.raw: "raw_data",
}


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """GitHub Copilot usage reports."""
    level = logging.DEBUG if verbose else Config.from_env().log_level
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


@app.command()
def report(
    name: Annotated[ReportName, typer.Argument(help="Report to build")],
    input_file: Annotated[
        Path | None,
        typer.Option("--input", "-i", help="Saved metrics API response (JSON)"),
    ] = None,
    org: Annotated[str | None, typer.Option("--org", help="GitHub organization")] = None,
    team: Annotated[str | None, typer.Option("--team", help="Team slug")] = None,
    date_range: Annotated[
        str | None, typer.Option("--range", help="'1 day', '7 days', '14 days' or '28 days'")
    ] = None,
) -> None:
    """Build a report from a saved response or live from the GitHub API."""
    config = Config.from_env()
    report_id = REPORT_IDS[name]
    if input_file is not None:
        if date_range:
            _fail("--range only applies to live reports; it cannot filter an --input file")
        _echo_bundle(_report_from_file(config, report_id, input_file))
        return

    if date_range:
        config = config.with_report_date_range(report_id, date_range)

    organization = org or config.organization
    _echo_bundle(
        asyncio.run(_build_report(config, report_id, organization, team or config.default_team))
    )


@app.command()
def roi(
    lines: Annotated[int | None, typer.Option("--lines", help="Accepted lines of code")] = None,
    org: Annotated[str | None, typer.Option("--org", help="GitHub organization")] = None,
    team: Annotated[str | None, typer.Option("--team", help="Team slug")] = None,
    since: Annotated[str | None, typer.Option("--since", help="Start date YYYY-MM-DD")] = None,
    until: Annotated[str | None, typer.Option("--until", help="End date YYYY-MM-DD")] = None,
    lines_per_hour: Annotated[float | None, typer.Option("--lines-per-hour")] = None,
    hourly_rate: Annotated[float | None, typer.Option("--hourly-rate")] = None,
    license_cost: Annotated[
        float | None, typer.Option("--license-cost", help="License cost for the period")
    ] = None,
    seat_price: Annotated[
        float | None, typer.Option("--seat-price", help="License cost per user per month")
    ] = None,
) -> None:
    """Estimate ROI from a line count, or from live metrics for an org/team."""
    config = Config.from_env()
    overrides = {
        "avg_lines_per_hour": lines_per_hour,
        "avg_hourly_rate": hourly_rate,
        "license_cost_per_month": seat_price,
    }

    if lines is not None:
        roi_config = config.roi.merged(overrides)
        figures = calculate_roi(
            accepted_lines=lines,
            avg_lines_per_hour=roi_config.avg_lines_per_hour,
            avg_hourly_rate=roi_config.avg_hourly_rate,
            license_cost=license_cost or 0.0,
        )
        figures["roi_percentage"] = figures["roi"] * 100
        typer.echo(json.dumps(figures, indent=2))
        return

    organization = org or config.organization
    if not organization:
        _fail("Pass --lines, or --org (or GHCM_ORGANIZATION) to fetch live metrics")
    try:
        if since or until:
            today = date.today().isoformat()
            period = DateRange(since or today, until or today)  # type: ignore[arg-type]
        else:
            period = DateRange.from_range_identifier(config.default_date_range)
    except ValueError as exc:
        _fail(str(exc))

    result = asyncio.run(_calculate_roi(config, organization, team, period, overrides))
    if isinstance(result, Err):
        _fail(result.err_value)
    typer.echo(result.ok_value.model_dump_json(indent=2))


@app.command()
def compare(
    team: Annotated[list[str] | None, typer.Option("--team", help="Team slug (repeatable)")] = None,
    org: Annotated[str | None, typer.Option("--org", help="GitHub organization")] = None,
    date_range: Annotated[str | None, typer.Option("--range", help="Range identifier")] = None,
) -> None:
    """Compare headline metrics across teams."""
    config = Config.from_env()
    if date_range:
        config = config.with_report_date_range("team_comparison", date_range)
    teams = list(team or config.teams)
    _echo_bundle(
        asyncio.run(
            _build_report(
                config, "team_comparison", org or config.organization, None, teams=teams
            )
        )
    )


def _report_from_file(
    config: Config, report_id: ReportId, path: Path
) -> Result[ReportBundle, str]:
    try:
        snapshots = load_snapshots(path)
    except SnapshotFileError as exc:
        return Err(str(exc))

    aggregator = MetricsAggregator()
    metrics = aggregator.process(snapshots)
    roi_result = calculate_metrics_roi(metrics, config.roi) if report_id == "roi" else None
    return Ok(ReportingService(aggregator).generate(report_id, metrics, roi_result))


async def _build_report(
    config: Config,
    report_id: ReportId,
    organization: str,
    team: str | None,
    teams: list[str] | None = None,
) -> Result[ReportBundle, str]:
    """Run one report against the live API."""
    from ghcm.services.container import ServiceContainer

    container = await ServiceContainer.create(config)
    try:
        return await container.analytics_service.build_report(
            report_id, organization, team=team, teams=teams
        )
    finally:
        await container.close()


async def _calculate_roi(
    config: Config,
    organization: str,
    team: str | None,
    period: DateRange,
    overrides: Mapping[str, float | None],
) -> Result[ROIResult, str]:
    from ghcm.services.container import ServiceContainer

    container = await ServiceContainer.create(config)
    try:
        return await container.analytics_service.calculate_roi(
            organization, team, period, overrides
        )
    finally:
        await container.close()


def _echo_bundle(result: Result[ReportBundle, str]) -> None:
    if isinstance(result, Err):
        _fail(result.err_value)
    typer.echo(result.ok_value.model_dump_json(indent=2))


def _fail(message: str) -> NoReturn:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(code=1)
