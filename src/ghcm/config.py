"""Configuration for GHCM."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace

from ghcm.data.github_client import DEFAULT_API_BASE_URL, DEFAULT_API_VERSION, DEFAULT_TIMEOUT_S
from ghcm.models.date_range import DEFAULT_RANGE_IDENTIFIER, DateRange
from ghcm.models.roi import ROIConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Config:
    """Application configuration."""

    organization: str = ""
    teams: tuple[str, ...] = ()
    token: str = field(default="", repr=False)
    api_base_url: str = DEFAULT_API_BASE_URL
    api_version: str = DEFAULT_API_VERSION
    timeout: float = DEFAULT_TIMEOUT_S
    default_date_range: str = DEFAULT_RANGE_IDENTIFIER
    report_date_ranges: Mapping[str, str] = field(default_factory=dict)
    roi: ROIConfig = field(default_factory=ROIConfig)
    log_level: str = "INFO"

    @property
    def default_team(self) -> str | None:
        return self.teams[0] if self.teams else None

    def report_date_range(self, report_id: str) -> DateRange:
        """Date range configured for a report, falling back to the default."""
        identifier = self.report_date_ranges.get(report_id, self.default_date_range)
        return DateRange.from_range_identifier(identifier)

    def with_report_date_range(self, report_id: str, identifier: str) -> Config:
        return replace(
            self, report_date_ranges={**self.report_date_ranges, report_id: identifier}
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Config:
        """Build config from ``GHCM_*`` variables and ``GITHUB_TOKEN``."""
        env = os.environ if environ is None else environ
        teams = tuple(
            team.strip() for team in env.get("GHCM_TEAMS", "").split(",") if team.strip()
        )
        roi = ROIConfig().merged(
            {
                "avg_lines_per_hour": _env_float(env, "GHCM_AVG_LINES_PER_HOUR"),
                "avg_hourly_rate": _env_float(env, "GHCM_AVG_HOURLY_RATE"),
                "license_cost_per_month": _env_float(env, "GHCM_LICENSE_COST_PER_MONTH"),
            }
        )
        return cls(
            organization=env.get("GHCM_ORGANIZATION", ""),
            teams=teams,
            token=env.get("GITHUB_TOKEN", ""),
            api_base_url=env.get("GHCM_API_BASE_URL", DEFAULT_API_BASE_URL),
            default_date_range=env.get("GHCM_DATE_RANGE", DEFAULT_RANGE_IDENTIFIER),
            roi=roi,
            log_level=_env_log_level(env, "GHCM_LOG_LEVEL"),
        )


def _env_log_level(env: Mapping[str, str], name: str) -> str:
    value = env.get(name, "").strip().upper()
    if not value:
        return "INFO"
    if value not in logging.getLevelNamesMapping():
        logger.warning("Ignoring unknown %s=%r", name, env[name])
        return "INFO"
    return value


def _env_float(env: Mapping[str, str], name: str) -> float | None:
    value = env.get(name, "").strip()
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        logger.warning("Ignoring non-numeric %s=%r", name, value)
        return None
