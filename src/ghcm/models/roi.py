"""ROI configuration and result models."""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_AVG_LINES_PER_HOUR = 30.0
DEFAULT_AVG_HOURLY_RATE = 75.0
DEFAULT_LICENSE_COST_PER_MONTH = 19.0


class ROIConfig(BaseModel):
    """Assumptions behind the ROI estimate."""

    model_config = ConfigDict(frozen=True)

    avg_lines_per_hour: float = DEFAULT_AVG_LINES_PER_HOUR
    avg_hourly_rate: float = DEFAULT_AVG_HOURLY_RATE
    license_cost_per_month: float = DEFAULT_LICENSE_COST_PER_MONTH

    def merged(self, overrides: Mapping[str, float | None] | None = None) -> ROIConfig:
        """Return a copy with the non-None overrides applied."""
        if not overrides:
            return self
        updates = {
            key: float(value)
            for key, value in overrides.items()
            if value is not None and key in type(self).model_fields
        }
        return self.model_copy(update=updates)


class ROIResult(BaseModel):
    """Hours and money saved against license spend."""

    hours_saved: float = 0.0
    money_saved: float = 0.0
    license_cost: float = 0.0
    roi: float = 0.0
    roi_percentage: float = 0.0
    calculated_at: str = ""
    config: ROIConfig = Field(default_factory=ROIConfig)

    @property
    def net_savings(self) -> float:
        return self.money_saved - self.license_cost
