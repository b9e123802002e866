"""Date range value object used to key API calls and caches."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta

DEFAULT_RANGE_IDENTIFIER = "28 days"

RANGE_IDENTIFIERS: dict[str, int] = {
    "1 day": 1,
    "7 days": 7,
    "14 days": 14,
    "28 days": 28,
}


class InvalidDateRangeError(ValueError):
    """Raised when a range starts after it ends."""


def _to_date(value: date | datetime | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.fromisoformat(value[:10]).date()


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar range between two dates."""

    start: date
    end: date

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", _to_date(self.start))
        object.__setattr__(self, "end", _to_date(self.end))
        if self.start > self.end:
            raise InvalidDateRangeError(
                f"Start date {self.start.isoformat()} cannot be after end date "
                f"{self.end.isoformat()}"
            )

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    @property
    def formatted_start(self) -> str:
        return self.start.isoformat()

    @property
    def formatted_end(self) -> str:
        return self.end.isoformat()

    def contains(self, value: date | datetime | str) -> bool:
        """Check whether a date falls inside the range, bounds included."""
        return self.start <= _to_date(value) <= self.end

    @classmethod
    def from_days_ago(cls, days: int, today: date | None = None) -> DateRange:
        """Range of ``days`` calendar days ending today."""
        end = today or date.today()
        return cls(end - timedelta(days=max(days, 1) - 1), end)

    @classmethod
    def from_range_identifier(cls, identifier: str, today: date | None = None) -> DateRange:
        """Build a range from a symbolic id like ``"7 days"``.

        Unknown identifiers fall back to the 28 day range.
        """
        days = RANGE_IDENTIFIERS.get(identifier, RANGE_IDENTIFIERS[DEFAULT_RANGE_IDENTIFIER])
        return cls.from_days_ago(days, today=today)
