"""Half-open time intervals within a calendar day.

Times are minutes since local midnight. An interval ``[start, end)`` owns its
start minute but not its end minute, so a reservation ending at 19:30 and one
starting at 19:30 do not overlap.
"""

import re
from dataclasses import dataclass
from datetime import date, time

from tableturn.booking.errors import ValidationError

MINUTES_PER_DAY = 24 * 60

_TIME_RE = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True, order=True)
class TimeInterval:
    start: int
    end: int

    def __post_init__(self):
        if self.start < 0 or self.end < self.start:
            raise ValidationError(
                "Invalid time interval",
                start=self.start,
                end=self.end,
            )

    @classmethod
    def from_start(cls, start: int, duration_minutes: int) -> "TimeInterval":
        if duration_minutes <= 0:
            raise ValidationError("Duration must be a positive number of minutes", duration=duration_minutes)
        return cls(start, start + duration_minutes)

    @property
    def duration(self) -> int:
        return self.end - self.start

    def overlaps(self, other: "TimeInterval") -> bool:
        return self.start < other.end and other.start < self.end

    def contains(self, other: "TimeInterval") -> bool:
        return self.start <= other.start and other.end <= self.end

    def __str__(self) -> str:
        return f"{format_minutes(self.start)}-{format_minutes(self.end)}"


def overlaps(a: TimeInterval, b: TimeInterval) -> bool:
    """Canonical overlap test used across the engine"""
    return a.overlaps(b)


def parse_time(value: str) -> int:
    """Parse a 24h ``HH:MM`` string into minutes since midnight"""
    match = _TIME_RE.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ValidationError("Time must be in HH:MM format", time=value)
    return int(match.group(1)) * 60 + int(match.group(2))


def parse_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` calendar date"""
    if not isinstance(value, str) or not _DATE_RE.match(value):
        raise ValidationError("Date must be in YYYY-MM-DD format", date=value)
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError("Date must be in YYYY-MM-DD format", date=value)


def format_minutes(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def minutes_of(value: time) -> int:
    return value.hour * 60 + value.minute


def to_time(minutes: int) -> time:
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValidationError("Time must fall within the calendar day", minutes=minutes)
    return time(minutes // 60, minutes % 60)
