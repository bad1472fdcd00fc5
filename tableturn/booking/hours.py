"""Business hours resolution"""

from dataclasses import dataclass
from datetime import date, time
from typing import Dict, Iterable, Optional

import structlog

from tableturn.booking.errors import ClosedDay, OutsideBusinessHours
from tableturn.booking.intervals import TimeInterval, format_minutes, minutes_of
from tableturn.models.restaurant import BusinessHours

logger = structlog.get_logger()

DAY_NAMES = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

# Applied to new restaurants; keyed by date.weekday()
DEFAULT_BUSINESS_HOURS = {
    0: (time(9, 0), time(22, 0)),
    1: (time(9, 0), time(22, 0)),
    2: (time(9, 0), time(22, 0)),
    3: (time(9, 0), time(22, 0)),
    4: (time(9, 0), time(23, 0)),
    5: (time(9, 0), time(23, 0)),
    6: (time(10, 0), time(21, 0)),
}


@dataclass(frozen=True)
class DayHours:
    """Resolved opening window for one calendar date"""
    weekday: int
    open: Optional[int] = None
    close: Optional[int] = None
    is_open: bool = False

    @property
    def day_name(self) -> str:
        return DAY_NAMES[self.weekday]

    @property
    def window(self) -> Optional[TimeInterval]:
        if not self.is_open:
            return None
        return TimeInterval(self.open, self.close)

    def as_dict(self) -> dict:
        if not self.is_open:
            return {"is_open": False}
        return {
            "open": format_minutes(self.open),
            "close": format_minutes(self.close),
            "is_open": True,
        }


class BusinessHoursResolver:
    """Maps a calendar date to the restaurant's window for that weekday"""

    def __init__(self, rows: Iterable[BusinessHours]):
        self._by_weekday: Dict[int, BusinessHours] = {row.weekday: row for row in rows}

    def resolve(self, day: date) -> DayHours:
        weekday = day.weekday()
        row = self._by_weekday.get(weekday)
        if row is None or not row.is_open:
            return DayHours(weekday=weekday)

        open_minute = minutes_of(row.open_time)
        close_minute = minutes_of(row.close_time)
        if close_minute <= open_minute:
            logger.warning(
                "Ignoring business hours that close before they open",
                weekday=DAY_NAMES[weekday],
                open=format_minutes(open_minute),
                close=format_minutes(close_minute),
            )
            return DayHours(weekday=weekday)

        return DayHours(weekday=weekday, open=open_minute, close=close_minute, is_open=True)

    def require_window(self, day: date, interval: TimeInterval) -> DayHours:
        """Raise unless ``interval`` lies entirely inside the day's window"""
        hours = self.resolve(day)
        if not hours.is_open:
            raise ClosedDay(
                f"Restaurant is closed on {hours.day_name.capitalize()}",
                date=day.isoformat(),
                day_name=hours.day_name,
            )
        if not hours.window.contains(interval):
            raise OutsideBusinessHours(
                "Requested time is outside business hours",
                date=day.isoformat(),
                requested=str(interval),
                business_hours=hours.as_dict(),
            )
        return hours
