"""Booking grid generation"""

from dataclasses import dataclass, field
from datetime import date
from typing import List

import structlog

from tableturn.booking.availability import AvailabilityChecker, find_conflicts, validate_duration
from tableturn.booking.hours import DayHours
from tableturn.booking.intervals import TimeInterval, format_minutes
from tableturn.models.table import DiningTable

logger = structlog.get_logger()

REASON_SUCCESS = "success"
REASON_CLOSED = "closed"
REASON_NO_SLOTS = "no_slots"


@dataclass
class SlotListing:
    """Free grid-aligned start times for one table and date"""
    day: DayHours
    slot_increment: int
    requested_duration: int
    slots: List[int] = field(default_factory=list)
    existing_count: int = 0

    @property
    def reason(self) -> str:
        if not self.day.is_open:
            return REASON_CLOSED
        return REASON_SUCCESS if self.slots else REASON_NO_SLOTS

    @property
    def message(self) -> str:
        if self.reason == REASON_CLOSED:
            return f"Restaurant is closed on {self.day.day_name.capitalize()}"
        if self.reason == REASON_NO_SLOTS:
            return "No available time slots for the requested duration"
        return f"Found {len(self.slots)} available time slot(s)"

    @property
    def times(self) -> List[str]:
        return [format_minutes(minute) for minute in self.slots]


class SlotGenerator:
    """Walks the table's grid from opening time and keeps the free candidates.

    The grid advances by the table's slot increment, not by the requested
    duration, and always starts at the opening time.
    """

    def __init__(self, checker: AvailabilityChecker):
        self.checker = checker

    async def list_slots(self, table: DiningTable, day: date, requested_duration: int) -> SlotListing:
        validate_duration(table, requested_duration)

        resolver = await self.checker.hours_for(table.restaurant_id)
        hours = resolver.resolve(day)
        listing = SlotListing(
            day=hours,
            slot_increment=table.slot_increment,
            requested_duration=requested_duration,
        )
        if not hours.is_open:
            return listing

        blocking = await self.checker.reservations.list_blocking(table.id, day)
        listing.existing_count = len(blocking)

        candidate = hours.open
        while candidate + requested_duration <= hours.close:
            interval = TimeInterval.from_start(candidate, requested_duration)
            if not find_conflicts(interval, blocking):
                listing.slots.append(candidate)
            candidate += table.slot_increment

        logger.debug(
            "Generated slots",
            table_id=str(table.id),
            date=day.isoformat(),
            duration=requested_duration,
            increment=table.slot_increment,
            slots=listing.times,
        )
        return listing
