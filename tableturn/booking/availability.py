"""Availability checks for a single candidate interval on a table"""

from datetime import date
from typing import Iterable, List, Optional
from uuid import UUID

from tableturn.booking.errors import CapacityExceeded, NotFound, SlotUnavailable, ValidationError
from tableturn.booking.hours import BusinessHoursResolver, DayHours
from tableturn.booking.intervals import TimeInterval, format_minutes, minutes_of
from tableturn.booking.repository import ReservationRepository, RestaurantReader
from tableturn.models.reservation import Reservation
from tableturn.models.table import DiningTable


def reservation_interval(reservation: Reservation) -> TimeInterval:
    return TimeInterval.from_start(minutes_of(reservation.start_time), reservation.duration_minutes)


def find_conflicts(candidate: TimeInterval, reservations: Iterable[Reservation]) -> List[Reservation]:
    """Blocking reservations whose interval overlaps ``candidate``"""
    return [r for r in reservations if reservation_interval(r).overlaps(candidate)]


def validate_duration(table: DiningTable, duration_minutes: int) -> None:
    if duration_minutes < table.min_booking_duration or duration_minutes > table.max_booking_duration:
        raise ValidationError(
            f"Duration must be between {table.min_booking_duration} and "
            f"{table.max_booking_duration} minutes for this table",
            duration=duration_minutes,
            min_duration=table.min_booking_duration,
            max_duration=table.max_booking_duration,
        )


def validate_capacity(table: DiningTable, party_size: int) -> None:
    if party_size > table.capacity:
        raise CapacityExceeded(
            f"Table capacity is {table.capacity}, but party size is {party_size}",
            capacity=table.capacity,
            party_size=party_size,
        )


class AvailabilityChecker:
    """Decides whether one interval is free on a table.

    Closed days, out-of-hours intervals, capacity and duration problems are
    raised as errors; a plain overlap with another blocking reservation is
    reported as ``False`` by :meth:`is_available` and as ``SlotUnavailable``
    by :meth:`ensure_available`.
    """

    def __init__(self, reservations: ReservationRepository, restaurants: RestaurantReader):
        self.reservations = reservations
        self.restaurants = restaurants

    async def get_table(self, table_id: UUID) -> DiningTable:
        table = await self.restaurants.get_table(table_id)
        if table is None or not table.is_active:
            raise NotFound("Table not found", table_id=str(table_id))
        return table

    async def hours_for(self, restaurant_id: UUID) -> BusinessHoursResolver:
        return BusinessHoursResolver(await self.restaurants.get_business_hours(restaurant_id))

    async def _validate(
        self,
        table: DiningTable,
        day: date,
        candidate: TimeInterval,
        party_size: Optional[int],
    ) -> DayHours:
        validate_duration(table, candidate.duration)
        if party_size is not None:
            validate_capacity(table, party_size)
        resolver = await self.hours_for(table.restaurant_id)
        return resolver.require_window(day, candidate)

    async def conflicts(
        self,
        table: DiningTable,
        day: date,
        start: int,
        duration_minutes: int,
        exclude_reservation_id: Optional[UUID] = None,
        party_size: Optional[int] = None,
    ) -> List[Reservation]:
        candidate = TimeInterval.from_start(start, duration_minutes)
        await self._validate(table, day, candidate, party_size)
        blocking = await self.reservations.list_blocking(table.id, day, exclude_id=exclude_reservation_id)
        return find_conflicts(candidate, blocking)

    async def is_available(
        self,
        table: DiningTable,
        day: date,
        start: int,
        duration_minutes: int,
        exclude_reservation_id: Optional[UUID] = None,
        party_size: Optional[int] = None,
    ) -> bool:
        found = await self.conflicts(
            table, day, start, duration_minutes,
            exclude_reservation_id=exclude_reservation_id,
            party_size=party_size,
        )
        return not found

    async def ensure_available(
        self,
        table: DiningTable,
        day: date,
        start: int,
        duration_minutes: int,
        exclude_reservation_id: Optional[UUID] = None,
        party_size: Optional[int] = None,
    ) -> None:
        found = await self.conflicts(
            table, day, start, duration_minutes,
            exclude_reservation_id=exclude_reservation_id,
            party_size=party_size,
        )
        if found:
            raise SlotUnavailable(
                "Selected time slot is not available",
                table_id=str(table.id),
                date=day.isoformat(),
                time=format_minutes(start),
                conflicts=[str(reservation_interval(r)) for r in found],
            )

    async def available_tables(
        self,
        restaurant_id: UUID,
        day: date,
        start: int,
        duration_minutes: int,
        party_size: int,
    ) -> List[DiningTable]:
        """Active tables that seat ``party_size`` and are free for the interval.

        Tables whose duration bounds exclude the request are skipped; a closed
        day or an interval outside the opening window is raised once for the
        whole restaurant.
        """
        candidate = TimeInterval.from_start(start, duration_minutes)
        resolver = await self.hours_for(restaurant_id)
        resolver.require_window(day, candidate)

        free = []
        for table in await self.restaurants.list_tables(restaurant_id):
            if table.capacity < party_size:
                continue
            if not table.min_booking_duration <= duration_minutes <= table.max_booking_duration:
                continue
            blocking = await self.reservations.list_blocking(table.id, day)
            if not find_conflicts(candidate, blocking):
                free.append(table)
        return free
