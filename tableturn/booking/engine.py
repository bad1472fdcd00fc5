"""Entry point of the booking engine"""

import asyncio
from datetime import datetime, timezone
from typing import Awaitable, Callable, List, Optional, Union
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tableturn.booking.availability import AvailabilityChecker
from tableturn.booking.errors import NotFound, ValidationError
from tableturn.booking.guard import ConflictGuard, GuardScope
from tableturn.booking.intervals import parse_date, parse_time
from tableturn.booking.lifecycle import (
    Action,
    Actor,
    Clock,
    CustomerInfo,
    PreOrderLine,
    ReservationLifecycle,
    ReservationRequest,
    TransitionPayload,
)
from tableturn.booking.repository import SqlReservationRepository, SqlRestaurantReader
from tableturn.booking.slots import SlotGenerator, SlotListing
from tableturn.config import Settings, get_settings
from tableturn.models.reservation import Reservation
from tableturn.models.table import DiningTable


def system_clock() -> datetime:
    return datetime.now(timezone.utc)


class BookingEngine:
    """Availability queries and reservation writes for every restaurant.

    The engine keeps no per-request state; it only holds the session factory,
    the clock and the retry policy, so one instance can serve the whole app.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Optional[Clock] = None,
        settings: Optional[Settings] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.settings = settings or get_settings()
        self.session_factory = session_factory
        self.clock = clock or system_clock
        self.guard = ConflictGuard(
            session_factory,
            max_attempts=self.settings.booking_max_attempts,
            base_delay_ms=self.settings.booking_retry_base_delay_ms,
            max_delay_ms=self.settings.booking_retry_max_delay_ms,
            sleep=sleep,
        )

    def _lifecycle(self, session: AsyncSession, guard: GuardScope) -> ReservationLifecycle:
        return ReservationLifecycle(
            SqlReservationRepository(session),
            SqlRestaurantReader(session),
            guard=guard,
            clock=self.clock,
            default_duration=self.settings.default_duration_minutes,
            min_party_size=self.settings.min_party_size,
        )

    @staticmethod
    def _checker(session: AsyncSession) -> AvailabilityChecker:
        return AvailabilityChecker(SqlReservationRepository(session), SqlRestaurantReader(session))

    def _duration(self, duration_minutes: Optional[int]) -> int:
        if duration_minutes is None:
            return self.settings.default_duration_minutes
        return duration_minutes

    async def check_availability(
        self,
        table_id: UUID,
        date: str,
        time: str,
        duration_minutes: Optional[int] = None,
        party_size: Optional[int] = None,
    ) -> bool:
        day = parse_date(date)
        start = parse_time(time)
        duration = self._duration(duration_minutes)

        async with self.session_factory() as session:
            checker = self._checker(session)
            table = await checker.get_table(table_id)
            return await checker.is_available(table, day, start, duration, party_size=party_size)

    async def list_slots(
        self,
        table_id: UUID,
        date: str,
        duration_minutes: Optional[int] = None,
    ) -> SlotListing:
        day = parse_date(date)
        duration = self._duration(duration_minutes)

        async with self.session_factory() as session:
            checker = self._checker(session)
            table = await checker.get_table(table_id)
            return await SlotGenerator(checker).list_slots(table, day, duration)

    async def find_available_tables(
        self,
        restaurant_id: UUID,
        date: str,
        time: str,
        party_size: int,
        duration_minutes: Optional[int] = None,
    ) -> List[DiningTable]:
        day = parse_date(date)
        start = parse_time(time)
        duration = self._duration(duration_minutes)
        if party_size < self.settings.min_party_size:
            raise ValidationError(
                f"Party size must be at least {self.settings.min_party_size}",
                party_size=party_size,
            )

        async with self.session_factory() as session:
            checker = self._checker(session)
            restaurant = await checker.restaurants.get_restaurant(restaurant_id)
            if restaurant is None or not restaurant.is_active:
                raise NotFound("Restaurant not found", restaurant_id=str(restaurant_id))
            return await checker.available_tables(restaurant.id, day, start, duration, party_size)

    async def create_reservation(
        self,
        restaurant_id: UUID,
        table_id: UUID,
        date: str,
        time: str,
        duration_minutes: Optional[int],
        party_size: int,
        actor: Actor,
        customer_id: Optional[UUID] = None,
        customer_info: Optional[CustomerInfo] = None,
        special_requests: Optional[str] = None,
        pre_order: Optional[List[PreOrderLine]] = None,
    ) -> Reservation:
        request = ReservationRequest(
            restaurant_id=restaurant_id,
            table_id=table_id,
            date=date,
            time=time,
            party_size=party_size,
            duration_minutes=duration_minutes,
            customer_id=customer_id,
            customer=customer_info or CustomerInfo(),
            special_requests=special_requests,
            pre_order=list(pre_order or []),
        )

        async def work(session: AsyncSession, guard: GuardScope) -> Reservation:
            return await self._lifecycle(session, guard).create(request, actor)

        return await self.guard.run(
            "create_reservation",
            work,
            table_id=str(table_id),
            date=date,
            time=time,
        )

    async def transition(
        self,
        reservation_id: UUID,
        action: Union[Action, str],
        actor: Actor,
        payload: Optional[TransitionPayload] = None,
    ) -> Reservation:
        try:
            action = Action(action)
        except ValueError:
            raise ValidationError(f"Unknown action: {action}", action=str(action)) from None

        async def work(session: AsyncSession, guard: GuardScope) -> Reservation:
            return await self._lifecycle(session, guard).apply(reservation_id, action, actor, payload)

        return await self.guard.run(
            action.value,
            work,
            reservation_id=str(reservation_id),
        )
