"""Collaborators consumed by the booking engine.

The engine only talks to the two protocols below. ``SqlReservationRepository``
and ``SqlRestaurantReader`` implement them on top of one ``AsyncSession``; the
session (and therefore the transaction) is owned by the caller.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional, Protocol, Sequence
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tableturn.models.audit import AuditLog
from tableturn.models.menu import MenuItem
from tableturn.models.reservation import BLOCKING_STATUSES, Reservation
from tableturn.models.restaurant import BusinessHours, Restaurant, RestaurantSettings
from tableturn.models.table import DiningTable
from tableturn.models.user import User


class ReservationRepository(Protocol):
    async def get(self, reservation_id: UUID) -> Optional[Reservation]: ...

    async def add(self, reservation: Reservation) -> Reservation: ...

    async def update_if_version(
        self,
        reservation_id: UUID,
        expected_version: int,
        values: Dict[str, Any],
    ) -> bool: ...

    async def list_blocking(
        self,
        table_id: UUID,
        day: date,
        exclude_id: Optional[UUID] = None,
    ) -> Sequence[Reservation]: ...

    async def record_event(self, entry: AuditLog) -> None: ...


class RestaurantReader(Protocol):
    async def get_restaurant(self, restaurant_id: UUID) -> Optional[Restaurant]: ...

    async def get_settings(self, restaurant_id: UUID) -> Optional[RestaurantSettings]: ...

    async def get_table(self, table_id: UUID) -> Optional[DiningTable]: ...

    async def list_tables(self, restaurant_id: UUID) -> Sequence[DiningTable]: ...

    async def get_business_hours(self, restaurant_id: UUID) -> Sequence[BusinessHours]: ...

    async def get_menu_items(self, restaurant_id: UUID, item_ids: Sequence[UUID]) -> Sequence[MenuItem]: ...

    async def get_user(self, user_id: UUID) -> Optional[User]: ...


class SqlReservationRepository:
    """ReservationRepository backed by SQLAlchemy"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, reservation_id: UUID) -> Optional[Reservation]:
        result = await self.session.execute(
            select(Reservation)
            .where(Reservation.id == reservation_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def add(self, reservation: Reservation) -> Reservation:
        self.session.add(reservation)
        await self.session.flush()
        return reservation

    async def update_if_version(
        self,
        reservation_id: UUID,
        expected_version: int,
        values: Dict[str, Any],
    ) -> bool:
        """Compare-and-set write; False means someone else wrote first"""
        result = await self.session.execute(
            update(Reservation)
            .where(
                Reservation.id == reservation_id,
                Reservation.version == expected_version,
            )
            .values(version=expected_version + 1, **values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def list_blocking(
        self,
        table_id: UUID,
        day: date,
        exclude_id: Optional[UUID] = None,
    ) -> List[Reservation]:
        query = select(Reservation).where(
            Reservation.table_id == table_id,
            Reservation.reservation_date == day,
            Reservation.status.in_([status.value for status in BLOCKING_STATUSES]),
        )
        if exclude_id is not None:
            query = query.where(Reservation.id != exclude_id)

        result = await self.session.execute(query.order_by(Reservation.start_time))
        return list(result.scalars().all())

    async def record_event(self, entry: AuditLog) -> None:
        self.session.add(entry)
        await self.session.flush()


class SqlRestaurantReader:
    """Read-only access to restaurant, table, hours, menu and customer data"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_restaurant(self, restaurant_id: UUID) -> Optional[Restaurant]:
        result = await self.session.execute(select(Restaurant).where(Restaurant.id == restaurant_id))
        return result.scalar_one_or_none()

    async def get_settings(self, restaurant_id: UUID) -> Optional[RestaurantSettings]:
        result = await self.session.execute(
            select(RestaurantSettings).where(RestaurantSettings.restaurant_id == restaurant_id)
        )
        return result.scalar_one_or_none()

    async def get_table(self, table_id: UUID) -> Optional[DiningTable]:
        result = await self.session.execute(select(DiningTable).where(DiningTable.id == table_id))
        return result.scalar_one_or_none()

    async def list_tables(self, restaurant_id: UUID) -> List[DiningTable]:
        """Active tables of a restaurant, by table number"""
        result = await self.session.execute(
            select(DiningTable)
            .where(DiningTable.restaurant_id == restaurant_id, DiningTable.is_active == True)
            .order_by(DiningTable.table_number)
        )
        return list(result.scalars().all())

    async def get_business_hours(self, restaurant_id: UUID) -> List[BusinessHours]:
        result = await self.session.execute(
            select(BusinessHours)
            .where(BusinessHours.restaurant_id == restaurant_id)
            .order_by(BusinessHours.weekday)
        )
        return list(result.scalars().all())

    async def get_menu_items(self, restaurant_id: UUID, item_ids: Sequence[UUID]) -> List[MenuItem]:
        if not item_ids:
            return []
        result = await self.session.execute(
            select(MenuItem).where(
                MenuItem.restaurant_id == restaurant_id,
                MenuItem.id.in_(list(item_ids)),
                MenuItem.is_active == True,
            )
        )
        return list(result.scalars().all())

    async def get_user(self, user_id: UUID) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()
