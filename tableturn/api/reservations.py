"""Reservation API endpoints"""

import calendar
from datetime import date as date_type
from typing import Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tableturn.booking import Action, Actor, BookingEngine, CustomerInfo, PreOrderLine, TransitionPayload
from tableturn.booking.intervals import parse_date
from tableturn.booking.lifecycle import restaurant_zone
from tableturn.database import get_db
from tableturn.models.reservation import BLOCKING_STATUSES, PaymentStatus, Reservation, ReservationStatus
from tableturn.models.user import User
from tableturn.schemas.reservation import (
    ReservationCreate,
    TransitionRequest,
    ReservationResponse,
    ReservationListResponse,
    ReservationStats,
    CalendarDay,
    CalendarResponse,
)
from tableturn.api.auth import get_current_active_user, get_current_actor, verify_restaurant_access
from tableturn.api.deps import get_booking_engine
from tableturn.api.restaurants import get_restaurant_or_404

router = APIRouter()
restaurant_router = APIRouter()

BLOCKING_VALUES = [status.value for status in BLOCKING_STATUSES]


async def restaurant_today(db: AsyncSession, restaurant_id: UUID, engine: BookingEngine) -> date_type:
    restaurant = await get_restaurant_or_404(db, restaurant_id)
    return engine.clock().astimezone(restaurant_zone(restaurant)).date()


@router.post("", response_model=ReservationResponse, status_code=201)
async def create_reservation(
    reservation_data: ReservationCreate,
    current_user: User = Depends(get_current_active_user),
    engine: BookingEngine = Depends(get_booking_engine),
):
    """Book a table"""
    actor = Actor.from_user(current_user)

    if actor.is_staff:
        customer = CustomerInfo(
            name=reservation_data.customer_name,
            phone=reservation_data.customer_phone,
            email=reservation_data.customer_email,
        )
    else:
        # Customers default to their profile details
        customer = CustomerInfo(
            name=reservation_data.customer_name or current_user.full_name,
            phone=reservation_data.customer_phone or current_user.phone,
            email=reservation_data.customer_email or current_user.email,
        )

    return await engine.create_reservation(
        restaurant_id=reservation_data.restaurant_id,
        table_id=reservation_data.table_id,
        date=reservation_data.date,
        time=reservation_data.time,
        duration_minutes=reservation_data.duration_minutes,
        party_size=reservation_data.party_size,
        actor=actor,
        customer_id=reservation_data.customer_id,
        customer_info=customer,
        special_requests=reservation_data.special_requests,
        pre_order=[
            PreOrderLine(menu_item_id=line.menu_item_id, quantity=line.quantity)
            for line in reservation_data.pre_order
        ],
    )


@router.get("/mine", response_model=ReservationListResponse)
async def list_my_reservations(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    status: Optional[ReservationStatus] = None,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Reservations booked by or for the current user"""
    query = select(Reservation).where(Reservation.customer_id == current_user.id)
    count_query = select(func.count(Reservation.id)).where(Reservation.customer_id == current_user.id)

    if status:
        query = query.where(Reservation.status == status.value)
        count_query = count_query.where(Reservation.status == status.value)

    total_result = await db.execute(count_query)
    total = total_result.scalar()

    offset = (page - 1) * page_size
    query = query.order_by(
        Reservation.reservation_date.desc(),
        Reservation.start_time.desc(),
    ).offset(offset).limit(page_size)

    result = await db.execute(query)
    return ReservationListResponse(
        items=result.scalars().all(),
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{reservation_id}", response_model=ReservationResponse)
async def get_reservation(
    reservation_id: UUID,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    """Get reservation details"""
    result = await db.execute(select(Reservation).where(Reservation.id == reservation_id))
    reservation = result.scalar_one_or_none()

    if not reservation or not actor.can_see(reservation):
        raise HTTPException(status_code=404, detail="Reservation not found")

    return reservation


@router.post("/{reservation_id}/{action}", response_model=ReservationResponse)
async def apply_action(
    reservation_id: UUID,
    action: Action,
    body: Optional[TransitionRequest] = None,
    actor: Actor = Depends(get_current_actor),
    engine: BookingEngine = Depends(get_booking_engine),
):
    """Move a reservation through its lifecycle (confirm, reject, cancel, complete, no-show, reschedule)"""
    payload = TransitionPayload(**body.model_dump()) if body else None
    return await engine.transition(reservation_id, action, actor, payload)


@restaurant_router.get("", response_model=ReservationListResponse)
async def list_reservations(
    restaurant_id: UUID,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    status: Optional[ReservationStatus] = None,
    date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    upcoming: bool = False,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
    engine: BookingEngine = Depends(get_booking_engine),
):
    """List reservations of a restaurant with pagination"""
    await verify_restaurant_access(restaurant_id, current_user)

    filters = [Reservation.restaurant_id == restaurant_id]

    if status:
        filters.append(Reservation.status == status.value)

    if date:
        filters.append(Reservation.reservation_date == parse_date(date))

    if upcoming:
        today = await restaurant_today(db, restaurant_id, engine)
        filters.append(Reservation.reservation_date >= today)
        filters.append(Reservation.status.in_(BLOCKING_VALUES))

    total_result = await db.execute(select(func.count(Reservation.id)).where(*filters))
    total = total_result.scalar()

    # Upcoming lists read soonest first, history newest first
    if upcoming:
        ordering = (Reservation.reservation_date.asc(), Reservation.start_time.asc())
    else:
        ordering = (Reservation.reservation_date.desc(), Reservation.start_time.desc())

    offset = (page - 1) * page_size
    result = await db.execute(
        select(Reservation).where(*filters).order_by(*ordering).offset(offset).limit(page_size)
    )

    return ReservationListResponse(
        items=result.scalars().all(),
        total=total,
        page=page,
        page_size=page_size,
    )


@restaurant_router.get("/stats", response_model=ReservationStats)
async def reservation_stats(
    restaurant_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
    engine: BookingEngine = Depends(get_booking_engine),
):
    """Reservation counters for the restaurant dashboard"""
    await verify_restaurant_access(restaurant_id, current_user)
    today = await restaurant_today(db, restaurant_id, engine)

    result = await db.execute(
        select(Reservation.status, func.count(Reservation.id))
        .where(Reservation.restaurant_id == restaurant_id)
        .group_by(Reservation.status)
    )
    by_status: Dict[str, int] = {status.value: 0 for status in ReservationStatus}
    for status, count in result.all():
        by_status[status] = count

    today_result = await db.execute(
        select(func.count(Reservation.id)).where(
            Reservation.restaurant_id == restaurant_id,
            Reservation.reservation_date == today,
            Reservation.status.in_(BLOCKING_VALUES),
        )
    )
    upcoming_result = await db.execute(
        select(func.count(Reservation.id)).where(
            Reservation.restaurant_id == restaurant_id,
            Reservation.reservation_date >= today,
            Reservation.status.in_(BLOCKING_VALUES),
        )
    )
    revenue_result = await db.execute(
        select(func.coalesce(func.sum(Reservation.total_cents), 0)).where(
            Reservation.restaurant_id == restaurant_id,
            Reservation.payment_status == PaymentStatus.PAID.value,
        )
    )

    return ReservationStats(
        total=sum(by_status.values()),
        by_status=by_status,
        today=today_result.scalar(),
        upcoming=upcoming_result.scalar(),
        revenue_cents=revenue_result.scalar(),
    )


@restaurant_router.get("/calendar", response_model=CalendarResponse)
async def reservation_calendar(
    restaurant_id: UUID,
    month: str = Query(..., pattern=r"^\d{4}-(0[1-9]|1[0-2])$", description="YYYY-MM"),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Per-day reservation counts for one month"""
    await verify_restaurant_access(restaurant_id, current_user)

    year, month_number = (int(part) for part in month.split("-"))
    first = date_type(year, month_number, 1)
    last = date_type(year, month_number, calendar.monthrange(year, month_number)[1])

    result = await db.execute(
        select(Reservation.reservation_date, Reservation.status, func.count(Reservation.id))
        .where(
            Reservation.restaurant_id == restaurant_id,
            Reservation.reservation_date >= first,
            Reservation.reservation_date <= last,
        )
        .group_by(Reservation.reservation_date, Reservation.status)
        .order_by(Reservation.reservation_date)
    )

    days: Dict[date_type, CalendarDay] = {}
    for day, status, count in result.all():
        entry = days.setdefault(day, CalendarDay(date=day, total=0, by_status={}))
        entry.by_status[status] = count
        entry.total += count

    return CalendarResponse(month=month, days=list(days.values()))
