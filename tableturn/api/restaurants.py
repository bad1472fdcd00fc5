"""Restaurant management API endpoints"""

from typing import List, Optional
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from tableturn.booking.hours import DEFAULT_BUSINESS_HOURS
from tableturn.database import get_db
from tableturn.models.restaurant import BusinessHours, Restaurant, RestaurantSettings
from tableturn.models.user import User, UserRole
from tableturn.schemas.restaurant import (
    RestaurantCreate,
    RestaurantUpdate,
    RestaurantResponse,
    BusinessHoursUpdate,
    BusinessHoursResponse,
    PoliciesUpdate,
    PoliciesResponse,
)
from tableturn.api.auth import get_current_active_user, require_role, verify_restaurant_access

router = APIRouter()


def check_timezone(name: Optional[str]) -> None:
    if name is None:
        return
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise HTTPException(status_code=422, detail=f"Unknown timezone: {name}")


async def get_restaurant_or_404(db: AsyncSession, restaurant_id: UUID) -> Restaurant:
    result = await db.execute(select(Restaurant).where(Restaurant.id == restaurant_id))
    restaurant = result.scalar_one_or_none()

    if not restaurant:
        raise HTTPException(status_code=404, detail="Restaurant not found")

    return restaurant


async def get_settings_or_404(db: AsyncSession, restaurant_id: UUID) -> RestaurantSettings:
    result = await db.execute(
        select(RestaurantSettings).where(RestaurantSettings.restaurant_id == restaurant_id)
    )
    settings = result.scalar_one_or_none()

    if not settings:
        raise HTTPException(status_code=404, detail="Settings not found")

    return settings


@router.get("", response_model=List[RestaurantResponse])
async def list_restaurants(
    skip: int = 0,
    limit: int = 100,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """List active restaurants"""
    result = await db.execute(
        select(Restaurant)
        .where(Restaurant.is_active == True)
        .order_by(Restaurant.name)
        .offset(skip)
        .limit(limit)
    )
    return result.scalars().all()


@router.post("", response_model=RestaurantResponse, status_code=status.HTTP_201_CREATED)
async def create_restaurant(
    restaurant_data: RestaurantCreate,
    current_user: User = Depends(require_role(UserRole.SUPER_ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Create a new restaurant with default policies and hours (SuperAdmin only)"""
    check_timezone(restaurant_data.timezone)

    restaurant = Restaurant(**restaurant_data.model_dump())
    db.add(restaurant)
    await db.flush()

    db.add(RestaurantSettings(restaurant_id=restaurant.id))
    for weekday, (open_time, close_time) in DEFAULT_BUSINESS_HOURS.items():
        db.add(BusinessHours(
            restaurant_id=restaurant.id,
            weekday=weekday,
            open_time=open_time,
            close_time=close_time,
            is_open=True,
        ))
    await db.commit()
    await db.refresh(restaurant)

    return restaurant


@router.get("/{restaurant_id}", response_model=RestaurantResponse)
async def get_restaurant(
    restaurant_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Get restaurant details"""
    restaurant = await get_restaurant_or_404(db, restaurant_id)

    # Customers only see restaurants that take bookings
    if not restaurant.is_active and not current_user.is_staff:
        raise HTTPException(status_code=404, detail="Restaurant not found")

    return restaurant


@router.put("/{restaurant_id}", response_model=RestaurantResponse)
async def update_restaurant(
    restaurant_id: UUID,
    restaurant_data: RestaurantUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Update restaurant"""
    await verify_restaurant_access(restaurant_id, current_user)

    if not current_user.has_permission(UserRole.RESTAURANT_ADMIN):
        raise HTTPException(status_code=403, detail="Insufficient permissions")

    check_timezone(restaurant_data.timezone)
    restaurant = await get_restaurant_or_404(db, restaurant_id)

    for field, value in restaurant_data.model_dump(exclude_unset=True).items():
        setattr(restaurant, field, value)

    await db.commit()
    await db.refresh(restaurant)

    return restaurant


@router.delete("/{restaurant_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_restaurant(
    restaurant_id: UUID,
    current_user: User = Depends(require_role(UserRole.SUPER_ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Delete restaurant (soft delete - SuperAdmin only)"""
    restaurant = await get_restaurant_or_404(db, restaurant_id)
    restaurant.is_active = False
    await db.commit()


@router.get("/{restaurant_id}/business-hours", response_model=List[BusinessHoursResponse])
async def get_business_hours(
    restaurant_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Weekly opening hours"""
    await get_restaurant_or_404(db, restaurant_id)

    result = await db.execute(
        select(BusinessHours)
        .where(BusinessHours.restaurant_id == restaurant_id)
        .order_by(BusinessHours.weekday)
    )
    return result.scalars().all()


@router.put("/{restaurant_id}/business-hours", response_model=List[BusinessHoursResponse])
async def update_business_hours(
    restaurant_id: UUID,
    hours_data: BusinessHoursUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Replace the weekly opening hours; weekdays left out are closed"""
    await verify_restaurant_access(restaurant_id, current_user)

    if not current_user.has_permission(UserRole.RESTAURANT_ADMIN):
        raise HTTPException(status_code=403, detail="Insufficient permissions")

    await get_restaurant_or_404(db, restaurant_id)

    await db.execute(delete(BusinessHours).where(BusinessHours.restaurant_id == restaurant_id))
    rows = [
        BusinessHours(restaurant_id=restaurant_id, **day.model_dump())
        for day in sorted(hours_data.days, key=lambda day: day.weekday)
    ]
    db.add_all(rows)
    await db.commit()

    return rows


@router.get("/{restaurant_id}/policies", response_model=PoliciesResponse)
async def get_policies(
    restaurant_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Booking and cancellation policies"""
    return await get_settings_or_404(db, restaurant_id)


@router.put("/{restaurant_id}/policies", response_model=PoliciesResponse)
async def update_policies(
    restaurant_id: UUID,
    policies_data: PoliciesUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Update booking and cancellation policies"""
    await verify_restaurant_access(restaurant_id, current_user)

    if not current_user.has_permission(UserRole.RESTAURANT_ADMIN):
        raise HTTPException(status_code=403, detail="Insufficient permissions")

    settings = await get_settings_or_404(db, restaurant_id)

    # null clears the nullable policy fields; the limits always keep a value
    for field, value in policies_data.model_dump(exclude_unset=True).items():
        if value is None and field in ("advance_booking_days", "max_party_size"):
            continue
        setattr(settings, field, value)

    await db.commit()
    await db.refresh(settings)

    return settings
