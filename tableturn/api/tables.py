"""Dining table management API endpoints"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tableturn.database import get_db
from tableturn.models.table import DiningTable
from tableturn.models.user import User, UserRole
from tableturn.schemas.table import TableCreate, TableUpdate, TableResponse
from tableturn.api.auth import get_current_active_user, verify_restaurant_access

router = APIRouter()


async def ensure_number_free(
    db: AsyncSession,
    restaurant_id: UUID,
    table_number: int,
    exclude_id: Optional[UUID] = None,
) -> None:
    query = select(DiningTable.id).where(
        DiningTable.restaurant_id == restaurant_id,
        DiningTable.table_number == table_number,
    )
    if exclude_id is not None:
        query = query.where(DiningTable.id != exclude_id)

    result = await db.execute(query)
    if result.first() is not None:
        raise HTTPException(status_code=409, detail=f"Table number {table_number} already exists")


async def get_table_or_404(db: AsyncSession, restaurant_id: UUID, table_id: UUID) -> DiningTable:
    result = await db.execute(
        select(DiningTable).where(
            DiningTable.id == table_id,
            DiningTable.restaurant_id == restaurant_id,
        )
    )
    table = result.scalar_one_or_none()

    if not table:
        raise HTTPException(status_code=404, detail="Table not found")

    return table


@router.get("", response_model=List[TableResponse])
async def list_tables(
    restaurant_id: UUID,
    is_active: Optional[bool] = True,
    min_capacity: Optional[int] = None,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """List tables of a restaurant"""
    query = select(DiningTable).where(DiningTable.restaurant_id == restaurant_id)

    # Inactive tables are a staff concern
    if not current_user.is_staff:
        is_active = True

    if is_active is not None:
        query = query.where(DiningTable.is_active == is_active)

    if min_capacity:
        query = query.where(DiningTable.capacity >= min_capacity)

    result = await db.execute(query.order_by(DiningTable.table_number))
    return result.scalars().all()


@router.post("", response_model=TableResponse, status_code=201)
async def create_table(
    restaurant_id: UUID,
    table_data: TableCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a new table"""
    await verify_restaurant_access(restaurant_id, current_user)

    if not current_user.has_permission(UserRole.RESTAURANT_ADMIN):
        raise HTTPException(status_code=403, detail="Insufficient permissions")

    await ensure_number_free(db, restaurant_id, table_data.table_number)

    table = DiningTable(restaurant_id=restaurant_id, **table_data.model_dump())
    db.add(table)
    await db.commit()
    await db.refresh(table)

    return table


@router.put("/{table_id}", response_model=TableResponse)
async def update_table(
    restaurant_id: UUID,
    table_id: UUID,
    table_data: TableUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Update a table"""
    await verify_restaurant_access(restaurant_id, current_user)

    if not current_user.has_permission(UserRole.RESTAURANT_ADMIN):
        raise HTTPException(status_code=403, detail="Insufficient permissions")

    table = await get_table_or_404(db, restaurant_id, table_id)
    changes = table_data.model_dump(exclude_unset=True)

    if changes.get("table_number") is not None:
        await ensure_number_free(db, restaurant_id, changes["table_number"], exclude_id=table.id)

    min_duration = changes.get("min_booking_duration") or table.min_booking_duration
    max_duration = changes.get("max_booking_duration") or table.max_booking_duration
    if min_duration > max_duration:
        raise HTTPException(
            status_code=422,
            detail="min_booking_duration cannot exceed max_booking_duration",
        )

    for field, value in changes.items():
        if value is None and field not in ("slot_increment_minutes", "location"):
            continue
        setattr(table, field, value)

    await db.commit()
    await db.refresh(table)

    return table


@router.delete("/{table_id}", status_code=204)
async def delete_table(
    restaurant_id: UUID,
    table_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete a table (soft delete)"""
    await verify_restaurant_access(restaurant_id, current_user)

    if not current_user.has_permission(UserRole.RESTAURANT_ADMIN):
        raise HTTPException(status_code=403, detail="Insufficient permissions")

    table = await get_table_or_404(db, restaurant_id, table_id)
    table.is_active = False
    await db.commit()
