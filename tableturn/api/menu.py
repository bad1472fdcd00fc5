"""Menu management API endpoints"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tableturn.database import get_db
from tableturn.models.menu import MenuItem
from tableturn.models.user import User, UserRole
from tableturn.schemas.menu import MenuItemCreate, MenuItemUpdate, MenuItemResponse
from tableturn.api.auth import get_current_active_user, verify_restaurant_access

router = APIRouter()


async def get_item_or_404(db: AsyncSession, restaurant_id: UUID, item_id: UUID) -> MenuItem:
    result = await db.execute(
        select(MenuItem).where(MenuItem.id == item_id, MenuItem.restaurant_id == restaurant_id)
    )
    item = result.scalar_one_or_none()

    if not item:
        raise HTTPException(status_code=404, detail="Menu item not found")

    return item


@router.get("", response_model=List[MenuItemResponse])
async def list_menu_items(
    restaurant_id: UUID,
    category: Optional[str] = None,
    is_active: Optional[bool] = True,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """List menu items of a restaurant"""
    query = select(MenuItem).where(MenuItem.restaurant_id == restaurant_id)

    if category:
        query = query.where(MenuItem.category == category)

    if is_active is not None:
        query = query.where(MenuItem.is_active == is_active)

    query = query.order_by(MenuItem.category, MenuItem.name)

    result = await db.execute(query)
    return result.scalars().all()


@router.post("", response_model=MenuItemResponse, status_code=201)
async def create_menu_item(
    restaurant_id: UUID,
    item_data: MenuItemCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a new menu item"""
    await verify_restaurant_access(restaurant_id, current_user)

    if not current_user.has_permission(UserRole.RESTAURANT_ADMIN):
        raise HTTPException(status_code=403, detail="Insufficient permissions")

    item = MenuItem(restaurant_id=restaurant_id, **item_data.model_dump())
    db.add(item)
    await db.commit()
    await db.refresh(item)

    return item


@router.put("/{item_id}", response_model=MenuItemResponse)
async def update_menu_item(
    restaurant_id: UUID,
    item_id: UUID,
    item_data: MenuItemUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Update a menu item"""
    await verify_restaurant_access(restaurant_id, current_user)

    # Staff may toggle availability during service; everything else is admin only
    changes = item_data.model_dump(exclude_unset=True)
    if set(changes) - {"is_available"} and not current_user.has_permission(UserRole.RESTAURANT_ADMIN):
        raise HTTPException(status_code=403, detail="Insufficient permissions")

    item = await get_item_or_404(db, restaurant_id, item_id)

    for field, value in changes.items():
        setattr(item, field, value)

    await db.commit()
    await db.refresh(item)

    return item


@router.delete("/{item_id}", status_code=204)
async def delete_menu_item(
    restaurant_id: UUID,
    item_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete a menu item (soft delete)"""
    await verify_restaurant_access(restaurant_id, current_user)

    if not current_user.has_permission(UserRole.RESTAURANT_ADMIN):
        raise HTTPException(status_code=403, detail="Insufficient permissions")

    item = await get_item_or_404(db, restaurant_id, item_id)
    item.is_active = False
    await db.commit()
