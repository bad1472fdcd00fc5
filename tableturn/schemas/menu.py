"""Menu schemas"""

from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, Field


class MenuItemCreate(BaseModel):
    """Create menu item request"""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    price_cents: int = Field(..., ge=0)
    category: Optional[str] = None
    is_active: bool = True
    is_available: bool = True


class MenuItemUpdate(BaseModel):
    """Update menu item request"""
    name: Optional[str] = None
    description: Optional[str] = None
    price_cents: Optional[int] = Field(None, ge=0)
    category: Optional[str] = None
    is_active: Optional[bool] = None
    is_available: Optional[bool] = None


class MenuItemResponse(BaseModel):
    """Menu item response"""
    id: UUID
    restaurant_id: UUID
    name: str
    description: Optional[str]
    price_cents: int
    category: Optional[str]
    is_active: bool
    is_available: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
