"""Authentication schemas"""

from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, EmailStr, Field

from tableturn.models.user import UserRole


class Token(BaseModel):
    """JWT token response"""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class TokenPayload(BaseModel):
    """JWT token payload"""
    sub: str  # User ID
    restaurant_id: Optional[str] = None
    role: str
    exp: datetime


class RefreshRequest(BaseModel):
    """Token refresh request"""
    refresh_token: str


class CustomerRegister(BaseModel):
    """Self-service customer sign-up"""
    email: EmailStr
    password: str = Field(..., min_length=8)
    full_name: str = Field(..., min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)


class UserResponse(BaseModel):
    """User response"""
    id: UUID
    email: str
    full_name: Optional[str]
    phone: Optional[str]
    role: UserRole
    restaurant_id: Optional[UUID]
    is_active: bool
    created_at: datetime
    last_login: Optional[datetime]

    class Config:
        from_attributes = True
