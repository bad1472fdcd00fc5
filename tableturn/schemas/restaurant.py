"""Restaurant schemas"""

from datetime import datetime, time
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field, model_validator


class RestaurantCreate(BaseModel):
    """Create restaurant request"""
    name: str = Field(..., min_length=1, max_length=255)
    timezone: str = "UTC"
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class RestaurantUpdate(BaseModel):
    """Update restaurant request"""
    name: Optional[str] = None
    timezone: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    is_active: Optional[bool] = None


class RestaurantResponse(BaseModel):
    """Restaurant response"""
    id: UUID
    name: str
    timezone: str
    address: Optional[str]
    phone: Optional[str]
    email: Optional[str]
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BusinessHoursEntry(BaseModel):
    """Opening window of one weekday (0 = Monday)"""
    weekday: int = Field(..., ge=0, le=6)
    open_time: time
    close_time: time
    is_open: bool = True

    @model_validator(mode="after")
    def check_window(self):
        if self.is_open and self.close_time <= self.open_time:
            raise ValueError("close_time must be after open_time")
        return self


class BusinessHoursUpdate(BaseModel):
    """Replace the weekly opening hours"""
    days: List[BusinessHoursEntry]

    @model_validator(mode="after")
    def check_unique_weekdays(self):
        weekdays = [day.weekday for day in self.days]
        if len(weekdays) != len(set(weekdays)):
            raise ValueError("Each weekday may appear only once")
        return self


class BusinessHoursResponse(BaseModel):
    weekday: int
    open_time: time
    close_time: time
    is_open: bool

    class Config:
        from_attributes = True


class PoliciesUpdate(BaseModel):
    """Update booking and cancellation policies"""
    allows_cancellation: Optional[bool] = None
    allow_free_cancel: Optional[bool] = None
    cancel_before_hours: Optional[int] = Field(None, ge=0)
    min_booking_hours: Optional[int] = Field(None, ge=0)
    advance_booking_days: Optional[int] = Field(None, ge=1)
    max_party_size: Optional[int] = Field(None, ge=1)


class PoliciesResponse(BaseModel):
    """Booking and cancellation policies"""
    restaurant_id: UUID
    allows_cancellation: Optional[bool]
    allow_free_cancel: Optional[bool]
    cancel_before_hours: Optional[int]
    min_booking_hours: Optional[int]
    advance_booking_days: int
    max_party_size: int
    updated_at: datetime

    class Config:
        from_attributes = True
