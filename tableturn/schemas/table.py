"""Dining table schemas"""

from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, Field, model_validator


class TableCreate(BaseModel):
    """Create table request"""
    table_number: int = Field(..., ge=1)
    capacity: int = Field(..., ge=1, le=50)
    location: Optional[str] = None
    slot_increment_minutes: Optional[int] = Field(None, ge=5, le=720)
    min_booking_duration: int = Field(90, ge=15, le=720)
    max_booking_duration: int = Field(180, ge=15, le=720)

    @model_validator(mode="after")
    def check_durations(self):
        if self.min_booking_duration > self.max_booking_duration:
            raise ValueError("min_booking_duration cannot exceed max_booking_duration")
        return self


class TableUpdate(BaseModel):
    """Update table request"""
    table_number: Optional[int] = Field(None, ge=1)
    capacity: Optional[int] = Field(None, ge=1, le=50)
    location: Optional[str] = None
    slot_increment_minutes: Optional[int] = Field(None, ge=5, le=720)
    min_booking_duration: Optional[int] = Field(None, ge=15, le=720)
    max_booking_duration: Optional[int] = Field(None, ge=15, le=720)
    is_active: Optional[bool] = None


class TableResponse(BaseModel):
    """Table response"""
    id: UUID
    restaurant_id: UUID
    table_number: int
    capacity: int
    location: Optional[str]
    slot_increment_minutes: Optional[int]
    slot_increment: int
    min_booking_duration: int
    max_booking_duration: int
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
