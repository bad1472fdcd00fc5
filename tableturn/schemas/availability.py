"""Availability schemas"""

from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel

from tableturn.schemas.table import TableResponse


class AvailabilityResponse(BaseModel):
    """Availability check response"""
    table_id: UUID
    date: str
    time: str
    duration_minutes: int
    party_size: Optional[int] = None
    available: bool


class BusinessHoursWindow(BaseModel):
    open: Optional[str] = None
    close: Optional[str] = None
    is_open: bool


class SlotsResponse(BaseModel):
    """Free start times for one table and date"""
    table_id: UUID
    date: str
    day_name: str
    business_hours: BusinessHoursWindow
    slot_increment: int
    requested_duration: int
    existing_reservations: int
    slots: List[str] = []
    reason: str
    message: str


class AvailableTablesResponse(BaseModel):
    """Tables of a restaurant that are free for one interval and party"""
    restaurant_id: UUID
    date: str
    time: str
    duration_minutes: int
    party_size: int
    tables: List[TableResponse] = []
