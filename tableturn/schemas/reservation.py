"""Reservation schemas"""

from datetime import date, datetime, time
from typing import Dict, List, Optional
from uuid import UUID
from pydantic import BaseModel, Field, field_serializer


class PreOrderItem(BaseModel):
    """One pre-ordered menu line"""
    menu_item_id: UUID
    quantity: int = Field(1, ge=1, le=50)


class ReservationCreate(BaseModel):
    """Create reservation request.

    Customers book for themselves and may omit contact details (taken from
    their profile). Staff provide the guest's contact details and may link a
    registered customer through ``customer_id``.
    """
    restaurant_id: UUID
    table_id: UUID
    date: str = Field(..., examples=["2030-06-03"])
    time: str = Field(..., examples=["19:30"])
    duration_minutes: Optional[int] = Field(None, ge=1)
    party_size: int
    customer_id: Optional[UUID] = None
    customer_name: Optional[str] = Field(None, max_length=255)
    customer_phone: Optional[str] = Field(None, max_length=20)
    customer_email: Optional[str] = None
    special_requests: Optional[str] = Field(None, max_length=500)
    pre_order: List[PreOrderItem] = []


class TransitionRequest(BaseModel):
    """Optional body of a lifecycle action"""
    reason: Optional[str] = Field(None, max_length=500)
    staff_notes: Optional[str] = Field(None, max_length=1000)
    payment_status: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    duration_minutes: Optional[int] = Field(None, ge=1)


class ReservationResponse(BaseModel):
    """Reservation response"""
    id: UUID
    restaurant_id: UUID
    table_id: UUID
    customer_id: Optional[UUID]
    customer_name: str
    customer_phone: str
    customer_email: Optional[str]
    reservation_date: date
    start_time: time
    duration_minutes: int
    party_size: int
    status: str
    special_requests: Optional[str]
    pre_order: Optional[List[dict]]
    total_cents: int
    payment_status: str
    cancellation_reason: Optional[str]
    staff_notes: Optional[str]
    confirmed_at: Optional[datetime]
    cancelled_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @field_serializer("start_time")
    def serialize_start_time(self, value: time) -> str:
        return value.strftime("%H:%M")


class ReservationListResponse(BaseModel):
    """Paginated reservation list"""
    items: List[ReservationResponse]
    total: int
    page: int
    page_size: int


class ReservationStats(BaseModel):
    """Dashboard counters for one restaurant"""
    total: int
    by_status: Dict[str, int]
    today: int
    upcoming: int
    revenue_cents: int


class CalendarDay(BaseModel):
    date: date
    total: int
    by_status: Dict[str, int]


class CalendarResponse(BaseModel):
    """Per-day reservation counts of one month"""
    month: str
    days: List[CalendarDay]
