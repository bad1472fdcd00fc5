"""Public availability endpoints"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from tableturn.booking import BookingEngine
from tableturn.schemas.availability import (
    AvailabilityResponse,
    AvailableTablesResponse,
    BusinessHoursWindow,
    SlotsResponse,
)
from tableturn.schemas.table import TableResponse
from tableturn.api.deps import get_booking_engine

router = APIRouter()
restaurant_router = APIRouter()


@router.get("/{table_id}/availability", response_model=AvailabilityResponse)
async def check_availability(
    table_id: UUID,
    date: str = Query(..., description="YYYY-MM-DD"),
    time: str = Query(..., description="HH:MM"),
    duration: Optional[int] = Query(None, ge=1),
    party_size: Optional[int] = Query(None, ge=1),
    engine: BookingEngine = Depends(get_booking_engine),
):
    """Check whether one interval is free on a table"""
    if duration is None:
        duration = engine.settings.default_duration_minutes
    available = await engine.check_availability(table_id, date, time, duration, party_size=party_size)

    return AvailabilityResponse(
        table_id=table_id,
        date=date,
        time=time,
        duration_minutes=duration,
        party_size=party_size,
        available=available,
    )


@router.get("/{table_id}/slots", response_model=SlotsResponse)
async def list_slots(
    table_id: UUID,
    date: str = Query(..., description="YYYY-MM-DD"),
    duration: Optional[int] = Query(None, ge=1),
    engine: BookingEngine = Depends(get_booking_engine),
):
    """Free start times on the table's booking grid"""
    listing = await engine.list_slots(table_id, date, duration)

    return SlotsResponse(
        table_id=table_id,
        date=date,
        day_name=listing.day.day_name,
        business_hours=BusinessHoursWindow(**listing.day.as_dict()),
        slot_increment=listing.slot_increment,
        requested_duration=listing.requested_duration,
        existing_reservations=listing.existing_count,
        slots=listing.times,
        reason=listing.reason,
        message=listing.message,
    )


@restaurant_router.get("/available-tables", response_model=AvailableTablesResponse)
async def find_available_tables(
    restaurant_id: UUID,
    date: str = Query(..., description="YYYY-MM-DD"),
    time: str = Query(..., description="HH:MM"),
    party_size: int = Query(..., ge=1),
    duration: Optional[int] = Query(None, ge=1),
    engine: BookingEngine = Depends(get_booking_engine),
):
    """Tables that seat the party and are free for the requested interval"""
    if duration is None:
        duration = engine.settings.default_duration_minutes
    tables = await engine.find_available_tables(restaurant_id, date, time, party_size, duration)

    return AvailableTablesResponse(
        restaurant_id=restaurant_id,
        date=date,
        time=time,
        duration_minutes=duration,
        party_size=party_size,
        tables=[TableResponse.model_validate(table) for table in tables],
    )
