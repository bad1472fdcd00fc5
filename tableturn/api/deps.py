"""Shared API dependencies"""

from functools import lru_cache

from tableturn.booking import BookingEngine
from tableturn.config import get_settings
from tableturn.database import get_session_factory


@lru_cache()
def get_booking_engine() -> BookingEngine:
    """Process-wide booking engine bound to the application session factory"""
    return BookingEngine(get_session_factory(), settings=get_settings())
