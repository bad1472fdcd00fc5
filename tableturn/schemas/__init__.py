"""Pydantic schemas for request/response validation"""

from tableturn.schemas.auth import (
    Token,
    TokenPayload,
    RefreshRequest,
    CustomerRegister,
    UserResponse,
)
from tableturn.schemas.restaurant import (
    RestaurantCreate,
    RestaurantUpdate,
    RestaurantResponse,
    BusinessHoursEntry,
    BusinessHoursUpdate,
    BusinessHoursResponse,
    PoliciesUpdate,
    PoliciesResponse,
)
from tableturn.schemas.table import (
    TableCreate,
    TableUpdate,
    TableResponse,
)
from tableturn.schemas.menu import (
    MenuItemCreate,
    MenuItemUpdate,
    MenuItemResponse,
)
from tableturn.schemas.reservation import (
    PreOrderItem,
    ReservationCreate,
    TransitionRequest,
    ReservationResponse,
    ReservationListResponse,
    ReservationStats,
    CalendarDay,
    CalendarResponse,
)
from tableturn.schemas.availability import (
    AvailabilityResponse,
    AvailableTablesResponse,
    BusinessHoursWindow,
    SlotsResponse,
)

__all__ = [
    "Token",
    "TokenPayload",
    "RefreshRequest",
    "CustomerRegister",
    "UserResponse",
    "RestaurantCreate",
    "RestaurantUpdate",
    "RestaurantResponse",
    "BusinessHoursEntry",
    "BusinessHoursUpdate",
    "BusinessHoursResponse",
    "PoliciesUpdate",
    "PoliciesResponse",
    "TableCreate",
    "TableUpdate",
    "TableResponse",
    "MenuItemCreate",
    "MenuItemUpdate",
    "MenuItemResponse",
    "PreOrderItem",
    "ReservationCreate",
    "TransitionRequest",
    "ReservationResponse",
    "ReservationListResponse",
    "ReservationStats",
    "CalendarDay",
    "CalendarResponse",
    "AvailabilityResponse",
    "AvailableTablesResponse",
    "BusinessHoursWindow",
    "SlotsResponse",
]
