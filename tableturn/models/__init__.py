"""Database models"""

from tableturn.models.restaurant import Restaurant, RestaurantSettings, BusinessHours
from tableturn.models.table import DiningTable
from tableturn.models.menu import MenuItem
from tableturn.models.reservation import (
    Reservation,
    ReservationStatus,
    PaymentStatus,
    TableDayGuard,
    BLOCKING_STATUSES,
)
from tableturn.models.audit import AuditLog
from tableturn.models.user import User, UserRole

__all__ = [
    "Restaurant",
    "RestaurantSettings",
    "BusinessHours",
    "DiningTable",
    "MenuItem",
    "Reservation",
    "ReservationStatus",
    "PaymentStatus",
    "TableDayGuard",
    "BLOCKING_STATUSES",
    "AuditLog",
    "User",
    "UserRole",
]
