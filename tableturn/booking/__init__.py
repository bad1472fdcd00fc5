"""Table availability and reservation lifecycle engine"""

from tableturn.booking.engine import BookingEngine
from tableturn.booking.errors import (
    BookingError,
    CapacityExceeded,
    ClosedDay,
    ConcurrencyConflict,
    InvalidStateTransition,
    NotFound,
    OutsideBusinessHours,
    PolicyViolation,
    SlotUnavailable,
    ValidationError,
)
from tableturn.booking.lifecycle import Action, Actor, CustomerInfo, PreOrderLine, TransitionPayload
from tableturn.booking.slots import SlotListing

__all__ = [
    "BookingEngine",
    "BookingError",
    "CapacityExceeded",
    "ClosedDay",
    "ConcurrencyConflict",
    "InvalidStateTransition",
    "NotFound",
    "OutsideBusinessHours",
    "PolicyViolation",
    "SlotUnavailable",
    "ValidationError",
    "Action",
    "Actor",
    "CustomerInfo",
    "PreOrderLine",
    "TransitionPayload",
    "SlotListing",
]
