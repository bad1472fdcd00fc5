"""Errors raised by the booking engine"""

from typing import Any, Dict, Optional


class BookingError(Exception):
    """Base class for every error the booking engine surfaces to callers"""

    code = "booking_error"
    status_code = 400

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "detail": self.message, **self.details}


class NotFound(BookingError):
    """Table, restaurant or reservation does not exist (or is not visible to the actor)"""

    code = "not_found"
    status_code = 404


class ValidationError(BookingError):
    """Malformed date, time, duration or party size"""

    code = "validation_error"
    status_code = 422


class CapacityExceeded(BookingError):
    code = "capacity_exceeded"
    status_code = 409


class ClosedDay(BookingError):
    """The restaurant is closed on the requested date"""

    code = "closed_day"
    status_code = 409


class OutsideBusinessHours(ClosedDay):
    """The requested interval does not fit inside the day's opening window"""

    code = "outside_business_hours"


class SlotUnavailable(BookingError):
    """The requested interval overlaps another blocking reservation"""

    code = "slot_unavailable"
    status_code = 409


class PolicyViolation(BookingError):
    """A restaurant policy forbids the operation (e.g. cancellation notice)"""

    code = "policy_violation"
    status_code = 403


class InvalidStateTransition(BookingError):
    code = "invalid_state_transition"
    status_code = 409

    def __init__(self, message: str, *, status: Optional[str] = None, action: Optional[str] = None, **details: Any):
        if status is not None:
            details["status"] = status
        if action is not None:
            details["action"] = action
        super().__init__(message, **details)


class ConcurrencyConflict(BookingError):
    """The retry budget ran out while competing with concurrent writers"""

    code = "concurrency_conflict"
    status_code = 503


class TransactionConflict(Exception):
    """Lost optimistic compare-and-set; retried by the conflict guard, never surfaced"""
