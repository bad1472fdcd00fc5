"""Reservation models"""

import enum
import uuid
from sqlalchemy import Column, String, Integer, Date, DateTime, ForeignKey, JSON, Text, Time, Uuid
from sqlalchemy.orm import relationship

from tableturn.database import Base, utcnow


class ReservationStatus(str, enum.Enum):
    """Lifecycle states of a reservation"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no-show"

    @property
    def is_blocking(self) -> bool:
        return self in BLOCKING_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self not in BLOCKING_STATUSES


BLOCKING_STATUSES = frozenset({ReservationStatus.PENDING, ReservationStatus.CONFIRMED})


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"


class Reservation(Base):
    """Table reservations"""
    __tablename__ = "reservations"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(Uuid, ForeignKey("restaurants.id"), nullable=False)
    table_id = Column(Uuid, ForeignKey("dining_tables.id"), nullable=False, index=True)
    customer_id = Column(Uuid, ForeignKey("users.id"))  # null for walk-in guests booked by staff
    created_by_id = Column(Uuid, ForeignKey("users.id"))

    # Customer information
    customer_name = Column(String(255), nullable=False)
    customer_phone = Column(String(20), nullable=False)
    customer_email = Column(String(255))

    # Reservation details
    reservation_date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    party_size = Column(Integer, nullable=False)
    special_requests = Column(Text)

    # Status
    status = Column(String(20), nullable=False, default=ReservationStatus.PENDING.value)

    # Pre-order
    # [{"menu_item_id": "...", "quantity": 2}, ...]
    pre_order = Column(JSON, default=list)
    total_cents = Column(Integer, nullable=False, default=0)
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value)

    # Staff side
    cancellation_reason = Column(Text)
    staff_notes = Column(Text, default="")

    # Optimistic row version, bumped on every write
    version = Column(Integer, nullable=False, default=1)

    # Metadata
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
    confirmed_at = Column(DateTime(timezone=True))
    cancelled_at = Column(DateTime(timezone=True))

    # Relationships
    restaurant = relationship("Restaurant", back_populates="reservations")
    table = relationship("DiningTable", back_populates="reservations")
    customer = relationship("User", foreign_keys=[customer_id])

    @property
    def current_status(self) -> ReservationStatus:
        return ReservationStatus(self.status)


class TableDayGuard(Base):
    """Serialization point for writes touching one table on one date"""
    __tablename__ = "table_day_guards"

    table_id = Column(Uuid, ForeignKey("dining_tables.id"), primary_key=True)
    reservation_date = Column(Date, primary_key=True)
    version = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
