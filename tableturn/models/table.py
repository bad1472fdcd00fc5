"""Dining table model"""

import uuid
from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from tableturn.database import Base, utcnow


class DiningTable(Base):
    """Bookable table with its own turnover grid"""
    __tablename__ = "dining_tables"
    __table_args__ = (UniqueConstraint("restaurant_id", "table_number", name="uq_dining_tables_number"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(Uuid, ForeignKey("restaurants.id"), nullable=False)
    table_number = Column(Integer, nullable=False)
    capacity = Column(Integer, nullable=False)
    location = Column(String(50))  # indoor, outdoor, private, bar

    # Booking grid
    slot_increment_minutes = Column(Integer)  # falls back to max_booking_duration
    min_booking_duration = Column(Integer, default=90, nullable=False)
    max_booking_duration = Column(Integer, default=180, nullable=False)

    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Relationships
    restaurant = relationship("Restaurant", back_populates="tables")
    reservations = relationship("Reservation", back_populates="table")

    @property
    def slot_increment(self) -> int:
        """Cadence of the booking grid in minutes"""
        return self.slot_increment_minutes or self.max_booking_duration or 180
