"""Restaurant-related models"""

import uuid
from sqlalchemy import (
    Column,
    String,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    Text,
    Time,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship

from tableturn.database import Base, utcnow


class Restaurant(Base):
    """Restaurant taking reservations"""
    __tablename__ = "restaurants"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    timezone = Column(String(50), default="UTC", nullable=False)
    address = Column(Text)
    phone = Column(String(20))
    email = Column(String(255))
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Relationships
    settings = relationship("RestaurantSettings", back_populates="restaurant", uselist=False)
    business_hours = relationship(
        "BusinessHours",
        back_populates="restaurant",
        order_by="BusinessHours.weekday",
        cascade="all, delete-orphan",
    )
    tables = relationship("DiningTable", back_populates="restaurant")
    menu_items = relationship("MenuItem", back_populates="restaurant")
    reservations = relationship("Reservation", back_populates="restaurant")
    users = relationship("User", back_populates="restaurant")


class RestaurantSettings(Base):
    """Booking and cancellation policies of a restaurant"""
    __tablename__ = "restaurant_settings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(Uuid, ForeignKey("restaurants.id"), unique=True, nullable=False)

    # Cancellation policy. Both generations of fields are kept: the specific
    # ones (allow_free_cancel, cancel_before_hours) win over the general ones.
    allows_cancellation = Column(Boolean)
    allow_free_cancel = Column(Boolean)
    cancel_before_hours = Column(Integer)
    min_booking_hours = Column(Integer)

    # Booking horizon and party limits
    advance_booking_days = Column(Integer, default=30, nullable=False)
    max_party_size = Column(Integer, default=20, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Relationships
    restaurant = relationship("Restaurant", back_populates="settings")


class BusinessHours(Base):
    """Opening window for one weekday (0 = Monday)"""
    __tablename__ = "business_hours"
    __table_args__ = (UniqueConstraint("restaurant_id", "weekday", name="uq_business_hours_weekday"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(Uuid, ForeignKey("restaurants.id"), nullable=False)
    weekday = Column(Integer, nullable=False)
    open_time = Column(Time, nullable=False)
    close_time = Column(Time, nullable=False)
    is_open = Column(Boolean, default=True, nullable=False)

    # Relationships
    restaurant = relationship("Restaurant", back_populates="business_hours")
