"""Menu model"""

import uuid
from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, Text, Uuid
from sqlalchemy.orm import relationship

from tableturn.database import Base, utcnow


class MenuItem(Base):
    """Menu items that can be pre-ordered with a reservation"""
    __tablename__ = "menu_items"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(Uuid, ForeignKey("restaurants.id"), nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    price_cents = Column(Integer, nullable=False)  # Price in cents to avoid float issues
    category = Column(String(100))
    is_active = Column(Boolean, default=True)
    is_available = Column(Boolean, default=True)  # Temporary availability
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Relationships
    restaurant = relationship("Restaurant", back_populates="menu_items")
