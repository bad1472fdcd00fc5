"""Audit log model"""

import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, JSON, Uuid

from tableturn.database import Base, utcnow


class AuditLog(Base):
    """Audit trail of reservation lifecycle operations"""
    __tablename__ = "audit_logs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(Uuid, ForeignKey("restaurants.id"))

    # Actor information
    actor_id = Column(Uuid)  # User ID or null for system
    actor_type = Column(String(50))  # customer, staff, system

    # Action details
    action = Column(String(100), nullable=False)  # create, confirm, reschedule, ...
    resource_type = Column(String(50))  # reservation
    resource_id = Column(Uuid)

    # Change data
    data_json = Column(JSON)  # {"before": {...}, "after": {...}}

    created_at = Column(DateTime(timezone=True), default=utcnow)
