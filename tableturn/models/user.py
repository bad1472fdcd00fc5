"""User model for customers and restaurant staff"""

import uuid
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Enum, Uuid
from sqlalchemy.orm import relationship
import enum

from tableturn.database import Base, utcnow


class UserRole(str, enum.Enum):
    """User roles for RBAC"""
    SUPER_ADMIN = "super_admin"
    RESTAURANT_ADMIN = "restaurant_admin"
    STAFF = "staff"
    CUSTOMER = "customer"


class User(Base):
    """Platform users"""
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(Uuid, ForeignKey("restaurants.id"))  # staff only

    # Authentication
    email = Column(String(255), unique=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    refresh_token = Column(String(500))

    # Profile
    full_name = Column(String(255))
    phone = Column(String(20))

    # Role
    role = Column(
        Enum(UserRole, native_enum=False, length=50, values_callable=lambda roles: [r.value for r in roles]),
        default=UserRole.CUSTOMER,
        nullable=False,
    )

    # Status
    is_active = Column(Boolean, default=True)

    # Timestamps
    last_login = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Relationships
    restaurant = relationship("Restaurant", back_populates="users")

    @property
    def is_staff(self) -> bool:
        return self.role != UserRole.CUSTOMER

    def has_permission(self, required_role: UserRole) -> bool:
        """Check if user has at least the required role level"""
        role_hierarchy = {
            UserRole.CUSTOMER: 0,
            UserRole.STAFF: 1,
            UserRole.RESTAURANT_ADMIN: 2,
            UserRole.SUPER_ADMIN: 3,
        }
        return role_hierarchy.get(self.role, 0) >= role_hierarchy.get(required_role, 0)
