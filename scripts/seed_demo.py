#!/usr/bin/env python3
"""
Seed script to create a demo restaurant with tables, menu and users
"""

import asyncio
import uuid

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


async def seed_demo_data():
    """Seed demo data for development"""
    from sqlalchemy import select

    from tableturn.booking.hours import DEFAULT_BUSINESS_HOURS
    from tableturn.database import SessionLocal, engine, Base
    from tableturn.models.restaurant import Restaurant, RestaurantSettings, BusinessHours
    from tableturn.models.table import DiningTable
    from tableturn.models.menu import MenuItem
    from tableturn.models.user import User, UserRole

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with SessionLocal() as db:
        # Check if demo restaurant already exists
        result = await db.execute(
            select(Restaurant).where(Restaurant.name == "Mario's Italian Kitchen")
        )
        existing = result.scalar_one_or_none()

        if existing:
            print("Demo data already exists. Skipping...")
            return

        print("Creating demo restaurant...")

        restaurant = Restaurant(
            id=uuid.uuid4(),
            name="Mario's Italian Kitchen",
            timezone="America/New_York",
            address="123 Main Street, New York, NY 10001",
            phone="+15551234567",
            email="hello@marios-kitchen.com",
        )
        db.add(restaurant)
        await db.flush()

        print(f"Created restaurant: {restaurant.name} (ID: {restaurant.id})")

        db.add(RestaurantSettings(
            restaurant_id=restaurant.id,
            allows_cancellation=True,
            cancel_before_hours=2,
            advance_booking_days=30,
            max_party_size=12,
        ))

        for weekday, (open_time, close_time) in DEFAULT_BUSINESS_HOURS.items():
            db.add(BusinessHours(
                restaurant_id=restaurant.id,
                weekday=weekday,
                open_time=open_time,
                close_time=close_time,
            ))

        # Tables: (number, capacity, location, slot increment)
        tables = [
            (1, 2, "indoor", 90),
            (2, 2, "indoor", 90),
            (3, 4, "indoor", 120),
            (4, 4, "outdoor", 120),
            (5, 6, "indoor", None),
            (6, 8, "private", None),
        ]
        for number, capacity, location, increment in tables:
            db.add(DiningTable(
                restaurant_id=restaurant.id,
                table_number=number,
                capacity=capacity,
                location=location,
                slot_increment_minutes=increment,
            ))

        # Create users
        super_admin = User(
            email="admin@tableturn.dev",
            hashed_password=pwd_context.hash("admin123"),
            full_name="Platform Admin",
            role=UserRole.SUPER_ADMIN,
        )
        db.add(super_admin)

        owner = User(
            restaurant_id=restaurant.id,
            email="mario@marios-kitchen.com",
            hashed_password=pwd_context.hash("mario123"),
            full_name="Mario Rossi",
            phone="+15559876543",
            role=UserRole.RESTAURANT_ADMIN,
        )
        db.add(owner)

        host = User(
            restaurant_id=restaurant.id,
            email="host@marios-kitchen.com",
            hashed_password=pwd_context.hash("host1234"),
            full_name="Front Desk",
            role=UserRole.STAFF,
        )
        db.add(host)

        guest = User(
            email="guest@example.com",
            hashed_password=pwd_context.hash("guest123"),
            full_name="Demo Guest",
            phone="+15550001111",
            role=UserRole.CUSTOMER,
        )
        db.add(guest)

        # Create menu items
        menu_items = [
            {"name": "Margherita Pizza", "price_cents": 1499, "category": "Pizza"},
            {"name": "Pepperoni Pizza", "price_cents": 1699, "category": "Pizza"},
            {"name": "Spaghetti Carbonara", "price_cents": 1899, "category": "Pasta"},
            {"name": "Fettuccine Alfredo", "price_cents": 1799, "category": "Pasta"},
            {"name": "Caesar Salad", "price_cents": 999, "category": "Salads"},
            {"name": "Bruschetta", "price_cents": 899, "category": "Appetizers"},
            {"name": "Tiramisu", "price_cents": 899, "category": "Desserts"},
            {"name": "Bottle of Chianti", "price_cents": 3900, "category": "Wine"},
        ]
        for item_data in menu_items:
            db.add(MenuItem(restaurant_id=restaurant.id, **item_data))

        await db.commit()

        print(f"""
Demo data created successfully!

Restaurant: Mario's Italian Kitchen
  ID: {restaurant.id}
  Tables: {len(tables)}

Users:
  Super Admin:
    Email: admin@tableturn.dev
    Password: admin123

  Restaurant Admin:
    Email: mario@marios-kitchen.com
    Password: mario123

  Staff:
    Email: host@marios-kitchen.com
    Password: host1234

  Customer:
    Email: guest@example.com
    Password: guest123

Menu: {len(menu_items)} items created
""")


if __name__ == "__main__":
    asyncio.run(seed_demo_data())
