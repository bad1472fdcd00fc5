"""Test configuration and fixtures"""

from datetime import datetime, timezone
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from tableturn.main import app
from tableturn.database import Base, get_db
from tableturn.api.auth import create_access_token, get_password_hash
from tableturn.api.deps import get_booking_engine
from tableturn.booking import Actor, BookingEngine, CustomerInfo
from tableturn.booking.hours import DEFAULT_BUSINESS_HOURS
from tableturn.config import Settings
from tableturn.models.menu import MenuItem
from tableturn.models.restaurant import BusinessHours, Restaurant, RestaurantSettings
from tableturn.models.table import DiningTable
from tableturn.models.user import User, UserRole


# Monday 2030-06-03, 08:00 UTC
FIXED_NOW = datetime(2030, 6, 3, 8, 0, tzinfo=timezone.utc)
MONDAY = "2030-06-03"
TUESDAY = "2030-06-04"
SUNDAY = "2030-06-09"


class FixedClock:
    """Clock the tests can move by hand"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
async def db_engine(tmp_path):
    """File-backed SQLite so concurrent sessions see each other's commits"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path}/test.db", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def test_db(session_factory):
    """Session used to seed and inspect the database"""
    async with session_factory() as session:
        yield session


@pytest.fixture
def clock():
    return FixedClock(FIXED_NOW)


@pytest.fixture
def booking_engine(session_factory, clock):
    settings = Settings(booking_retry_base_delay_ms=1, booking_retry_max_delay_ms=10)
    return BookingEngine(session_factory, clock=clock, settings=settings)


@pytest.fixture
async def test_restaurant(test_db):
    """Create a test restaurant with default hours and policies"""
    restaurant = Restaurant(
        id=uuid4(),
        name="Test Restaurant",
        timezone="UTC",
    )
    test_db.add(restaurant)
    await test_db.flush()

    test_db.add(RestaurantSettings(restaurant_id=restaurant.id))
    for weekday, (open_time, close_time) in DEFAULT_BUSINESS_HOURS.items():
        test_db.add(BusinessHours(
            restaurant_id=restaurant.id,
            weekday=weekday,
            open_time=open_time,
            close_time=close_time,
        ))
    await test_db.commit()

    return restaurant


@pytest.fixture
async def test_table(test_db, test_restaurant):
    """Four-seat table; no explicit increment, so the grid follows the 180 minute maximum"""
    table = DiningTable(
        id=uuid4(),
        restaurant_id=test_restaurant.id,
        table_number=1,
        capacity=4,
        location="indoor",
        min_booking_duration=60,
        max_booking_duration=180,
    )
    test_db.add(table)
    await test_db.commit()

    return table


@pytest.fixture
async def test_menu_items(test_db, test_restaurant):
    """Create test menu items"""
    items = [
        MenuItem(
            restaurant_id=test_restaurant.id,
            name="Margherita Pizza",
            price_cents=1499,
            category="Pizza",
        ),
        MenuItem(
            restaurant_id=test_restaurant.id,
            name="Tiramisu",
            price_cents=899,
            category="Desserts",
        ),
        MenuItem(
            restaurant_id=test_restaurant.id,
            name="Seasonal Special",
            price_cents=2500,
            category="Specials",
            is_available=False,
        ),
    ]

    for item in items:
        test_db.add(item)

    await test_db.commit()
    return items


async def make_user(test_db, email, role, restaurant_id=None, **extra):
    user = User(
        id=uuid4(),
        restaurant_id=restaurant_id,
        email=email,
        hashed_password=get_password_hash("testpass123"),
        role=role,
        is_active=True,
        **extra,
    )
    test_db.add(user)
    await test_db.commit()
    return user


@pytest.fixture
async def staff_user(test_db, test_restaurant):
    return await make_user(
        test_db, "host@example.com", UserRole.STAFF, test_restaurant.id, full_name="Front Desk"
    )


@pytest.fixture
async def admin_user(test_db, test_restaurant):
    return await make_user(
        test_db, "owner@example.com", UserRole.RESTAURANT_ADMIN, test_restaurant.id, full_name="Owner"
    )


@pytest.fixture
async def super_admin(test_db):
    return await make_user(test_db, "admin@example.com", UserRole.SUPER_ADMIN, full_name="Admin User")


@pytest.fixture
async def customer_user(test_db):
    return await make_user(
        test_db, "guest@example.com", UserRole.CUSTOMER, full_name="Guest One", phone="+15550001111"
    )


@pytest.fixture
async def other_customer(test_db):
    return await make_user(
        test_db, "other@example.com", UserRole.CUSTOMER, full_name="Guest Two", phone="+15550002222"
    )


@pytest.fixture
def staff_actor(staff_user):
    return Actor.from_user(staff_user)


@pytest.fixture
def customer_actor(customer_user):
    return Actor.from_user(customer_user)


@pytest.fixture
def book(booking_engine, test_restaurant, test_table, customer_actor):
    """Shortcut for creating a reservation through the engine"""
    async def _book(date=MONDAY, time="19:00", duration=120, party_size=2, actor=None, table=None):
        return await booking_engine.create_reservation(
            restaurant_id=test_restaurant.id,
            table_id=(table or test_table).id,
            date=date,
            time=time,
            duration_minutes=duration,
            party_size=party_size,
            actor=actor or customer_actor,
            customer_info=CustomerInfo(name="Guest One", phone="+15550001111"),
        )
    return _book


@pytest.fixture
async def make_client(session_factory, booking_engine):
    """Build ASGI clients against the test database, optionally authenticated"""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_booking_engine] = lambda: booking_engine

    clients = []

    def _make(user=None) -> AsyncClient:
        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        if user is not None:
            client.headers["Authorization"] = f"Bearer {create_access_token(user)}"
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.aclose()
    app.dependency_overrides.clear()


@pytest.fixture
def client(make_client):
    return make_client()


@pytest.fixture
def customer_client(make_client, customer_user):
    return make_client(customer_user)


@pytest.fixture
def staff_client(make_client, staff_user):
    return make_client(staff_user)


@pytest.fixture
def admin_client(make_client, admin_user):
    return make_client(admin_user)


@pytest.fixture
def super_admin_client(make_client, super_admin):
    return make_client(super_admin)
