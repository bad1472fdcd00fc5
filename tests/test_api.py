"""API tests: auth, availability, reservations and restaurant management"""

import pytest
from httpx import AsyncClient

from tests.conftest import MONDAY, TUESDAY


def reservation_body(restaurant, table, **overrides):
    body = {
        "restaurant_id": str(restaurant.id),
        "table_id": str(table.id),
        "date": MONDAY,
        "time": "19:00",
        "duration_minutes": 120,
        "party_size": 2,
    }
    body.update(overrides)
    return body


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_register_login_and_me(client: AsyncClient):
    response = await client.post(
        "/auth/register",
        json={
            "email": "newguest@tableturn.io",
            "password": "supersecret",
            "full_name": "New Guest",
            "phone": "+15550003333",
        },
    )
    assert response.status_code == 201
    assert response.json()["role"] == "customer"

    duplicate = await client.post(
        "/auth/register",
        json={"email": "newguest@tableturn.io", "password": "supersecret", "full_name": "Again"},
    )
    assert duplicate.status_code == 409

    login = await client.post(
        "/auth/login",
        data={"username": "newguest@tableturn.io", "password": "supersecret"},
    )
    assert login.status_code == 200
    tokens = login.json()
    assert tokens["token_type"] == "bearer"

    me = await client.get("/auth/me", headers={"Authorization": f"Bearer {tokens['access_token']}"})
    assert me.status_code == 200
    assert me.json()["full_name"] == "New Guest"

    refreshed = await client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert refreshed.status_code == 200


@pytest.mark.asyncio
async def test_login_with_wrong_password(client: AsyncClient, customer_user):
    response = await client.post(
        "/auth/login",
        data={"username": customer_user.email, "password": "wrongpass"},
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_availability_endpoint(client: AsyncClient, test_table):
    response = await client.get(
        f"/tables/{test_table.id}/availability",
        params={"date": MONDAY, "time": "19:00", "duration": 120},
    )

    assert response.status_code == 200
    assert response.json()["available"] is True

    too_big = await client.get(
        f"/tables/{test_table.id}/availability",
        params={"date": MONDAY, "time": "19:00", "party_size": 9},
    )
    assert too_big.status_code == 409
    assert too_big.json()["error"] == "capacity_exceeded"

    malformed = await client.get(
        f"/tables/{test_table.id}/availability",
        params={"date": "tomorrow", "time": "19:00"},
    )
    assert malformed.status_code == 422


@pytest.mark.asyncio
async def test_slots_endpoint(client: AsyncClient, test_table, book):
    await book(time="12:00", duration=120)

    response = await client.get(f"/tables/{test_table.id}/slots", params={"date": MONDAY, "duration": 120})

    assert response.status_code == 200
    data = response.json()
    assert data["slots"] == ["09:00", "15:00", "18:00"]
    assert data["day_name"] == "monday"
    assert data["business_hours"] == {"open": "09:00", "close": "22:00", "is_open": True}
    assert data["existing_reservations"] == 1
    assert data["reason"] == "success"


@pytest.mark.asyncio
async def test_customer_books_and_sees_conflict(customer_client: AsyncClient, test_restaurant, test_table, customer_user):
    response = await customer_client.post("/reservations", json=reservation_body(test_restaurant, test_table))

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "pending"
    assert data["start_time"] == "19:00"
    assert data["customer_name"] == "Guest One"
    assert data["customer_id"] == str(customer_user.id)

    conflict = await customer_client.post(
        "/reservations",
        json=reservation_body(test_restaurant, test_table, time="20:00", duration_minutes=60),
    )
    assert conflict.status_code == 409
    assert conflict.json()["error"] == "slot_unavailable"

    mine = await customer_client.get("/reservations/mine")
    assert mine.json()["total"] == 1


@pytest.mark.asyncio
async def test_pre_order_through_api(customer_client: AsyncClient, test_restaurant, test_table, test_menu_items):
    pizza, tiramisu, special = test_menu_items

    response = await customer_client.post(
        "/reservations",
        json=reservation_body(
            test_restaurant, test_table,
            pre_order=[{"menu_item_id": str(pizza.id), "quantity": 2}, {"menu_item_id": str(tiramisu.id)}],
        ),
    )
    assert response.status_code == 201
    assert response.json()["total_cents"] == 2 * 1499 + 899

    unavailable = await customer_client.post(
        "/reservations",
        json=reservation_body(
            test_restaurant, test_table, date=TUESDAY,
            pre_order=[{"menu_item_id": str(special.id), "quantity": 1}],
        ),
    )
    assert unavailable.status_code == 422


@pytest.mark.asyncio
async def test_lifecycle_actions(customer_client: AsyncClient, staff_client: AsyncClient, test_restaurant, test_table):
    created = await customer_client.post("/reservations", json=reservation_body(test_restaurant, test_table))
    reservation_id = created.json()["id"]

    forbidden = await customer_client.post(f"/reservations/{reservation_id}/confirm")
    assert forbidden.status_code == 409
    assert forbidden.json()["error"] == "invalid_state_transition"

    confirmed = await staff_client.post(f"/reservations/{reservation_id}/confirm")
    assert confirmed.status_code == 200
    assert confirmed.json()["status"] == "confirmed"
    assert confirmed.json()["confirmed_at"] is not None

    completed = await staff_client.post(
        f"/reservations/{reservation_id}/complete",
        json={"payment_status": "paid", "staff_notes": "Window seat"},
    )
    assert completed.status_code == 200
    assert completed.json()["payment_status"] == "paid"

    again = await staff_client.post(f"/reservations/{reservation_id}/no-show")
    assert again.status_code == 409

    unknown = await staff_client.post(f"/reservations/{reservation_id}/archive")
    assert unknown.status_code == 422


@pytest.mark.asyncio
async def test_reschedule_and_cancel(customer_client: AsyncClient, test_restaurant, test_table):
    created = await customer_client.post("/reservations", json=reservation_body(test_restaurant, test_table))
    reservation_id = created.json()["id"]

    moved = await customer_client.post(
        f"/reservations/{reservation_id}/reschedule",
        json={"date": TUESDAY, "time": "12:30"},
    )
    assert moved.status_code == 200
    assert moved.json()["reservation_date"] == TUESDAY
    assert moved.json()["start_time"] == "12:30"

    cancelled = await customer_client.post(f"/reservations/{reservation_id}/cancel", json={"reason": "Plans changed"})
    assert cancelled.status_code == 200
    assert cancelled.json()["status"] == "cancelled"
    assert cancelled.json()["cancellation_reason"] == "Plans changed"


@pytest.mark.asyncio
async def test_other_customers_reservation_is_hidden(make_client, book, other_customer):
    reservation = await book()
    stranger = make_client(other_customer)

    response = await stranger.get(f"/reservations/{reservation.id}")
    assert response.status_code == 404

    response = await stranger.post(f"/reservations/{reservation.id}/cancel")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_restaurant_reservation_views(staff_client: AsyncClient, customer_client: AsyncClient, test_restaurant, book):
    await book(time="12:00")
    await book(date=TUESDAY, time="19:00")

    listing = await staff_client.get(f"/restaurants/{test_restaurant.id}/reservations", params={"upcoming": True})
    assert listing.status_code == 200
    assert [item["reservation_date"] for item in listing.json()["items"]] == [MONDAY, TUESDAY]

    by_date = await staff_client.get(f"/restaurants/{test_restaurant.id}/reservations", params={"date": TUESDAY})
    assert by_date.json()["total"] == 1

    stats = await staff_client.get(f"/restaurants/{test_restaurant.id}/reservations/stats")
    assert stats.status_code == 200
    assert stats.json()["by_status"]["pending"] == 2
    assert stats.json()["today"] == 1
    assert stats.json()["upcoming"] == 2

    month = await staff_client.get(
        f"/restaurants/{test_restaurant.id}/reservations/calendar", params={"month": "2030-06"}
    )
    assert month.status_code == 200
    assert [day["date"] for day in month.json()["days"]] == [MONDAY, TUESDAY]

    bad_month = await staff_client.get(
        f"/restaurants/{test_restaurant.id}/reservations/calendar", params={"month": "2030-13"}
    )
    assert bad_month.status_code == 422

    denied = await customer_client.get(f"/restaurants/{test_restaurant.id}/reservations")
    assert denied.status_code == 403


@pytest.mark.asyncio
async def test_policies_require_restaurant_admin(admin_client: AsyncClient, staff_client: AsyncClient, test_restaurant):
    denied = await staff_client.put(
        f"/restaurants/{test_restaurant.id}/policies",
        json={"cancel_before_hours": 24},
    )
    assert denied.status_code == 403

    response = await admin_client.put(
        f"/restaurants/{test_restaurant.id}/policies",
        json={"cancel_before_hours": 24, "max_party_size": 8, "advance_booking_days": None},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["cancel_before_hours"] == 24
    assert data["max_party_size"] == 8
    assert data["advance_booking_days"] == 30


@pytest.mark.asyncio
async def test_business_hours_replacement(admin_client: AsyncClient, client: AsyncClient, test_restaurant, test_table):
    response = await admin_client.put(
        f"/restaurants/{test_restaurant.id}/business-hours",
        json={"days": [{"weekday": 0, "open_time": "17:00", "close_time": "23:00"}]},
    )
    assert response.status_code == 200
    assert len(response.json()) == 1

    slots = await client.get(f"/tables/{test_table.id}/slots", params={"date": MONDAY, "duration": 120})
    assert slots.json()["business_hours"]["open"] == "17:00"

    closed = await client.get(f"/tables/{test_table.id}/slots", params={"date": TUESDAY, "duration": 120})
    assert closed.json()["reason"] == "closed"

    invalid = await admin_client.put(
        f"/restaurants/{test_restaurant.id}/business-hours",
        json={"days": [{"weekday": 0, "open_time": "23:00", "close_time": "17:00"}]},
    )
    assert invalid.status_code == 422


@pytest.mark.asyncio
async def test_table_management(admin_client: AsyncClient, customer_client: AsyncClient, test_restaurant, test_table):
    response = await admin_client.post(
        f"/restaurants/{test_restaurant.id}/tables",
        json={"table_number": 2, "capacity": 6, "slot_increment_minutes": 30},
    )
    assert response.status_code == 201
    assert response.json()["slot_increment"] == 30

    duplicate = await admin_client.post(
        f"/restaurants/{test_restaurant.id}/tables",
        json={"table_number": 1, "capacity": 2},
    )
    assert duplicate.status_code == 409

    listing = await customer_client.get(f"/restaurants/{test_restaurant.id}/tables")
    assert listing.status_code == 200
    assert sorted(table["table_number"] for table in listing.json()) == [1, 2]


@pytest.mark.asyncio
async def test_super_admin_creates_restaurant(super_admin_client: AsyncClient, staff_client: AsyncClient):
    payload = {"name": "Harbour Grill", "timezone": "Europe/Lisbon"}

    denied = await staff_client.post("/restaurants", json=payload)
    assert denied.status_code == 403

    response = await super_admin_client.post("/restaurants", json=payload)
    assert response.status_code == 201
    restaurant_id = response.json()["id"]

    hours = await super_admin_client.get(f"/restaurants/{restaurant_id}/business-hours")
    assert len(hours.json()) == 7

    bad_zone = await super_admin_client.post("/restaurants", json={"name": "Nowhere", "timezone": "Mars/Base"})
    assert bad_zone.status_code == 422


@pytest.mark.asyncio
async def test_menu_management(admin_client: AsyncClient, staff_client: AsyncClient, test_restaurant, test_menu_items):
    pizza = test_menu_items[0]
    base = f"/restaurants/{test_restaurant.id}/menu_items"

    created = await admin_client.post(base, json={"name": "Bruschetta", "price_cents": 799, "category": "Starters"})
    assert created.status_code == 201

    toggled = await staff_client.put(f"{base}/{pizza.id}", json={"is_available": False})
    assert toggled.status_code == 200
    assert toggled.json()["is_available"] is False

    repriced = await staff_client.put(f"{base}/{pizza.id}", json={"price_cents": 1})
    assert repriced.status_code == 403

    deleted = await admin_client.delete(f"{base}/{pizza.id}")
    assert deleted.status_code == 204

    listing = await staff_client.get(base)
    assert "Margherita Pizza" not in [item["name"] for item in listing.json()]
    assert "Bruschetta" in [item["name"] for item in listing.json()]


@pytest.mark.asyncio
async def test_available_tables_endpoint(client: AsyncClient, test_restaurant, test_table, book):
    url = f"/restaurants/{test_restaurant.id}/available-tables"

    response = await client.get(url, params={"date": MONDAY, "time": "19:00", "party_size": 2, "duration": 120})
    assert response.status_code == 200
    data = response.json()
    assert data["duration_minutes"] == 120
    assert [table["id"] for table in data["tables"]] == [str(test_table.id)]

    await book(time="19:00", duration=120)
    taken = await client.get(url, params={"date": MONDAY, "time": "20:00", "party_size": 2, "duration": 60})
    assert taken.json()["tables"] == []

    too_big = await client.get(url, params={"date": MONDAY, "time": "12:00", "party_size": 6})
    assert too_big.json()["tables"] == []

    closed_hours = await client.get(url, params={"date": MONDAY, "time": "23:00", "party_size": 2})
    assert closed_hours.status_code == 409
