"""
Tests for the event catalogue and admin endpoints.
"""

import pytest
from httpx import AsyncClient

ADMIN = {"X-Admin-Id": "admin-1"}


async def _book(client: AsyncClient, roll_number: str, slot_id: str = "sA"):
    return await client.post(
        "/api/v1/bookings/",
        json={
            "eventId": "E1",
            "slotId": slot_id,
            "participant": {
                "name": "Ravi Kumar",
                "email": "ravi@college.edu",
                "phone": "9123456780",
                "rollNumber": roll_number,
            },
            "paymentRef": f"PAY-{roll_number}",
        },
    )


@pytest.mark.asyncio
async def test_list_events(client: AsyncClient, workshop, game, inactive_event):
    """Listing shows active events only, with slots and seat counts."""
    response = await client.get("/api/v1/events/")

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert data["cached"] is False
    names = [e["name"] for e in data["events"]]
    assert names == ["Robotics Workshop", "Treasure Hunt"]

    robotics = data["events"][0]
    assert robotics["isActive"] is True
    assert [s["slotId"] for s in robotics["slots"]] == ["sA", "sB", "sC"]
    assert robotics["slots"][2]["remainingSeats"] == 1


@pytest.mark.asyncio
async def test_list_events_by_kind(client: AsyncClient, workshop, game):
    response = await client.get("/api/v1/events/", params={"kind": "game"})

    assert response.status_code == 200
    assert [e["id"] for e in response.json()["events"]] == ["G1"]


@pytest.mark.asyncio
async def test_get_event_not_found(client: AsyncClient, inactive_event):
    for event_id in ("E404", "OLD"):
        response = await client.get(f"/api/v1/events/{event_id}")
        assert response.status_code == 404
        assert response.json()["errorKind"] == "NotFound"


@pytest.mark.asyncio
async def test_admin_create_event(client: AsyncClient):
    response = await client.post(
        "/api/v1/admin/events",
        json={
            "id": "W2",
            "name": "Drone Building",
            "price": 150,
            "slots": [
                {"slotId": "morning", "timeLabel": "9:00 AM", "maxCapacity": 10},
                {"slotId": "evening", "timeLabel": "6:00 PM"},
            ],
        },
    )

    assert response.status_code == 201
    data = response.json()
    assert data["kind"] == "workshop"
    slots = {s["slotId"]: s for s in data["slots"]}
    assert slots["morning"]["remainingSeats"] == 10
    assert slots["evening"]["maxCapacity"] == 4

    duplicate = await client.post("/api/v1/admin/events", json={"id": "W2", "name": "Again"})
    assert duplicate.status_code == 400
    assert duplicate.json()["errorKind"] == "InvalidArgument"


@pytest.mark.asyncio
async def test_admin_add_slot(client: AsyncClient, workshop):
    response = await client.post(
        "/api/v1/admin/events/E1/slots",
        json={"slotId": "sD", "timeLabel": "7:00 PM", "maxCapacity": 2},
    )

    assert response.status_code == 201
    assert response.json()["remainingSeats"] == 2

    missing = await client.post(
        "/api/v1/admin/events/E404/slots",
        json={"slotId": "sD", "timeLabel": "7:00 PM"},
    )
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_admin_close_slot(client: AsyncClient, workshop):
    response = await client.patch("/api/v1/admin/events/E1/slots/sB", json={"isClosed": True})
    assert response.status_code == 200
    assert response.json()["isClosed"] is True

    booking = await _book(client, "21BCE0100", slot_id="sB")
    assert booking.status_code == 409
    assert booking.json()["errorKind"] == "SlotClosed"


@pytest.mark.asyncio
async def test_admin_capacity_below_occupancy(client: AsyncClient, workshop):
    await _book(client, "21BCE0110")
    await _book(client, "21BCE0111")

    response = await client.patch("/api/v1/admin/events/E1/slots/sA", json={"maxCapacity": 1})

    assert response.status_code == 400
    assert response.json()["fields"] == ["maxCapacity"]


@pytest.mark.asyncio
async def test_admin_review_flow(client: AsyncClient, workshop, notifier):
    await _book(client, "21BCE0120", slot_id="sC")
    await _book(client, "21BCE0121", slot_id="sA")

    pending = await client.get("/api/v1/admin/bookings", params={"status": "pending"})
    assert pending.status_code == 200
    assert len(pending.json()) == 2

    confirm = await client.post(
        "/api/v1/admin/events/E1/slots/sA/bookings/21BCE0121/confirm", headers=ADMIN
    )
    assert confirm.status_code == 200
    assert confirm.json()["status"] == "confirmed"
    assert confirm.json()["processedBy"] == "admin-1"

    reject = await client.post(
        "/api/v1/admin/events/E1/slots/sC/bookings/21BCE0120/reject", headers=ADMIN
    )
    assert reject.status_code == 200
    assert reject.json()["status"] == "rejected"

    event = await client.get("/api/v1/events/E1")
    slots = {s["slotId"]: s for s in event.json()["slots"]}
    assert slots["sC"]["remainingSeats"] == 1

    stats = await client.get("/api/v1/admin/stats", params={"eventId": "E1"})
    assert stats.json() == {
        "totalBookings": 2,
        "pendingBookings": 0,
        "confirmedBookings": 1,
        "rejectedBookings": 1,
        "totalRevenue": 200,
    }

    occupancy = await client.get("/api/v1/admin/events/E1/occupancy")
    assert all(row["consistent"] for row in occupancy.json())

    assert [n.status for n in notifier.sent] == ["pending", "pending", "confirmed", "rejected"]


@pytest.mark.asyncio
async def test_admin_status_change_needs_admin_header(client: AsyncClient, workshop):
    await _book(client, "21BCE0130")

    response = await client.post("/api/v1/admin/events/E1/slots/sA/bookings/21BCE0130/confirm")

    assert response.status_code == 400
    assert response.json()["errorKind"] == "InvalidArgument"


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["cache"] == {"status": "disabled"}
