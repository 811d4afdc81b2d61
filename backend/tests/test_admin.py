"""
Tests for the admin review surface: status changes, seat release, slot edits, stats.
"""

import pytest

from conftest import make_participant
from festival_booking.core.errors import AlreadyRegisteredError, InvalidArgumentError, NotFoundError
from festival_booking.models import Booking, ParticipantMarker, PaymentRecord, Slot
from festival_booking.services import admin_service
from festival_booking.services.booking_service import create_booking


async def _book(session_factory, slot_id: str, roll: str, payment: str):
    return await create_booking(session_factory, "E1", slot_id, make_participant(roll), payment)


async def _slot(session_factory, slot_id: str) -> Slot:
    async with session_factory() as db:
        return await db.get(Slot, ("E1", slot_id))


@pytest.mark.asyncio
async def test_confirm_booking(session_factory, workshop, notifier):
    await _book(session_factory, "sA", "21BCE0001", "PAY-001")

    booking = await admin_service.confirm_booking(
        session_factory, "E1", "sA", "21bce0001", "admin-7", notifier=notifier
    )

    assert booking.status == "confirmed"
    assert booking.processed_by == "admin-7"
    assert booking.processed_at is not None
    assert [n.status for n in notifier.sent] == ["confirmed"]
    # occupancy unchanged
    assert (await _slot(session_factory, "sA")).current_bookings == 1


@pytest.mark.asyncio
async def test_confirm_twice_is_a_no_op(session_factory, workshop, notifier):
    await _book(session_factory, "sA", "21BCE0002", "PAY-002")
    await admin_service.confirm_booking(session_factory, "E1", "sA", "21BCE0002", "admin-1")

    booking = await admin_service.confirm_booking(
        session_factory, "E1", "sA", "21BCE0002", "admin-2", notifier=notifier
    )

    assert booking.processed_by == "admin-1"
    assert notifier.sent == []


@pytest.mark.asyncio
async def test_status_change_requires_admin_id(session_factory, workshop):
    await _book(session_factory, "sA", "21BCE0003", "PAY-003")

    with pytest.raises(InvalidArgumentError):
        await admin_service.confirm_booking(session_factory, "E1", "sA", "21BCE0003", "  ")


@pytest.mark.asyncio
async def test_unknown_booking(session_factory, workshop):
    with pytest.raises(NotFoundError):
        await admin_service.reject_booking(session_factory, "E1", "sA", "21BCE9999", "admin-1")


@pytest.mark.asyncio
async def test_reject_releases_seat_but_keeps_roll_and_payment_used(session_factory, workshop):
    await _book(session_factory, "sC", "21BCE0010", "PAY-010")

    booking = await admin_service.reject_booking(
        session_factory, "E1", "sC", "21BCE0010", "admin-1"
    )

    assert booking.status == "rejected"
    assert (await _slot(session_factory, "sC")).current_bookings == 0
    async with session_factory() as db:
        assert await db.get(Booking, ("E1", "sC", "21BCE0010")) is not None
        assert await db.get(ParticipantMarker, ("E1", "21BCE0010")) is not None
        assert await db.get(PaymentRecord, "PAY-010") is not None

    with pytest.raises(AlreadyRegisteredError):
        await _book(session_factory, "sC", "21BCE0010", "PAY-011")

    # the released seat goes to someone else
    result = await _book(session_factory, "sC", "21BCE0012", "PAY-012")
    assert result.remaining_seats == 0


@pytest.mark.asyncio
async def test_reject_twice_releases_one_seat(session_factory, workshop):
    await _book(session_factory, "sA", "21BCE0020", "PAY-020")
    await _book(session_factory, "sA", "21BCE0021", "PAY-021")

    await admin_service.reject_booking(session_factory, "E1", "sA", "21BCE0020", "admin-1")
    await admin_service.reject_booking(session_factory, "E1", "sA", "21BCE0020", "admin-1")

    assert (await _slot(session_factory, "sA")).current_bookings == 1


@pytest.mark.asyncio
async def test_rejected_booking_cannot_be_confirmed(session_factory, workshop):
    await _book(session_factory, "sA", "21BCE0030", "PAY-030")
    await admin_service.reject_booking(session_factory, "E1", "sA", "21BCE0030", "admin-1")

    with pytest.raises(InvalidArgumentError):
        await admin_service.confirm_booking(session_factory, "E1", "sA", "21BCE0030", "admin-1")


@pytest.mark.asyncio
async def test_capacity_cannot_drop_below_occupancy(session_factory, workshop):
    for i in range(3):
        await _book(session_factory, "sA", f"21BCE004{i}", f"PAY-04{i}")

    with pytest.raises(InvalidArgumentError):
        await admin_service.update_slot(session_factory, "E1", "sA", max_capacity=2)

    slot = await admin_service.update_slot(session_factory, "E1", "sA", max_capacity=3)
    assert slot.max_capacity == 3
    assert slot.remaining_seats == 0


@pytest.mark.asyncio
async def test_raising_capacity_opens_seats(session_factory, workshop):
    await _book(session_factory, "sC", "21BCE0050", "PAY-050")

    slot = await admin_service.update_slot(session_factory, "E1", "sC", max_capacity=2)

    assert slot.remaining_seats == 1
    result = await _book(session_factory, "sC", "21BCE0051", "PAY-051")
    assert result.remaining_seats == 0


@pytest.mark.asyncio
async def test_close_and_reopen_slot(session_factory, workshop):
    slot = await admin_service.update_slot(
        session_factory, "E1", "sB", max_capacity=6, is_closed=True
    )
    assert slot.is_closed is True
    assert slot.max_capacity == 6

    slot = await admin_service.update_slot(session_factory, "E1", "sB", is_closed=False)
    assert slot.is_closed is False
    result = await _book(session_factory, "sB", "21BCE0060", "PAY-060")
    assert result.remaining_seats == 5


@pytest.mark.asyncio
async def test_unchanged_slot_update_is_not_counted(session_factory, workshop, monkeypatch):
    actions = []
    monkeypatch.setattr(admin_service, "record_admin_action", actions.append)

    slot = await admin_service.update_slot(
        session_factory, "E1", "sB", max_capacity=4, is_closed=False
    )
    assert slot.version == 1
    assert actions == []

    slot = await admin_service.update_slot(session_factory, "E1", "sB", max_capacity=5)
    assert slot.version == 2
    assert actions == ["update_slot"]


@pytest.mark.asyncio
async def test_empty_slot_update_is_rejected(session_factory, workshop):
    with pytest.raises(InvalidArgumentError):
        await admin_service.update_slot(session_factory, "E1", "sB")


@pytest.mark.asyncio
async def test_list_bookings_by_status(session_factory, workshop, db_session):
    await _book(session_factory, "sA", "21BCE0070", "PAY-070")
    await _book(session_factory, "sB", "21BCE0071", "PAY-071")
    await admin_service.confirm_booking(session_factory, "E1", "sB", "21BCE0071", "admin-1")

    pending = await admin_service.list_bookings(db_session, status="pending")
    assert [b.roll_number for b in pending] == ["21BCE0070"]

    everything = await admin_service.list_bookings(db_session, event_id="E1")
    assert len(everything) == 2

    with pytest.raises(InvalidArgumentError):
        await admin_service.list_bookings(db_session, status="cancelled")


@pytest.mark.asyncio
async def test_stats(session_factory, workshop, db_session):
    await _book(session_factory, "sA", "21BCE0080", "PAY-080")
    await _book(session_factory, "sA", "21BCE0081", "PAY-081")
    await _book(session_factory, "sB", "21BCE0082", "PAY-082")
    await admin_service.confirm_booking(session_factory, "E1", "sA", "21BCE0080", "admin-1")
    await admin_service.confirm_booking(session_factory, "E1", "sA", "21BCE0081", "admin-1")
    await admin_service.reject_booking(session_factory, "E1", "sB", "21BCE0082", "admin-1")

    stats = await admin_service.get_stats(db_session, event_id="E1")

    assert stats.total_bookings == 3
    assert stats.pending_bookings == 0
    assert stats.confirmed_bookings == 2
    assert stats.rejected_bookings == 1
    assert stats.total_revenue == 400


@pytest.mark.asyncio
async def test_occupancy_report_matches_bookings(session_factory, workshop, db_session):
    await _book(session_factory, "sA", "21BCE0090", "PAY-090")
    await _book(session_factory, "sA", "21BCE0091", "PAY-091")
    await _book(session_factory, "sC", "21BCE0092", "PAY-092")
    await admin_service.reject_booking(session_factory, "E1", "sA", "21BCE0091", "admin-1")

    report = {row.slot_id: row for row in await admin_service.check_occupancy(db_session, "E1")}

    assert report["sA"].current_bookings == report["sA"].active_bookings == 1
    assert report["sC"].current_bookings == 1
    assert all(row.consistent for row in report.values())

    with pytest.raises(NotFoundError):
        await admin_service.check_occupancy(db_session, "E404")
