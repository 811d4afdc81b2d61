"""
Pytest fixtures for the test database, client, and seeded events.

Each test gets its own SQLite file (aiosqlite) so that concurrent bookings
really run on separate connections and contend for the database lock.
"""

import os

os.environ["ENVIRONMENT"] = "test"
os.environ["REDIS_ENABLED"] = "false"
os.environ["NOTIFICATION_BACKEND"] = "null"

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from festival_booking.main import app
from festival_booking.db.base import Base
from festival_booking.db.session import build_engine, build_session_factory, get_session_factory
from festival_booking.models.event import Event
from festival_booking.schemas.booking import ParticipantIn
from festival_booking.schemas.event import EventCreate, SlotCreate
from festival_booking.services import event_service
from festival_booking.services.interfaces import BookingNotification, NotificationDispatcher
from festival_booking.services.notification_service import get_notifier


class RecordingNotifier(NotificationDispatcher):
    def __init__(self):
        self.sent: list[BookingNotification] = []

    async def notify(self, notification: BookingNotification) -> None:
        self.sent.append(notification)


class FailingNotifier(NotificationDispatcher):
    async def notify(self, notification: BookingNotification) -> None:
        raise ConnectionError("mail server unreachable")


def make_participant(roll_number: str, **overrides) -> ParticipantIn:
    data = {
        "name": "Asha Verma",
        "email": f"{roll_number.strip().lower()}@college.edu",
        "phone": "9876543210",
        "rollNumber": roll_number,
    }
    data.update(overrides)
    return ParticipantIn(**data)


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Fresh schema in a per-test database file."""
    test_engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'festival.db'}")
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(engine)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """A read session for assertions; opened after the code under test has committed."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def workshop(session_factory) -> Event:
    """
    Robotics workshop E1:
    sA (10:00 AM, 4 seats), sB (2:00 PM, 4 seats), sC (5:00 PM, 1 seat).
    """
    return await event_service.create_event(
        session_factory,
        EventCreate(
            id="E1",
            name="Robotics Workshop",
            kind="workshop",
            price=200,
            slots=[
                SlotCreate(slot_id="sA", time_label="10:00 AM", max_capacity=4),
                SlotCreate(slot_id="sB", time_label="2:00 PM", max_capacity=4),
                SlotCreate(slot_id="sC", time_label="5:00 PM", max_capacity=1),
            ],
        ),
    )


@pytest_asyncio.fixture
async def game(session_factory) -> Event:
    """Free game G1 with a single default-capacity slot."""
    return await event_service.create_event(
        session_factory,
        EventCreate(
            id="G1",
            name="Treasure Hunt",
            kind="game",
            price=0,
            slots=[SlotCreate(slot_id="g1", time_label="11:00 AM")],
        ),
    )


@pytest_asyncio.fixture
async def inactive_event(session_factory) -> Event:
    return await event_service.create_event(
        session_factory,
        EventCreate(
            id="OLD",
            name="Cancelled Workshop",
            is_active=False,
            slots=[SlotCreate(slot_id="s1", time_label="9:00 AM", max_capacity=4)],
        ),
    )


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest_asyncio.fixture(scope="function")
async def client(session_factory, notifier) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client wired to the per-test database and a recording notifier."""
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_notifier] = lambda: notifier

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
