"""
Tests for the transaction runner's retry policy.
"""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.exc import TimeoutError as SATimeoutError

from festival_booking.core.errors import InternalError, SlotFullError, StaleSlotError
from festival_booking.services.transaction import retry_reason, run_transaction


class _FakeDriverError(Exception):
    def __init__(self, message, sqlstate=None):
        super().__init__(message)
        self.sqlstate = sqlstate


def test_retry_reasons():
    assert retry_reason(StaleSlotError("E1", "sA")) == "version_conflict"
    assert retry_reason(IntegrityError("INSERT", {}, Exception("UNIQUE"))) == "unique_conflict"
    assert retry_reason(
        OperationalError("UPDATE", {}, _FakeDriverError("could not serialize", "40001"))
    ) == "serialization_failure"
    assert retry_reason(
        OperationalError("BEGIN", {}, _FakeDriverError("database is locked"))
    ) == "database_locked"
    assert retry_reason(OperationalError("SELECT", {}, _FakeDriverError("disk I/O error"))) is None
    assert retry_reason(ValueError("nope")) is None


@pytest.mark.asyncio
async def test_stale_version_is_retried(session_factory):
    calls = []

    async def work(db):
        calls.append(db)
        if len(calls) < 3:
            raise StaleSlotError("E1", "sA")
        return "booked"

    assert await run_transaction(session_factory, work, operation="test") == "booked"
    assert len(calls) == 3
    # every attempt gets a fresh session
    assert len({id(db) for db in calls}) == 3


@pytest.mark.asyncio
async def test_business_errors_are_not_retried(session_factory):
    calls = []

    async def work(db):
        calls.append(db)
        raise SlotFullError()

    with pytest.raises(SlotFullError):
        await run_transaction(session_factory, work, operation="test")
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_exhausted_retries_become_internal(session_factory):
    calls = []

    async def work(db):
        calls.append(db)
        raise StaleSlotError("E1", "sA")

    with pytest.raises(InternalError) as exc_info:
        await run_transaction(session_factory, work, operation="test", max_attempts=2)

    assert len(calls) == 2
    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_unexpected_database_error_is_internal(session_factory):
    async def work(db):
        raise OperationalError("SELECT", {}, _FakeDriverError("disk I/O error"))

    with pytest.raises(InternalError):
        await run_transaction(session_factory, work, operation="test")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "failure",
    [
        SATimeoutError("QueuePool limit of size 20 overflow 10 reached"),
        ConnectionRefusedError(111, "Connection refused"),
    ],
)
async def test_connection_failures_are_internal(failure):
    """Pool exhaustion and refused connections surface as InternalError."""
    session_factory = MagicMock(side_effect=failure)

    async def work(db):
        return "never"

    with pytest.raises(InternalError) as exc_info:
        await run_transaction(session_factory, work, operation="test")

    assert exc_info.value.__cause__ is failure
    session_factory.assert_called_once()
