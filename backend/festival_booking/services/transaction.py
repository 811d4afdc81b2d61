"""
Transaction runner with bounded retry on write conflicts.

Every attempt gets its own session and its own transaction, so a retry
always starts from a fresh read. Business errors (BookingError) are final
and re-raised untouched: retrying cannot change their outcome. Conflicts
caused by concurrent writers are retried:

- StaleSlotError: our versioned slot UPDATE matched no row
- IntegrityError: a concurrent commit inserted the same marker, payment
  or booking key first
- serialization failure / deadlock (SQLSTATE 40001 / 40P01)
- SQLite "database is locked"

Anything else (pool timeouts, lost connections, driver connect errors) and
running out of attempts become InternalError.
"""

import asyncio
import random
from typing import Awaitable, Callable, Optional, TypeVar

from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from festival_booking.core.config import get_settings
from festival_booking.core.errors import BookingError, InternalError, StaleSlotError
from festival_booking.core.logging import get_logger
from festival_booking.core.metrics import record_transaction_retry

logger = get_logger(__name__)

T = TypeVar("T")

_RETRYABLE_SQLSTATES = {"40001", "40P01"}


def retry_reason(exc: BaseException) -> Optional[str]:
    """Why `exc` is worth another attempt, or None if it is not."""
    if isinstance(exc, StaleSlotError):
        return "version_conflict"
    if isinstance(exc, IntegrityError):
        return "unique_conflict"
    if isinstance(exc, DBAPIError):
        orig = exc.orig
        sqlstate = (
            getattr(orig, "sqlstate", None)
            or getattr(orig, "pgcode", None)
            or getattr(getattr(orig, "__cause__", None), "sqlstate", None)
        )
        if sqlstate in _RETRYABLE_SQLSTATES:
            return "serialization_failure"
        if "database is locked" in str(orig):
            return "database_locked"
    return None


def _backoff(attempt: int, base_delay: float) -> float:
    return base_delay * (2 ** (attempt - 1)) * (1 + random.random())


async def run_transaction(
    session_factory: async_sessionmaker[AsyncSession],
    work: Callable[[AsyncSession], Awaitable[T]],
    *,
    operation: str,
    max_attempts: Optional[int] = None,
) -> T:
    settings = get_settings()
    attempts = max_attempts or settings.BOOKING_MAX_RETRY_ATTEMPTS

    for attempt in range(1, attempts + 1):
        try:
            async with session_factory() as session:
                async with session.begin():
                    return await work(session)
        except BookingError:
            raise
        except (StaleSlotError, SQLAlchemyError, OSError) as exc:
            reason = retry_reason(exc)
            if reason is None:
                logger.error(
                    "transaction_failed",
                    operation=operation,
                    attempt=attempt,
                    error=str(exc),
                )
                raise InternalError() from exc

            record_transaction_retry(operation, reason)
            logger.info(
                "transaction_retry",
                operation=operation,
                attempt=attempt,
                reason=reason,
            )
            if attempt < attempts:
                await asyncio.sleep(_backoff(attempt, settings.BOOKING_RETRY_BASE_DELAY))

    logger.error("transaction_retries_exhausted", operation=operation, attempts=attempts)
    raise InternalError()
