"""Concurrency boundary for reservation writes.

Every write runs in its own transaction on a fresh session. Writes that put
an interval on a table first *observe* the guard row of ``(table_id, date)``,
read the blocking reservations, and finally *claim* the guard with a
compare-and-set on its version. Two writers that observed the same version
cannot both claim it, so one of them is rolled back and retried against the
new state. Reservation rows carry their own version for the same purpose.
"""

import asyncio
import random
from dataclasses import dataclass
from datetime import date
from typing import Awaitable, Callable, Optional, TypeVar
from uuid import UUID

import structlog
from sqlalchemy import insert, select, update
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tableturn.booking.errors import ConcurrencyConflict, TransactionConflict
from tableturn.models.reservation import TableDayGuard

logger = structlog.get_logger()

T = TypeVar("T")

# serialization_failure, deadlock_detected, lock_not_available
RETRYABLE_SQLSTATES = frozenset({"40001", "40P01", "55P03"})


def is_transient_db_error(exc: DBAPIError) -> bool:
    orig = getattr(exc, "orig", None)
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate in RETRYABLE_SQLSTATES:
        return True
    message = str(exc).lower()
    return "database is locked" in message or "deadlock detected" in message


@dataclass(frozen=True)
class GuardToken:
    """Version of a (table, date) guard as seen before reading the blocking set"""
    table_id: UUID
    day: date
    version: Optional[int]


class GuardScope:
    """Guard operations bound to the session of one attempt"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def observe(self, table_id: UUID, day: date) -> GuardToken:
        result = await self.session.execute(
            select(TableDayGuard.version).where(
                TableDayGuard.table_id == table_id,
                TableDayGuard.reservation_date == day,
            )
        )
        return GuardToken(table_id=table_id, day=day, version=result.scalar_one_or_none())

    async def claim(self, token: GuardToken) -> None:
        if token.version is None:
            try:
                await self.session.execute(
                    insert(TableDayGuard).values(
                        table_id=token.table_id,
                        reservation_date=token.day,
                        version=1,
                    )
                )
            except IntegrityError as exc:
                raise TransactionConflict("guard row created concurrently") from exc
            return

        result = await self.session.execute(
            update(TableDayGuard)
            .where(
                TableDayGuard.table_id == token.table_id,
                TableDayGuard.reservation_date == token.day,
                TableDayGuard.version == token.version,
            )
            .values(version=token.version + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise TransactionConflict("guard version moved")


class ConflictGuard:
    """Runs a unit of work atomically, retrying lost races with bounded backoff"""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        max_attempts: int = 5,
        base_delay_ms: int = 20,
        max_delay_ms: int = 500,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.session_factory = session_factory
        self.max_attempts = max_attempts
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms
        self._sleep = sleep

    def backoff(self, attempt: int) -> float:
        """Delay in seconds before retrying after ``attempt`` failed"""
        capped = min(self.max_delay_ms, self.base_delay_ms * (2 ** (attempt - 1)))
        return capped * random.uniform(0.5, 1.0) / 1000

    async def run(
        self,
        operation: str,
        work: Callable[[AsyncSession, GuardScope], Awaitable[T]],
        **log_context,
    ) -> T:
        for attempt in range(1, self.max_attempts + 1):
            try:
                async with self.session_factory() as session:
                    async with session.begin():
                        return await work(session, GuardScope(session))
            except TransactionConflict as exc:
                reason = str(exc)
            except DBAPIError as exc:
                if not is_transient_db_error(exc):
                    raise
                reason = exc.__class__.__name__

            if attempt < self.max_attempts:
                delay = self.backoff(attempt)
                logger.info(
                    "Transaction conflict, retrying",
                    operation=operation,
                    attempt=attempt,
                    reason=reason,
                    delay_ms=round(delay * 1000, 1),
                    **log_context,
                )
                await self._sleep(delay)

        logger.warning(
            "Retry budget exhausted",
            operation=operation,
            attempts=self.max_attempts,
            **log_context,
        )
        raise ConcurrencyConflict(
            "Too many concurrent changes, please try again",
            operation=operation,
            attempts=self.max_attempts,
        )
