"""Unit of Work: one all-or-nothing database transaction per piece of work."""

import logging
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .database import async_session_factory
from .retry import VersionConflict

logger = logging.getLogger(__name__)

T = TypeVar("T")

Work = Callable[[AsyncSession], Awaitable[T]]


class UnitOfWork:
    """
    Runs a unit of work inside a single transaction on a fresh session.

    Every row change made by the work is committed together, or none is:
    an exception rolls back and propagates, and a VersionConflict result
    rolls back and is handed to the caller so it can retry.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def run(self, work: Work[T]) -> T:
        """
        Execute ``work`` in a new transaction.

        Args:
            work: Coroutine function receiving the transaction's session

        Returns:
            Whatever the work returned
        """
        async with self.session_factory() as session:
            try:
                result = await work(session)
            except Exception:
                await session.rollback()
                raise

            if isinstance(result, VersionConflict):
                await session.rollback()
                logger.debug(
                    "Unit of work rolled back after version conflict",
                    extra={"resource_id": result.resource_id}
                )
                return result

            await session.commit()
            return result


def get_unit_of_work() -> UnitOfWork:
    """FastAPI dependency returning a unit of work bound to the application database."""
    return UnitOfWork(async_session_factory)
