"""Booking reference generation."""

import logging
import secrets
from typing import Callable, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ReferenceGenerationExhausted
from ..models.booking import Booking

logger = logging.getLogger(__name__)

# Uppercase letters and digits without the look-alikes 0/O and 1/I
REFERENCE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
REFERENCE_LENGTH = 6


def generate_reference(choice: Callable[[Sequence[str]], str] = secrets.choice) -> str:
    """Draw one random booking reference."""
    return "".join(choice(REFERENCE_ALPHABET) for _ in range(REFERENCE_LENGTH))


class ReferenceGenerator:
    """
    Produces booking references not used by any existing booking.

    Uniqueness is checked on the caller's session, so the check runs inside
    the same transaction that inserts the booking. The unique index on
    ``bookings.booking_ref`` backs this up for concurrent inserts.
    """

    def __init__(
        self,
        db: AsyncSession,
        max_attempts: int = 10,
        choice: Callable[[Sequence[str]], str] = secrets.choice,
    ):
        self.db = db
        self.max_attempts = max_attempts
        self.choice = choice

    async def reference_exists(self, booking_ref: str) -> bool:
        stmt = select(Booking.id).where(Booking.booking_ref == booking_ref)
        result = await self.db.execute(stmt)
        return result.first() is not None

    async def generate_unique_reference(self) -> str:
        """
        Return a reference no existing booking uses.

        Raises:
            ReferenceGenerationExhausted: If every draw collided
        """
        for attempt in range(1, self.max_attempts + 1):
            candidate = generate_reference(self.choice)
            if not await self.reference_exists(candidate):
                return candidate

            logger.warning(
                "Booking reference collision",
                extra={"booking_ref": candidate, "attempt": attempt}
            )

        raise ReferenceGenerationExhausted(self.max_attempts)
