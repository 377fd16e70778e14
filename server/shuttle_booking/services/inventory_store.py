"""Departure inventory store: snapshots and conditional writes."""

import logging
from dataclasses import dataclass
from datetime import date
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.departure import Departure, DepartureStatus
from ..models.route import Trip, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InventorySnapshot:
    """Point-in-time view of one departure's inventory row."""

    departure_id: UUID
    trip_id: UUID
    departure_date: date
    capacity: int
    available_seats: int
    version: int
    status: str
    base_price_amount: int
    price_currency: str

    @property
    def is_active(self) -> bool:
        return self.status == DepartureStatus.ACTIVE.value


class InventoryStore:
    """
    Storage access for departure inventory rows.

    This is the only code that writes ``available_seats``, ``version`` or
    ``status``. Every write is conditional on the version the caller read,
    and every successful write increments the version by one.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_snapshot(self, departure_id: UUID) -> InventorySnapshot | None:
        """
        Read the current inventory row for a departure.

        Columns are selected directly so that the result never comes from
        the session's identity map and always reflects the database.

        Args:
            departure_id: Departure to read

        Returns:
            Snapshot if the departure exists, None otherwise
        """
        stmt = (
            select(
                Departure.id,
                Departure.trip_id,
                Departure.departure_date,
                Departure.capacity,
                Departure.available_seats,
                Departure.version,
                Departure.status,
                Trip.base_price_amount,
                Trip.price_currency,
            )
            .join(Trip, Trip.id == Departure.trip_id)
            .where(Departure.id == departure_id)
        )
        result = await self.db.execute(stmt)
        row = result.one_or_none()
        if row is None:
            return None

        return InventorySnapshot(
            departure_id=row.id,
            trip_id=row.trip_id,
            departure_date=row.departure_date,
            capacity=row.capacity,
            available_seats=row.available_seats,
            version=row.version,
            status=row.status,
            base_price_amount=row.base_price_amount,
            price_currency=row.price_currency,
        )

    async def adjust_seats_if_version(self, departure_id: UUID, expected_version: int, seat_delta: int) -> bool:
        """
        Add ``seat_delta`` to available seats if the row is still at ``expected_version``.

        Args:
            departure_id: Departure to update
            expected_version: Version observed by the caller
            seat_delta: Negative to reserve, positive to restock

        Returns:
            True if the row was updated, False if another writer got there first
        """
        stmt = (
            update(Departure)
            .where(Departure.id == departure_id, Departure.version == expected_version)
            .values(
                available_seats=Departure.available_seats + seat_delta,
                version=Departure.version + 1,
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        updated = result.rowcount == 1

        logger.debug(
            "Conditional seat update",
            extra={
                "departure_id": str(departure_id),
                "expected_version": expected_version,
                "seat_delta": seat_delta,
                "updated": updated,
            }
        )
        return updated

    async def set_status_if_version(self, departure_id: UUID, expected_version: int, status: str) -> bool:
        """
        Change the lifecycle status if the row is still at ``expected_version``.

        Args:
            departure_id: Departure to update
            expected_version: Version observed by the caller
            status: New status value

        Returns:
            True if the row was updated, False if another writer got there first
        """
        stmt = (
            update(Departure)
            .where(Departure.id == departure_id, Departure.version == expected_version)
            .values(status=status, version=Departure.version + 1, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount == 1
