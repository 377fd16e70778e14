"""Optimistic seat reservation protocol."""

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import DepartureUnavailableError, InsufficientCapacityError, NotFoundError
from ..core.retry import VersionConflict
from .inventory_store import InventorySnapshot, InventoryStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reservation:
    """
    Seats taken by a successful conditional write.

    Only valid inside the transaction that made it: the booking that uses
    these seats must be committed in the same unit of work, or the seats
    are rolled back with it.
    """

    departure_id: UUID
    seats: int
    version_before: int
    version_after: int
    snapshot: InventorySnapshot

    @property
    def available_seats_after(self) -> int:
        return self.snapshot.available_seats - self.seats


@dataclass(frozen=True)
class Release:
    """Seats returned to a departure by a successful conditional write."""

    departure_id: UUID
    seats: int
    version_before: int
    version_after: int


class ReservationProtocol:
    """Read, check and conditionally write a departure's seat inventory."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.store = InventoryStore(db)

    async def reserve(self, departure_id: UUID, passenger_count: int) -> Reservation | VersionConflict:
        """
        Take ``passenger_count`` seats from a departure in a single attempt.

        Args:
            departure_id: Departure to reserve on
            passenger_count: Number of seats, must be positive

        Returns:
            Reservation on success, VersionConflict if another writer changed
            the row between the read and the conditional write

        Raises:
            ValueError: If passenger_count is not a positive integer
            NotFoundError: If the departure does not exist
            DepartureUnavailableError: If the departure is not active
            InsufficientCapacityError: If fewer seats remain than requested
        """
        if isinstance(passenger_count, bool) or not isinstance(passenger_count, int) or passenger_count < 1:
            raise ValueError(f"passenger_count must be a positive integer, got {passenger_count!r}")

        snapshot = await self.store.get_snapshot(departure_id)

        if snapshot is None:
            raise NotFoundError(resource_type="departure", resource_id=str(departure_id))

        if not snapshot.is_active:
            logger.info(
                "Reservation refused - departure not active",
                extra={"departure_id": str(departure_id), "status": snapshot.status}
            )
            raise DepartureUnavailableError(departure_id=str(departure_id), status=snapshot.status)

        if snapshot.available_seats < passenger_count:
            logger.info(
                "Reservation refused - insufficient capacity",
                extra={
                    "departure_id": str(departure_id),
                    "requested_seats": passenger_count,
                    "available_seats": snapshot.available_seats,
                }
            )
            raise InsufficientCapacityError(
                departure_id=str(departure_id),
                requested_seats=passenger_count,
                available_seats=snapshot.available_seats,
            )

        updated = await self.store.adjust_seats_if_version(
            departure_id, expected_version=snapshot.version, seat_delta=-passenger_count
        )
        if not updated:
            return VersionConflict(resource_id=str(departure_id), expected_version=snapshot.version)

        return Reservation(
            departure_id=departure_id,
            seats=passenger_count,
            version_before=snapshot.version,
            version_after=snapshot.version + 1,
            snapshot=snapshot,
        )

    async def release(self, departure_id: UUID, seats: int) -> Release | VersionConflict:
        """
        Return ``seats`` to a departure in a single attempt.

        The departure's status is not checked: seats from a cancelled booking
        go back to the inventory whatever state the departure is in.

        Raises:
            ValueError: If seats is not positive
            NotFoundError: If the departure does not exist
        """
        if seats < 1:
            raise ValueError(f"seats must be positive, got {seats!r}")

        snapshot = await self.store.get_snapshot(departure_id)
        if snapshot is None:
            raise NotFoundError(resource_type="departure", resource_id=str(departure_id))

        updated = await self.store.adjust_seats_if_version(
            departure_id, expected_version=snapshot.version, seat_delta=seats
        )
        if not updated:
            return VersionConflict(resource_id=str(departure_id), expected_version=snapshot.version)

        return Release(
            departure_id=departure_id,
            seats=seats,
            version_before=snapshot.version,
            version_after=snapshot.version + 1,
        )
