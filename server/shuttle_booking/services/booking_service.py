"""Booking service: reserve-and-book, cancellation and lookup."""

import logging
from functools import partial
from typing import Sequence
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.attributes import set_committed_value

from ..core.config import settings
from ..core.exceptions import (
    DepartureUnavailableError,
    InsufficientCapacityError,
    InventoryIntegrityError,
    NotFoundError,
    parse_resource_id,
)
from ..core.observability import metrics_collector
from ..core.retry import VersionConflict, with_retry
from ..core.unit_of_work import UnitOfWork
from ..models.booking import Booking, BookingStatus, Passenger
from ..models.route import utcnow
from ..schemas.booking import PassengerRequest, ReserveBookingRequest
from .inventory_store import InventoryStore
from .reference_service import ReferenceGenerator
from .reservation import Reservation, ReservationProtocol

logger = logging.getLogger(__name__)


class BookingService:
    """
    Service for booking operations.

    Every write runs as one unit of work per attempt and is retried on
    version conflicts: the seat decrement, the booking row and its
    passenger rows are committed together or not at all.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        max_attempts: int | None = None,
        retry_delay: float | None = None,
        reference_attempts: int | None = None,
    ):
        self.uow = uow
        self.max_attempts = max_attempts if max_attempts is not None else settings.reservation_max_attempts
        self.retry_delay = retry_delay if retry_delay is not None else settings.reservation_retry_delay_seconds
        self.reference_attempts = (
            reference_attempts if reference_attempts is not None else settings.reference_max_attempts
        )

    async def reserve_and_book(self, request: ReserveBookingRequest) -> Booking:
        """
        Reserve one seat per passenger and create the booking.

        Args:
            request: Booking request with departure, passengers and contact

        Returns:
            The confirmed booking with its passengers

        Raises:
            NotFoundError: If the departure does not exist
            DepartureUnavailableError: If the departure is not active
            InsufficientCapacityError: If not enough seats remain
            ContentionError: If every attempt lost a version race
        """
        departure_id = parse_resource_id(request.departure_id, "departure")

        async def attempt():
            return await self.uow.run(partial(self._reserve_and_commit, departure_id=departure_id, request=request))

        try:
            booking = await with_retry(attempt, max_attempts=self.max_attempts, base_delay=self.retry_delay)
        except InsufficientCapacityError:
            metrics_collector.record_booking_rejected("insufficient_capacity")
            raise
        except DepartureUnavailableError:
            metrics_collector.record_booking_rejected("unavailable")
            raise
        except NotFoundError:
            metrics_collector.record_booking_rejected("not_found")
            raise

        metrics_collector.record_booking_confirmed(booking.seats)
        logger.info(
            "Booking confirmed successfully",
            extra={
                "booking_id": str(booking.id),
                "booking_ref": booking.booking_ref,
                "departure_id": str(departure_id),
                "seats": booking.seats,
                "total_price_amount": booking.total_price_amount,
            }
        )
        return booking

    async def _reserve_and_commit(
        self,
        session: AsyncSession,
        departure_id: UUID,
        request: ReserveBookingRequest,
    ) -> Booking | VersionConflict:
        reservation = await ReservationProtocol(session).reserve(departure_id, len(request.passengers))
        if isinstance(reservation, VersionConflict):
            return reservation

        return await self.commit(
            session,
            reservation,
            passengers=request.passengers,
            contact_email=str(request.contact_email),
            contact_phone=request.contact_phone,
        )

    async def commit(
        self,
        session: AsyncSession,
        reservation: Reservation,
        passengers: Sequence[PassengerRequest],
        contact_email: str,
        contact_phone: str,
    ) -> Booking:
        """
        Persist the booking for a reservation made on the same session.

        Must run inside the transaction that made the reservation.

        Raises:
            InventoryIntegrityError: If the inventory row no longer matches the reservation
            ReferenceGenerationExhausted: If no unused reference could be drawn
        """
        if len(passengers) != reservation.seats:
            raise InventoryIntegrityError(
                f"Reservation holds {reservation.seats} seats for {len(passengers)} passengers"
            )

        current = await InventoryStore(session).get_snapshot(reservation.departure_id)
        if (
            current is None
            or current.version != reservation.version_after
            or current.available_seats != reservation.available_seats_after
        ):
            logger.error(
                "Inventory row does not match reservation",
                extra={
                    "departure_id": str(reservation.departure_id),
                    "expected_version": reservation.version_after,
                    "actual_version": current.version if current else None,
                }
            )
            raise InventoryIntegrityError(
                f"Departure {reservation.departure_id} changed inside the reserving transaction"
            )

        booking_ref = await ReferenceGenerator(
            session, max_attempts=self.reference_attempts
        ).generate_unique_reference()

        snapshot = reservation.snapshot
        booking = Booking(
            departure_id=reservation.departure_id,
            booking_ref=booking_ref,
            status=BookingStatus.CONFIRMED.value,
            seats=reservation.seats,
            total_price_amount=snapshot.base_price_amount * reservation.seats,
            price_currency=snapshot.price_currency,
            contact_email=contact_email,
            contact_phone=contact_phone,
            passengers=[
                Passenger(
                    position=position,
                    first_name=passenger.first_name,
                    last_name=passenger.last_name,
                    email=str(passenger.email) if passenger.email else None,
                    phone=passenger.phone or None,
                )
                for position, passenger in enumerate(passengers)
            ],
        )
        session.add(booking)
        try:
            await session.flush()
        except IntegrityError:
            # A concurrent transaction may have inserted the same reference after our check
            logger.error(
                "Booking insert rejected by a unique constraint, possibly a concurrent booking_ref collision",
                extra={"booking_ref": booking_ref, "departure_id": str(reservation.departure_id)}
            )
            raise

        return booking

    async def cancel_booking(self, booking_ref: str) -> Booking:
        """
        Cancel a booking and return its seats to the departure.

        Cancelling an already cancelled booking returns it unchanged.

        Args:
            booking_ref: Reference of the booking to cancel

        Returns:
            The cancelled booking

        Raises:
            NotFoundError: If no booking has this reference
            ContentionError: If every attempt lost a version race
        """
        booking_ref = booking_ref.strip().upper()

        async def attempt():
            return await self.uow.run(partial(self._cancel_once, booking_ref=booking_ref))

        booking, cancelled_now = await with_retry(
            attempt, max_attempts=self.max_attempts, base_delay=self.retry_delay
        )

        if not cancelled_now:
            logger.info(
                "Booking already cancelled - returning existing booking",
                extra={"booking_ref": booking_ref}
            )
            return booking

        metrics_collector.record_booking_cancelled()
        logger.info(
            "Booking cancelled successfully",
            extra={
                "booking_id": str(booking.id),
                "booking_ref": booking.booking_ref,
                "departure_id": str(booking.departure_id),
                "seats_restored": booking.seats,
            }
        )
        return booking

    async def _cancel_once(
        self,
        session: AsyncSession,
        booking_ref: str,
    ) -> tuple[Booking, bool] | VersionConflict:
        booking = await self._load_booking(session, booking_ref)
        if booking is None:
            raise NotFoundError(resource_type="booking", resource_id=booking_ref)

        if booking.status == BookingStatus.CANCELLED.value:
            return booking, False

        now = utcnow()
        stmt = (
            update(Booking)
            .where(Booking.id == booking.id, Booking.status == BookingStatus.CONFIRMED.value)
            .values(status=BookingStatus.CANCELLED.value, cancelled_at=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        if result.rowcount == 0:
            # Cancelled by a concurrent request after we read it
            booking = await self._load_booking(session, booking_ref, refresh=True)
            return booking, False

        release = await ReservationProtocol(session).release(booking.departure_id, booking.seats)
        if isinstance(release, VersionConflict):
            return release

        set_committed_value(booking, "status", BookingStatus.CANCELLED.value)
        set_committed_value(booking, "cancelled_at", now)
        set_committed_value(booking, "updated_at", now)
        return booking, True

    async def get_booking(self, booking_ref: str) -> Booking:
        """
        Get a booking and its passengers by reference.

        Raises:
            NotFoundError: If no booking has this reference
        """
        booking_ref = booking_ref.strip().upper()

        async def load(session: AsyncSession) -> Booking | None:
            return await self._load_booking(session, booking_ref)

        booking = await self.uow.run(load)
        if booking is None:
            logger.warning("Booking not found", extra={"booking_ref": booking_ref})
            raise NotFoundError(resource_type="booking", resource_id=booking_ref)
        return booking

    async def _load_booking(self, session: AsyncSession, booking_ref: str, refresh: bool = False) -> Booking | None:
        stmt = (
            select(Booking)
            .options(selectinload(Booking.passengers))
            .where(Booking.booking_ref == booking_ref)
        )
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()
