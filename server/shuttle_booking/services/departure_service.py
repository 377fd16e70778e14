"""Departure service for business logic operations."""

import logging
from functools import partial
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.exceptions import ConflictError, InvalidStatusTransitionError, NotFoundError, parse_resource_id
from ..core.retry import VersionConflict, with_retry
from ..models.departure import Departure, DepartureStatus
from ..models.route import Route, Trip
from ..schemas.common import Money
from ..schemas.departure import (
    CreateDepartureRequest,
    DepartureSearchResult,
    SearchDeparturesRequest,
    SearchDeparturesResponse,
)
from .inventory_store import InventoryStore
from .schedule_service import ScheduleService

logger = logging.getLogger(__name__)

# Allowed lifecycle moves; cancelled is terminal
ALLOWED_STATUS_TRANSITIONS = {
    DepartureStatus.ACTIVE.value: {DepartureStatus.CLOSED.value, DepartureStatus.CANCELLED.value},
    DepartureStatus.CLOSED.value: {DepartureStatus.ACTIVE.value, DepartureStatus.CANCELLED.value},
    DepartureStatus.CANCELLED.value: set(),
}


class DepartureService:
    """Service for departure-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.schedule_service = ScheduleService(db)

    async def create_departure(self, request: CreateDepartureRequest) -> Departure:
        """
        Create a new dated departure of a trip.

        The departure starts active, fully available and at version 0.

        Args:
            request: Departure creation request

        Returns:
            Created departure entity

        Raises:
            NotFoundError: If trip not found
            ConflictError: If the trip already has a departure on that date
        """
        trip_id = parse_resource_id(request.trip_id, "trip")
        trip = await self.schedule_service.get_trip_by_id_or_raise(trip_id)

        existing = await self.get_departure_by_trip_and_date(trip_id, request.departure_date)
        if existing:
            logger.warning(
                "Departure creation failed - date already scheduled",
                extra={
                    "trip_id": str(trip_id),
                    "departure_date": request.departure_date.isoformat(),
                    "existing_departure_id": str(existing.id),
                }
            )
            raise ConflictError(
                detail=f"Trip {trip_id} already has a departure on {request.departure_date.isoformat()}",
                conflicting_resource={"id": str(existing.id)},
            )

        capacity = request.capacity if request.capacity is not None else trip.capacity
        departure = Departure(
            trip_id=trip_id,
            departure_date=request.departure_date,
            capacity=capacity,
            available_seats=capacity,
            version=0,
            status=DepartureStatus.ACTIVE.value,
        )

        try:
            self.db.add(departure)
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.error(
                "Departure creation failed due to integrity constraint",
                extra={
                    "trip_id": str(trip_id),
                    "departure_date": request.departure_date.isoformat(),
                    "error": str(e),
                }
            )
            raise ConflictError(detail="Departure creation failed due to constraint violation")

        logger.info(
            "Departure created successfully",
            extra={
                "departure_id": str(departure.id),
                "trip_id": str(departure.trip_id),
                "departure_date": departure.departure_date.isoformat(),
                "capacity": departure.capacity,
            }
        )

        return departure

    async def search_departures(self, request: SearchDeparturesRequest) -> SearchDeparturesResponse:
        """
        Search bookable departures between two places.

        Origin and destination match as case-insensitive substrings. Only
        active departures with at least one free seat are returned. Seat
        counts are read without coordination and may be stale by the time
        a booking is attempted.

        Args:
            request: Search criteria

        Returns:
            Matching departures ordered by date and departure time
        """
        date_to = request.date_to or request.date_from

        stmt = (
            select(Departure, Trip, Route)
            .join(Trip, Trip.id == Departure.trip_id)
            .join(Route, Route.id == Trip.route_id)
            .where(
                Route.origin.icontains(request.origin.strip(), autoescape=True),
                Route.destination.icontains(request.destination.strip(), autoescape=True),
                Departure.departure_date >= request.date_from,
                Departure.departure_date <= date_to,
                Departure.status == DepartureStatus.ACTIVE.value,
                Departure.available_seats > 0,
            )
            .order_by(Departure.departure_date, Trip.departure_time, Departure.id)
            .limit(request.limit)
        )

        result = await self.db.execute(stmt)
        items = [
            DepartureSearchResult(
                departure_id=str(departure.id),
                trip_id=str(trip.id),
                origin=route.origin,
                destination=route.destination,
                departure_date=departure.departure_date,
                departure_time=trip.departure_time,
                arrival_time=trip.arrival_time,
                price=Money(amount=trip.base_price_amount, currency=trip.price_currency),
                available_seats=departure.available_seats,
                distance_km=route.distance_km,
            )
            for departure, trip, route in result.all()
        ]

        logger.info(
            "Departure search completed",
            extra={
                "total_found": len(items),
                "filters": {
                    "origin": request.origin,
                    "destination": request.destination,
                    "date_from": request.date_from.isoformat(),
                    "date_to": date_to.isoformat(),
                }
            }
        )

        return SearchDeparturesResponse(items=items)

    async def change_status(self, departure_id: UUID, status: str) -> Departure:
        """
        Move a departure to a new lifecycle status.

        The change is a conditional write on the inventory version and is
        retried on conflicts like any seat change. Requesting the current
        status is a no-op.

        Raises:
            NotFoundError: If departure not found
            InvalidStatusTransitionError: If the move is not allowed
            ContentionError: If every attempt lost a version race
        """
        changed = await with_retry(
            partial(self._change_status_once, departure_id=departure_id, status=status),
            max_attempts=settings.reservation_max_attempts,
            base_delay=settings.reservation_retry_delay_seconds,
        )

        departure = await self.get_departure_by_id_or_raise(departure_id, refresh=True)
        if changed:
            logger.info(
                "Departure status changed",
                extra={
                    "departure_id": str(departure_id),
                    "status": departure.status,
                    "version": departure.version,
                }
            )
        return departure

    async def _change_status_once(self, departure_id: UUID, status: str) -> bool | VersionConflict:
        store = InventoryStore(self.db)
        try:
            snapshot = await store.get_snapshot(departure_id)
            if snapshot is None:
                raise NotFoundError(resource_type="departure", resource_id=str(departure_id))

            if snapshot.status == status:
                await self.db.rollback()
                return False

            if status not in ALLOWED_STATUS_TRANSITIONS[snapshot.status]:
                raise InvalidStatusTransitionError(
                    departure_id=str(departure_id),
                    current_status=snapshot.status,
                    requested_status=status,
                )

            updated = await store.set_status_if_version(departure_id, snapshot.version, status)
            if not updated:
                await self.db.rollback()
                return VersionConflict(resource_id=str(departure_id), expected_version=snapshot.version)

            await self.db.commit()
            return True
        except Exception:
            await self.db.rollback()
            raise

    async def get_departure_by_id(self, departure_id: UUID, refresh: bool = False) -> Optional[Departure]:
        """
        Get departure by ID.

        Args:
            departure_id: Departure ID to search for
            refresh: Reload attributes already held by the session

        Returns:
            Departure if found, None otherwise
        """
        stmt = select(Departure).where(Departure.id == departure_id)
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_departure_by_id_or_raise(self, departure_id: UUID, refresh: bool = False) -> Departure:
        """
        Get departure by ID or raise NotFoundError.

        Raises:
            NotFoundError: If departure not found
        """
        departure = await self.get_departure_by_id(departure_id, refresh=refresh)
        if not departure:
            logger.warning(
                "Departure not found",
                extra={"departure_id": str(departure_id)}
            )
            raise NotFoundError(
                resource_type="departure",
                resource_id=str(departure_id)
            )
        return departure

    async def get_departure_by_trip_and_date(self, trip_id: UUID, departure_date) -> Optional[Departure]:
        stmt = select(Departure).where(
            Departure.trip_id == trip_id,
            Departure.departure_date == departure_date,
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()
