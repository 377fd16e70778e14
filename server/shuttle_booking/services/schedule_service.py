"""Schedule service: routes and the trips that run on them."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ConflictError, NotFoundError, parse_resource_id
from ..models.route import Route, Trip
from ..schemas.schedule import CreateRouteRequest, CreateTripRequest

logger = logging.getLogger(__name__)


class ScheduleService:
    """Service for route and trip operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_route(self, request: CreateRouteRequest) -> Route:
        """
        Create a new route.

        Args:
            request: Route creation request

        Returns:
            Created route entity

        Raises:
            ConflictError: If a route with the same origin and destination exists
        """
        origin = request.origin.strip()
        destination = request.destination.strip()

        existing_route = await self.get_route_by_endpoints(origin, destination)
        if existing_route:
            logger.warning(
                "Route creation failed - route already exists",
                extra={
                    "origin": origin,
                    "destination": destination,
                    "existing_route_id": str(existing_route.id)
                }
            )
            raise self._route_conflict(existing_route)

        route = Route(origin=origin, destination=destination, distance_km=request.distance_km)

        try:
            self.db.add(route)
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.error(
                "Route creation failed due to integrity constraint",
                extra={"origin": origin, "destination": destination, "error": str(e)}
            )
            existing_route = await self.get_route_by_endpoints(origin, destination)
            if existing_route:
                raise self._route_conflict(existing_route)
            raise ConflictError(detail="Route creation failed due to constraint violation")

        logger.info(
            "Route created successfully",
            extra={
                "route_id": str(route.id),
                "origin": route.origin,
                "destination": route.destination
            }
        )
        return route

    async def create_trip(self, request: CreateTripRequest) -> Trip:
        """
        Create a scheduled trip on an existing route.

        Raises:
            NotFoundError: If route not found
        """
        route_id = parse_resource_id(request.route_id, "route")
        await self.get_route_by_id_or_raise(route_id)

        trip = Trip(
            route_id=route_id,
            departure_time=request.departure_time,
            arrival_time=request.arrival_time,
            days_of_week=request.days_of_week,
            base_price_amount=request.base_price.amount,
            price_currency=request.base_price.currency,
            capacity=request.capacity,
        )

        self.db.add(trip)
        await self.db.commit()

        logger.info(
            "Trip created successfully",
            extra={
                "trip_id": str(trip.id),
                "route_id": str(route_id),
                "departure_time": trip.departure_time,
                "capacity": trip.capacity
            }
        )
        return trip

    async def get_route_by_id(self, route_id: UUID) -> Optional[Route]:
        stmt = select(Route).where(Route.id == route_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_route_by_endpoints(self, origin: str, destination: str) -> Optional[Route]:
        stmt = select(Route).where(Route.origin == origin, Route.destination == destination)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_route_by_id_or_raise(self, route_id: UUID) -> Route:
        """
        Get route by ID or raise NotFoundError.

        Raises:
            NotFoundError: If route not found
        """
        route = await self.get_route_by_id(route_id)
        if not route:
            logger.warning("Route not found", extra={"route_id": str(route_id)})
            raise NotFoundError(resource_type="route", resource_id=str(route_id))
        return route

    async def get_trip_by_id(self, trip_id: UUID) -> Optional[Trip]:
        stmt = select(Trip).where(Trip.id == trip_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_trip_by_id_or_raise(self, trip_id: UUID) -> Trip:
        """
        Get trip by ID or raise NotFoundError.

        Raises:
            NotFoundError: If trip not found
        """
        trip = await self.get_trip_by_id(trip_id)
        if not trip:
            logger.warning("Trip not found", extra={"trip_id": str(trip_id)})
            raise NotFoundError(resource_type="trip", resource_id=str(trip_id))
        return trip

    @staticmethod
    def _route_conflict(route: Route) -> ConflictError:
        return ConflictError(
            detail=f"Route from '{route.origin}' to '{route.destination}' already exists",
            conflicting_resource={
                "id": str(route.id),
                "origin": route.origin,
                "destination": route.destination
            }
        )
