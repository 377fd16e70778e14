"""Schedule router for route and trip management operations."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..core.dependencies import get_schedule_service
from ..core.exceptions import InternalServerError, ProblemDetailsException
from ..schemas.common import Money
from ..schemas.schedule import CreateRouteRequest, CreateTripRequest, Route, Trip
from ..services.schedule_service import ScheduleService

logger = logging.getLogger(__name__)

route_router = APIRouter(prefix="/v1/route", tags=["schedule"])
trip_router = APIRouter(prefix="/v1/trip", tags=["schedule"])

SCHEDULE_SERVICE_DEPENDENCY = Depends(get_schedule_service)


def _convert_route_to_schema(route_model) -> Route:
    """Convert route model to schema."""
    return Route(
        id=str(route_model.id),
        origin=route_model.origin,
        destination=route_model.destination,
        distance_km=route_model.distance_km
    )


def _convert_trip_to_schema(trip_model) -> Trip:
    """Convert trip model to schema with Money conversion."""
    return Trip(
        id=str(trip_model.id),
        route_id=str(trip_model.route_id),
        departure_time=trip_model.departure_time,
        arrival_time=trip_model.arrival_time,
        days_of_week=trip_model.days_of_week,
        base_price=Money(
            amount=trip_model.base_price_amount,
            currency=trip_model.price_currency
        ),
        capacity=trip_model.capacity
    )


@route_router.post("/create", response_model=Route)
async def create_route(
    request: CreateRouteRequest,
    schedule_service: ScheduleService = SCHEDULE_SERVICE_DEPENDENCY
) -> JSONResponse:
    """Create a route between two places."""
    try:
        route = await schedule_service.create_route(request)
        response_data = _convert_route_to_schema(route)

        return JSONResponse(
            status_code=200,
            content=response_data.model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in route creation",
            extra={
                "origin": request.origin,
                "destination": request.destination,
                "error": str(e)
            },
            exc_info=True
        )
        raise InternalServerError()


@trip_router.post("/create", response_model=Trip)
async def create_trip(
    request: CreateTripRequest,
    schedule_service: ScheduleService = SCHEDULE_SERVICE_DEPENDENCY
) -> JSONResponse:
    """Create a scheduled trip with a timetable and fare on a route."""
    try:
        trip = await schedule_service.create_trip(request)
        response_data = _convert_trip_to_schema(trip)

        return JSONResponse(
            status_code=200,
            content=response_data.model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in trip creation",
            extra={
                "route_id": request.route_id,
                "error": str(e)
            },
            exc_info=True
        )
        raise InternalServerError()
