"""Departure router for departure management and search operations."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..core.dependencies import get_departure_service
from ..core.exceptions import InternalServerError, ProblemDetailsException, parse_resource_id
from ..schemas.departure import (
    ChangeDepartureStatusRequest,
    CreateDepartureRequest,
    Departure,
    GetDepartureRequest,
    SearchDeparturesRequest,
    SearchDeparturesResponse,
)
from ..services.departure_service import DepartureService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/departure", tags=["departure"])

DEPARTURE_SERVICE_DEPENDENCY = Depends(get_departure_service)


def _convert_departure_to_schema(departure_model) -> Departure:
    """Convert departure model to schema."""
    return Departure(
        id=str(departure_model.id),
        trip_id=str(departure_model.trip_id),
        departure_date=departure_model.departure_date,
        capacity=departure_model.capacity,
        available_seats=departure_model.available_seats,
        version=departure_model.version,
        status=departure_model.status
    )


@router.post("/create", response_model=Departure)
async def create_departure(
    request: CreateDepartureRequest,
    departure_service: DepartureService = DEPARTURE_SERVICE_DEPENDENCY
) -> JSONResponse:
    """
    Create a dated departure of a trip.

    A trip has at most one departure per date.
    """
    try:
        departure = await departure_service.create_departure(request)
        response_data = _convert_departure_to_schema(departure)

        return JSONResponse(
            status_code=200,
            content=response_data.model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in departure creation",
            extra={
                "trip_id": request.trip_id,
                "departure_date": request.departure_date.isoformat(),
                "error": str(e)
            },
            exc_info=True
        )
        raise InternalServerError()


@router.post("/search", response_model=SearchDeparturesResponse)
async def search_departures(
    request: SearchDeparturesRequest,
    departure_service: DepartureService = DEPARTURE_SERVICE_DEPENDENCY
) -> JSONResponse:
    """
    Search bookable departures by origin, destination and travel dates.

    Seat counts are informative; the booking itself is the authority.
    """
    try:
        response_data = await departure_service.search_departures(request)

        return JSONResponse(
            status_code=200,
            content=response_data.model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in departure search",
            extra={
                "filters": {
                    "origin": request.origin,
                    "destination": request.destination,
                    "date_from": request.date_from.isoformat(),
                    "date_to": request.date_to.isoformat() if request.date_to else None
                },
                "error": str(e)
            },
            exc_info=True
        )
        raise InternalServerError()


@router.post("/status", response_model=Departure)
async def change_departure_status(
    request: ChangeDepartureStatusRequest,
    departure_service: DepartureService = DEPARTURE_SERVICE_DEPENDENCY
) -> JSONResponse:
    """
    Open, close or cancel a departure.

    Cancelled departures cannot be reopened.
    """
    try:
        departure_id = parse_resource_id(request.departure_id, "departure")
        departure = await departure_service.change_status(departure_id, request.status.value)
        response_data = _convert_departure_to_schema(departure)

        return JSONResponse(
            status_code=200,
            content=response_data.model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in departure status change",
            extra={
                "departure_id": request.departure_id,
                "status": request.status.value,
                "error": str(e)
            },
            exc_info=True
        )
        raise InternalServerError()


@router.post("/get", response_model=Departure)
async def get_departure(
    request: GetDepartureRequest,
    departure_service: DepartureService = DEPARTURE_SERVICE_DEPENDENCY
) -> JSONResponse:
    """Get a departure's current inventory and status."""
    try:
        departure_id = parse_resource_id(request.departure_id, "departure")
        departure = await departure_service.get_departure_by_id_or_raise(departure_id)
        response_data = _convert_departure_to_schema(departure)

        return JSONResponse(
            status_code=200,
            content=response_data.model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in departure retrieval",
            extra={
                "departure_id": request.departure_id,
                "error": str(e)
            },
            exc_info=True
        )
        raise InternalServerError()
