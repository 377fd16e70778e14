"""Booking router for booking operations."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..core.dependencies import get_booking_service
from ..core.exceptions import InternalServerError, ProblemDetailsException
from ..schemas.booking import (
    Booking,
    CancelBookingRequest,
    GetBookingRequest,
    Passenger,
    ReserveBookingRequest,
    ReserveBookingResponse,
)
from ..schemas.common import Money
from ..services.booking_service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/booking", tags=["booking"])

# Define dependencies to avoid B008 linting errors
BOOKING_SERVICE_DEPENDENCY = Depends(get_booking_service)


def _convert_booking_to_schema(booking_model) -> Booking:
    """Convert booking model to schema."""
    return Booking(
        id=str(booking_model.id),
        booking_ref=booking_model.booking_ref,
        departure_id=str(booking_model.departure_id),
        status=booking_model.status,
        seats=booking_model.seats,
        total_price=Money(
            amount=booking_model.total_price_amount,
            currency=booking_model.price_currency
        ),
        contact_email=booking_model.contact_email,
        contact_phone=booking_model.contact_phone,
        passengers=[Passenger.model_validate(p) for p in booking_model.passengers],
        created_at=booking_model.created_at,
        cancelled_at=booking_model.cancelled_at
    )


@router.post("/reserve", response_model=ReserveBookingResponse)
async def reserve_booking(
    request: ReserveBookingRequest,
    booking_service: BookingService = BOOKING_SERVICE_DEPENDENCY
) -> JSONResponse:
    """
    Reserve one seat per passenger and create a confirmed booking.

    The seat decrement, booking and passengers are stored atomically.
    Lost races against other bookings are retried a bounded number of
    times before answering 409 CONTENTION.
    """
    try:
        booking = await booking_service.reserve_and_book(request)
        response_data = ReserveBookingResponse(
            booking_ref=booking.booking_ref,
            message=f"Booking confirmed for {booking.seats} passenger(s)",
            booking=_convert_booking_to_schema(booking)
        )

        return JSONResponse(
            status_code=200,
            content=response_data.model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in booking reservation",
            extra={
                "departure_id": request.departure_id,
                "passengers": len(request.passengers),
                "error": str(e)
            },
            exc_info=True
        )
        raise InternalServerError()


@router.post("/cancel", response_model=Booking)
async def cancel_booking(
    request: CancelBookingRequest,
    booking_service: BookingService = BOOKING_SERVICE_DEPENDENCY
) -> JSONResponse:
    """
    Cancel a booking and restock its seats.

    Cancelling an already cancelled booking returns it unchanged.
    """
    try:
        booking = await booking_service.cancel_booking(request.booking_ref)
        response_data = _convert_booking_to_schema(booking)

        return JSONResponse(
            status_code=200,
            content=response_data.model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in booking cancellation",
            extra={
                "booking_ref": request.booking_ref,
                "error": str(e)
            },
            exc_info=True
        )
        raise InternalServerError()


@router.post("/get", response_model=Booking)
async def get_booking(
    request: GetBookingRequest,
    booking_service: BookingService = BOOKING_SERVICE_DEPENDENCY
) -> JSONResponse:
    """Get a booking and its passengers by reference."""
    try:
        booking = await booking_service.get_booking(request.booking_ref)
        response_data = _convert_booking_to_schema(booking)

        return JSONResponse(
            status_code=200,
            content=response_data.model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in booking retrieval",
            extra={
                "booking_ref": request.booking_ref,
                "error": str(e)
            },
            exc_info=True
        )
        raise InternalServerError()
