"""FastAPI dependencies that build services for a request."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from .database import get_db
from .unit_of_work import UnitOfWork, get_unit_of_work


def get_booking_service(uow: UnitOfWork = Depends(get_unit_of_work)):
    """Booking service bound to a unit of work; each attempt opens its own session."""
    from ..services.booking_service import BookingService

    return BookingService(uow)


def get_departure_service(db: AsyncSession = Depends(get_db)):
    """Departure service bound to the request's session."""
    from ..services.departure_service import DepartureService

    return DepartureService(db)


def get_schedule_service(db: AsyncSession = Depends(get_db)):
    """Schedule service bound to the request's session."""
    from ..services.schedule_service import ScheduleService

    return ScheduleService(db)
