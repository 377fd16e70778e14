"""Service layer package."""

from .booking_service import BookingService
from .departure_service import DepartureService
from .inventory_store import InventorySnapshot, InventoryStore
from .reference_service import ReferenceGenerator, generate_reference
from .reservation import Release, Reservation, ReservationProtocol
from .schedule_service import ScheduleService

__all__ = [
    "BookingService",
    "DepartureService",
    "InventorySnapshot",
    "InventoryStore",
    "ReferenceGenerator",
    "Release",
    "Reservation",
    "ReservationProtocol",
    "ScheduleService",
    "generate_reference",
]
