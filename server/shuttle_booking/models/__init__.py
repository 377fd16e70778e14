"""Models module exporting all database models."""

from .booking import Booking, BookingStatus, Passenger
from .departure import Departure, DepartureStatus
from .route import Route, Trip

__all__ = [
    # Catalogue entities
    "Route",
    "Trip",

    # Inventory entity
    "Departure",
    "DepartureStatus",

    # Booking entities
    "Booking",
    "BookingStatus",
    "Passenger",
]
