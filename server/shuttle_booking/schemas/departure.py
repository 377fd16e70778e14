"""Departure-related Pydantic schemas."""

from datetime import date
from enum import Enum

from pydantic import BaseModel, Field, model_validator

from .common import Money


class DepartureStatus(str, Enum):
    """Departure status enumeration."""
    ACTIVE = "active"
    CANCELLED = "cancelled"
    CLOSED = "closed"


class CreateDepartureRequest(BaseModel):
    """Request schema for creating a dated departure of a trip."""

    trip_id: str = Field(..., description="Trip this departure belongs to")
    departure_date: date = Field(..., description="Calendar date of the departure")
    capacity: int | None = Field(None, ge=1, le=1000, description="Seat capacity; defaults to the trip's capacity")


class GetDepartureRequest(BaseModel):
    """Request schema for getting a departure."""

    departure_id: str = Field(..., description="Departure to retrieve")


class ChangeDepartureStatusRequest(BaseModel):
    """Request schema for changing a departure's lifecycle status."""

    departure_id: str = Field(..., description="Departure to update")
    status: DepartureStatus = Field(..., description="New status")


class SearchDeparturesRequest(BaseModel):
    """Request schema for searching bookable departures."""

    origin: str = Field(..., min_length=1, max_length=128, description="Origin, case-insensitive substring")
    destination: str = Field(..., min_length=1, max_length=128, description="Destination, case-insensitive substring")
    date_from: date = Field(..., description="First travel date")
    date_to: date | None = Field(None, description="Last travel date; defaults to date_from")
    limit: int = Field(50, ge=1, le=200, description="Maximum results")

    @model_validator(mode="after")
    def check_date_range(self) -> "SearchDeparturesRequest":
        """Ensure the date range is not reversed."""
        if self.date_to is not None and self.date_to < self.date_from:
            raise ValueError("date_to must not be before date_from")
        return self


class Departure(BaseModel):
    """Departure response schema."""

    id: str = Field(..., description="Unique departure ID")
    trip_id: str = Field(..., description="Associated trip ID")
    departure_date: date = Field(..., description="Calendar date of the departure")
    capacity: int = Field(..., ge=1, description="Total capacity")
    available_seats: int = Field(..., ge=0, description="Seats still available")
    version: int = Field(..., ge=0, description="Inventory version")
    status: DepartureStatus = Field(..., description="Lifecycle status")


class DepartureSearchResult(BaseModel):
    """One bookable departure in search results."""

    departure_id: str = Field(..., description="Departure ID to book")
    trip_id: str = Field(..., description="Trip ID")
    origin: str = Field(..., description="Route origin")
    destination: str = Field(..., description="Route destination")
    departure_date: date = Field(..., description="Travel date")
    departure_time: str = Field(..., description="Departure time (HH:MM)")
    arrival_time: str = Field(..., description="Arrival time (HH:MM)")
    price: Money = Field(..., description="Price per seat")
    available_seats: int = Field(..., ge=0, description="Seats available at query time")
    distance_km: int = Field(..., ge=0, description="Route distance")


class SearchDeparturesResponse(BaseModel):
    """Response schema for departure search."""

    items: list[DepartureSearchResult] = Field(..., description="Found departures")
