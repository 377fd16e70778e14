"""Booking-related Pydantic schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, EmailStr, Field, field_validator

from .common import Money


class BookingStatus(str, Enum):
    """Booking status enumeration."""
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class PassengerRequest(BaseModel):
    """A traveller submitted with a booking request."""

    first_name: str = Field(..., min_length=1, max_length=100, description="First name")
    last_name: str = Field(..., min_length=1, max_length=100, description="Last name")
    email: EmailStr | None = Field(None, description="Optional passenger email")
    phone: str | None = Field(None, max_length=32, description="Optional passenger phone")

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        """Reject names made only of whitespace."""
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("email", "phone", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        """Treat empty optional contact fields as absent."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class ReserveBookingRequest(BaseModel):
    """Request schema for reserving seats and creating a booking."""

    departure_id: str = Field(..., min_length=1, description="Departure to book")
    passengers: list[PassengerRequest] = Field(..., min_length=1, description="Travellers, one seat each")
    contact_email: EmailStr = Field(..., description="Booking contact email")
    contact_phone: str = Field(..., min_length=1, max_length=32, description="Booking contact phone")

    @field_validator("contact_phone")
    @classmethod
    def strip_contact_phone(cls, v: str) -> str:
        """Reject a contact phone made only of whitespace."""
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class CancelBookingRequest(BaseModel):
    """Request schema for cancelling a booking."""

    booking_ref: str = Field(..., min_length=1, max_length=16, description="Booking reference to cancel")


class GetBookingRequest(BaseModel):
    """Request schema for getting a booking."""

    booking_ref: str = Field(..., min_length=1, max_length=16, description="Booking reference to retrieve")


class Passenger(BaseModel):
    """Passenger response schema."""

    first_name: str = Field(..., description="First name")
    last_name: str = Field(..., description="Last name")
    email: str | None = Field(None, description="Passenger email")
    phone: str | None = Field(None, description="Passenger phone")

    model_config = {"from_attributes": True}


class Booking(BaseModel):
    """Booking response schema."""

    id: str = Field(..., description="Unique booking ID")
    booking_ref: str = Field(..., description="Booking reference")
    departure_id: str = Field(..., description="Booked departure ID")
    status: BookingStatus = Field(..., description="Booking status")
    seats: int = Field(..., ge=1, description="Number of seats booked")
    total_price: Money = Field(..., description="Total price")
    contact_email: str = Field(..., description="Booking contact email")
    contact_phone: str = Field(..., description="Booking contact phone")
    passengers: list[Passenger] = Field(default_factory=list, description="Travellers")
    created_at: datetime = Field(..., description="Booking creation time (ISO 8601)")
    cancelled_at: datetime | None = Field(None, description="Cancellation time (ISO 8601)")


class ReserveBookingResponse(BaseModel):
    """Response schema for a successful reservation."""

    booking_ref: str = Field(..., description="Booking reference")
    message: str = Field(..., description="Human-readable confirmation")
    booking: Booking = Field(..., description="Created booking")
