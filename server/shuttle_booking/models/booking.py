"""Booking and Passenger model definitions."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base
from .route import utcnow

if TYPE_CHECKING:
    from .departure import Departure


class BookingStatus(str, Enum):
    """Booking status enumeration."""
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class Booking(Base):
    """Booking entity: one customer's confirmed seats on a departure."""

    __tablename__ = "bookings"

    # Primary key
    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    # Non-owning reference to the departure inventory
    departure_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("departures.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )

    # Booking details
    booking_ref: Mapped[str] = mapped_column(String(6), nullable=False, unique=True, index=True)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=BookingStatus.CONFIRMED.value,
        index=True
    )
    seats: Mapped[int] = mapped_column(Integer, nullable=False)

    # Total price (stored as minor units, e.g., cents)
    total_price_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    price_currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")

    # Contact details
    contact_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    contact_phone: Mapped[str] = mapped_column(String(32), nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now()
    )
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Constraints
    __table_args__ = (
        CheckConstraint("seats > 0", name="ck_booking_seats_positive"),
        CheckConstraint("total_price_amount >= 0", name="ck_booking_total_price_non_negative"),
        CheckConstraint("length(booking_ref) = 6", name="ck_booking_ref_length"),
        CheckConstraint("status IN ('confirmed', 'cancelled')", name="ck_booking_status_valid"),
    )

    # Relationships
    departure: Mapped["Departure"] = relationship("Departure", back_populates="bookings")
    passengers: Mapped[list["Passenger"]] = relationship(
        "Passenger",
        back_populates="booking",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Passenger.position"
    )

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, booking_ref='{self.booking_ref}', "
            f"departure_id={self.departure_id}, seats={self.seats}, status={self.status})>"
        )


class Passenger(Base):
    """Passenger entity: a named traveller owned by exactly one booking."""

    __tablename__ = "passengers"

    # Primary key
    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    # Foreign key to booking
    booking_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Order within the booking, as submitted
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("length(first_name) > 0", name="ck_passenger_first_name_not_empty"),
        CheckConstraint("length(last_name) > 0", name="ck_passenger_last_name_not_empty"),
    )

    # Relationships
    booking: Mapped["Booking"] = relationship("Booking", back_populates="passengers")

    def __repr__(self) -> str:
        return f"<Passenger(id={self.id}, booking_id={self.booking_id}, name='{self.first_name} {self.last_name}')>"
