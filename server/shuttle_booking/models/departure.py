"""Departure inventory model definition."""

from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Date, DateTime, ForeignKey, Integer, String, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base
from .route import utcnow

if TYPE_CHECKING:
    from .booking import Booking
    from .route import Trip


class DepartureStatus(str, Enum):
    """Departure lifecycle status."""
    ACTIVE = "active"
    CANCELLED = "cancelled"
    CLOSED = "closed"


class Departure(Base):
    """
    Departure entity: one dated, bookable occurrence of a trip.

    ``available_seats``, ``version`` and ``status`` are only ever written
    through InventoryStore's conditional updates.
    """

    __tablename__ = "departures"

    # Primary key
    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    # Foreign key to trip
    trip_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("trips.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )

    departure_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    # Seat inventory
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    available_seats: Mapped[int] = mapped_column(Integer, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=DepartureStatus.ACTIVE.value,
        server_default=DepartureStatus.ACTIVE.value,
        index=True
    )

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

    # Constraints
    __table_args__ = (
        CheckConstraint("capacity > 0", name="ck_departure_capacity_positive"),
        CheckConstraint("available_seats >= 0", name="ck_departure_available_seats_non_negative"),
        CheckConstraint("available_seats <= capacity", name="ck_departure_available_seats_lte_capacity"),
        CheckConstraint("version >= 0", name="ck_departure_version_non_negative"),
        CheckConstraint(
            "status IN ('active', 'cancelled', 'closed')",
            name="ck_departure_status_valid"
        ),
        UniqueConstraint("trip_id", "departure_date", name="uq_departure_trip_date"),
    )

    # Relationships
    trip: Mapped["Trip"] = relationship("Trip", back_populates="departures")
    bookings: Mapped[list["Booking"]] = relationship("Booking", back_populates="departure")

    def __repr__(self) -> str:
        return (
            f"<Departure(id={self.id}, trip_id={self.trip_id}, date={self.departure_date}, "
            f"seats={self.available_seats}/{self.capacity}, version={self.version}, status={self.status})>"
        )
