"""Route and Trip model definitions."""

from datetime import datetime, timezone
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .departure import Departure


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Route(Base):
    """Route entity: an origin/destination pair served by one or more trips."""

    __tablename__ = "routes"

    # Primary key
    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    # Route information
    origin: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    destination: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    distance_km: Mapped[int] = mapped_column(Integer, nullable=False)

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
        onupdate=utcnow,
        server_default=func.now()
    )

    # Constraints
    __table_args__ = (
        CheckConstraint("distance_km >= 0", name="ck_route_distance_non_negative"),
        CheckConstraint("length(origin) > 0", name="ck_route_origin_not_empty"),
        CheckConstraint("length(destination) > 0", name="ck_route_destination_not_empty"),
        UniqueConstraint("origin", "destination", name="uq_route_origin_destination"),
    )

    # Relationships
    trips: Mapped[list["Trip"]] = relationship("Trip", back_populates="route")

    def __repr__(self) -> str:
        return f"<Route(id={self.id}, origin='{self.origin}', destination='{self.destination}')>"


class Trip(Base):
    """Trip entity: a scheduled service on a route with a fixed timetable and fare."""

    __tablename__ = "trips"

    # Primary key
    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    # Foreign key to route
    route_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("routes.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )

    # Timetable, local wall-clock times as HH:MM
    departure_time: Mapped[str] = mapped_column(String(5), nullable=False)
    arrival_time: Mapped[str] = mapped_column(String(5), nullable=False)
    # Informative only; departures are created explicitly per date
    days_of_week: Mapped[str] = mapped_column(String(32), nullable=False, default="1,2,3,4,5,6,7")

    # Fare per seat (stored as minor units, e.g., cents)
    base_price_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    price_currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")

    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=55)

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
        onupdate=utcnow,
        server_default=func.now()
    )

    # Constraints
    __table_args__ = (
        CheckConstraint("capacity > 0", name="ck_trip_capacity_positive"),
        CheckConstraint("base_price_amount >= 0", name="ck_trip_price_amount_non_negative"),
        CheckConstraint("length(price_currency) = 3", name="ck_trip_price_currency_length"),
    )

    # Relationships
    route: Mapped["Route"] = relationship("Route", back_populates="trips")
    departures: Mapped[list["Departure"]] = relationship("Departure", back_populates="trip")

    def __repr__(self) -> str:
        return (
            f"<Trip(id={self.id}, route_id={self.route_id}, "
            f"departure_time='{self.departure_time}', capacity={self.capacity})>"
        )
