"""Route and trip Pydantic schemas."""

from pydantic import BaseModel, Field

from .common import Money

_CLOCK_PATTERN = r"^([01][0-9]|2[0-3]):[0-5][0-9]$"


class CreateRouteRequest(BaseModel):
    """Request schema for creating a route."""

    origin: str = Field(..., min_length=1, max_length=128, description="Origin")
    destination: str = Field(..., min_length=1, max_length=128, description="Destination")
    distance_km: int = Field(..., ge=0, description="Distance in kilometres")


class Route(BaseModel):
    """Route response schema."""

    id: str = Field(..., description="Unique route ID")
    origin: str = Field(..., description="Origin")
    destination: str = Field(..., description="Destination")
    distance_km: int = Field(..., description="Distance in kilometres")


class CreateTripRequest(BaseModel):
    """Request schema for creating a scheduled trip on a route."""

    route_id: str = Field(..., description="Route served by this trip")
    departure_time: str = Field(..., pattern=_CLOCK_PATTERN, description="Departure time (HH:MM)")
    arrival_time: str = Field(..., pattern=_CLOCK_PATTERN, description="Arrival time (HH:MM)")
    days_of_week: str = Field("1,2,3,4,5,6,7", pattern=r"^[1-7](,[1-7])*$", description="ISO weekdays served")
    base_price: Money = Field(..., description="Fare per seat")
    capacity: int = Field(55, ge=1, le=1000, description="Seats per departure")


class Trip(BaseModel):
    """Trip response schema."""

    id: str = Field(..., description="Unique trip ID")
    route_id: str = Field(..., description="Route ID")
    departure_time: str = Field(..., description="Departure time (HH:MM)")
    arrival_time: str = Field(..., description="Arrival time (HH:MM)")
    days_of_week: str = Field(..., description="ISO weekdays served")
    base_price: Money = Field(..., description="Fare per seat")
    capacity: int = Field(..., description="Seats per departure")
