"""FastAPI routers package."""

from .booking import router as booking_router
from .departure import router as departure_router
from .health import router as health_router
from .metrics import router as metrics_router
from .schedule import route_router, trip_router

__all__ = [
    "booking_router",
    "departure_router",
    "health_router",
    "metrics_router",
    "route_router",
    "trip_router",
]
