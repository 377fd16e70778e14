#!/usr/bin/env python3
"""Setup script for the shuttle booking API: migrate the database and seed a timetable."""

import asyncio
import logging
from datetime import date, timedelta
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import func, select

from shuttle_booking.core.database import async_session_factory, close_db
from shuttle_booking.models import Route
from shuttle_booking.schemas.common import Money
from shuttle_booking.schemas.departure import CreateDepartureRequest
from shuttle_booking.schemas.schedule import CreateRouteRequest, CreateTripRequest
from shuttle_booking.services.departure_service import DepartureService
from shuttle_booking.services.schedule_service import ScheduleService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SERVER_DIR = Path(__file__).parent.parent / "server"
SEED_DAYS = 30

# (origin, destination, distance_km)
ROUTES = [
    ("San Francisco", "Los Angeles", 382),
    ("Los Angeles", "San Francisco", 382),
    ("Oakland", "Los Angeles", 370),
    ("Los Angeles", "Oakland", 370),
    ("San Francisco", "Santa Barbara", 330),
    ("Santa Barbara", "San Francisco", 330),
]

# (route index, departure, arrival, ISO weekdays, fare in cents)
TRIPS = [
    (0, "07:00", "15:30", "1,2,3,4,5,6,7", 4900),
    (0, "11:00", "19:30", "1,2,3,4,5,6,7", 4900),
    (0, "15:00", "23:30", "5,6,7", 6900),
    (1, "08:00", "16:30", "1,2,3,4,5,6,7", 4900),
    (1, "13:00", "21:30", "1,2,3,4,5,6,7", 4900),
    (1, "17:00", "01:30", "6,7", 6900),
    (2, "08:30", "17:00", "1,2,3,4,5", 4500),
    (2, "14:00", "22:30", "6,7", 5900),
    (3, "09:00", "17:30", "1,2,3,4,5", 4500),
    (3, "16:00", "00:30", "6,7", 5900),
    (4, "10:00", "17:00", "3,5,7", 5500),
    (5, "11:00", "18:00", "1,4,6", 5500),
]


def setup_database():
    """Run Alembic migrations up to head."""
    logger.info("Running database migrations...")
    alembic_cfg = Config(str(SERVER_DIR / "db" / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(SERVER_DIR / "db" / "alembic"))
    command.upgrade(alembic_cfg, "head")
    logger.info("Database migrations completed")


async def create_sample_data():
    """Create routes, trips and departures for the next few weeks."""
    logger.info("Creating sample data...")

    async with async_session_factory() as db:
        existing_routes = await db.execute(select(func.count()).select_from(Route))
        if existing_routes.scalar_one() > 0:
            logger.info("Sample data already exists, skipping...")
            return

        schedule_service = ScheduleService(db)
        departure_service = DepartureService(db)

        routes = [
            await schedule_service.create_route(
                CreateRouteRequest(origin=origin, destination=destination, distance_km=distance)
            )
            for origin, destination, distance in ROUTES
        ]

        trips = []
        for route_index, departs, arrives, days, fare in TRIPS:
            trip = await schedule_service.create_trip(
                CreateTripRequest(
                    route_id=str(routes[route_index].id),
                    departure_time=departs,
                    arrival_time=arrives,
                    days_of_week=days,
                    base_price=Money(amount=fare, currency="USD"),
                )
            )
            trips.append(trip)

        created = 0
        today = date.today()
        for offset in range(SEED_DAYS):
            travel_date = today + timedelta(days=offset)
            weekday = str(travel_date.isoweekday())
            for trip in trips:
                if weekday in trip.days_of_week.split(","):
                    await departure_service.create_departure(
                        CreateDepartureRequest(trip_id=str(trip.id), departure_date=travel_date)
                    )
                    created += 1

        logger.info(
            "Sample data created successfully",
            extra={"routes": len(routes), "trips": len(trips), "departures": created}
        )


async def seed():
    try:
        await create_sample_data()
    finally:
        await close_db()


def main():
    """Main setup function."""
    logger.info("Starting shuttle booking API setup...")

    setup_database()
    asyncio.run(seed())

    logger.info("Setup completed successfully!")
    logger.info("You can now start the API server with: uvicorn shuttle_booking.main:app --reload")


if __name__ == "__main__":
    main()
