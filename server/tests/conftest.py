"""Test configuration and fixtures."""

import os

# Must be set before the application settings are imported
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import date  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import update  # noqa: E402

from shuttle_booking.core.database import Base, build_engine, build_session_factory, get_db  # noqa: E402
from shuttle_booking.core.unit_of_work import UnitOfWork, get_unit_of_work  # noqa: E402
from shuttle_booking.models import *  # noqa: E402,F403 - Import all models
from shuttle_booking.models.departure import Departure  # noqa: E402
from shuttle_booking.schemas.common import Money  # noqa: E402
from shuttle_booking.schemas.departure import CreateDepartureRequest  # noqa: E402
from shuttle_booking.schemas.schedule import CreateRouteRequest, CreateTripRequest  # noqa: E402
from shuttle_booking.services.booking_service import BookingService  # noqa: E402
from shuttle_booking.services.departure_service import DepartureService  # noqa: E402
from shuttle_booking.services.inventory_store import InventoryStore  # noqa: E402
from shuttle_booking.services.schedule_service import ScheduleService  # noqa: E402

TRAVEL_DATE = date(2030, 6, 1)


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path):
    """
    Create a test database engine.

    A file database is used so that concurrent units of work get their own
    connections and queue on SQLite's write lock.
    """
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'shuttle_test.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    """Session factory bound to the test engine."""
    return build_session_factory(test_engine)


@pytest_asyncio.fixture(scope="function")
async def test_session(session_factory):
    """
    Create a test database session.

    Close or commit before running another writer: an open SQLite
    transaction holds the write lock.
    """
    async with session_factory() as session:
        yield session


@pytest.fixture
def unit_of_work(session_factory):
    return UnitOfWork(session_factory)


@pytest.fixture
def booking_service(unit_of_work):
    """Booking service with a short retry delay."""
    return BookingService(unit_of_work, max_attempts=3, retry_delay=0.01)


@pytest.fixture
def read_inventory(session_factory):
    """Read a departure's inventory on a fresh, immediately closed session."""

    async def _read(departure_id):
        async with session_factory() as session:
            return await InventoryStore(session).get_snapshot(departure_id)

    return _read


@pytest.fixture
def make_departure(session_factory):
    """
    Factory creating a route, trip and departure.

    Returns the departure id. ``available_seats`` and ``status`` let a test
    start from a partly sold or inactive departure.
    """
    routes = {}

    async def _make(
        capacity: int = 55,
        available_seats: int | None = None,
        status: str | None = None,
        base_price_amount: int = 2500,
        departure_date: date = TRAVEL_DATE,
        origin: str = "Downtown Terminal",
        destination: str = "International Airport",
        departure_time: str = "08:00",
    ):
        async with session_factory() as session:
            schedule_service = ScheduleService(session)
            route = routes.get((origin, destination))
            if route is None:
                route = await schedule_service.create_route(
                    CreateRouteRequest(origin=origin, destination=destination, distance_km=32)
                )
                routes[(origin, destination)] = route

            trip = await schedule_service.create_trip(
                CreateTripRequest(
                    route_id=str(route.id),
                    departure_time=departure_time,
                    arrival_time="23:59",
                    base_price=Money(amount=base_price_amount, currency="USD"),
                    capacity=capacity,
                )
            )
            departure = await DepartureService(session).create_departure(
                CreateDepartureRequest(trip_id=str(trip.id), departure_date=departure_date)
            )

            values = {}
            if available_seats is not None:
                values["available_seats"] = available_seats
            if status is not None:
                values["status"] = status
            if values:
                await session.execute(
                    update(Departure).where(Departure.id == departure.id).values(**values)
                )
                await session.commit()

            return departure.id

    return _make


@pytest.fixture
def passenger_payload():
    """Build a list of passenger dicts for booking requests."""

    def _build(count: int):
        return [
            {"first_name": f"Passenger{i}", "last_name": "Traveller", "email": f"p{i}@example.com"}
            for i in range(count)
        ]

    return _build


@pytest_asyncio.fixture(scope="function")
async def test_app(session_factory):
    """Create the application wired to the test database."""
    from shuttle_booking.main import create_app

    app = create_app()

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_unit_of_work] = lambda: UnitOfWork(session_factory)

    yield app

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app):
    """Create a test HTTP client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def sample_route_data():
    """Sample route data for testing."""
    return {
        "origin": "Central Station",
        "destination": "Harbour Ferry Terminal",
        "distance_km": 12
    }
