"""Unit tests for departure service."""

from datetime import date
from uuid import uuid4

import pytest

from shuttle_booking.core.exceptions import ConflictError, InvalidStatusTransitionError, NotFoundError
from shuttle_booking.schemas.common import Money
from shuttle_booking.schemas.departure import CreateDepartureRequest, SearchDeparturesRequest
from shuttle_booking.schemas.schedule import CreateRouteRequest, CreateTripRequest
from shuttle_booking.services.departure_service import DepartureService
from shuttle_booking.services.schedule_service import ScheduleService

TRAVEL_DATE = date(2030, 6, 1)


async def create_trip(session, capacity=40):
    schedule_service = ScheduleService(session)
    route = await schedule_service.create_route(
        CreateRouteRequest(origin="Riverside", destination="University Campus", distance_km=9)
    )
    return await schedule_service.create_trip(
        CreateTripRequest(
            route_id=str(route.id),
            departure_time="06:45",
            arrival_time="07:05",
            base_price=Money(amount=350, currency="USD"),
            capacity=capacity,
        )
    )


def search_request(**overrides):
    values = {
        "origin": "downtown",
        "destination": "AIRPORT",
        "date_from": TRAVEL_DATE,
    }
    values.update(overrides)
    return SearchDeparturesRequest(**values)


@pytest.mark.asyncio
async def test_create_departure_defaults_to_trip_capacity(test_session):
    trip = await create_trip(test_session, capacity=40)
    service = DepartureService(test_session)

    departure = await service.create_departure(
        CreateDepartureRequest(trip_id=str(trip.id), departure_date=TRAVEL_DATE)
    )

    assert departure.capacity == 40
    assert departure.available_seats == 40
    assert departure.version == 0
    assert departure.status == "active"


@pytest.mark.asyncio
async def test_create_departure_with_capacity_override(test_session):
    trip = await create_trip(test_session, capacity=40)

    departure = await DepartureService(test_session).create_departure(
        CreateDepartureRequest(trip_id=str(trip.id), departure_date=TRAVEL_DATE, capacity=12)
    )

    assert departure.capacity == 12
    assert departure.available_seats == 12


@pytest.mark.asyncio
async def test_create_departure_twice_on_same_date(test_session):
    trip = await create_trip(test_session)
    service = DepartureService(test_session)
    request = CreateDepartureRequest(trip_id=str(trip.id), departure_date=TRAVEL_DATE)
    await service.create_departure(request)

    with pytest.raises(ConflictError):
        await service.create_departure(request)


@pytest.mark.asyncio
async def test_create_departure_unknown_trip(test_session):
    with pytest.raises(NotFoundError):
        await DepartureService(test_session).create_departure(
            CreateDepartureRequest(trip_id=str(uuid4()), departure_date=TRAVEL_DATE)
        )


@pytest.mark.asyncio
async def test_search_matches_case_insensitive_substrings(session_factory, make_departure):
    departure_id = await make_departure(capacity=20, base_price_amount=1900)

    async with session_factory() as session:
        response = await DepartureService(session).search_departures(search_request())

    assert len(response.items) == 1
    item = response.items[0]
    assert item.departure_id == str(departure_id)
    assert item.origin == "Downtown Terminal"
    assert item.destination == "International Airport"
    assert item.price == Money(amount=1900, currency="USD")
    assert item.available_seats == 20
    assert item.distance_km == 32


@pytest.mark.asyncio
async def test_search_excludes_unbookable_departures(session_factory, make_departure):
    bookable = await make_departure(capacity=20, departure_time="10:00")
    await make_departure(capacity=20, available_seats=0, departure_time="11:00")
    await make_departure(capacity=20, status="closed", departure_time="12:00")
    await make_departure(capacity=20, status="cancelled", departure_time="13:00")
    await make_departure(capacity=20, departure_date=date(2030, 6, 2), departure_time="14:00")

    async with session_factory() as session:
        response = await DepartureService(session).search_departures(search_request())

    assert [item.departure_id for item in response.items] == [str(bookable)]


@pytest.mark.asyncio
async def test_search_orders_by_date_then_time(session_factory, make_departure):
    late = await make_departure(departure_time="17:15")
    early = await make_departure(departure_time="06:30")
    next_day = await make_departure(departure_date=date(2030, 6, 2), departure_time="05:00")

    async with session_factory() as session:
        response = await DepartureService(session).search_departures(
            search_request(date_to=date(2030, 6, 2))
        )

    assert [item.departure_id for item in response.items] == [str(early), str(late), str(next_day)]


@pytest.mark.asyncio
async def test_search_respects_limit(session_factory, make_departure):
    for hour in range(5):
        await make_departure(departure_time=f"0{hour}:00")

    async with session_factory() as session:
        response = await DepartureService(session).search_departures(search_request(limit=3))

    assert len(response.items) == 3


@pytest.mark.asyncio
async def test_search_wildcards_are_literal(session_factory, make_departure):
    await make_departure()

    async with session_factory() as session:
        response = await DepartureService(session).search_departures(search_request(origin="%"))

    assert response.items == []


def test_search_rejects_reversed_date_range():
    with pytest.raises(ValueError):
        search_request(date_to=date(2030, 5, 1))


@pytest.mark.asyncio
async def test_close_and_reopen(session_factory, make_departure, read_inventory):
    departure_id = await make_departure(capacity=10)

    async with session_factory() as session:
        closed = await DepartureService(session).change_status(departure_id, "closed")
    assert closed.status == "closed"
    assert closed.version == 1

    async with session_factory() as session:
        reopened = await DepartureService(session).change_status(departure_id, "active")
    assert reopened.status == "active"

    inventory = await read_inventory(departure_id)
    assert inventory.status == "active"
    assert inventory.version == 2
    assert inventory.available_seats == 10


@pytest.mark.asyncio
async def test_same_status_is_a_no_op(session_factory, make_departure, read_inventory):
    departure_id = await make_departure(capacity=10)

    async with session_factory() as session:
        departure = await DepartureService(session).change_status(departure_id, "active")

    assert departure.status == "active"
    inventory = await read_inventory(departure_id)
    assert inventory.version == 0


@pytest.mark.asyncio
async def test_cancelled_departure_cannot_reopen(session_factory, make_departure, read_inventory):
    departure_id = await make_departure(capacity=10)

    async with session_factory() as session:
        await DepartureService(session).change_status(departure_id, "cancelled")

    async with session_factory() as session:
        with pytest.raises(InvalidStatusTransitionError):
            await DepartureService(session).change_status(departure_id, "active")

    inventory = await read_inventory(departure_id)
    assert inventory.status == "cancelled"


@pytest.mark.asyncio
async def test_change_status_unknown_departure(session_factory):
    async with session_factory() as session:
        with pytest.raises(NotFoundError):
            await DepartureService(session).change_status(uuid4(), "closed")
