"""Unit tests for schedule service."""

from uuid import uuid4

import pytest

from shuttle_booking.core.exceptions import ConflictError, NotFoundError
from shuttle_booking.schemas.common import Money
from shuttle_booking.schemas.schedule import CreateRouteRequest, CreateTripRequest
from shuttle_booking.services.schedule_service import ScheduleService


@pytest.mark.asyncio
async def test_create_route(test_session, sample_route_data):
    """Test creating a route."""
    service = ScheduleService(test_session)

    route = await service.create_route(CreateRouteRequest(**sample_route_data))

    assert route.id is not None
    assert route.origin == sample_route_data["origin"]
    assert route.destination == sample_route_data["destination"]
    assert route.distance_km == sample_route_data["distance_km"]


@pytest.mark.asyncio
async def test_create_route_strips_names(test_session):
    service = ScheduleService(test_session)

    route = await service.create_route(
        CreateRouteRequest(origin="  Old Town ", destination="Stadium  ", distance_km=5)
    )

    assert route.origin == "Old Town"
    assert route.destination == "Stadium"


@pytest.mark.asyncio
async def test_create_route_duplicate(test_session, sample_route_data):
    """Test creating the same route twice raises a conflict."""
    service = ScheduleService(test_session)
    await service.create_route(CreateRouteRequest(**sample_route_data))

    with pytest.raises(ConflictError) as exc_info:
        await service.create_route(CreateRouteRequest(**sample_route_data))

    assert exc_info.value.problem_details["code"] == "CONFLICT"


@pytest.mark.asyncio
async def test_reverse_direction_is_a_different_route(test_session, sample_route_data):
    service = ScheduleService(test_session)
    outbound = await service.create_route(CreateRouteRequest(**sample_route_data))

    inbound = await service.create_route(
        CreateRouteRequest(
            origin=sample_route_data["destination"],
            destination=sample_route_data["origin"],
            distance_km=sample_route_data["distance_km"],
        )
    )

    assert inbound.id != outbound.id


@pytest.mark.asyncio
async def test_create_trip(test_session, sample_route_data):
    service = ScheduleService(test_session)
    route = await service.create_route(CreateRouteRequest(**sample_route_data))

    trip = await service.create_trip(
        CreateTripRequest(
            route_id=str(route.id),
            departure_time="07:30",
            arrival_time="08:10",
            base_price=Money(amount=1450, currency="EUR"),
            capacity=30,
        )
    )

    assert trip.route_id == route.id
    assert trip.base_price_amount == 1450
    assert trip.price_currency == "EUR"
    assert trip.capacity == 30
    assert trip.days_of_week == "1,2,3,4,5,6,7"

    fetched = await service.get_trip_by_id_or_raise(trip.id)
    assert fetched.id == trip.id


@pytest.mark.asyncio
@pytest.mark.parametrize("route_id", [str(uuid4()), "bogus"])
async def test_create_trip_unknown_route(test_session, route_id):
    service = ScheduleService(test_session)

    with pytest.raises(NotFoundError):
        await service.create_trip(
            CreateTripRequest(
                route_id=route_id,
                departure_time="07:30",
                arrival_time="08:10",
                base_price=Money(amount=1450, currency="EUR"),
            )
        )


@pytest.mark.asyncio
async def test_get_missing_route_and_trip(test_session):
    service = ScheduleService(test_session)

    assert await service.get_route_by_id(uuid4()) is None
    with pytest.raises(NotFoundError):
        await service.get_route_by_id_or_raise(uuid4())
    with pytest.raises(NotFoundError):
        await service.get_trip_by_id_or_raise(uuid4())
