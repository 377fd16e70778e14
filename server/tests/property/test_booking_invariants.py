"""Property-based tests for booking system invariants."""

import asyncio
import random

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from sqlalchemy import select

from shuttle_booking.core.exceptions import ContentionError, InsufficientCapacityError
from shuttle_booking.core.retry import VersionConflict, with_retry
from shuttle_booking.models.booking import Booking, BookingStatus
from shuttle_booking.schemas.booking import ReserveBookingRequest
from shuttle_booking.services.reference_service import REFERENCE_ALPHABET, generate_reference

# Strategies for generating test data
alphabet_indices = st.lists(st.integers(min_value=0, max_value=len(REFERENCE_ALPHABET) - 1), min_size=6, max_size=6)
attempt_budgets = st.integers(min_value=1, max_value=6)


@given(indices=alphabet_indices)
def test_reference_is_six_symbols_from_alphabet(indices):
    """Any sequence of draws spells a valid reference."""
    draws = iter(indices)
    reference = generate_reference(choice=lambda alphabet: alphabet[next(draws)])

    assert len(reference) == 6
    assert all(ch in REFERENCE_ALPHABET for ch in reference)
    assert not set(reference) & set("0O1I")


@given(max_attempts=attempt_budgets, conflicts=st.integers(min_value=0, max_value=8))
@settings(max_examples=50)
def test_retry_runs_at_most_budget(max_attempts, conflicts):
    """The operation runs min(conflicts + 1, budget) times and only succeeds within budget."""
    calls = []

    async def operation():
        calls.append(1)
        if len(calls) <= conflicts:
            return VersionConflict(resource_id="dep", expected_version=len(calls))
        return "done"

    async def run():
        return await with_retry(operation, max_attempts=max_attempts, base_delay=0)

    if conflicts < max_attempts:
        assert asyncio.run(run()) == "done"
        assert len(calls) == conflicts + 1
    else:
        with pytest.raises(ContentionError):
            asyncio.run(run())
        assert len(calls) == max_attempts


@pytest.mark.asyncio
@pytest.mark.parametrize("seed", [1, 7, 42, 2024])
async def test_seats_match_confirmed_bookings(seed, booking_service, make_departure, read_inventory,
                                              session_factory, passenger_payload):
    """After any sequence of bookings and cancellations, seats sold equal confirmed passengers."""
    rng = random.Random(seed)
    capacity = rng.randint(3, 12)
    departure_id = await make_departure(capacity=capacity)
    confirmed = []

    for step in range(25):
        if confirmed and rng.random() < 0.3:
            booking_ref = confirmed.pop(rng.randrange(len(confirmed)))
            await booking_service.cancel_booking(booking_ref)
            continue

        count = rng.randint(1, 4)
        try:
            booking = await booking_service.reserve_and_book(
                ReserveBookingRequest(
                    departure_id=str(departure_id),
                    passengers=passenger_payload(count),
                    contact_email=f"step{step}@example.com",
                    contact_phone="+15550100",
                )
            )
            confirmed.append(booking.booking_ref)
        except InsufficientCapacityError as exc:
            assert exc.available_seats < count

        inventory = await read_inventory(departure_id)
        assert 0 <= inventory.available_seats <= capacity

    async with session_factory() as session:
        result = await session.execute(
            select(Booking.seats).where(
                Booking.departure_id == departure_id,
                Booking.status == BookingStatus.CONFIRMED.value,
            )
        )
        sold = sum(result.scalars())

    inventory = await read_inventory(departure_id)
    assert inventory.available_seats == capacity - sold
