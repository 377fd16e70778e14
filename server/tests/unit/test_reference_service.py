"""Unit tests for booking reference generation."""

from itertools import cycle

import pytest

from shuttle_booking.core.exceptions import ReferenceGenerationExhausted
from shuttle_booking.schemas.booking import ReserveBookingRequest
from shuttle_booking.services import booking_service as booking_module
from shuttle_booking.services.reference_service import (
    REFERENCE_ALPHABET,
    REFERENCE_LENGTH,
    ReferenceGenerator,
    generate_reference,
)


def scripted_choice(references):
    """A choice function that spells out the given references in order."""
    characters = iter("".join(references))
    return lambda alphabet: next(characters)


def reserve_request(departure_id, passengers, email):
    return ReserveBookingRequest(
        departure_id=str(departure_id),
        passengers=passengers,
        contact_email=email,
        contact_phone="+15550100",
    )


def test_alphabet_excludes_ambiguous_characters():
    assert len(REFERENCE_ALPHABET) == 32
    assert len(set(REFERENCE_ALPHABET)) == 32
    for ambiguous in "0O1I":
        assert ambiguous not in REFERENCE_ALPHABET


def test_generate_reference_shape():
    reference = generate_reference()

    assert len(reference) == REFERENCE_LENGTH
    assert set(reference) <= set(REFERENCE_ALPHABET)


@pytest.mark.asyncio
async def test_unused_reference_returned_first_time(test_session):
    generator = ReferenceGenerator(test_session, choice=scripted_choice(["A3K9M2"]))

    assert await generator.generate_unique_reference() == "A3K9M2"


@pytest.mark.asyncio
async def test_collision_draws_again(monkeypatch, booking_service, make_departure, passenger_payload):
    departure_id = await make_departure(capacity=10)

    class ScriptedGenerator(ReferenceGenerator):
        def __init__(self, db, max_attempts=10):
            super().__init__(db, max_attempts=max_attempts, choice=scripted_choice(["A3K9M2", "B7N4P8"]))

    monkeypatch.setattr(booking_module, "ReferenceGenerator", ScriptedGenerator)

    first = await booking_service.reserve_and_book(
        reserve_request(departure_id, passenger_payload(1), "first@example.com")
    )
    second = await booking_service.reserve_and_book(
        reserve_request(departure_id, passenger_payload(1), "second@example.com")
    )

    assert first.booking_ref == "A3K9M2"
    # The second booking drew A3K9M2 again, found it taken and drew B7N4P8
    assert second.booking_ref == "B7N4P8"


@pytest.mark.asyncio
async def test_exhaustion_after_max_attempts(session_factory, booking_service, make_departure, passenger_payload):
    departure_id = await make_departure(capacity=10)
    booking = await booking_service.reserve_and_book(
        reserve_request(departure_id, passenger_payload(1), "taken@example.com")
    )

    taken = cycle(booking.booking_ref)
    async with session_factory() as session:
        generator = ReferenceGenerator(session, max_attempts=10, choice=lambda alphabet: next(taken))

        with pytest.raises(ReferenceGenerationExhausted) as exc_info:
            await generator.generate_unique_reference()

    assert exc_info.value.attempts == 10
