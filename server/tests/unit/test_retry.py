"""Unit tests for the version-conflict retry controller."""

import pytest

from shuttle_booking.core import retry as retry_module
from shuttle_booking.core.exceptions import ContentionError, InsufficientCapacityError
from shuttle_booking.core.retry import VersionConflict, with_retry


class ScriptedOperation:
    """Returns the scripted results in order and counts calls."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def recorded_sleeps(monkeypatch):
    sleeps = []

    async def fake_sleep(delay):
        sleeps.append(delay)

    monkeypatch.setattr(retry_module.asyncio, "sleep", fake_sleep)
    return sleeps


def conflict():
    return VersionConflict(resource_id="dep-1", expected_version=4)


@pytest.mark.asyncio
async def test_returns_first_result_without_sleeping(recorded_sleeps):
    operation = ScriptedOperation("booked")

    assert await with_retry(operation) == "booked"
    assert operation.calls == 1
    assert recorded_sleeps == []


@pytest.mark.asyncio
async def test_retries_after_conflict_with_fixed_delay(recorded_sleeps):
    operation = ScriptedOperation(conflict(), conflict(), "booked")

    result = await with_retry(operation, max_attempts=3, base_delay=0.1)

    assert result == "booked"
    assert operation.calls == 3
    assert recorded_sleeps == [0.1, 0.1]


@pytest.mark.asyncio
async def test_conflict_on_every_attempt_raises_contention(recorded_sleeps):
    operation = ScriptedOperation(conflict(), conflict(), conflict())

    with pytest.raises(ContentionError) as exc_info:
        await with_retry(operation, max_attempts=3, base_delay=0.1)

    assert operation.calls == 3
    # No pause after the final attempt
    assert recorded_sleeps == [0.1, 0.1]
    error = exc_info.value
    assert error.status_code == 409
    assert error.problem_details["code"] == "CONTENTION"
    assert error.problem_details["retryable"] is True
    assert "try again" in error.problem_details["detail"].lower()


@pytest.mark.asyncio
async def test_raised_errors_are_not_retried(recorded_sleeps):
    error = InsufficientCapacityError(departure_id="dep-1", requested_seats=3, available_seats=1)
    operation = ScriptedOperation(error, "never reached")

    with pytest.raises(InsufficientCapacityError):
        await with_retry(operation)

    assert operation.calls == 1
    assert recorded_sleeps == []


@pytest.mark.asyncio
async def test_single_attempt_budget(recorded_sleeps):
    operation = ScriptedOperation(conflict())

    with pytest.raises(ContentionError):
        await with_retry(operation, max_attempts=1)

    assert operation.calls == 1
    assert recorded_sleeps == []


@pytest.mark.asyncio
async def test_rejects_non_positive_attempt_budget():
    with pytest.raises(ValueError):
        await with_retry(ScriptedOperation("x"), max_attempts=0)
