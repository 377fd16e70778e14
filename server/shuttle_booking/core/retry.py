"""Bounded retry for optimistic-concurrency conflicts."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar, Union

from .exceptions import ContentionError
from .observability import metrics_collector

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class VersionConflict:
    """
    Result of a conditional write that matched no row.

    Another writer changed the record after it was read. This is returned,
    not raised, so that retrying is an explicit branch on the result and
    never a catch of some unrelated error.
    """

    resource_id: str
    expected_version: int


async def with_retry(
    operation: Callable[[], Awaitable[Union[T, VersionConflict]]],
    max_attempts: int = 3,
    base_delay: float = 0.1,
) -> T:
    """
    Run ``operation`` until it returns something other than a VersionConflict.

    Each attempt must start from a fresh read; the operation is re-invoked
    from scratch. The delay between attempts is fixed. Exceptions raised by
    the operation propagate immediately and are never retried.

    Args:
        operation: Zero-argument coroutine factory performing one attempt
        max_attempts: Total number of attempts, including the first
        base_delay: Seconds to wait after a conflict before the next attempt

    Returns:
        The first non-conflict result

    Raises:
        ContentionError: If every attempt ended in a VersionConflict
        ValueError: If max_attempts is less than 1
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    conflict: VersionConflict | None = None
    for attempt in range(1, max_attempts + 1):
        result = await operation()
        if not isinstance(result, VersionConflict):
            if attempt > 1:
                logger.info(
                    "Operation succeeded after version conflict",
                    extra={"attempt": attempt, "resource_id": conflict.resource_id}
                )
            return result

        conflict = result
        metrics_collector.record_version_conflict()
        logger.warning(
            "Version conflict detected",
            extra={
                "resource_id": conflict.resource_id,
                "expected_version": conflict.expected_version,
                "attempt": attempt,
                "max_attempts": max_attempts,
            }
        )

        if attempt < max_attempts and base_delay > 0:
            await asyncio.sleep(base_delay)

    metrics_collector.record_contention()
    logger.error(
        "Retries exhausted after repeated version conflicts",
        extra={"resource_id": conflict.resource_id, "attempts": max_attempts}
    )
    raise ContentionError(resource_id=conflict.resource_id, attempts=max_attempts)
