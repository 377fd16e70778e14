"""Custom exceptions following RFC 9457 Problem Details for HTTP APIs."""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class ProblemDetailsException(HTTPException):
    """
    Base exception class following RFC 9457 Problem Details for HTTP APIs.

    Every subclass carries a stable application ``code`` and a ``retryable``
    flag so clients can tell "try again" apart from terminal failures.

    https://tools.ietf.org/rfc/rfc9457.txt
    """

    def __init__(
        self,
        status_code: int,
        title: str,
        detail: Optional[str] = None,
        type_uri: Optional[str] = None,
        instance: Optional[str] = None,
        code: Optional[str] = None,
        retryable: bool = False,
        extensions: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize Problem Details exception.

        Args:
            status_code: HTTP status code
            title: Short, human-readable summary of the problem type
            detail: Human-readable explanation specific to this occurrence
            type_uri: URI reference that identifies the problem type
            instance: URI reference that identifies the specific occurrence
            code: Stable application error code
            retryable: Whether repeating the same request may succeed
            extensions: Additional problem-specific information
            headers: HTTP headers to include in response
        """
        self.status_code = status_code
        self.title = title
        self.detail = detail
        self.type_uri = type_uri or f"about:blank#{status_code}"
        self.instance = instance
        self.code = code
        self.retryable = retryable
        self.extensions = extensions or {}

        # Create the problem details object
        self.problem_details = {
            "type": self.type_uri,
            "title": self.title,
            "status": self.status_code,
            "retryable": self.retryable,
        }

        if self.code:
            self.problem_details["code"] = self.code

        if self.detail:
            self.problem_details["detail"] = self.detail

        if self.instance:
            self.problem_details["instance"] = self.instance

        # Add extensions
        self.problem_details.update(self.extensions)

        super().__init__(
            status_code=status_code,
            detail=self.problem_details,
            headers=headers
        )


class NotFoundError(ProblemDetailsException):
    """Exception for resource not found errors."""

    def __init__(
        self,
        resource_type: str = "resource",
        resource_id: Optional[str] = None,
        detail: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        if not detail:
            detail = f"The requested {resource_type}"
            if resource_id:
                detail += f" with ID '{resource_id}'"
            detail += " could not be found"

        extensions = {
            "resource_type": resource_type,
        }
        if resource_id:
            extensions["resource_id"] = resource_id

        super().__init__(
            status_code=404,
            title="Resource Not Found",
            detail=detail,
            type_uri="https://example.com/problems/resource-not-found",
            instance=instance,
            code="NOT_FOUND",
            extensions=extensions,
        )


def parse_resource_id(value: str, resource_type: str) -> uuid.UUID:
    """
    Parse a client-supplied identifier.

    A malformed identifier cannot name an existing resource, so it is
    reported the same way as an unknown one.
    """
    try:
        return uuid.UUID(str(value))
    except (ValueError, TypeError):
        raise NotFoundError(resource_type=resource_type, resource_id=str(value)) from None


class ConflictError(ProblemDetailsException):
    """Exception for resource conflict errors."""

    def __init__(
        self,
        detail: str = "The request conflicts with the current state of the resource",
        conflicting_resource: Optional[Dict[str, Any]] = None,
        instance: Optional[str] = None,
    ):
        extensions = {}
        if conflicting_resource:
            extensions["conflicting_resource"] = conflicting_resource

        super().__init__(
            status_code=409,
            title="Resource Conflict",
            detail=detail,
            type_uri="https://example.com/problems/resource-conflict",
            instance=instance,
            code="CONFLICT",
            extensions=extensions,
        )


class InternalServerError(ProblemDetailsException):
    """Exception for internal server errors."""

    def __init__(
        self,
        detail: str = "An unexpected error occurred while processing the request",
        error_id: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        if not error_id:
            error_id = str(uuid.uuid4())

        super().__init__(
            status_code=500,
            title="Internal Server Error",
            detail=detail,
            type_uri="https://example.com/problems/internal-server-error",
            instance=instance,
            code="INTERNAL_ERROR",
            extensions={
                "error_id": error_id,
                "timestamp": _utc_timestamp(),
            },
        )


# Business logic exceptions

class DepartureUnavailableError(ProblemDetailsException):
    """Exception when a departure is no longer open for booking."""

    def __init__(self, departure_id: str, status: str):
        super().__init__(
            status_code=409,
            title="Departure Unavailable",
            detail=f"Departure {departure_id} is no longer available for booking (status: {status})",
            type_uri="https://example.com/problems/departure-unavailable",
            code="UNAVAILABLE",
            extensions={
                "departure_id": departure_id,
                "departure_status": status,
            },
        )


class InsufficientCapacityError(ProblemDetailsException):
    """Exception when a departure has fewer seats left than requested."""

    def __init__(self, departure_id: str, requested_seats: int, available_seats: int):
        super().__init__(
            status_code=409,
            title="Insufficient Capacity",
            detail=f"Only {available_seats} seats available",
            type_uri="https://example.com/problems/insufficient-capacity",
            code="INSUFFICIENT_CAPACITY",
            extensions={
                "departure_id": departure_id,
                "requested_seats": requested_seats,
                "available_seats": available_seats,
            },
        )
        self.requested_seats = requested_seats
        self.available_seats = available_seats


class ContentionError(ProblemDetailsException):
    """Exception when every reservation attempt lost the race to another writer."""

    def __init__(self, resource_id: str, attempts: int):
        super().__init__(
            status_code=409,
            title="Booking Contention",
            detail="Unable to complete booking. Please try again.",
            type_uri="https://example.com/problems/booking-contention",
            code="CONTENTION",
            retryable=True,
            extensions={
                "resource_id": resource_id,
                "attempts": attempts,
            },
            headers={"Retry-After": "1"},
        )
        self.attempts = attempts


class InvalidStatusTransitionError(ProblemDetailsException):
    """Exception when a departure status change is not allowed."""

    def __init__(self, departure_id: str, current_status: str, requested_status: str):
        super().__init__(
            status_code=409,
            title="Invalid Status Transition",
            detail=f"Departure {departure_id} cannot move from {current_status} to {requested_status}",
            type_uri="https://example.com/problems/invalid-status-transition",
            code="INVALID_STATUS_TRANSITION",
            extensions={
                "departure_id": departure_id,
                "current_status": current_status,
                "requested_status": requested_status,
            },
        )


# Internal failures. These never reach clients as-is; routers log them and
# answer with a generic InternalServerError.

class ReferenceGenerationExhausted(RuntimeError):
    """Raised when no unused booking reference was found within the attempt budget."""

    def __init__(self, attempts: int):
        super().__init__(f"No unused booking reference after {attempts} attempts")
        self.attempts = attempts


class InventoryIntegrityError(RuntimeError):
    """Raised when the inventory row does not match a reservation made in the same transaction."""


async def problem_details_handler(request: Request, exc: ProblemDetailsException) -> JSONResponse:
    """
    Exception handler for Problem Details exceptions.

    Args:
        request: FastAPI request object
        exc: Problem Details exception

    Returns:
        JSONResponse: Problem Details formatted response
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.problem_details,
        headers=exc.headers,
        media_type="application/problem+json",
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Convert FastAPI request validation errors to Problem Details with violations.

    Args:
        request: FastAPI request object
        exc: Request validation error

    Returns:
        JSONResponse: Problem Details formatted response
    """
    violations = [
        {
            "path": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg", "Invalid value"),
        }
        for error in exc.errors()
    ]

    return JSONResponse(
        status_code=422,
        content={
            "type": "https://example.com/problems/validation-error",
            "title": "Validation Error",
            "status": 422,
            "code": "VALIDATION_ERROR",
            "retryable": False,
            "detail": "The request data failed validation",
            "instance": str(request.url),
            "violations": violations,
        },
        media_type="application/problem+json",
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Generic exception handler that converts unhandled exceptions to Problem Details format.

    Args:
        request: FastAPI request object
        exc: Unhandled exception

    Returns:
        JSONResponse: Problem Details formatted response
    """
    error_id = str(uuid.uuid4())

    logger.error(
        "Unhandled exception",
        extra={"error_id": error_id, "path": request.url.path, "error": str(exc)},
        exc_info=exc,
    )

    problem_details = {
        "type": "https://example.com/problems/internal-server-error",
        "title": "Internal Server Error",
        "status": 500,
        "code": "INTERNAL_ERROR",
        "retryable": False,
        "detail": "An unexpected error occurred while processing the request",
        "instance": str(request.url),
        "error_id": error_id,
        "timestamp": _utc_timestamp(),
    }

    return JSONResponse(
        status_code=500,
        content=problem_details,
        media_type="application/problem+json",
    )
