# backend/spa_booking/core/exceptions.py
"""
Domain-specific exceptions for the spa booking API.

Every domain error carries an explicit ``kind`` (client or server) and an
HTTP ``status_code`` so the API layer can render it without guessing.
Client errors describe requests the caller must fix; server errors describe
store or infrastructure failures.
"""

from enum import Enum
from typing import Any, Dict, Optional

from fastapi import HTTPException, status

class ErrorKind(str, Enum):
    """Who has to act on an error."""

    CLIENT = "client"
    SERVER = "server"


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    kind: ErrorKind = ErrorKind.SERVER
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    @property
    def is_client_error(self) -> bool:
        return self.kind == ErrorKind.CLIENT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "kind": self.kind.value,
            "details": self.details,
        }

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=self.status_code, detail=self.to_dict())


class ValidationException(DomainException):
    """Raised when business validation fails."""

    kind = ErrorKind.CLIENT
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    kind = ErrorKind.CLIENT
    status_code = status.HTTP_404_NOT_FOUND


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["message"] = self.message or "An error occurred processing your request"
        return payload


class StoreUnavailableException(ServiceException):
    """Raised when the store cannot complete a unit of work after retries."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


# Specific business exceptions


class BookingNotFoundException(NotFoundException):
    """Raised when a booking id does not resolve to a stored booking."""

    def __init__(self, booking_id: str):
        super().__init__(
            message=f"Booking not found: {booking_id}",
            code="BOOKING_NOT_FOUND",
            details={"booking_id": booking_id},
        )


class InvalidStatusTransitionException(ValidationException):
    """Raised when a booking status change is not in the transition table."""

    def __init__(self, current: str, requested: str):
        super().__init__(
            message=f"Invalid status transition {current} -> {requested}",
            code="INVALID_STATUS_TRANSITION",
            details={"from": current, "to": requested},
        )


class BookingCanceledException(ValidationException):
    """Raised when a canceled booking would be modified."""

    def __init__(self, booking_id: str):
        super().__init__(
            message="Cannot update details of canceled booking",
            code="BOOKING_CANCELED",
            details={"booking_id": booking_id},
        )


class CatalogItemNotFoundException(ValidationException):
    """Raised when a selection references a program or package that does not exist."""

    def __init__(self, item_type: str, item_id: str):
        super().__init__(
            message=f"{item_type.capitalize()} not found: {item_id}",
            code=f"{item_type.upper()}_NOT_FOUND",
            details={"item_type": item_type, "item_id": item_id},
        )


class CatalogItemInactiveException(ValidationException):
    """Raised when a selection references a soft-deleted catalog record."""

    def __init__(self, item_type: str, item_id: str):
        super().__init__(
            message=f"{item_type.capitalize()} inactive: {item_id}",
            code=f"{item_type.upper()}_INACTIVE",
            details={"item_type": item_type, "item_id": item_id},
        )


class DurationOptionNotFoundException(ValidationException):
    """Raised when a program selection names a duration the program does not offer."""

    def __init__(self, program_id: str, duration_minutes: int, available: list[int]):
        super().__init__(
            message=(
                f"Program {program_id} has no {duration_minutes}-minute option "
                f"(available: {', '.join(str(d) for d in available) or 'none'})"
            ),
            code="DURATION_OPTION_NOT_FOUND",
            details={
                "program_id": program_id,
                "duration_minutes": duration_minutes,
                "available_durations": available,
            },
        )


class InvalidPageTokenException(ValidationException):
    """Raised when a page token cannot be decoded or does not fit the current query."""

    def __init__(self, reason: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.reason = reason
        super().__init__(
            message=message,
            code="INVALID_PAGE_TOKEN",
            details={"reason": reason, **(details or {})},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """
