"""
Custom exceptions for the booking engine

Every error carries the HTTP status it maps to at the request boundary.
"""
from datetime import date
from typing import Any, Iterable


class BookingEngineError(Exception):
    """Base exception for booking-related errors"""

    http_status: int = 500

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__.upper()
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses"""
        return {
            "error": self.message,
            "error_code": self.error_code,
            "details": self.details
        }


class NotFound(BookingEngineError):
    """Exception raised when a referenced entity does not exist"""

    http_status = 404

    def __init__(
        self,
        message: str,
        entity_type: str | None = None,
        entity_id: Any | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None
    ):
        super().__init__(message, error_code or "NOT_FOUND", details)
        self.entity_type = entity_type
        self.entity_id = entity_id

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["entity"] = {
            "type": self.entity_type,
            "id": str(self.entity_id) if self.entity_id is not None else None
        }
        return result


class GuardianNotFound(NotFound):
    def __init__(self, guardian_id: Any):
        super().__init__("User not found", "guardian", guardian_id, "GUARDIAN_NOT_FOUND")


class DependentNotFound(NotFound):
    def __init__(self, dependent_id: Any):
        super().__init__("Dependent not found", "dependent", dependent_id, "DEPENDENT_NOT_FOUND")


class NoDependentFound(NotFound):
    """The guardian has no dependents at all"""

    def __init__(self, guardian_id: Any):
        super().__init__(
            "No dependents found for user",
            "dependent",
            None,
            "NO_DEPENDENT_FOUND",
            {"guardian_id": str(guardian_id)}
        )


class NoMatchingDependent(NotFound):
    """A dependent name was supplied and matched none of the guardian's dependents"""

    def __init__(self, dependent_name: str, guardian_id: Any | None = None):
        super().__init__(
            f'No dependent found matching "{dependent_name}"',
            "dependent",
            None,
            "NO_MATCHING_DEPENDENT",
            {"dependent_name": dependent_name}
        )
        self.dependent_name = dependent_name
        self.guardian_id = guardian_id


class CenterNotFound(NotFound):
    def __init__(self, center_name: str | None = None, center_id: Any | None = None):
        label = f'"{center_name}"' if center_name else str(center_id)
        super().__init__(
            f"Childcare center {label} not found",
            "center",
            center_id,
            "CENTER_NOT_FOUND",
            {"center_name": center_name} if center_name else None
        )
        self.center_name = center_name


class NoCentersInArea(NotFound):
    def __init__(self, zip_code: str):
        super().__init__(
            f"No childcare centers found in zip code {zip_code}",
            "center",
            None,
            "NO_CENTERS_IN_AREA",
            {"zip_code": zip_code}
        )
        self.zip_code = zip_code


class BookingNotFound(NotFound):
    def __init__(self, booking_id: Any):
        super().__init__("Booking not found", "booking", booking_id, "BOOKING_NOT_FOUND")


class BookingDayNotFound(NotFound):
    def __init__(self, booking_day_id: Any):
        super().__init__("Booking day not found", "booking_day", booking_day_id, "BOOKING_DAY_NOT_FOUND")


class InvalidDate(BookingEngineError):
    """Exception raised when a requested date literal cannot be parsed"""

    http_status = 400

    def __init__(self, literal: Any):
        super().__init__(
            f"Invalid date: {literal!r}",
            "INVALID_DATE",
            {"value": str(literal)}
        )
        self.literal = literal


class InvalidBookingRequest(BookingEngineError):
    """Exception raised when a request is structurally incomplete"""

    http_status = 400

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message, "INVALID_REQUEST", {"field": field} if field else None)
        self.field = field


class InvalidStatus(BookingEngineError):
    """Exception raised when a status value is outside the accepted set"""

    http_status = 400

    def __init__(self, status: Any, allowed: Iterable[str]):
        allowed = list(allowed)
        super().__init__(
            "Invalid status value",
            "INVALID_STATUS",
            {"status": status, "allowed": allowed}
        )
        self.status = status
        self.allowed = allowed


class InvalidStatusTransition(BookingEngineError):
    """Exception raised when a lifecycle transition is not permitted"""

    http_status = 409

    def __init__(self, entity_type: str, current: str, requested: str):
        super().__init__(
            f"Cannot move {entity_type} from {current} to {requested}",
            "INVALID_STATUS_TRANSITION",
            {"entity_type": entity_type, "current": current, "requested": requested}
        )
        self.current = current
        self.requested = requested


class PartialUnavailability(BookingEngineError):
    """
    Some requested dates cannot be served by any candidate center.

    Carries the unassignable dates and the full candidate schedule so the
    caller can propose alternative dates or centers.
    """

    http_status = 400

    def __init__(
        self,
        unavailable_dates: list[date],
        available_centers: list[dict[str, Any]]
    ):
        self.unavailable_dates = sorted(unavailable_dates)
        self.available_centers = available_centers
        super().__init__(
            "No available centers found for some requested dates",
            "PARTIAL_UNAVAILABILITY",
            {
                "unavailable_dates": [d.isoformat() for d in self.unavailable_dates],
                "available_centers": available_centers
            }
        )

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        # Top level keys are part of the public contract
        result["unavailable_dates"] = self.details["unavailable_dates"]
        result["available_centers"] = self.details["available_centers"]
        return result


class TransactionFailure(BookingEngineError):
    """Datastore failure; the whole transaction has been rolled back"""

    http_status = 500

    def __init__(self, message: str, operation: str | None = None, cause: Exception | None = None):
        super().__init__(
            message,
            "TRANSACTION_FAILURE",
            {"operation": operation} if operation else None
        )
        self.operation = operation
        self.cause = cause


# Exception hierarchy for easy catching
NOT_FOUND_EXCEPTIONS = (
    GuardianNotFound,
    DependentNotFound,
    NoDependentFound,
    NoMatchingDependent,
    CenterNotFound,
    NoCentersInArea,
    BookingNotFound,
    BookingDayNotFound
)

REQUEST_EXCEPTIONS = (
    InvalidDate,
    InvalidBookingRequest,
    InvalidStatus,
    InvalidStatusTransition,
    PartialUnavailability
)


def create_error_response(exception: BookingEngineError) -> dict[str, Any]:
    """Create standardized error response from exception"""
    return exception.to_dict()
