from __future__ import annotations


class BookingError(RuntimeError):
    """Base for expected, user-facing scheduling outcomes."""

    code = "BOOKING_ERROR"

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class ResourceNotFound(BookingError):
    """Raised when a booking, service or referenced user does not exist."""

    code = "RESOURCE_NOT_FOUND"


class InvalidBooking(BookingError):
    """Raised for input the client must correct (past time, empty service set)."""

    code = "INVALID_BOOKING"


class BookingConflict(BookingError):
    """Raised when the requested interval overlaps an active booking."""

    code = "BOOKING_CONFLICT"

    def __init__(self, message: str, conflicting_ids: list[str] | None = None) -> None:
        super().__init__(message)
        self.conflicting_ids = list(conflicting_ids or [])


class InvalidOperation(BookingError):
    """Raised for illegal status transitions and edits of terminal bookings."""

    code = "BOOKING_INVALID_STATUS"

    def __init__(
        self,
        message: str,
        current_status: str | None = None,
        target_status: str | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message, code=code)
        self.current_status = current_status
        self.target_status = target_status


class AccessDenied(BookingError):
    """Raised when the AccessGate rejects the caller."""

    code = "ACCESS_DENIED"


class StoreTimeout(RuntimeError):
    """Raised when the booking store could not be reached or locked in time. Retryable."""


class CatalogUnavailable(RuntimeError):
    """Raised when the service catalog fails (timeouts, network errors, bad payloads)."""
