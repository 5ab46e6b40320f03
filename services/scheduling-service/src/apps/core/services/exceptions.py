# services/scheduling-service/src/apps/core/services/exceptions.py
"""
Scheduling Service Exceptions

Custom exceptions for the weather-aware scheduling core.
"""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorKind(str, Enum):
    """Error taxonomy exposed to callers."""
    INVALID_TRAINING_LEVEL = 'INVALID_TRAINING_LEVEL'
    INVALID_TRANSITION = 'INVALID_TRANSITION'
    TERMINAL_BOOKING_IMMUTABLE = 'TERMINAL_BOOKING_IMMUTABLE'
    BOOKING_NOT_ON_HOLD = 'BOOKING_NOT_ON_HOLD'
    CANDIDATE_NO_LONGER_SAFE = 'CANDIDATE_NO_LONGER_SAFE'
    FORECAST_UNAVAILABLE = 'FORECAST_UNAVAILABLE'
    WEATHER_SOURCE_UNAVAILABLE = 'WEATHER_SOURCE_UNAVAILABLE'
    BOOKING_NOT_FOUND = 'BOOKING_NOT_FOUND'
    CONCURRENT_MODIFICATION = 'CONCURRENT_MODIFICATION'


class SchedulingError(Exception):
    """Base exception for scheduling core errors."""

    kind = None
    # Transient infrastructure errors may be retried by the caller
    transient = False

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.kind.value if self.kind else "SCHEDULING_ERROR",
            "message": self.message,
            "details": self.details,
        }


class InvalidTrainingLevelError(SchedulingError):
    """Raised when a training level has no entry in the minima policy."""

    kind = ErrorKind.INVALID_TRAINING_LEVEL

    def __init__(self, training_level: Any, message: str = None):
        super().__init__(
            message=message or f"Unknown training level: {training_level}",
            details={"training_level": str(training_level)}
        )


class InvalidTransitionError(SchedulingError):
    """Raised when a booking status transition is not allowed."""

    kind = ErrorKind.INVALID_TRANSITION

    def __init__(
        self,
        current_state: str,
        target_state: str,
        message: str = None,
        details: Optional[Dict[str, Any]] = None
    ):
        msg = message or f"Cannot transition from {current_state} to {target_state}"
        error_details = details or {}
        error_details.update({
            "current_state": current_state,
            "target_state": target_state,
        })
        super().__init__(message=msg, details=error_details)


class TerminalBookingImmutableError(SchedulingError):
    """Raised when a cancelled or completed booking would be changed."""

    kind = ErrorKind.TERMINAL_BOOKING_IMMUTABLE

    def __init__(self, booking_id: Any, status: str):
        super().__init__(
            message=f"Booking {booking_id} is {status} and can no longer change",
            details={"booking_id": str(booking_id), "status": status}
        )


class BookingNotOnHoldError(SchedulingError):
    """Raised when a reschedule is requested for a booking not on weather hold."""

    kind = ErrorKind.BOOKING_NOT_ON_HOLD

    def __init__(self, booking_id: Any, status: str):
        super().__init__(
            message=f"Booking {booking_id} is {status}, not on weather hold",
            details={"booking_id": str(booking_id), "status": status}
        )


class CandidateNoLongerSafeError(SchedulingError):
    """Raised when a selected reschedule candidate fails re-validation."""

    kind = ErrorKind.CANDIDATE_NO_LONGER_SAFE

    def __init__(self, message: str, verdict=None):
        details = {}
        if verdict is not None:
            details = {
                "violations": [code.value for code in verdict.violations],
                "reason": verdict.reason,
            }
        self.verdict = verdict
        super().__init__(message=message, details=details)


class ForecastUnavailableError(SchedulingError):
    """Raised when reschedule generation cannot obtain every forecast in time."""

    kind = ErrorKind.FORECAST_UNAVAILABLE
    transient = True


class WeatherSourceUnavailableError(SchedulingError):
    """Raised by weather sources when data cannot be retrieved."""

    kind = ErrorKind.WEATHER_SOURCE_UNAVAILABLE
    transient = True


class BookingNotFoundError(SchedulingError):
    """Raised when a booking is not found."""

    kind = ErrorKind.BOOKING_NOT_FOUND

    def __init__(self, booking_id: Any):
        super().__init__(
            message=f"Booking not found: {booking_id}",
            details={"booking_id": str(booking_id)}
        )


class ConcurrentModificationError(SchedulingError):
    """Raised when a booking was saved by someone else since it was loaded."""

    kind = ErrorKind.CONCURRENT_MODIFICATION
    transient = True

    def __init__(self, booking_id: Any, expected_version: int, actual_version: int):
        super().__init__(
            message=(
                f"Booking {booking_id} was modified concurrently "
                f"(expected version {expected_version}, found {actual_version})"
            ),
            details={
                "booking_id": str(booking_id),
                "expected_version": expected_version,
                "actual_version": actual_version,
            }
        )
