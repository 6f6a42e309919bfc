"""
Error taxonomy for the discipline tracker.

Every data-access and scanner failure maps onto one of these. Callers nearest
the user action turn them into a notification or an HTTP error; nothing here
is retried.
"""

from __future__ import annotations


class DisciplineTrackerError(Exception):
    """Base class for all tracker errors."""

    #: Short message suitable for showing to staff
    user_message = "Something went wrong"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.user_message)


class StudentNotFoundError(DisciplineTrackerError):
    """Lookup returned no student, or an ambiguous match."""

    user_message = "Student not found"


class TransportError(DisciplineTrackerError):
    """A database call failed (connection, constraint, timeout...)."""

    user_message = "Database request failed"


class PolicyRejectedError(DisciplineTrackerError):
    """An access policy refused the operation (e.g. creator mismatch)."""

    user_message = "Not permitted"


class CameraError(DisciplineTrackerError):
    """The camera could not be opened or stopped delivering frames."""

    user_message = "Error accessing camera"
