class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AttendanceError(DomainError):
    """Raised when a check-in/check-out transition is not allowed."""


class AlreadyCheckedIn(AttendanceError):
    def __init__(self, message: str = "already checked in today"):
        super().__init__(message)


class NotCheckedIn(AttendanceError):
    def __init__(self, message: str = "not checked in today"):
        super().__init__(message)


class AlreadyCheckedOut(AttendanceError):
    def __init__(self, message: str = "already checked out today"):
        super().__init__(message)


class InvalidStatus(AttendanceError):
    """Raised for a status outside unmarked/present/absent/late/excused."""


class LocationError(DomainError):
    """Raised when a reported location cannot be accepted."""


class InvalidLocation(LocationError):
    """Coordinates are malformed (NaN, out of range, not numeric)."""


class LocationRejected(LocationError):
    """Coordinates are valid but outside every configured geofence."""

    def __init__(self, message: str, verdict=None):
        super().__init__(message)
        self.verdict = verdict
