"""Booking error taxonomy.

Each error carries the HTTP status the boundary answers with; routes never
build these codes themselves.
"""


class BookingError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BookingError):
    """A required field is missing or malformed."""
    status_code = 400


class NotFound(BookingError):
    status_code = 404


class SlotConflict(BookingError):
    """An active booking already holds the requested slot."""
    status_code = 409


class Forbidden(BookingError):
    status_code = 403


class InvalidTransition(BookingError):
    """The status change is not allowed from the booking's current status."""
    status_code = 409


class BookingCodeTaken(Exception):
    """Raised by a store when a generated booking code already exists."""
