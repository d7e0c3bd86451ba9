"""
Domain errors raised by the booking engine.

Each error carries the HTTP status class the API layer reports it with;
the handler registered in main.py renders them as {"error": message}.
"""


class BookingError(Exception):
    status_code: int = 400

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class InvalidRequest(BookingError):
    """Malformed request: missing or duplicate seats, non-positive cost, write-time uniqueness violation."""

    status_code = 400


class NotFound(BookingError):
    status_code = 404

    def __init__(self, entity: str, identifier=None):
        self.entity = entity
        self.identifier = identifier
        if identifier is None:
            message = f"{entity} not found"
        else:
            message = f"{entity} not found with ID: {identifier}"
        super().__init__(message)


class Conflict(BookingError):
    """One or more requested seats are already reserved."""

    status_code = 409

    def __init__(self, message: str, seats: list[str] | None = None):
        self.seats = seats or []
        super().__init__(message)
