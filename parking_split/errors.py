# errors.py


class ParkingError(Exception):
    """Base class for failures surfaced to whoever triggered an action."""
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class Conflict(ParkingError):
    """The date is already taken, or the booking belongs to the other party."""
    status_code = 409


class NotFound(ParkingError):
    status_code = 404


class UnknownOccupant(ParkingError):
    status_code = 400


class StoreUnavailable(ParkingError):
    """The record store could not complete the call."""
    status_code = 503
