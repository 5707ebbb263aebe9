"""Domain exceptions raised by the fare calculator and trip lifecycle.

Every error here is an expected, caller-recoverable condition.  The API
layer maps each class to an HTTP status (see ``ridebook.api.errors``).
"""


class RideBookingError(Exception):
    """Base class for all domain errors."""


class InvalidInput(RideBookingError):
    """Raised when an argument fails validation."""


class InvalidLocation(InvalidInput):
    """Raised when a location id is not in the location store."""


class SameLocation(InvalidInput):
    """Raised when pickup and destination are the same location."""


class InvalidRideClass(InvalidInput):
    """Raised when a ride class is not one of the known vehicle categories."""


class DistanceNotFound(InvalidInput):
    """Raised when the distance table has no usable entry for a route."""


class TripNotFound(RideBookingError):
    pass


class TripNotPending(RideBookingError):
    """Raised when a trip can no longer be accepted."""


class Unauthorized(RideBookingError):
    """Raised when the actor is not a party to the trip."""


class InvalidTransition(RideBookingError):
    """Raised when a status change violates the trip state machine."""


class StorageError(RideBookingError):
    """Raised when the persistence layer fails."""


class IdempotencyConflict(RideBookingError):
    """Raised when a passenger's idempotency key is already taken by another row."""
