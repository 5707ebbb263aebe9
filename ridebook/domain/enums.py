"""Domain enumerations and state-transition rules."""

import enum


class TripStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# State machine: maps current status -> set of valid next statuses
TRIP_TRANSITIONS: dict[TripStatus, set[TripStatus]] = {
    TripStatus.PENDING: {TripStatus.ACCEPTED, TripStatus.CANCELLED},
    TripStatus.ACCEPTED: {TripStatus.IN_PROGRESS, TripStatus.CANCELLED},
    TripStatus.IN_PROGRESS: {TripStatus.COMPLETED},
    TripStatus.COMPLETED: set(),
    TripStatus.CANCELLED: set(),
}

ACTIVE_STATUSES = (TripStatus.ACCEPTED, TripStatus.IN_PROGRESS)
TERMINAL_STATUSES = (TripStatus.COMPLETED, TripStatus.CANCELLED)


class RideClass(str, enum.Enum):
    BIKE = "bike"  # two-wheeler
    CAR = "car"
    RICKSHA = "ricksha"  # three-wheeler


class ActorRole(str, enum.Enum):
    PASSENGER = "passenger"
    DRIVER = "driver"
