"""
Domain entities and value objects.

Patterns used
-------------
- ``Location`` is an immutable reference record created at seed time.
- ``FareQuote`` is the price breakdown returned by the fare calculator.
- ``check_transition`` enforces the trip lifecycle
  (pending -> accepted -> in_progress -> completed | cancelled).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from .enums import RideClass, TripStatus, TRIP_TRANSITIONS
from .errors import InvalidTransition


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Location:
    id: int
    name: str
    address: str
    # destination location id -> travel distance in km
    distances: dict[int, float] = field(default_factory=dict, hash=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "distances": {str(k): v for k, v in self.distances.items()},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Location":
        """Build from a JSON-ish mapping (distance keys may be strings)."""
        return cls(
            id=int(data["id"]),
            name=data["name"],
            address=data["address"],
            distances={
                int(k): float(v) for k, v in (data.get("distances") or {}).items()
            },
        )


@dataclass(frozen=True)
class FareQuote:
    distance_km: float
    ride_class: RideClass
    base_price: float
    distance_price: float
    total_price: int


# ── State machine ─────────────────────────────────────────────────────


def parse_status(value: Union[str, TripStatus]) -> TripStatus:
    try:
        return TripStatus(value)
    except ValueError:
        raise InvalidTransition(f"Unknown trip status: {value!r}") from None


def check_transition(current: TripStatus, new_status: TripStatus) -> None:
    """Raise ``InvalidTransition`` unless *current* -> *new_status* is legal."""
    allowed = TRIP_TRANSITIONS.get(current, set())
    if new_status not in allowed:
        raise InvalidTransition(
            f"Cannot transition from {current.value} to {new_status.value}"
        )
