"""
Distance lookup against the precomputed location table.

Every seeded location carries the road distance (km) to every other
location, so no routing engine is involved: a route's distance is a
single dictionary read on the pickup location.

A stored distance of zero is reported as "not found" rather than as a
free ride; the message says which of the two cases applied.
"""

from .entities import Location
from .errors import DistanceNotFound


def lookup_distance(from_location: Location, to_location_id: int) -> float:
    """Return the km distance from *from_location* to *to_location_id*."""
    distance = from_location.distances.get(int(to_location_id))
    if distance is None:
        raise DistanceNotFound(
            f"Distance not found between locations "
            f"{from_location.id} and {to_location_id}"
        )
    if distance <= 0:
        raise DistanceNotFound(
            f"Zero distance recorded between locations "
            f"{from_location.id} and {to_location_id}"
        )
    return float(distance)
