"""
Seeded pickup / drop-off points (Lahore) with their road distances.

Used by ``seed.py`` to populate the ``locations`` table and by
``StaticLocationStore`` when ``LOCATION_BACKEND=static``.
"""

from __future__ import annotations

from ridebook.domain.entities import Location

PLACES: list[tuple[int, str, str]] = [
    (1, "City Center", "Main Street, Downtown"),
    (2, "Airport", "Allama Iqbal International Airport"),
    (3, "Train Station", "Lahore Railway Station"),
    (4, "Emporium Mall", "Johar Town"),
    (5, "University", "University of Lahore"),
    (6, "Jinnah Hospital", "Jinnah Hospital"),
    (7, "Gadaffi Stadium", "Gadaffi Stadium"),
    (8, "Faisal Town", "Faisal Town"),
    (9, "DHA Raya", "DHA Raya"),
    (10, "Lake City", "Lake City"),
]

# (a, b) -> km; the table is symmetric
ROUTES: dict[tuple[int, int], float] = {
    (1, 2): 15, (1, 3): 4, (1, 4): 14, (1, 5): 22, (1, 6): 10,
    (1, 7): 7, (1, 8): 11, (1, 9): 20, (1, 10): 24,
    (2, 3): 14, (2, 4): 20, (2, 5): 30, (2, 6): 16, (2, 7): 12,
    (2, 8): 17, (2, 9): 9, (2, 10): 28,
    (3, 4): 16, (3, 5): 25, (3, 6): 12, (3, 7): 9, (3, 8): 13,
    (3, 9): 21, (3, 10): 26,
    (4, 5): 10, (4, 6): 5, (4, 7): 9, (4, 8): 4, (4, 9): 18, (4, 10): 12,
    (5, 6): 13, (5, 7): 17, (5, 8): 11, (5, 9): 26, (5, 10): 14,
    (6, 7): 5, (6, 8): 4, (6, 9): 15, (6, 10): 15,
    (7, 8): 6, (7, 9): 12, (7, 10): 18,
    (8, 9): 16, (8, 10): 13,
    (9, 10): 24,
}


def distance_table() -> dict[int, dict[int, float]]:
    table: dict[int, dict[int, float]] = {pid: {} for pid, _, _ in PLACES}
    for (a, b), km in ROUTES.items():
        table[a][b] = float(km)
        table[b][a] = float(km)
    return table


def default_locations() -> list[Location]:
    table = distance_table()
    return [
        Location(id=pid, name=name, address=address, distances=table[pid])
        for pid, name, address in PLACES
    ]
