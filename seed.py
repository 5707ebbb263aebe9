"""
Seed script -- populates the locations table with the fixed pickup /
drop-off points and their pairwise distances.

Run after migrations:
    python seed.py

Creates:
  - 10 locations around Lahore (City Center, Airport, Train Station, ...)
  - a symmetric distance table between every pair of them
"""

import asyncio

from sqlalchemy import func, select

from ridebook.infrastructure.catalog import default_locations
from ridebook.infrastructure.database import async_session_factory, engine
from ridebook.infrastructure.models import LocationModel
from ridebook.infrastructure.repositories import LocationRepository


async def seed():
    async with async_session_factory() as session:
        # Check if already seeded
        result = await session.execute(select(func.count()).select_from(LocationModel))
        if result.scalar() > 0:
            print("Locations already seeded. Skipping.")
            return

        locations = default_locations()
        await LocationRepository(session).add_many(locations)
        await session.commit()

        routes = sum(len(loc.distances) for loc in locations) // 2
        print(f"  Created {len(locations)} locations ({routes} routes)")
        print("\nSeed complete!")


async def main():
    print("Seeding database...")
    await seed()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
