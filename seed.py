"""
Seed script -- populates the database with demo data for reviewers.

Run after migrations:
    python seed.py

Creates (from the factories in ``src.domain.demo_data``):
  - 3 aggregation points around Douala (central office, splice, junction box)
  - 1 DSLAM and 1 backbone link per region of Cameroon
  - 2 saved connection simulations (aerial and underground) with their
    planned last-mile elements
"""

import asyncio
import logging

from sqlalchemy import text

from src.config import get_cost_model
from src.domain.builder import build_connection_path
from src.domain.demo_data import demo_connection_inputs, demo_network_elements
from src.domain.enums import ConnectionStatus
from src.infrastructure.database import async_session_factory, engine
from src.infrastructure.repositories import (
    ConnectionPathRepository,
    NetworkElementRepository,
)

logger = logging.getLogger("seed")


async def seed():
    async with async_session_factory() as session:
        # Check if already seeded
        result = await session.execute(text("SELECT count(*) FROM network_elements"))
        if result.scalar() > 0:
            logger.info("Database already seeded. Skipping.")
            return

        element_repo = NetworkElementRepository(session)
        connection_repo = ConnectionPathRepository(session)

        # ── Network inventory ─────────────────────────────────────────
        elements = demo_network_elements()
        for element in elements:
            await element_repo.create(element)
        logger.info("  Created %d network elements", len(elements))

        # ── Connection simulations ────────────────────────────────────
        cost_model = get_cost_model()
        for index, data in enumerate(demo_connection_inputs()):
            path = build_connection_path(data, cost_model)
            row = await connection_repo.create(path)
            for element in path.last_mile_elements:
                await element_repo.create(element, source_connection_id=row.id)
            # Second demo connection was already signed off
            if index == 1:
                path.transition_to(ConnectionStatus.APPROVED)
                await connection_repo.set_status(row, path.status)
            logger.info(
                "  Created connection %d (%s, %.0f m, %.0f %s)",
                row.id, path.installation_type, path.total_distance_m,
                path.estimated_cost, path.currency,
            )

        await session.commit()
        logger.info("Seed complete!")


async def main():
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    logger.info("Seeding database...")
    await seed()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
