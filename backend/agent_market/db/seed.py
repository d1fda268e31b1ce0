"""Category Seeding — one-off script for fresh databases.

Usage: python -m agent_market.db.seed

Invariants:
    - Idempotent: only missing predefined categories are inserted
"""

import asyncio
import logging

from agent_market.config import get_settings
from agent_market.db.session import create_session_factory
from agent_market.infrastructure.observability import setup_logging
from agent_market.services.catalog import seed_categories

logger = logging.getLogger(__name__)


async def seed(database_url: str) -> list[str]:
    """Seed predefined categories; returns every category name now present."""
    session_factory = create_session_factory(database_url)
    async with session_factory() as db:
        categories = await seed_categories(db)
        names = [c.name for c in categories]
    await db.bind.dispose()
    return names


def main() -> None:
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    names = asyncio.run(seed(settings.database_url))
    logger.info(f"Categories present: {', '.join(names)}")


if __name__ == "__main__":
    main()
