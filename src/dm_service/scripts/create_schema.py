"""One-time script: create the chat tables (and a local users mirror) if missing."""
from __future__ import annotations

import asyncio
import logging

from dm_service.infrastructure.db import models  # noqa: F401  registers tables
from dm_service.infrastructure.db.base import Base
from dm_service.infrastructure.db.session import engine
from dm_service.log import configure_logging

logger = logging.getLogger(__name__)


async def create_schema() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Created tables: %s", ", ".join(sorted(Base.metadata.tables)))
    await engine.dispose()


def main() -> None:
    configure_logging("INFO")
    asyncio.run(create_schema())


if __name__ == "__main__":
    main()
