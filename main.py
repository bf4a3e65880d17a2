# main.py
"""
Entry point for the periodic pairing sweep. Run from project root:
    python main.py

Meant to be invoked by an external scheduler (cron or similar) once a day.
"""
import asyncio
import logging

from dinnerpair.config.settings import settings
from dinnerpair.infrastructure.db.session import AsyncSessionLocal, engine
from dinnerpair.services.scheduling_service import run_scheduled_pairings

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


async def run_once():
    async with AsyncSessionLocal() as db:
        outcomes = await run_scheduled_pairings(db)
    await engine.dispose()
    for o in outcomes:
        logger.info(f"{o.group_id} ({o.group_name}): {o.status} pairs={o.pairs_generated} {o.reason or ''}")
    return outcomes


def main():
    asyncio.run(run_once())


if __name__ == "__main__":
    main()
