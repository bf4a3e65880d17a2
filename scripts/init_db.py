# scripts/init_db.py
"""
Script to initialize database tables. Run from project root:
    python scripts/init_db.py
"""
import asyncio

from dinnerpair.infrastructure.db.session import Base, engine
import dinnerpair.infrastructure.models  # noqa: F401  registers tables on Base


async def init():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()
    print("DB initialized")

if __name__ == "__main__":
    asyncio.run(init())
