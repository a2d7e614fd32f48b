import asyncio
import logging
import sys
import os

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.database import build_engine, dispose_engine
from core.logging import setup_logging
# Importing the package registers every model on Base.metadata
from models import Base

setup_logging()
logger = logging.getLogger(__name__)


async def init_database():
    logger.info("Connecting to database...")
    engine = build_engine()

    async with engine.begin() as conn:
        logger.info(f"Creating tables: {', '.join(sorted(Base.metadata.tables))}")
        await conn.run_sync(Base.metadata.create_all)
        logger.info("Tables created successfully.")

    await dispose_engine(engine)

if __name__ == "__main__":
    asyncio.run(init_database())
