# scripts/init_db.py
import asyncio
import logging

from shipdesk.core.config import settings
from shipdesk.core.logging import setup_logging
from shipdesk.db import create_db_and_tables

log = logging.getLogger(__name__)


async def create_tables():
    await create_db_and_tables()
    log.info("All missing tables created.")


if __name__ == "__main__":
    setup_logging(settings.log_level)
    asyncio.run(create_tables())
