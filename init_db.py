import asyncio
import logging

from totp_api.app.core.logging import setup_logging
from totp_api.app.db.base import engine, Base
# Import models so Base.metadata knows the tables
from totp_api.app.models import User, Credential  # noqa: F401

logger = logging.getLogger(__name__)


async def init_models():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()
    logger.info("Tables created")


if __name__ == "__main__":
    setup_logging()
    asyncio.run(init_models())
