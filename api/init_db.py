"""
Initialize database schema from models
"""
import asyncio
import sys
from pathlib import Path

# Add current directory to path
sys.path.insert(0, str(Path(__file__).parent))

from config.database import db_manager
from config.settings import get_settings
from models.database import Base, User, PasswordResetToken, Contact  # noqa: F401
from services.bootstrap.seed_admin import seed_initial_admin
from utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


async def init_db():
    """Initialize database schema and seed the first admin"""
    try:
        logger.info("Initializing database manager...")

        await db_manager.initialize()

        logger.info("Creating database schema...")

        async with db_manager.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        logger.info(f"Created tables: {', '.join(sorted(Base.metadata.tables))}")

        async with db_manager.async_session_factory() as session:
            await seed_initial_admin(session, get_settings())

    except Exception as e:
        logger.error(f"Error initializing database: {e}")
        raise
    finally:
        await db_manager.close()

if __name__ == "__main__":
    setup_logging()
    asyncio.run(init_db())
