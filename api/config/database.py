"""
Database configuration with SQLAlchemy async support
Single engine with connection pooling, one session per request
"""
import asyncio
from typing import AsyncGenerator, Optional
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from config.settings import get_settings
from utils.logging import get_logger
from models.database import Base

logger = get_logger(__name__)

class DatabaseManager:
    """Async database manager owning the engine and session factory"""
    
    def __init__(self):
        self.engine: Optional[AsyncEngine] = None
        self.async_session_factory: Optional[async_sessionmaker] = None
        self._initialized = False
    
    async def initialize(self, database_url: Optional[str] = None):
        """Initialize database engine and session factory"""
        if self._initialized:
            return
        
        settings = get_settings()
        database_url = database_url or settings.database_url
        
        engine_kwargs = {
            "pool_pre_ping": True,
            "echo": settings.DB_ECHO,
        }
        if database_url.startswith("postgresql"):
            engine_kwargs.update({
                "pool_size": settings.DB_POOL_SIZE,
                "max_overflow": 0,
                "pool_recycle": 3600,
                "pool_timeout": 30,
                "connect_args": {
                    "server_settings": {
                        "application_name": "landing_crm_api",
                        "timezone": "UTC",
                        "statement_timeout": "30000",
                    },
                    "command_timeout": 30
                },
            })
        
        try:
            self.engine = create_async_engine(database_url, **engine_kwargs)
            self.async_session_factory = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
            self._initialized = True
            logger.info("Database initialized successfully")
            
        except SQLAlchemyError as e:
            logger.error(f"Failed to initialize database: {e}")
            raise
    
    async def test_connection(self) -> bool:
        """Test database connection"""
        if not self.engine:
            return False
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error(f"Database connection test failed: {e}")
            return False
        except OSError as e:
            logger.error(f"Database unreachable: {e}")
            return False
    
    async def create_tables(self):
        """Create all database tables"""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created successfully")
    
    async def close(self):
        """Close database connections properly"""
        if self.engine:
            try:
                await asyncio.wait_for(self.engine.dispose(), timeout=30.0)
                logger.info("Database connections closed")
            except asyncio.TimeoutError:
                logger.warning("Database close operation timed out")
            finally:
                self.engine = None
                self.async_session_factory = None
                self._initialized = False

db_manager = DatabaseManager()

async def init_db():
    """Initialize database on application startup"""
    await db_manager.initialize()
    await db_manager.create_tables()

async def close_db():
    """Close database on application shutdown"""
    await db_manager.close()

@asynccontextmanager
async def get_db_context():
    """Context manager for a database session; rolls back anything left uncommitted"""
    if not db_manager._initialized:
        await db_manager.initialize()
    
    session = db_manager.async_session_factory()
    try:
        yield session
    except Exception:
        if session.in_transaction():
            await session.rollback()
        raise
    finally:
        await session.close()

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting database session"""
    async with get_db_context() as session:
        yield session

async def test_connection() -> bool:
    """Test database connection health"""
    return await db_manager.test_connection()
