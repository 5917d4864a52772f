"""
Async Database Connection and Management for MarketLens
Uses SQLAlchemy with aiosqlite for async SQLite operations
"""

from typing import AsyncGenerator, Dict
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy import text, event
from contextlib import asynccontextmanager
import logging

from .models import Base
from .operations import RecordNotFoundError, InvalidStatusTransitionError
from ..config.settings import settings

logger = logging.getLogger(__name__)

# Tables reported by get_stats(), children after their owners
TABLES = ["queries", "products", "reviews", "keywords", "recommendations"]


class DatabaseManager:
    """
    Manages async database connections with SQLite
    Enforces foreign keys on every connection so cascading deletes work
    """

    def __init__(self, database_url: str = None):
        """
        Initialize database manager

        Args:
            database_url: SQLite database URL. If None, uses settings.get_database_url_async()
                         Allows override for testing with temporary databases.
        """
        if database_url is None:
            database_url = settings.get_database_url_async()

        self.database_url = database_url
        self.engine = None
        self.async_session = None
        self._initialized = False

    async def initialize(self):
        """
        Initialize database connection and create tables
        """
        if self._initialized:
            logger.info("Database already initialized")
            return

        logger.info(f"Initializing database: {self.database_url}")

        self.engine = create_async_engine(
            self.database_url,
            echo=settings.DATABASE_ECHO,
            pool_pre_ping=True,
        )

        # SQLite PRAGMAs are connection-specific
        @event.listens_for(self.engine.sync_engine, "connect")
        def set_sqlite_pragma(dbapi_conn, connection_record):
            """Apply SQLite PRAGMAs to each connection"""
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys = ON")
            cursor.execute("PRAGMA temp_store = MEMORY")
            cursor.execute("PRAGMA synchronous = NORMAL")
            cursor.execute("PRAGMA journal_mode = WAL")
            cursor.close()

        self.async_session = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False
        )

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables created successfully")

        await self._create_indexes()

        self._initialized = True
        logger.info("Database initialization complete")

    async def _create_indexes(self):
        """
        Create indexes on foreign keys and the columns the readers filter by
        """
        indexes = [
            # Query indexes
            "CREATE INDEX IF NOT EXISTS idx_queries_created ON queries(created_at)",
            "CREATE INDEX IF NOT EXISTS idx_queries_expires ON queries(expires_at)",
            "CREATE INDEX IF NOT EXISTS idx_queries_status ON queries(status)",

            # Dependent row indexes
            "CREATE INDEX IF NOT EXISTS idx_products_query ON products(query_id)",
            "CREATE INDEX IF NOT EXISTS idx_reviews_product ON reviews(product_id)",
            "CREATE INDEX IF NOT EXISTS idx_keywords_query ON keywords(query_id)",
            "CREATE INDEX IF NOT EXISTS idx_recommendations_query ON recommendations(query_id)",
        ]

        async with self.engine.begin() as conn:
            for index_sql in indexes:
                await conn.execute(text(index_sql))
            logger.info(f"Created {len(indexes)} database indexes")

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Get database session with context manager
        Handles commit/rollback automatically

        Yields:
            AsyncSession: Database session
        """
        if not self._initialized:
            await self.initialize()

        async with self.async_session() as session:
            try:
                yield session
                await session.commit()
            except (RecordNotFoundError, InvalidStatusTransitionError):
                # Logged by the API exception handlers
                await session.rollback()
                raise
            except Exception as e:
                await session.rollback()
                logger.error(f"Database session error: {e}")
                raise

    async def close(self):
        """Close database connection and cleanup resources"""
        if self.engine:
            await self.engine.dispose()
            logger.info("Database connection closed")
            self._initialized = False

    async def health_check(self) -> bool:
        """
        Check if database is accessible and healthy

        Returns:
            bool: True if database is healthy
        """
        try:
            async with self.get_session() as session:
                result = await session.execute(text("SELECT 1"))
                return result.scalar() == 1
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return False

    async def get_stats(self) -> Dict[str, int]:
        """
        Get row counts for every table

        Returns:
            dict: {"<table>_count": n}
        """
        stats = {}

        async with self.get_session() as session:
            for table in TABLES:
                result = await session.execute(text(f"SELECT COUNT(*) FROM {table}"))
                stats[f"{table}_count"] = result.scalar()

        return stats


# Global database manager instance
db_manager = DatabaseManager()


# Dependency for FastAPI
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency to get database session

    Yields:
        AsyncSession: Database session
    """
    async with db_manager.get_session() as session:
        yield session


async def init_db():
    """Initialize database (for scripts and testing)"""
    await db_manager.initialize()


async def close_db():
    """Close database connection"""
    await db_manager.close()
