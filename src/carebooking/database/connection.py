"""PostgreSQL database connection management."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

import asyncpg

from ..config import Settings

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).with_name("schema.sql")


class DatabaseManager:
    """
    Owns the asyncpg pool for one application instance.

    Created in the application lifespan and handed to request handlers
    through dependencies; there is no module-level instance.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.pool: asyncpg.Pool | None = None
        self._initialized = False

    async def initialize(self, database_url: str | None = None, apply_schema: bool = False):
        """Initialize database connection pool."""
        if self._initialized:
            logger.warning("Database already initialized")
            return

        db_url = database_url or self.settings.database_url
        if not db_url:
            raise ValueError("DATABASE_URL is required")

        try:
            self.pool = await asyncpg.create_pool(
                db_url,
                min_size=self.settings.db_pool_min_size,
                max_size=self.settings.db_pool_max_size,
                command_timeout=self.settings.db_command_timeout,
                server_settings={
                    'application_name': self.settings.db_application_name
                }
            )

            async with self.pool.acquire() as conn:
                await conn.fetchval('SELECT 1')
                if apply_schema:
                    await conn.execute(SCHEMA_PATH.read_text())
                    logger.info("Database schema applied")

            self._initialized = True
            logger.info("PostgreSQL connection pool initialized")

        except Exception as e:
            logger.error(f"Failed to initialize database pool: {e}")
            raise

    async def close(self):
        """Close database connection pool."""
        if self.pool:
            await self.pool.close()
            self._initialized = False
            logger.info("PostgreSQL connection pool closed")

    @asynccontextmanager
    async def get_connection(self):
        """Get a database connection from the pool."""
        if not self._initialized or not self.pool:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        async with self.pool.acquire() as connection:
            yield connection

    @property
    def is_initialized(self) -> bool:
        return self._initialized and self.pool is not None

    async def health_check(self) -> bool:
        """Check database health."""
        try:
            async with self.get_connection() as conn:
                result = await conn.fetchval('SELECT 1')
                return result == 1
        except (RuntimeError, OSError, asyncpg.PostgresError) as e:
            logger.warning(f"Database health check failed: {e}")
            return False
