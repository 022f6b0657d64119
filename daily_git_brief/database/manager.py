"""
Database access for the trend store.

The SQLAlchemy engine (psycopg2) is only used to create the schema at startup;
every read and upsert goes through the asyncpg pool.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import asyncpg
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from daily_git_brief.core.config import Settings, settings as default_settings
from daily_git_brief.database.schema import Base
from daily_git_brief.exceptions import StoreError


def _sync_dsn(database_url: str) -> str:
    # A DSN with the async driver is switched to psycopg2 for the sync engine
    if "+asyncpg" in database_url:
        return database_url.replace("+asyncpg", "+psycopg2")
    return database_url


def _async_dsn(database_url: str) -> str:
    # asyncpg expects plain postgresql:// without a driver suffix
    for driver in ("+asyncpg", "+psycopg2"):
        database_url = database_url.replace(driver, "")
    return database_url


class DatabaseManager:
    """Owns the schema engine and the asyncpg query pool"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        self.engine: Optional[Engine] = None
        self.pool: Optional[asyncpg.Pool] = None
        self.logger = logging.getLogger("database_manager")

    async def initialize(self):
        """Create missing tables, then open the query pool"""
        self.create_schema()
        await self.open_pool()

    def create_schema(self):
        """Connect with SQLAlchemy and create trending_repos, repo_languages
        and daily_language_trends if they do not exist yet."""
        try:
            self.engine = create_engine(
                _sync_dsn(self.settings.database_url),
                pool_size=self.settings.database_pool_size,
                future=True,
            )
            with self.engine.begin() as conn:
                conn.execute(text("SELECT 1"))
                Base.metadata.create_all(bind=conn)
            self.logger.info(f"Schema ready ({', '.join(sorted(Base.metadata.tables))})")
        except Exception as e:
            self.logger.error(f"Schema setup failed: {e}")
            self._dispose_engine()
            raise

    async def open_pool(self):
        try:
            self.pool = await asyncpg.create_pool(
                dsn=_async_dsn(self.settings.database_url),
                min_size=self.settings.database_pool_min_size,
                max_size=self.settings.database_pool_max_size,
                command_timeout=60,
            )
            self.logger.info(
                f"Query pool open (min={self.settings.database_pool_min_size}, "
                f"max={self.settings.database_pool_max_size})"
            )
        except Exception as e:
            self.logger.error(f"Could not open query pool: {e}")
            self.pool = None
            raise

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[asyncpg.Connection]:
        if self.pool is None:
            raise StoreError("query pool is not open; call initialize() first")
        async with self.pool.acquire() as conn:
            yield conn

    async def execute_query(self, query: str, *args: Any) -> list[dict]:
        """Rows of ``query`` as plain dicts"""
        async with self.connection() as conn:
            records = await conn.fetch(query, *args)
        return [dict(record) for record in records]

    async def execute(self, query: str, *args: Any) -> str:
        async with self.connection() as conn:
            return await conn.execute(query, *args)

    def _dispose_engine(self):
        if self.engine is not None:
            self.engine.dispose()
            self.engine = None

    async def close(self):
        if self.pool is not None:
            await self.pool.close()
            self.pool = None
        self._dispose_engine()
        self.logger.info("Database connections closed")
