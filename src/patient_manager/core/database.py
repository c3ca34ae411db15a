"""
Database utility abstractions for the relational patient store
"""

import asyncio
import logging
from typing import Optional, Dict, Any, List

from sqlalchemy import MetaData, Table, text
from sqlalchemy.engine import Row
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.sql import Executable

from .config import get_database_config, DatabaseConfig
from .exceptions import StorageError

logger = logging.getLogger(__name__)

metadata = MetaData()


class DatabaseManager:
    """
    Owns the process-wide connection pool.

    The pool is created once by initialize() and disposed at most once by
    cleanup(), whichever shutdown path reaches it first.
    """

    def __init__(self, config: Optional[DatabaseConfig] = None):
        self.config = config or get_database_config()
        self._engine: Optional[AsyncEngine] = None
        self._initialized = False
        self._closed = False
        self._cleanup_lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Create the pool, verify connectivity and ensure the schema exists"""
        if self._initialized:
            return
        if self._closed:
            raise RuntimeError("Database manager has been closed")

        logger.info(f"Initializing database connection to {self.config.masked_url()}")

        engine_options: Dict[str, Any] = {"echo": self.config.echo, "pool_pre_ping": True}
        if not self.config.is_sqlite:
            engine_options.update(
                pool_size=self.config.pool_size,
                max_overflow=self.config.max_overflow,
                pool_timeout=self.config.pool_timeout,
            )

        try:
            self._engine = create_async_engine(self.config.url, **engine_options)

            # Test connection
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            logger.info("Database connection established successfully")

            await self._setup_tables()

            self._initialized = True
            logger.info("Database manager initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")
            await self.cleanup()
            raise

    async def _setup_tables(self) -> None:
        """Create tables and indexes registered on the shared metadata"""
        logger.info(f"Ensuring tables exist: {', '.join(sorted(metadata.tables))}")
        async with self._engine.begin() as conn:
            await conn.run_sync(metadata.create_all)

    async def cleanup(self) -> None:
        """Dispose the pool; later calls are no-ops"""
        async with self._cleanup_lock:
            if self._closed:
                return
            self._closed = True
            self._initialized = False

            if self._engine is not None:
                await self._engine.dispose()
                self._engine = None
                logger.info("Database pool closed")

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def engine(self) -> AsyncEngine:
        """Get the engine (and its pool)"""
        if not self._initialized:
            raise RuntimeError("Database manager not initialized. Call initialize() first.")
        return self._engine

    async def health_check(self) -> Dict[str, Any]:
        """Perform database health check"""
        try:
            if not self._initialized:
                return {"status": "error", "message": "Database not initialized"}

            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))

            return {
                "status": "healthy",
                "dialect": self._engine.dialect.name,
                "pool": self._engine.pool.status(),
            }

        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return {
                "status": "unhealthy",
                "error": str(e)
            }


class BaseRepository:
    """
    Base repository class providing single-statement execution helpers.

    Every helper runs its statement in its own transaction, logs driver
    failures where they happen and re-raises them as StorageError.
    """

    def __init__(self, db_manager: DatabaseManager, table: Table):
        self.db_manager = db_manager
        self.table = table

    @property
    def engine(self) -> AsyncEngine:
        return self.db_manager.engine

    async def fetch_one(self, statement: Executable) -> Optional[Row]:
        """Run a read statement and return the first row"""
        try:
            async with self.engine.connect() as conn:
                result = await conn.execute(statement)
                return result.first()
        except SQLAlchemyError as e:
            logger.error(f"Error in fetch_one for {self.table.name}: {e}")
            raise StorageError(str(e)) from e

    async def fetch_all(self, statement: Executable) -> List[Row]:
        """Run a read statement and return every row"""
        try:
            async with self.engine.connect() as conn:
                result = await conn.execute(statement)
                return list(result.all())
        except SQLAlchemyError as e:
            logger.error(f"Error in fetch_all for {self.table.name}: {e}")
            raise StorageError(str(e)) from e

    async def execute_returning(self, statement: Executable) -> Optional[Row]:
        """Run a write statement with RETURNING and commit it"""
        try:
            async with self.engine.begin() as conn:
                result = await conn.execute(statement)
                return result.first()
        except SQLAlchemyError as e:
            logger.error(f"Error in execute_returning for {self.table.name}: {e}")
            raise StorageError(str(e)) from e
