"""Database configuration and session management.

This module provides the async SQLAlchemy engine and the session-per-unit-of-work
helper that every repository uses. One ``Database.session()`` block is one
transaction: it commits when the block exits normally and rolls back otherwise.
"""

import asyncio
from contextlib import asynccontextmanager, nullcontext
from typing import Any, AsyncContextManager, AsyncGenerator, Optional

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from threadstore.observability.logging import get_logger
from threadstore.storage.base_model import Base

logger = get_logger(__name__)


class DatabaseConfig:
    """Database configuration.

    Attributes:
        url: Async database connection URL (aiosqlite or asyncpg)
        echo: Whether to log SQL statements (default: False)
        pool_size: Connection pool size (default: 5)
        max_overflow: Maximum overflow connections (default: 10)
    """

    def __init__(
        self,
        url: str = "sqlite+aiosqlite:///:memory:",
        echo: bool = False,
        pool_size: int = 5,
        max_overflow: int = 10,
    ):
        self.url = url
        self.echo = echo
        self.pool_size = pool_size
        self.max_overflow = max_overflow

    @property
    def is_sqlite(self) -> bool:
        """Whether the URL points at a SQLite database."""
        return self.url.startswith("sqlite")

    @property
    def is_memory(self) -> bool:
        """Whether the URL points at an in-memory SQLite database.

        SQLAlchemy serves such a database from a single shared connection.
        """
        if not self.is_sqlite:
            return False
        url = make_url(self.url)
        return url.database in (None, "", ":memory:") or url.query.get("mode") == "memory"


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    """Turn on foreign key enforcement for every new SQLite connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Async database connection and session manager.

    A Database is created once at application startup and passed explicitly to
    the repositories that need it.

    Example:
        >>> config = DatabaseConfig(url="sqlite+aiosqlite:///./threads.db")
        >>> db = Database(config)
        >>> async with db.session() as session:
        ...     result = await session.execute(select(ConversationModel))
    """

    def __init__(self, config: DatabaseConfig):
        """Initialize database with configuration.

        Args:
            config: Database configuration

        Raises:
            ValueError: If the URL does not use an async driver
        """
        if "aiosqlite" not in config.url and "asyncpg" not in config.url:
            raise ValueError(
                f"Database URL must use an async driver (aiosqlite or asyncpg): {config.url}"
            )

        self.config = config

        # Pool settings do not apply to SQLite
        engine_kwargs: dict[str, Any] = {"echo": config.echo}
        if not config.is_sqlite:
            engine_kwargs["pool_size"] = config.pool_size
            engine_kwargs["max_overflow"] = config.max_overflow

        self.engine = create_async_engine(config.url, **engine_kwargs)
        if config.is_sqlite:
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        self.session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

        # Every checkout of an in-memory database is the same DBAPI connection,
        # so transactions on it must take turns
        self._connection_lock: Optional[asyncio.Lock] = (
            asyncio.Lock() if config.is_memory else None
        )

    def _exclusive(self) -> AsyncContextManager[Any]:
        if self._connection_lock is None:
            return nullcontext()
        return self._connection_lock

    async def create_tables(self) -> None:
        """Create all tables defined in ORM models."""
        from threadstore.storage.model_registry import register_all_models

        register_all_models()

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("database_tables_created", url=self.config.url)

    async def drop_tables(self) -> None:
        """Drop all tables defined in ORM models."""
        from threadstore.storage.model_registry import register_all_models

        register_all_models()

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    @asynccontextmanager
    async def session(
        self, isolation_level: Optional[str] = None
    ) -> AsyncGenerator[AsyncSession, None]:
        """Open a session wrapping exactly one transaction.

        Commits when the block completes and rolls back if it raises. A block
        abandoned by task cancellation never reaches the commit; closing the
        session discards the open transaction. Sessions on an in-memory
        SQLite database run one at a time.

        Args:
            isolation_level: Transaction isolation level, e.g. "SERIALIZABLE";
                the engine default when omitted

        Yields:
            AsyncSession bound to a fresh transaction
        """
        async with self._exclusive():
            async with self.session_factory() as session:
                try:
                    if isolation_level is not None:
                        await session.connection(
                            execution_options={"isolation_level": isolation_level}
                        )
                    yield session
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise

    async def close(self) -> None:
        """Close database engine and connections."""
        await self.engine.dispose()

    async def health_check(self) -> bool:
        """Check database connectivity.

        Returns:
            True if database is healthy

        Raises:
            Exception if database connection fails
        """
        async with self._exclusive():
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        return True
