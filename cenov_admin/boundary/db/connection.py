"""
Database connection management.

Holds one async SQLAlchemy engine and session factory per CENOV database
(cenov, cenov_dev, cenov_preprod) and exposes them to FastAPI.

Dependencies: sqlalchemy, cenov_admin.configs
System role: Database connection lifecycle management
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Literal, get_args

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from cenov_admin.configs import get_settings
from cenov_admin.core.exceptions import UnknownDatabaseError

logger = logging.getLogger(__name__)

DatabaseName = Literal["cenov", "cenov_dev", "cenov_preprod"]
DATABASE_NAMES: tuple[str, ...] = get_args(DatabaseName)


def is_valid_database(name: str | None) -> bool:
    """Whether name is one of the configured databases."""
    return name in DATABASE_NAMES


class DatabaseRegistry:
    """
    Lazily created async engines keyed by database name.

    Engines use pool_pre_ping=True so stale connections are replaced
    before use. Session factories are built with expire_on_commit=False
    so rows stay readable after the transaction that loaded them.

    Attributes:
        urls: Async connection URL per database name
    """

    def __init__(
        self,
        urls: dict[str, str],
        engine_options: dict | None = None,
        execution_options: dict | None = None,
    ) -> None:
        """
        Initialize registry from database URLs.

        Args:
            urls: Mapping database name -> async SQLAlchemy URL
            engine_options: Extra keyword arguments for create_async_engine
            execution_options: Execution options applied to every engine
                (e.g. schema_translate_map)
        """
        self.urls = dict(urls)
        self._engine_options = engine_options or {}
        self._execution_options = execution_options or {}
        self._engines: dict[str, AsyncEngine] = {}
        self._session_factories: dict[str, async_sessionmaker[AsyncSession]] = {}

    @classmethod
    def from_settings(cls) -> "DatabaseRegistry":
        """
        Build registry from application settings.

        Returns:
            DatabaseRegistry: Registry with pool parameters from DatabaseSettings
        """
        db_config = get_settings().database
        return cls(
            db_config.urls,
            engine_options={
                "echo": db_config.echo_sql,
                "pool_size": db_config.pool_size,
                "max_overflow": db_config.max_overflow,
                "pool_timeout": db_config.pool_timeout,
                "pool_pre_ping": True,
            },
        )

    @property
    def databases(self) -> list[str]:
        return list(self.urls)

    def _check(self, database: str) -> None:
        if database not in self.urls:
            raise UnknownDatabaseError(database)

    def get_engine(self, database: str) -> AsyncEngine:
        """
        Get (or create) the engine of a database.

        Args:
            database: Database name

        Returns:
            AsyncEngine: Engine bound to the database

        Raises:
            UnknownDatabaseError: If database is not configured
        """
        self._check(database)
        engine = self._engines.get(database)
        if engine is None:
            engine = create_async_engine(self.urls[database], **self._engine_options)
            if self._execution_options:
                engine = engine.execution_options(**self._execution_options)
            self._engines[database] = engine
            logger.info("Database engine created", extra={"database": database})
        return engine

    def get_session_factory(self, database: str) -> async_sessionmaker[AsyncSession]:
        """
        Get the session factory of a database.

        Args:
            database: Database name

        Returns:
            async_sessionmaker: Factory configured for manual transaction control
        """
        factory = self._session_factories.get(database)
        if factory is None:
            factory = async_sessionmaker(
                bind=self.get_engine(database),
                autoflush=False,
                expire_on_commit=False,
            )
            self._session_factories[database] = factory
        return factory

    @asynccontextmanager
    async def session(self, database: str) -> AsyncGenerator[AsyncSession, None]:
        """
        Open a session on a database.

        Usage:
            async with registry.session("cenov_dev") as session:
                await session.execute(select(ProductModel))
        """
        async with self.get_session_factory(database)() as session:
            yield session

    async def dispose_all(self) -> None:
        """Dispose every engine created so far."""
        for database, engine in list(self._engines.items()):
            await engine.dispose()
            logger.info("Database engine disposed", extra={"database": database})
        self._engines.clear()
        self._session_factories.clear()


_registry: DatabaseRegistry | None = None


def get_registry() -> DatabaseRegistry:
    """
    FastAPI dependency returning the process-wide registry.

    Returns:
        DatabaseRegistry: Registry built from settings on first use
    """
    global _registry
    if _registry is None:
        _registry = DatabaseRegistry.from_settings()
    return _registry


async def dispose_registry() -> None:
    """Dispose the process-wide registry, if one was created."""
    global _registry
    if _registry is not None:
        await _registry.dispose_all()
        _registry = None
