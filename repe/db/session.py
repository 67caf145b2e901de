"""Async database engine and session factory."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from repe.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


def _enable_sqlite_pragmas(engine: AsyncEngine) -> None:
    """Foreign keys and SAVEPOINT-capable transactions for SQLite."""

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # let SQLAlchemy emit BEGIN itself so nested transactions work
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


class Database:
    """Owns the engine and session factory for one application instance.

    The engine is created on first use so a missing DATABASE_URL only fails
    when something actually talks to the database.
    """

    def __init__(self, url: str | None = None, settings: Settings | None = None):
        self._settings = settings or get_settings()
        self._url = url
        self._engine: AsyncEngine | None = None
        self._session_maker: async_sessionmaker[AsyncSession] | None = None

    @property
    def url(self) -> str:
        return self._url or self._settings.async_database_url

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            url = self.url
            kwargs: dict = {"echo": self._settings.debug}
            if url.startswith("postgresql"):
                kwargs["pool_size"] = self._settings.database_pool_size
                kwargs["max_overflow"] = self._settings.database_max_overflow
            self._engine = create_async_engine(url, **kwargs)
            if self._engine.dialect.name == "sqlite":
                _enable_sqlite_pragmas(self._engine)
            logger.info("Database engine created (%s)", self._engine.dialect.name)
        return self._engine

    @property
    def session_maker(self) -> async_sessionmaker[AsyncSession]:
        if self._session_maker is None:
            self._session_maker = async_sessionmaker(
                self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
        return self._session_maker

    def session(self) -> AsyncSession:
        return self.session_maker()

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_maker = None


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency that yields one transactional session per request."""
    database: Database = request.app.state.database
    async with database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
