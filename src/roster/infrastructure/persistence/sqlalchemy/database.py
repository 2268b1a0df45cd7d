"""Engine creation and schema management.

Both the application tables (``Base``) and the authentication tables
(``AuthBase``) live in the same database and are managed together.
"""

import logging
from pathlib import Path

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

# Import models to register with Base.metadata
import roster.infrastructure.persistence.sqlalchemy.models  # noqa: F401
import roster_auth.persistence.sqlalchemy.models  # noqa: F401
from roster.infrastructure.persistence.sqlalchemy.models.base import Base
from roster_auth.persistence.sqlalchemy.base import AuthBase

logger = logging.getLogger(__name__)

SCHEMA_METADATA = (Base.metadata, AuthBase.metadata)


def is_sqlite_url(url: str) -> bool:
    return url.startswith("sqlite")


def ensure_sqlite_directory(url: str) -> None:
    """Create the parent directory of a file-based SQLite database."""
    if not is_sqlite_url(url):
        return
    db_path = url.split("///", 1)[-1].split("?", 1)[0]
    if db_path and db_path != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine_for_url(url: str, echo: bool = False, **kwargs) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    SQLite connections get ``PRAGMA foreign_keys=ON`` so that the
    ``person_roles`` cascades are enforced by the database.
    """
    ensure_sqlite_directory(url)
    engine = create_async_engine(url, echo=echo, pool_pre_ping=True, **kwargs)
    if is_sqlite_url(url):
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


async def create_tables(engine: AsyncEngine) -> None:
    """
    Create all database tables (idempotent).

    Uses SQLAlchemy's create_all() which only creates missing tables.
    Existing tables and their data are never modified or deleted.
    """
    logger.info("Ensuring all database tables exist...")

    async with engine.begin() as conn:
        for metadata in SCHEMA_METADATA:
            await conn.run_sync(metadata.create_all)

    logger.info("Database schema is up to date (missing tables created if needed)")


async def drop_tables(engine: AsyncEngine) -> None:
    """
    Drop all database tables (USE WITH CAUTION!).

    This is primarily for testing and development reset scenarios.
    """
    logger.warning("Dropping all database tables...")

    async with engine.begin() as conn:
        for metadata in reversed(SCHEMA_METADATA):
            await conn.run_sync(metadata.drop_all)

    logger.info("Database tables dropped successfully")


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
