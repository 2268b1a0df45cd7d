"""Per-application state of the API.

``create_app`` stores its ``Settings`` on ``app.state``; the lifespan adds the
engine and session maker built from them. Dependencies read both from the
request, so two apps with different settings can live in one process.
"""

from fastapi import FastAPI, Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from roster.infrastructure.persistence.sqlalchemy.database import (
    create_engine_for_url,
    create_session_maker,
)
from roster_config.settings import Settings


def get_api_settings(request: Request) -> Settings:
    return request.app.state.settings


def open_database(app: FastAPI) -> AsyncEngine:
    """Create the engine and session maker for ``app``'s database URL."""
    engine = create_engine_for_url(app.state.settings.database_url)
    app.state.engine = engine
    app.state.session_maker = create_session_maker(engine)
    return engine


def get_session_maker(request: Request) -> async_sessionmaker[AsyncSession]:
    session_maker = getattr(request.app.state, "session_maker", None)
    if session_maker is None:
        msg = "Database is not open; the application lifespan has not run"
        raise RuntimeError(msg)
    return session_maker
