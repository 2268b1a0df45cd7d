"""Fixtures for repository tests against a SQLite file."""

import pytest
from sqlalchemy.pool import NullPool

from roster.infrastructure.persistence.sqlalchemy.database import (
    create_engine_for_url,
    create_session_maker,
    create_tables,
)


@pytest.fixture
async def db_engine(tmp_path):
    url = f"sqlite+aiosqlite:///{(tmp_path / 'repositories.db').as_posix()}"
    engine = create_engine_for_url(url, poolclass=NullPool)
    await create_tables(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(db_engine):
    return create_session_maker(db_engine)
