"""
Pytest fixtures that give every test worker its own API server.

Enable with ``-p roster_e2e.pytest_plugin`` or in a conftest::

    pytest_plugins = ["roster_e2e.pytest_plugin"]

Under pytest-xdist the worker index comes from ``PYTEST_XDIST_WORKER``
(``gw3`` is worker 3); without xdist it is 0. When ``roster-e2e setup``
already started the servers, their URLs are read from ``API_URL_<i>`` and
no new server is started.
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path

import httpx
import pytest
import pytest_asyncio

from roster_e2e.pool import WorkerPool
from roster_e2e.settings import get_e2e_settings

API_URL_VAR = "API_URL_{index}"
FRONTEND_URL_VAR = "FRONTEND_URL_{index}"
DATABASE_PATH_VAR = "DATABASE_PATH_{index}"


@dataclass(frozen=True)
class E2EServer:
    """Where the tests of one worker find their servers."""

    worker_index: int
    api_url: str
    frontend_url: str | None = None
    database_path: Path | None = None


def worker_index_from_env(environ: dict | None = None) -> int:
    environ = os.environ if environ is None else environ
    worker = environ.get("PYTEST_XDIST_WORKER", "")
    match = re.search(r"(\d+)$", worker)
    return int(match.group(1)) if match else 0


def server_from_env(index: int, environ: dict | None = None) -> E2EServer | None:
    """The server announced by a separate ``roster-e2e setup``, if any."""
    environ = os.environ if environ is None else environ
    api_url = environ.get(API_URL_VAR.format(index=index))
    if not api_url:
        return None
    database_path = environ.get(DATABASE_PATH_VAR.format(index=index))
    return E2EServer(
        worker_index=index,
        api_url=api_url,
        frontend_url=environ.get(FRONTEND_URL_VAR.format(index=index)),
        database_path=Path(database_path) if database_path else None,
    )


@pytest.fixture(scope="session")
def e2e_worker_index() -> int:
    return worker_index_from_env()


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def e2e_pool():
    """Pool owned by this test process; stopped at the end of the session."""
    pool = WorkerPool(get_e2e_settings())
    yield pool
    await pool.release_all()


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def e2e_server(e2e_worker_index, e2e_pool) -> E2EServer:
    announced = server_from_env(e2e_worker_index)
    if announced is not None:
        return announced

    server = await e2e_pool.acquire(e2e_worker_index)
    return E2EServer(
        worker_index=server.index,
        api_url=server.api_url,
        frontend_url=server.frontend_url,
        database_path=server.database.path,
    )


@pytest.fixture(scope="session")
def e2e_api_client(e2e_server):
    """Synchronous HTTP client bound to this worker's API."""
    with httpx.Client(base_url=e2e_server.api_url, timeout=10.0) as client:
        yield client


@pytest.fixture
def clean_database(e2e_api_client, e2e_worker_index):
    """Reset and seed this worker's database before the test."""
    payload = {"workerIndex": e2e_worker_index}
    response = e2e_api_client.post("/api/database/reset", json=payload)
    response.raise_for_status()
    response = e2e_api_client.post("/api/database/seed", json=payload)
    response.raise_for_status()
    return response.json()
