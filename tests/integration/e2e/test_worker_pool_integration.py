"""
Worker pool against real API processes.

Starts uvicorn subprocesses, so it only runs with ``--run-integration``.
"""

import httpx
import pytest

from roster_e2e.pool import WorkerPool
from roster_e2e.settings import E2ESettings
from roster_e2e.states import ServerState

pytestmark = [pytest.mark.integration, pytest.mark.slow]


@pytest.fixture
def settings(tmp_path) -> E2ESettings:
    return E2ESettings(
        api_base_port=6172,
        temp_dir=tmp_path,
        log_dir=tmp_path,
        state_file=tmp_path / ".test-servers.json",
        api_startup_timeout=60.0,
        api_env={"JWT_SECRET_KEY": "integration-secret-key-with-enough-length"},
    )


@pytest.fixture
async def pool(settings):
    pool = WorkerPool(settings)
    yield pool
    await pool.release_all()


async def test_workers_get_isolated_servers(pool: WorkerPool):
    first, second = await pool.acquire_many(2)

    assert first.state is ServerState.HEALTHY
    assert second.state is ServerState.HEALTHY
    assert first.ports.api_port != second.ports.api_port
    assert first.database.path != second.database.path

    async with httpx.AsyncClient(timeout=10.0) as client:
        for server in (first, second):
            health = await client.get(f"{server.api_url}/health")
            assert health.json()["status"] == "healthy"

        response = await client.post(
            f"{first.api_url}/api/people",
            json={"fullName": "Only On Worker Zero"},
        )
        assert response.status_code == 201

        names_first = [
            person["fullName"]
            for person in (await client.get(f"{first.api_url}/api/people")).json()
        ]
        names_second = [
            person["fullName"]
            for person in (await client.get(f"{second.api_url}/api/people")).json()
        ]

    assert "Only On Worker Zero" in names_first
    assert "Only On Worker Zero" not in names_second


async def test_seed_and_reset_through_spawned_api(pool: WorkerPool):
    server = await pool.acquire(0)

    async with httpx.AsyncClient(base_url=server.api_url, timeout=10.0) as client:
        seeded = await client.post("/api/database/seed", json={"workerIndex": 0})
        assert seeded.status_code == 200

        status = (await client.get("/api/database/status")).json()
        assert status["peopleCount"] > 0
        assert status["environment"] == "testing"

        reset = await client.post("/api/database/reset", json={"workerIndex": 0})
        assert reset.status_code == 200

        status = (await client.get("/api/database/status")).json()
        assert status["peopleCount"] == 0


async def test_release_removes_database(pool: WorkerPool):
    server = await pool.acquire(0)
    database_path = server.database.path
    assert database_path.exists()

    assert await pool.release(0)

    assert server.state is ServerState.STOPPED
    assert not database_path.exists()
