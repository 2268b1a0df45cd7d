"""Unit tests for WorkerPool with fake processes and a fake health waiter."""

import asyncio
import json
import time

import pytest

import roster_e2e.pool as pool_module
from roster_e2e.exceptions import WorkerStartupError
from roster_e2e.pool import WorkerPool
from roster_e2e.ports import PortAllocator
from roster_e2e.settings import E2ESettings
from roster_e2e.state_file import RecordedServer, ServerStateFile
from roster_e2e.states import ServerState
from tests.shared.fixtures.e2e import FakeHealth, FakeProcess


@pytest.fixture(autouse=True)
def reset_fake_processes():
    FakeProcess.instances = []


@pytest.fixture
def settings(tmp_path) -> E2ESettings:
    return E2ESettings(
        temp_dir=tmp_path,
        log_dir=tmp_path / "logs",
        frontend_cwd=tmp_path,
        state_file=tmp_path / ".test-servers.json",
        max_concurrent_startups=2,
    )


@pytest.fixture
def allocator() -> PortAllocator:
    return PortAllocator(is_free=lambda port: True)


def make_pool(settings, allocator, health=None, **kwargs) -> WorkerPool:
    return WorkerPool(
        settings=settings,
        allocator=allocator,
        process_factory=FakeProcess,
        health_waiter=health or FakeHealth(),
        **kwargs,
    )


class TestAcquire:
    async def test_acquire_starts_healthy_api(self, settings, allocator):
        health = FakeHealth()
        pool = make_pool(settings, allocator, health)

        server = await pool.acquire(1)

        assert server.state is ServerState.HEALTHY
        assert server.api_url == "http://127.0.0.1:5173"
        assert health.urls == ["http://127.0.0.1:5173/health"]
        [process] = FakeProcess.instances
        assert "5173" in process.command
        assert process.env["DATABASE_URL"] == server.database.url
        assert process.env["APP_ENV"] == "testing"
        assert process.env["API_PORT"] == "5173"
        assert "JWT_SECRET_KEY" in process.env
        assert server.database.path.name.startswith("CrudTest_Worker1_")
        assert allocator.reserved == {5173: 1}

    async def test_healthy_server_is_returned_again(self, settings, allocator):
        pool = make_pool(settings, allocator)

        first = await pool.acquire(0)
        second = await pool.acquire(0)

        assert first is second
        assert len(FakeProcess.instances) == 1

    async def test_concurrent_callers_share_one_startup(self, settings, allocator):
        pool = make_pool(settings, allocator, FakeHealth(delay=0.05))

        servers = await asyncio.gather(*(pool.acquire(0) for _ in range(5)))

        assert all(server is servers[0] for server in servers)
        assert len(FakeProcess.instances) == 1

    async def test_startups_are_bounded_by_semaphore(self, settings, allocator):
        settings = settings.model_copy(update={"max_concurrent_startups": 1})
        health = FakeHealth(delay=0.02)
        pool = make_pool(settings, allocator, health)

        servers = await pool.acquire_many(3)

        assert [server.index for server in servers] == [0, 1, 2]
        assert health.max_active == 1
        assert len({server.ports.api_port for server in servers}) == 3

    async def test_negative_index_is_rejected(self, settings, allocator):
        pool = make_pool(settings, allocator)

        with pytest.raises(ValueError):
            await pool.acquire(-1)


class TestFailedStartup:
    async def test_failure_cleans_up_and_propagates(self, settings, allocator):
        health = FakeHealth(failing={"http://127.0.0.1:5172/health"})
        pool = make_pool(settings, allocator, health)

        with pytest.raises(WorkerStartupError) as exc_info:
            await pool.acquire(0)

        assert exc_info.value.worker_index == 0
        server = pool.get(0)
        assert server.state is ServerState.STOPPED
        assert [t.target for t in server.lifecycle.history] == [
            ServerState.STARTING,
            ServerState.STOPPING,
            ServerState.STOPPED,
        ]
        assert FakeProcess.instances[0].stopped
        assert allocator.reserved == {}

    async def test_failed_worker_can_be_started_again(self, settings, allocator):
        health = FakeHealth(failing={"http://127.0.0.1:5172/health"})
        pool = make_pool(settings, allocator, health)
        with pytest.raises(WorkerStartupError):
            await pool.acquire(0)

        health.failing.clear()
        server = await pool.acquire(0)

        assert server.state is ServerState.HEALTHY


class TestRelease:
    async def test_release_stops_and_deletes_database(self, settings, allocator):
        pool = make_pool(settings, allocator)
        server = await pool.acquire(0)
        server.database.path.write_text("data")
        process = server.api_process

        assert await pool.release(0)

        assert server.state is ServerState.STOPPED
        assert process.stopped
        assert not server.database.path.exists()
        assert allocator.reserved == {}

    async def test_keep_databases(self, settings, allocator):
        settings = settings.model_copy(update={"keep_databases": True})
        pool = make_pool(settings, allocator)
        server = await pool.acquire(0)
        server.database.path.write_text("data")

        await pool.release(0)

        assert server.database.path.exists()

    async def test_release_unknown_worker(self, settings, allocator):
        pool = make_pool(settings, allocator)

        assert not await pool.release(7)

    async def test_release_all_and_snapshot(self, settings, allocator):
        pool = make_pool(settings, allocator)
        await pool.acquire_many(2)

        snapshot = pool.snapshot()
        assert [entry["state"] for entry in snapshot] == ["healthy", "healthy"]
        assert [entry["api_port"] for entry in snapshot] == [5172, 5173]
        assert len(pool.records()) == 2

        assert await pool.release_all() == 2
        assert [entry["state"] for entry in pool.snapshot()] == ["stopped", "stopped"]
        assert pool.records() == []


class SlowStoppingProcess(FakeProcess):
    async def stop(self, grace_period=5.0):
        await asyncio.sleep(0.05)
        return await super().stop(grace_period)


class TestReleaseRaces:
    def make_slow_pool(self, settings, allocator) -> WorkerPool:
        return WorkerPool(
            settings=settings,
            allocator=allocator,
            process_factory=SlowStoppingProcess,
            health_waiter=FakeHealth(),
        )

    async def test_acquire_during_release_waits_and_restarts(
        self,
        settings,
        allocator,
    ):
        pool = self.make_slow_pool(settings, allocator)
        first = await pool.acquire(0)
        first_process = first.api_process

        release = asyncio.ensure_future(pool.release(0))
        await asyncio.sleep(0)
        server = await pool.acquire(0)

        assert await release
        assert server.state is ServerState.HEALTHY
        assert first_process.stopped
        assert server.api_process is not first_process
        assert [t.target for t in server.lifecycle.history] == [
            ServerState.STARTING,
            ServerState.HEALTHY,
            ServerState.STOPPING,
            ServerState.STOPPED,
            ServerState.STARTING,
            ServerState.HEALTHY,
        ]
        assert allocator.reserved == {5172: 0}

    async def test_concurrent_releases_stop_once(self, settings, allocator):
        pool = self.make_slow_pool(settings, allocator)
        await pool.acquire(0)

        results = await asyncio.gather(pool.release(0), pool.release(0))

        assert sorted(results) == [False, True]
        assert pool.get(0).state is ServerState.STOPPED


class TestCommandRendering:
    async def test_only_known_placeholders_are_replaced(self, settings, allocator):
        settings = settings.model_copy(
            update={
                "api_command": [
                    "python",
                    "-c",
                    "import json; print(json.dumps({'port': 1}))",
                    "--bind={host}:{port}",
                    "{unknown}",
                ],
            },
        )
        pool = make_pool(settings, allocator)

        await pool.acquire(0)

        [process] = FakeProcess.instances
        assert process.command == [
            "python",
            "-c",
            "import json; print(json.dumps({'port': 1}))",
            "--bind=127.0.0.1:5172",
            "{unknown}",
        ]

    async def test_rate_limiting_is_off_for_workers(self, settings, allocator):
        pool = make_pool(settings, allocator)

        await pool.acquire(0)

        assert FakeProcess.instances[0].env["RATE_LIMIT_ENABLED"] == "false"


class TestFrontend:
    async def test_frontend_gets_proxy_config_and_own_port(self, settings, allocator):
        health = FakeHealth()
        pool = make_pool(settings, allocator, health, with_frontend=True)

        server = await pool.acquire(1)

        assert server.frontend_url == "http://127.0.0.1:4210"
        assert set(health.urls) == {
            "http://127.0.0.1:5173/health",
            "http://127.0.0.1:4210",
        }
        api, frontend = FakeProcess.instances
        assert "--port=4210" in frontend.command
        proxy = json.loads(server.proxy_config_path.read_text())
        assert proxy["/api"]["target"] == "http://127.0.0.1:5173"

        proxy_path = server.proxy_config_path
        await pool.release(1)

        assert not proxy_path.exists()
        assert api.stopped and frontend.stopped

    async def test_frontend_failure_stops_api_too(self, settings, allocator):
        health = FakeHealth(failing={"http://127.0.0.1:4200"})
        pool = make_pool(settings, allocator, health, with_frontend=True)

        with pytest.raises(WorkerStartupError, match="frontend"):
            await pool.acquire(0)

        assert all(process.stopped for process in FakeProcess.instances)
        assert allocator.reserved == {}


class TestReuse:
    async def test_fresh_recorded_server_is_adopted(
        self,
        settings,
        allocator,
        monkeypatch,
        tmp_path,
    ):
        settings = settings.model_copy(update={"reuse_servers": True})
        state_file = ServerStateFile(settings.state_file)
        state_file.write(
            [
                RecordedServer(
                    worker_index=0,
                    host="127.0.0.1",
                    api_port=5180,
                    database=str(tmp_path / "CrudTest_Worker0_1.db"),
                    started_at=time.time(),
                    api_pid=4321,
                ),
            ],
        )

        async def always_healthy(url, accept=None, client=None, request_timeout=5.0):
            return True

        terminated: list[int] = []
        monkeypatch.setattr(pool_module, "check_http", always_healthy)
        monkeypatch.setattr(
            pool_module,
            "terminate_pid",
            lambda pid, grace: terminated.append(pid),
        )
        pool = make_pool(settings, allocator, state_file=state_file)

        server = await pool.acquire(0)

        assert server.reused
        assert server.api_url == "http://127.0.0.1:5180"
        assert FakeProcess.instances == []
        assert allocator.reserved == {5180: 0}

        await pool.release(0)

        assert terminated == [4321]
        assert server.state is ServerState.STOPPED

    async def test_unhealthy_recorded_server_is_replaced(
        self,
        settings,
        allocator,
        monkeypatch,
        tmp_path,
    ):
        settings = settings.model_copy(update={"reuse_servers": True})
        state_file = ServerStateFile(settings.state_file)
        state_file.write(
            [
                RecordedServer(
                    worker_index=0,
                    host="127.0.0.1",
                    api_port=5180,
                    database=str(tmp_path / "old.db"),
                    started_at=time.time(),
                ),
            ],
        )

        async def never_healthy(url, accept=None, client=None, request_timeout=5.0):
            return False

        monkeypatch.setattr(pool_module, "check_http", never_healthy)
        pool = make_pool(settings, allocator, state_file=state_file)

        server = await pool.acquire(0)

        assert not server.reused
        assert server.ports.api_port == 5172
        assert len(FakeProcess.instances) == 1
