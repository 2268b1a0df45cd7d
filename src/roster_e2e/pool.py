"""The worker pool: one API (and optionally one frontend) per test worker.

Every worker index owns a ``WorkerServer`` whose lifecycle follows
``LifecycleStateMachine``. Ports come from the pool's ``PortAllocator`` and
database files from ``WorkerDatabase``; nothing else assigns either.
"""

import asyncio
import contextlib
import json
import logging
import os
import secrets
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Awaitable, Callable

from roster_e2e.databases import WorkerDatabase, get_temp_directory
from roster_e2e.exceptions import HealthCheckError, WorkerStartupError
from roster_e2e.health import api_ready, check_http, frontend_ready, wait_for_http
from roster_e2e.ports import PortAllocator, PortPlan
from roster_e2e.process import ManagedProcess, terminate_pid
from roster_e2e.settings import E2ESettings, get_e2e_settings
from roster_e2e.state_file import RecordedServer, ServerStateFile
from roster_e2e.states import LifecycleStateMachine, ServerState

logger = logging.getLogger(__name__)

HealthWaiter = Callable[..., Awaitable[float]]
ProcessFactory = Callable[..., ManagedProcess]


@dataclass
class WorkerServer:
    """The servers and resources of one worker index."""

    index: int
    host: str
    lifecycle: LifecycleStateMachine
    ports: PortPlan | None = None
    database: WorkerDatabase | None = None
    api_process: ManagedProcess | None = None
    frontend_process: ManagedProcess | None = None
    proxy_config_path: Path | None = None
    started_at: float | None = None
    reused: bool = False
    adopted_pids: tuple[int, ...] = field(default_factory=tuple)

    @property
    def state(self) -> ServerState:
        return self.lifecycle.state

    @property
    def api_url(self) -> str:
        if self.ports is None:
            msg = f"Worker {self.index} has no ports assigned"
            raise RuntimeError(msg)
        return f"http://{self.host}:{self.ports.api_port}"

    @property
    def frontend_url(self) -> str | None:
        if self.ports is None or self.ports.frontend_port is None:
            return None
        return f"http://{self.host}:{self.ports.frontend_port}"

    @property
    def api_pid(self) -> int | None:
        if self.api_process is not None:
            return self.api_process.pid
        return self.adopted_pids[0] if self.adopted_pids else None

    @property
    def frontend_pid(self) -> int | None:
        if self.frontend_process is not None:
            return self.frontend_process.pid
        return self.adopted_pids[1] if len(self.adopted_pids) > 1 else None

    def to_record(self) -> RecordedServer:
        return RecordedServer(
            worker_index=self.index,
            host=self.host,
            api_port=self.ports.api_port,
            frontend_port=self.ports.frontend_port,
            database=str(self.database.path),
            started_at=self.started_at or time.time(),
            api_pid=self.api_pid,
            frontend_pid=self.frontend_pid,
        )

    def describe(self) -> dict[str, Any]:
        return {
            "worker_index": self.index,
            "state": self.state.value,
            "api_url": self.api_url if self.ports else None,
            "frontend_url": self.frontend_url,
            "api_port": self.ports.api_port if self.ports else None,
            "frontend_port": self.ports.frontend_port if self.ports else None,
            "database": str(self.database.path) if self.database else None,
            "api_pid": self.api_pid,
            "frontend_pid": self.frontend_pid,
            "started_at": self.started_at,
            "reused": self.reused,
            "last_changed_at": (
                self.lifecycle.last_changed_at.isoformat()
                if self.lifecycle.last_changed_at
                else None
            ),
        }


class WorkerPool:
    """
    Starts, tracks and stops the servers of every test worker.

    ``acquire`` is safe to call concurrently: callers asking for the same
    index share one start-up, and start-ups of different workers pass
    through a semaphore of ``max_concurrent_startups`` slots.
    """

    def __init__(  # NOQA: PLR0913
        self,
        settings: E2ESettings | None = None,
        allocator: PortAllocator | None = None,
        process_factory: ProcessFactory = ManagedProcess,
        health_waiter: HealthWaiter = wait_for_http,
        state_file: ServerStateFile | None = None,
        with_frontend: bool | None = None,
    ):
        self.settings = settings or get_e2e_settings()
        self.allocator = allocator or PortAllocator(
            api_base_port=self.settings.api_base_port,
            frontend_base_port=self.settings.frontend_base_port,
            frontend_port_stride=self.settings.frontend_port_stride,
            search_range=self.settings.port_search_range,
            host=self.settings.host,
            kill_existing=self.settings.kill_existing_servers,
        )
        self.with_frontend = (
            self.settings.enable_frontend if with_frontend is None else with_frontend
        )
        self.state_file = state_file
        self._process_factory = process_factory
        self._health_waiter = health_waiter
        self._servers: dict[int, WorkerServer] = {}
        self._startups: dict[int, asyncio.Future[WorkerServer]] = {}
        self._shutdowns: dict[int, asyncio.Future[None]] = {}
        self._startup_slots = asyncio.Semaphore(self.settings.max_concurrent_startups)
        self._jwt_secret = secrets.token_urlsafe(32)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, index: int) -> WorkerServer | None:
        return self._servers.get(index)

    @property
    def servers(self) -> dict[int, WorkerServer]:
        return dict(self._servers)

    def healthy_servers(self) -> list[WorkerServer]:
        return [
            server
            for _, server in sorted(self._servers.items())
            if server.state is ServerState.HEALTHY
        ]

    def snapshot(self) -> list[dict[str, Any]]:
        return [server.describe() for _, server in sorted(self._servers.items())]

    def records(self) -> list[RecordedServer]:
        return [server.to_record() for server in self.healthy_servers()]

    # ------------------------------------------------------------------
    # Acquire / release
    # ------------------------------------------------------------------

    async def acquire(self, index: int) -> WorkerServer:
        """Return the healthy server of ``index``, starting it if necessary."""
        if index < 0:
            msg = f"Worker index must be >= 0, got {index}"
            raise ValueError(msg)

        server = self._servers.get(index)
        if (
            server is not None
            and server.state is ServerState.HEALTHY
            and index not in self._shutdowns
        ):
            return server

        startup = self._startups.get(index)
        if startup is None:
            startup = asyncio.ensure_future(self._start(index))
            self._startups[index] = startup
            startup.add_done_callback(lambda _f: self._startups.pop(index, None))
        else:
            logger.debug("Worker %d start-up already in progress, waiting", index)

        # One cancelled caller must not abort a start-up others wait for
        return await asyncio.shield(startup)

    async def acquire_many(self, count: int) -> list[WorkerServer]:
        return list(await asyncio.gather(*(self.acquire(i) for i in range(count))))

    async def release(self, index: int) -> bool:
        """Stop the servers of ``index`` and free its ports and database."""
        startup = self._startups.get(index)
        if startup is not None:
            with contextlib.suppress(Exception):
                await startup

        pending = self._shutdowns.get(index)
        if pending is not None:
            logger.debug("Worker %d is already stopping, waiting", index)
            await asyncio.shield(pending)
            return False

        server = self._servers.get(index)
        if server is None or server.state is not ServerState.HEALTHY:
            return False

        await asyncio.shield(self._begin_shutdown(server))
        return True

    async def release_all(self) -> int:
        results = await asyncio.gather(
            *(self.release(index) for index in list(self._servers)),
        )
        return sum(1 for released in results if released)

    # ------------------------------------------------------------------
    # Start-up
    # ------------------------------------------------------------------

    async def _start(self, index: int) -> WorkerServer:
        pending = self._shutdowns.get(index)
        if pending is not None:
            logger.debug("Worker %d is still stopping, waiting", index)
            with contextlib.suppress(Exception):
                await asyncio.shield(pending)

        async with self._startup_slots:
            server = self._servers.get(index)
            if server is None:
                server = WorkerServer(
                    index=index,
                    host=self.settings.host,
                    lifecycle=LifecycleStateMachine(f"worker-{index}"),
                )
                self._servers[index] = server
            started = time.monotonic()

            try:
                server.lifecycle.transition(ServerState.STARTING)
                if not await self._try_reuse(server):
                    await self._launch(server)
            except asyncio.CancelledError:
                await self._abandon_startup(server)
                raise
            except Exception as e:
                logger.error("Worker %d failed to start: %s", index, e)
                await self._abandon_startup(server)
                if isinstance(e, WorkerStartupError):
                    raise
                raise WorkerStartupError(index, str(e)) from e

            server.started_at = time.time()
            server.lifecycle.transition(ServerState.HEALTHY)
            logger.info(
                "Worker %d ready in %.1fs: API=%s%s",
                index,
                time.monotonic() - started,
                server.api_url,
                f", frontend={server.frontend_url}" if server.frontend_url else "",
            )
            return server

    async def _try_reuse(self, server: WorkerServer) -> bool:
        if not self.settings.reuse_servers or self.state_file is None:
            return False

        recorded = self.state_file.fresh(self.settings.state_file_max_age).get(
            server.index,
        )
        if recorded is None:
            return False
        if self.with_frontend and recorded.frontend_port is None:
            return False

        if not await check_http(
            f"{recorded.api_url}/health",
            api_ready,
            request_timeout=self.settings.request_timeout,
        ):
            return False
        if recorded.frontend_url and not await check_http(
            recorded.frontend_url,
            frontend_ready,
            request_timeout=self.settings.request_timeout,
        ):
            return False

        plan = PortPlan(server.index, recorded.api_port, recorded.frontend_port)
        self.allocator.reserve(plan)
        server.ports = plan
        server.database = WorkerDatabase(server.index, Path(recorded.database))
        server.reused = True
        server.adopted_pids = tuple(
            pid for pid in (recorded.api_pid, recorded.frontend_pid) if pid
        )
        logger.info("Reusing running servers of worker %d", server.index)
        return True

    async def _launch(self, server: WorkerServer) -> None:
        settings = self.settings
        server.reused = False
        server.adopted_pids = ()
        server.ports = self.allocator.allocate(server.index, self.with_frontend)
        server.database = WorkerDatabase.create(
            server.index,
            prefix=settings.db_prefix,
            temp_dir=settings.temp_dir,
        )
        log_dir = settings.log_dir or settings.temp_dir or get_temp_directory()

        server.api_process = self._process_factory(
            name=f"api-{server.index}",
            command=self._render_command(
                settings.api_command,
                server,
                server.ports.api_port,
            ),
            env=self._api_environment(server),
            cwd=settings.api_cwd,
            log_path=log_dir / f"{settings.db_prefix}_Worker{server.index}_api.log",
        )
        starters = [self._start_api(server)]

        if self.with_frontend:
            server.proxy_config_path = self._write_proxy_config(server)
            server.frontend_process = self._process_factory(
                name=f"frontend-{server.index}",
                command=self._render_command(
                    settings.frontend_command,
                    server,
                    server.ports.frontend_port,
                ),
                env={**os.environ, "NG_CLI_ANALYTICS": "false"},
                cwd=settings.frontend_cwd,
                log_path=log_dir
                / f"{settings.db_prefix}_Worker{server.index}_frontend.log",
            )
            starters.append(self._start_frontend(server))

        tasks = [asyncio.ensure_future(starter) for starter in starters]
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _start_api(self, server: WorkerServer) -> None:
        process = server.api_process
        await process.start()
        try:
            await self._health_waiter(
                f"{server.api_url}/health",
                timeout=self.settings.api_startup_timeout,
                poll_interval=self.settings.poll_interval,
                accept=api_ready,
                is_alive=process.is_running,
                request_timeout=self.settings.request_timeout,
            )
        except HealthCheckError as e:
            logger.error(
                "API of worker %d output:\n%s",
                server.index,
                process.tail_log(),
            )
            raise WorkerStartupError(server.index, f"API: {e.message}") from e

    async def _start_frontend(self, server: WorkerServer) -> None:
        process = server.frontend_process
        await process.start()
        try:
            await self._health_waiter(
                server.frontend_url,
                timeout=self.settings.frontend_startup_timeout,
                poll_interval=self.settings.poll_interval,
                accept=frontend_ready,
                is_alive=process.is_running,
                request_timeout=self.settings.request_timeout,
            )
        except HealthCheckError as e:
            logger.error(
                "Frontend of worker %d output:\n%s",
                server.index,
                process.tail_log(),
            )
            raise WorkerStartupError(server.index, f"frontend: {e.message}") from e

    def _render_command(
        self,
        command: list[str],
        server: WorkerServer,
        port: int,
    ) -> list[str]:
        values = {
            "host": server.host,
            "port": port,
            "api_port": server.ports.api_port,
            "proxy_config": server.proxy_config_path or "",
        }
        rendered = []
        for part in command:
            text = part
            # Only known placeholders; other braces pass through untouched
            for key, value in values.items():
                text = text.replace(f"{{{key}}}", str(value))
            rendered.append(text)
        return rendered

    def _api_environment(self, server: WorkerServer) -> dict[str, str]:
        env = {**os.environ, **self.settings.api_env}
        env.setdefault("JWT_SECRET_KEY", self._jwt_secret)
        env.setdefault("API_COOKIE_SECURE", "false")
        env.setdefault("RATE_LIMIT_ENABLED", "false")
        env.update(
            {
                "APP_ENV": "testing",
                "DATABASE_URL": server.database.url,
                "API_HOST": server.host,
                "API_PORT": str(server.ports.api_port),
                "E2E_WORKER_INDEX": str(server.index),
            },
        )
        return env

    def _write_proxy_config(self, server: WorkerServer) -> Path:
        directory = (
            self.settings.frontend_cwd or self.settings.temp_dir or get_temp_directory()
        )
        path = directory / f"proxy.worker{server.index}.conf.json"
        config = {
            "/api": {
                "target": server.api_url,
                "secure": False,
                "changeOrigin": True,
                "logLevel": "warn",
            },
        }
        path.write_text(json.dumps(config, indent=2), encoding="utf-8")
        return path

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    def _begin_shutdown(self, server: WorkerServer) -> asyncio.Future[None]:
        index = server.index
        shutdown = self._shutdowns.get(index)
        if shutdown is None:
            shutdown = asyncio.ensure_future(self._shutdown(server))
            self._shutdowns[index] = shutdown
            shutdown.add_done_callback(
                lambda done: self._forget_shutdown(index, done),
            )
        return shutdown

    def _forget_shutdown(self, index: int, shutdown: asyncio.Future[None]) -> None:
        if self._shutdowns.get(index) is shutdown:
            del self._shutdowns[index]

    async def _abandon_startup(self, server: WorkerServer) -> None:
        # A start-up that never reached STARTING owns no resources
        if server.state is ServerState.STARTING:
            await self._shutdown(server)

    async def _shutdown(self, server: WorkerServer) -> None:
        if server.state in (ServerState.STARTING, ServerState.HEALTHY):
            server.lifecycle.transition(ServerState.STOPPING)

        grace = self.settings.stop_grace_period
        processes = [
            process
            for process in (server.api_process, server.frontend_process)
            if process is not None
        ]
        results = await asyncio.gather(
            *(process.stop(grace) for process in processes),
            return_exceptions=True,
        )
        for process, result in zip(processes, results):
            if isinstance(result, Exception):
                logger.warning("Failed to stop %s: %s", process.name, result)

        for pid in server.adopted_pids:
            await asyncio.to_thread(terminate_pid, pid, grace)

        self.allocator.release(server.index)

        if server.proxy_config_path is not None:
            server.proxy_config_path.unlink(missing_ok=True)
            server.proxy_config_path = None

        if server.database is not None and not self.settings.keep_databases:
            await asyncio.to_thread(server.database.delete)

        server.api_process = None
        server.frontend_process = None
        server.adopted_pids = ()
        server.lifecycle.transition(ServerState.STOPPED)
        logger.info("Worker %d stopped", server.index)
