"""Global setup and teardown of an E2E run.

``global_setup`` prepares every worker before the tests start and returns
the environment the test processes need to find their servers.
``global_teardown`` undoes it, either through the pool that is still alive
in this process or, from a separate process, through the state file.
"""

import asyncio
import logging

from roster_e2e.databases import (
    cleanup_all_databases,
    cleanup_stale_databases,
    delete_database,
)
from roster_e2e.pool import WorkerPool
from roster_e2e.process import terminate_pid
from roster_e2e.settings import E2ESettings, get_e2e_settings
from roster_e2e.state_file import ServerStateFile

logger = logging.getLogger(__name__)

_active_pool: WorkerPool | None = None


def get_active_pool() -> WorkerPool | None:
    return _active_pool


def worker_environment(pool: WorkerPool) -> dict[str, str]:
    """``API_URL_<i>``, ``FRONTEND_URL_<i>`` and ``DATABASE_PATH_<i>`` per worker."""
    servers = pool.healthy_servers()
    env = {"E2E_WORKERS": str(len(servers))}
    for server in servers:
        env[f"API_URL_{server.index}"] = server.api_url
        env[f"DATABASE_PATH_{server.index}"] = str(server.database.path)
        if server.frontend_url:
            env[f"FRONTEND_URL_{server.index}"] = server.frontend_url
    return env


async def global_setup(
    workers: int,
    settings: E2ESettings | None = None,
    with_frontend: bool | None = None,
    pool: WorkerPool | None = None,
) -> dict[str, str]:
    """
    Start the servers of ``workers`` workers.

    1. Delete databases left behind by earlier runs.
    2. Check the planned ports; free them when ``kill_existing_servers`` is on.
    3. Start every worker, at most ``max_concurrent_startups`` at a time.
    4. Record the servers in the state file.

    Any failure stops the workers that did start before re-raising.
    """
    global _active_pool  # NOQA: PLW0603

    if workers < 1:
        msg = f"At least one worker is required, got {workers}"
        raise ValueError(msg)

    settings = settings or get_e2e_settings()
    state_file = ServerStateFile(settings.state_file)
    pool = pool or WorkerPool(
        settings=settings,
        state_file=state_file,
        with_frontend=with_frontend,
    )
    if pool.state_file is None:
        pool.state_file = state_file

    if settings.cleanup_before_tests:
        deleted = cleanup_stale_databases(
            older_than_hours=settings.stale_database_hours,
            prefix=settings.db_prefix,
            temp_dir=settings.temp_dir,
        )
        if deleted:
            logger.info("Removed %d stale database(s)", len(deleted))

    conflicts = pool.allocator.scan(workers, pool.with_frontend)
    if conflicts and not settings.reuse_servers:
        for conflict in conflicts:
            logger.warning(
                "Worker %d %s port %d is in use (pids %s)",
                conflict.worker_index,
                conflict.role,
                conflict.port,
                ", ".join(str(pid) for pid in conflict.pids) or "unknown",
            )
        if settings.kill_existing_servers:
            killed = pool.allocator.free_ports(conflicts)
            logger.info("Killed %d process(es) holding planned ports", len(killed))

    logger.info("Starting %d worker(s)", workers)
    try:
        await pool.acquire_many(workers)
    except BaseException:
        await pool.release_all()
        raise

    state_file.write(pool.records())
    _active_pool = pool

    env = worker_environment(pool)
    for server in pool.healthy_servers():
        logger.info(
            "Worker %d: API %s, database %s",
            server.index,
            server.api_url,
            server.database.path.name,
        )
    return env


async def global_teardown(settings: E2ESettings | None = None) -> int:
    """
    Stop every worker server and remove its database.

    Returns the number of workers stopped.
    """
    global _active_pool  # NOQA: PLW0603

    settings = settings or get_e2e_settings()
    state_file = ServerStateFile(settings.state_file)
    stopped = 0

    if _active_pool is not None:
        stopped = await _active_pool.release_all()
        _active_pool = None
    else:
        for recorded in state_file.read():
            pids = [
                pid for pid in (recorded.api_pid, recorded.frontend_pid) if pid
            ]
            for pid in pids:
                await asyncio.to_thread(
                    terminate_pid,
                    pid,
                    settings.stop_grace_period,
                )
            if not settings.keep_databases:
                await asyncio.to_thread(delete_database, recorded.database_path)
            logger.info("Stopped worker %d from state file", recorded.worker_index)
            stopped += 1

    state_file.remove()

    if not settings.keep_databases:
        leftovers = cleanup_all_databases(settings.db_prefix, settings.temp_dir)
        if leftovers:
            logger.info("Deleted %d leftover database(s)", len(leftovers))

    return stopped
