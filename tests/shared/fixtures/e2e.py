"""
Stand-ins for server processes and health polling.

Usage:
    from tests.shared.fixtures.e2e import FakeHealth, FakeProcess

    pool = WorkerPool(
        settings=settings,
        process_factory=FakeProcess,
        health_waiter=FakeHealth(),
    )
"""

import asyncio

from roster_e2e.exceptions import HealthCheckError


class FakeProcess:
    """Records every instance so tests can inspect what the pool spawned."""

    instances: list["FakeProcess"] = []
    next_pid = 1000

    def __init__(self, name, command, env=None, cwd=None, log_path=None):
        self.name = name
        self.command = command
        self.env = env
        self.cwd = cwd
        self.log_path = log_path
        self.pid = None
        self.running = False
        self.stopped = False
        FakeProcess.instances.append(self)

    async def start(self):
        FakeProcess.next_pid += 1
        self.pid = FakeProcess.next_pid
        self.running = True

    def is_running(self):
        return self.running

    async def stop(self, grace_period=5.0):
        self.running = False
        self.stopped = True
        return 0

    def tail_log(self, lines=20):
        return "fake output"


class FakeHealth:
    """Health waiter that records calls and can fail chosen URLs."""

    def __init__(self, delay=0.0, failing=()):
        self.delay = delay
        self.failing = set(failing)
        self.urls: list[str] = []
        self.active = 0
        self.max_active = 0

    async def __call__(self, url, **kwargs):
        self.urls.append(url)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delay)
            if url in self.failing:
                msg = f"{url} not healthy"
                raise HealthCheckError(msg)
            return self.delay
        finally:
            self.active -= 1
